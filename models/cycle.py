from pydantic import BaseModel
from typing import Optional
from datetime import date
from enum import Enum


class CycleKind(str, Enum):
    REVISION = "REVISION"
    READING = "READING"


class CompletionCycle(BaseModel):
    owner_id: int
    kind: CycleKind
    completed_at: date
    days_to_complete: Optional[int] = None
    id: Optional[int] = None

    class Config:
        from_attributes = True
