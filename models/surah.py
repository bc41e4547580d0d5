from pydantic import BaseModel, Field
from typing import Optional


class Surah(BaseModel):
    number: int = Field(ge=1, le=114)
    total_verses: int = Field(ge=1)
    name: Optional[str] = None

    class Config:
        from_attributes = True
        frozen = True
