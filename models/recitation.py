from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Union
from datetime import date, datetime

from .mastery import MasteryStatus


class RecitationCreate(BaseModel):
    """One surah passage recited in a group session, with the status it earned."""
    surah_number: int = Field(ge=1, le=114)
    program: str = "MEMORIZATION"
    verse_start: int = Field(ge=1)
    verse_end: int = Field(ge=1)
    status: Union[MasteryStatus, str, float]
    session_date: date
    session_week: Optional[int] = Field(default=None, ge=1, le=53)
    comment: Optional[str] = None

    @field_validator("program")
    @classmethod
    def normalize_program(cls, v: str) -> str:
        return v.strip().upper()

    @model_validator(mode="after")
    def check_range_order(self):
        if self.verse_end < self.verse_start:
            raise ValueError("verse_end must not precede verse_start")
        return self


class Recitation(BaseModel):
    owner_id: int
    surah_number: int
    program: str
    verse_start: int
    verse_end: int
    status: MasteryStatus
    session_date: date
    session_week: int
    comment: Optional[str] = None
    recorded_by: Optional[int] = None
    created_at: datetime
    id: Optional[int] = None

    class Config:
        from_attributes = True
        frozen = True
