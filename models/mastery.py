from pydantic import BaseModel, Field, model_validator
from typing import Optional, Union
from datetime import datetime
from enum import Enum


class MasteryStatus(str, Enum):
    TO_MEMORIZE = "AM"
    HALF = "50%"
    HALF_PLUS = "51%"
    NINETY = "90%"
    SUBMITTED = "S"
    VALIDATED = "V"
    KNOWN = "X"


class MasteryUpdate(BaseModel):
    """A status written for one surah, either typed or as a raw legacy code."""
    surah_number: int = Field(ge=1, le=114)
    status: Union[MasteryStatus, str, float]
    validated_week: Optional[int] = Field(default=None, ge=1, le=53)
    verse_start: Optional[int] = Field(default=None, ge=1)
    verse_end: Optional[int] = Field(default=None, ge=1)
    validated_at: Optional[datetime] = None

    @model_validator(mode="after")
    def check_explicit_range(self):
        if (self.verse_start is None) != (self.verse_end is None):
            raise ValueError("verse_start and verse_end must be given together")
        if self.verse_start is not None and self.verse_end < self.verse_start:
            raise ValueError("verse_end must not precede verse_start")
        return self


class MasteryRecord(BaseModel):
    owner_id: int
    surah_number: int
    status: MasteryStatus
    validated_week: Optional[int] = None
    verse_start: Optional[int] = None
    verse_end: Optional[int] = None
    validated_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
        frozen = True
