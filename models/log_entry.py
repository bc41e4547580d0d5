from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional
from datetime import date


class LogEntryBase(BaseModel):
    program: str
    surah_number: int = Field(ge=1, le=114)
    verse_start: int = Field(ge=1)
    verse_end: int = Field(ge=1)
    date: date
    repetitions: Optional[int] = Field(default=None, ge=1)
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


class LogEntryCreate(LogEntryBase):
    pass


class LogEntry(LogEntryBase):
    owner_id: int
    id: Optional[int] = None
    is_mirror: bool = False

    class Config:
        from_attributes = True
        frozen = True
