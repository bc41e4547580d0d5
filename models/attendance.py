from pydantic import AfterValidator, BaseModel
from typing import Annotated, Dict, Optional
from datetime import date

from utils.validation import validate_week_start

SundayDate = Annotated[date, AfterValidator(validate_week_start)]

WEEKDAY_FIELDS = ("sunday", "monday", "tuesday", "wednesday", "thursday", "friday", "saturday")


class AttendanceRecord(BaseModel):
    owner_id: int
    week_start: SundayDate
    sunday: bool = False
    monday: bool = False
    tuesday: bool = False
    wednesday: bool = False
    thursday: bool = False
    friday: bool = False
    saturday: bool = False

    class Config:
        from_attributes = True

    def present_days(self) -> int:
        return sum(1 for name in WEEKDAY_FIELDS if getattr(self, name))


class DailyCompletion(BaseModel):
    owner_id: int
    program: str
    date: date
    completed: bool = True

    class Config:
        from_attributes = True
        frozen = True


class DailyCompletionSet(BaseModel):
    program: str
    date: date
    completed: bool


class ObjectiveCompletion(BaseModel):
    owner_id: int
    objective_id: int
    week_start: SundayDate
    completed: bool = True

    class Config:
        from_attributes = True
        frozen = True


class ObjectiveCompletionSet(BaseModel):
    week_start: SundayDate
    completed: bool


class WeeklyObjective(BaseModel):
    id: int
    owner_id: int
    name: str
    program: Optional[str] = None
    is_active: bool = True

    class Config:
        from_attributes = True
        frozen = True


class RateFigure(BaseModel):
    completed: int
    total: int
    percentage: int


class RateReport(BaseModel):
    owner_id: int
    period: str
    start_date: date
    end_date: date
    effective_end_date: date
    total_days: int
    total_weeks: int
    per_program: Dict[str, RateFigure]
    per_objective: Dict[int, RateFigure]
    objective_names: Dict[int, str] = {}
