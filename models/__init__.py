from .surah import Surah
from .log_entry import LogEntry, LogEntryCreate
from .mastery import MasteryStatus, MasteryRecord, MasteryUpdate
from .attendance import (
    AttendanceRecord,
    DailyCompletion,
    DailyCompletionSet,
    ObjectiveCompletion,
    ObjectiveCompletionSet,
    RateFigure,
    RateReport,
    WeeklyObjective,
)
from .user import DataKind, GroupMembership, GroupRole, User, UserCreate, UserRole
from .cycle import CompletionCycle, CycleKind
from .recitation import Recitation, RecitationCreate

__all__ = [
    'Surah', 'LogEntry', 'LogEntryCreate', 'MasteryStatus', 'MasteryRecord', 'MasteryUpdate',
    'AttendanceRecord', 'DailyCompletion', 'DailyCompletionSet', 'ObjectiveCompletion',
    'ObjectiveCompletionSet', 'RateFigure', 'RateReport', 'WeeklyObjective',
    'DataKind', 'GroupMembership', 'GroupRole', 'User', 'UserCreate', 'UserRole',
    'CompletionCycle', 'CycleKind', 'Recitation', 'RecitationCreate',
]
