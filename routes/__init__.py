# Routes package __init__.py - re-exports routers for main.py convenience
from .progress import router as progress_router
from .stats import router as stats_router
from .mastery import router as mastery_router
from .attendance import router as attendance_router
from .cycles import router as cycles_router
from .users import router as users_router
from .recitations import router as recitations_router

__all__ = ['progress_router', 'stats_router', 'mastery_router', 'attendance_router', 'cycles_router', 'users_router', 'recitations_router']
