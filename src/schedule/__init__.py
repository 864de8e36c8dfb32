from src.schedule.base import (
    SESSION_TITLES,
    RaceSchedule,
    SessionSchedule,
)
from src.schedule.fetcher import ScheduleFetcher
from src.schedule.weekend import is_in_upcoming_weekend

__all__ = [
    "SESSION_TITLES",
    "RaceSchedule",
    "ScheduleFetcher",
    "SessionSchedule",
    "is_in_upcoming_weekend",
]
