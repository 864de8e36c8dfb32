from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, tzinfo
from typing import List, Optional, Tuple

# Session identifier -> human readable title, in weekend order
SESSION_TITLES = {
    "fp1": "FP 1",
    "fp2": "FP 2",
    "fp3": "FP 3",
    "sprint_quali": "Sprint Qualifying",
    "sprint": "Sprint",
    "quali": "Qualifying",
    "race": "Race",
}


@dataclass(frozen=True)
class SessionSchedule:
    """One timed session, in the display timezone.

    ``time`` is a 24-hour ``"HH:MM"`` string. Either field may be missing when
    the upstream source did not publish it.
    """

    date: Optional[date] = None
    time: Optional[str] = None

    def starts_at(self, tz: tzinfo) -> Optional[datetime]:
        """Return the aware start datetime, or None if date or time is missing.

        Raises:
            ValueError: if ``time`` is not a valid ``HH:MM`` string.
        """
        if self.date is None or not self.time:
            return None
        hour, minute = (int(part) for part in self.time.split(":")[:2])
        return datetime.combine(self.date, time(hour, minute), tzinfo=tz)


@dataclass(frozen=True)
class RaceSchedule:
    race: Optional[SessionSchedule]
    fp1: Optional[SessionSchedule] = None
    fp2: Optional[SessionSchedule] = None
    fp3: Optional[SessionSchedule] = None
    sprint_quali: Optional[SessionSchedule] = None
    sprint: Optional[SessionSchedule] = None
    quali: Optional[SessionSchedule] = None

    season: Optional[str] = None
    round: Optional[str] = None
    race_name: Optional[str] = None
    circuit_name: Optional[str] = None

    def sessions(self) -> List[Tuple[str, str, Optional[SessionSchedule]]]:
        """(session_id, title, schedule) for every session slot, in weekend order."""
        return [
            (session_id, title, getattr(self, session_id))
            for session_id, title in SESSION_TITLES.items()
        ]

    @property
    def is_sprint_weekend(self) -> bool:
        return self.sprint is not None
