from __future__ import annotations

import threading
from datetime import datetime, timedelta, tzinfo
from typing import Callable, Dict, List, Optional, Set
from zoneinfo import ZoneInfo

from loguru import logger

from src.notifications.messages import NotificationMessage, format_session_starting_soon
from src.schedule.base import RaceSchedule
from src.schedule.weekend import is_in_upcoming_weekend

LEAD_TIME = timedelta(hours=1)

SendFn = Callable[[NotificationMessage], object]


class UpcomingSessionNotifier:
    """Sends one "starts in 1 hour" notification per session occurrence.

    Holds the set of session ids already notified. An id leaves the set once
    its session has started, so next weekend's session of the same kind is
    notified again. The set lives in memory only.
    """

    def __init__(self, tz: tzinfo, notified: Optional[Set[str]] = None):
        self.tz = tz
        self._notified: Set[str] = set(notified or ())
        self._lock = threading.Lock()

    @classmethod
    def for_timezone(cls, name: str) -> "UpcomingSessionNotifier":
        return cls(ZoneInfo(name))

    @property
    def notified(self) -> Set[str]:
        with self._lock:
            return set(self._notified)

    def _start_times(self, schedule: RaceSchedule) -> Dict[str, datetime]:
        starts: Dict[str, datetime] = {}
        for session_id, _, session in schedule.sessions():
            if session is None:
                continue
            try:
                start = session.starts_at(self.tz)
            except ValueError as e:
                logger.warning(f"Skipping {session_id}: bad time {session.time!r} ({e})")
                continue
            if start is not None:
                starts[session_id] = start
        return starts

    def tick(self, schedule: RaceSchedule, now: datetime, send: SendFn) -> List[str]:
        """Run one polling tick.

        Args:
            schedule: The freshly fetched race schedule.
            now: Current time, converted to the display timezone; naive
                values are taken to already be in it.
            send: Broadcast callable, called once per session to notify.

        Returns:
            Session ids notified during this tick.
        """
        if now.tzinfo is None:
            now = now.replace(tzinfo=self.tz)
        else:
            now = now.astimezone(self.tz)

        starts = self._start_times(schedule)
        sent: List[str] = []

        with self._lock:
            for session_id, title, session in schedule.sessions():
                start = starts.get(session_id)
                if start is None or session_id in self._notified:
                    continue
                if not (start - LEAD_TIME <= now <= start):
                    continue
                if not is_in_upcoming_weekend(session.date, now):
                    continue

                try:
                    send(format_session_starting_soon(title))
                except Exception as e:
                    logger.error(f"Error sending {session_id} notification: {e}")
                    continue

                self._notified.add(session_id)
                sent.append(session_id)
                logger.info(f"Notified {session_id} starting at {start.isoformat()}")

            for session_id in list(self._notified):
                start = starts.get(session_id)
                if start is not None and start < now:
                    self._notified.discard(session_id)
                    logger.debug(f"Session {session_id} has started, cleared from notified set")

        return sent
