from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo

import httpx
from loguru import logger

from src.config import get_settings
from src.schedule.base import RaceSchedule, SessionSchedule

# RaceSchedule slot -> key(s) in a Jolpica race entry
SESSION_KEYS = {
    "fp1": ("FirstPractice",),
    "fp2": ("SecondPractice",),
    "fp3": ("ThirdPractice",),
    "sprint_quali": ("SprintQualifying", "SprintShootout"),
    "sprint": ("Sprint",),
    "quali": ("Qualifying",),
}


def convert_session(
    raw_date: str, raw_time: Optional[str], tz: ZoneInfo
) -> SessionSchedule:
    """Convert a published UTC date/time pair into the display timezone.

    The local calendar date is kept alongside the local ``HH:MM`` time so a
    session published late in the UTC day lands on the right local day.
    Without a time only the date is kept.

    Raises:
        ValueError: if the date or time cannot be parsed.
    """
    if not raw_time:
        return SessionSchedule(date=date.fromisoformat(raw_date), time=None)

    published = datetime.fromisoformat(f"{raw_date}T{raw_time.replace('Z', '+00:00')}")
    if published.tzinfo is None:
        published = published.replace(tzinfo=timezone.utc)

    local = published.astimezone(tz)
    return SessionSchedule(date=local.date(), time=local.strftime("%H:%M"))


class ScheduleFetcher:
    """Fetch the next Grand Prix weekend from the Jolpica (Ergast) API."""

    def __init__(self):
        settings = get_settings()
        self.url = settings.schedule_url
        self.tz = ZoneInfo(settings.display_timezone)
        self.client = httpx.Client(
            timeout=settings.schedule_api_timeout,
            headers={"Accept": "application/json"},
        )
        self.last_schedule: Optional[RaceSchedule] = None

    def close(self) -> None:
        self.client.close()

    def fetch_next_schedule(self) -> Optional[RaceSchedule]:
        """Fetch and normalize the next race weekend.

        Returns:
            The RaceSchedule, or None when the season is over, the response is
            malformed or the request failed.
        """
        try:
            resp = self.client.get(self.url)
            resp.raise_for_status()
            races = resp.json()["MRData"]["RaceTable"]["Races"]
        except Exception as e:
            logger.error(f"Error fetching next race schedule: {e}")
            return None

        if not races:
            logger.info("No upcoming race in the schedule")
            return None

        try:
            schedule = self._parse_race(races[0])
        except Exception as e:
            logger.error(f"Error parsing next race schedule: {e}")
            return None

        if schedule != self.last_schedule:
            logger.info(
                f"Race schedule updated: {schedule.race_name} "
                f"(round {schedule.round}, race {schedule.race})"
            )
            self.last_schedule = schedule

        return schedule

    def _parse_race(self, entry: Dict[str, Any]) -> RaceSchedule:
        sessions: Dict[str, Optional[SessionSchedule]] = {}
        for session_id, keys in SESSION_KEYS.items():
            sessions[session_id] = self._parse_session(entry, session_id, keys)

        # The race itself always carries a date; a bad one fails the whole fetch
        race = convert_session(entry["date"], entry.get("time"), self.tz)

        return RaceSchedule(
            race=race,
            season=entry.get("season"),
            round=entry.get("round"),
            race_name=entry.get("raceName"),
            circuit_name=entry.get("Circuit", {}).get("circuitName"),
            **sessions,
        )

    def _parse_session(
        self, entry: Dict[str, Any], session_id: str, keys: tuple
    ) -> Optional[SessionSchedule]:
        for key in keys:
            data = entry.get(key)
            if not data:
                continue
            try:
                return convert_session(data["date"], data.get("time"), self.tz)
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping {session_id}: unparsable date/time {data!r} ({e})")
                return None
        return None
