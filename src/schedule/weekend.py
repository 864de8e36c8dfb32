from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Tuple

FRIDAY = 4  # date.weekday()


def upcoming_weekend(now: datetime) -> Tuple[date, date]:
    """Return the (Friday, Sunday) calendar days of the weekend ahead of ``now``.

    On a Friday the window starts today; on any other day it starts on the
    nearest future Friday, so on Saturday and Sunday it already points at the
    following weekend.
    """
    today = now.date()
    friday = today + timedelta(days=(FRIDAY - today.weekday()) % 7)
    return friday, friday + timedelta(days=2)


def is_in_upcoming_weekend(event_date: Optional[date], now: datetime) -> bool:
    """Check whether ``event_date`` falls on the Friday-Sunday window ahead of ``now``.

    Both ends are inclusive (Friday 00:00 through Sunday 23:59:59.999). A
    datetime ``event_date`` is reduced to its calendar day.
    """
    if event_date is None:
        return False
    if isinstance(event_date, datetime):
        event_date = event_date.date()

    friday, sunday = upcoming_weekend(now)
    return friday <= event_date <= sunday
