from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class NotificationMessage:
    title: str
    body: str


RACE_WEEKEND_AHEAD = NotificationMessage(
    title="🏎️ Race weekend ahead!",
    body="Get ready! The Grand Prix starts this weekend.",
)

FRIDAY_WEEKEND_START = NotificationMessage(
    title="🏁 Friday Race Weekend Start!",
    body="Free practice starts today - don't miss anything!",
)

KEEP_RACING = NotificationMessage(
    title="🚀 Keep Racing!",
    body="Stay tuned for more updates and live coverage!",
)


def format_session_starting_soon(session_title: str) -> NotificationMessage:
    """Message for a session starting within the hour."""
    return NotificationMessage(
        title=f'⏰ "{session_title}" starts in 1 hour!',
        body="Tune in and watch live!",
    )
