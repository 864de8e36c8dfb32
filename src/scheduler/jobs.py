"""Scheduled notification jobs.

Schedule overview:
  - every 5 min  - Upcoming session check ("starts in 1 hour")
  - every 2 min  - Keep Racing heartbeat
  - Wed 12:00    - Race weekend ahead reminder
  - Fri 09:00    - Friday race weekend start reminder
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from loguru import logger
from sqlalchemy import create_engine
from sqlalchemy.orm import Session

from src.config import get_settings
from src.notifications.broadcaster import Broadcaster
from src.notifications.messages import KEEP_RACING, NotificationMessage
from src.schedule.fetcher import ScheduleFetcher
from src.schedule.weekend import is_in_upcoming_weekend
from src.scheduler.notifier import UpcomingSessionNotifier

settings = get_settings()

# 同步版本的資料庫連線（給排程使用）
sync_database_url = settings.database_url.replace("+aiosqlite", "")


def get_sync_session() -> Session:
    engine = create_engine(sync_database_url)
    return Session(engine)


def _now() -> datetime:
    return datetime.now(ZoneInfo(settings.display_timezone))


def broadcast(notification: NotificationMessage) -> int:
    with get_sync_session() as session:
        return Broadcaster(session).send_to_all(notification)


def run_upcoming_session_check(
    fetcher: ScheduleFetcher,
    notifier: UpcomingSessionNotifier,
    now: Optional[datetime] = None,
) -> List[str]:
    """每 5 分鐘：檢查一小時內開始的場次並通知"""
    try:
        schedule = fetcher.fetch_next_schedule()
        if schedule is None:
            logger.debug("No race schedule available, skipping session check")
            return []

        sent = notifier.tick(schedule, now or _now(), broadcast)
        if sent:
            logger.info(f"Upcoming session notifications sent for: {sent}")
        return sent
    except Exception as e:
        logger.exception(f"Error in upcoming session check: {e}")
        return []


def run_race_weekend_reminder(
    fetcher: ScheduleFetcher,
    notification: NotificationMessage,
    now: Optional[datetime] = None,
) -> bool:
    """每週提醒：比賽在即將到來的週末時發送通知"""
    logger.info(f"Running race weekend reminder '{notification.title}'")
    try:
        schedule = fetcher.fetch_next_schedule()
        if schedule is None:
            return False

        race_date = schedule.race.date if schedule.race else None
        if not is_in_upcoming_weekend(race_date, now or _now()):
            logger.info(f"Next race on {race_date} is not this weekend, no reminder")
            return False

        broadcast(notification)
        return True
    except Exception as e:
        logger.exception(f"Error in race weekend reminder: {e}")
        return False


def run_heartbeat() -> int:
    """每 2 分鐘：發送 Keep Racing 通知"""
    try:
        return broadcast(KEEP_RACING)
    except Exception as e:
        logger.exception(f"Error sending heartbeat notification: {e}")
        return 0
