from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from loguru import logger

from src.config import get_settings
from src.notifications.messages import FRIDAY_WEEKEND_START, RACE_WEEKEND_AHEAD
from src.schedule.fetcher import ScheduleFetcher
from src.scheduler.jobs import (
    run_heartbeat,
    run_race_weekend_reminder,
    run_upcoming_session_check,
)
from src.scheduler.notifier import UpcomingSessionNotifier


def create_scheduler(
    fetcher: Optional[ScheduleFetcher] = None,
    notifier: Optional[UpcomingSessionNotifier] = None,
) -> BackgroundScheduler:
    settings = get_settings()
    scheduler = BackgroundScheduler(timezone=settings.scheduler_timezone)

    fetcher = fetcher or ScheduleFetcher()
    notifier = notifier or UpcomingSessionNotifier.for_timezone(settings.display_timezone)

    # 每週三 12:00 比賽週末預告
    scheduler.add_job(
        run_race_weekend_reminder,
        CronTrigger(day_of_week="wed", hour=12, minute=0),
        args=[fetcher, RACE_WEEKEND_AHEAD],
        id="race_weekend_ahead",
        name="Race Weekend Ahead Reminder",
    )

    # 每週五 09:00 比賽週末開始提醒
    scheduler.add_job(
        run_race_weekend_reminder,
        CronTrigger(day_of_week="fri", hour=9, minute=0),
        args=[fetcher, FRIDAY_WEEKEND_START],
        id="friday_weekend_start",
        name="Friday Race Weekend Start Reminder",
    )

    # 每 5 分鐘檢查即將開始的場次
    scheduler.add_job(
        run_upcoming_session_check,
        "interval",
        minutes=settings.session_check_interval_minutes,
        args=[fetcher, notifier],
        id="upcoming_session_check",
        name="Upcoming Session Check",
    )

    # 每 2 分鐘發送 Keep Racing 通知
    scheduler.add_job(
        run_heartbeat,
        "interval",
        minutes=settings.heartbeat_interval_minutes,
        id="heartbeat",
        name="Keep Racing Heartbeat",
    )

    logger.info("Scheduler configured with jobs")
    return scheduler


def start_scheduler(
    fetcher: Optional[ScheduleFetcher] = None,
    notifier: Optional[UpcomingSessionNotifier] = None,
):
    scheduler = create_scheduler(fetcher, notifier)
    scheduler.start()
    logger.info("Scheduler started")
    return scheduler
