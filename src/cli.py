import argparse

from loguru import logger
from sqlalchemy import create_engine

from src.config import get_settings
from src.db.database import Base, ensure_sqlite_directory

settings = get_settings()
sync_database_url = settings.database_url.replace("+aiosqlite", "")


def init_database():
    """初始化資料庫"""
    import src.models  # noqa: F401

    ensure_sqlite_directory(sync_database_url)
    engine = create_engine(sync_database_url)
    Base.metadata.create_all(engine)
    logger.info("Database initialized")


def show_schedule():
    """顯示下一場比賽的時間表"""
    from src.schedule.fetcher import ScheduleFetcher

    fetcher = ScheduleFetcher()
    try:
        schedule = fetcher.fetch_next_schedule()
    finally:
        fetcher.close()
    if schedule is None:
        logger.warning("No upcoming race schedule available")
        return

    weekend = "sprint weekend" if schedule.is_sprint_weekend else "conventional weekend"
    print(f"{schedule.season} round {schedule.round}: {schedule.race_name} ({weekend})")
    if schedule.circuit_name:
        print(f"  {schedule.circuit_name}")
    for session_id, title, session in schedule.sessions():
        if session is None:
            continue
        print(f"  {title:<18} {session.date} {session.time or '--:--'} ({settings.display_timezone})")


def send_broadcast(title: str, body: str):
    """手動發送推播給所有裝置"""
    from src.notifications.messages import NotificationMessage
    from src.scheduler.jobs import broadcast

    count = broadcast(NotificationMessage(title=title, body=body))
    logger.info(f"Manual broadcast delivered to {count} devices")


def main():
    parser = argparse.ArgumentParser(description="F1 Push Notification CLI")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    subparsers.add_parser("init", help="Initialize database")

    # serve command
    subparsers.add_parser("serve", help="Start API server and scheduler")

    # schedule command
    subparsers.add_parser("schedule", help="Show the next race weekend schedule")

    # broadcast command
    broadcast_parser = subparsers.add_parser("broadcast", help="Send a push to all devices")
    broadcast_parser.add_argument("--title", "-t", required=True, help="Notification title")
    broadcast_parser.add_argument("--body", "-b", required=True, help="Notification body")

    args = parser.parse_args()

    if args.command == "init":
        init_database()
    elif args.command == "serve":
        import uvicorn

        uvicorn.run(
            "src.main:app",
            host=settings.api_host,
            port=settings.api_port,
            reload=settings.debug,
        )
    elif args.command == "schedule":
        show_schedule()
    elif args.command == "broadcast":
        send_broadcast(args.title, args.body)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
