from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from src.api.router import api_router
from src.config import get_settings
from src.db.database import init_db
from src.schedule.fetcher import ScheduleFetcher
from src.scheduler.notifier import UpcomingSessionNotifier
from src.scheduler.runner import start_scheduler

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up...")
    await init_db()

    # Shared by the scheduled jobs and the admin status route
    app.state.fetcher = ScheduleFetcher()
    app.state.notifier = UpcomingSessionNotifier.for_timezone(settings.display_timezone)
    app.state.scheduler = start_scheduler(app.state.fetcher, app.state.notifier)

    yield

    app.state.scheduler.shutdown()
    app.state.fetcher.close()
    logger.info("Shutting down...")


app = FastAPI(
    title="F1 Push Notification API",
    description="F1 companion app device registration and race notifications",
    version="0.1.0",
    lifespan=lifespan,
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None,
)

# Empty CORS_ORIGINS means the companion web app only
if settings.cors_origins:
    cors_origins = [origin.strip() for origin in settings.cors_origins.split(",")]
else:
    cors_origins = ["https://rmsr2004.github.io"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
)

app.include_router(api_router)


@app.get("/health")
async def health_check():
    return {"status": "ok"}
