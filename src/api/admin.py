from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request

from src.config import get_settings
from src.schedule.base import RaceSchedule

router = APIRouter(prefix="/api/admin", tags=["admin"])


def require_admin_key(x_admin_key: Optional[str] = Header(None)) -> None:
    # Only enforced in production
    settings = get_settings()
    if not settings.is_production:
        return
    if not settings.admin_api_key:
        raise HTTPException(status_code=503, detail="Admin API not configured")
    if x_admin_key != settings.admin_api_key:
        raise HTTPException(status_code=401, detail="Invalid admin key")


def _describe_schedule(schedule: Optional[RaceSchedule]) -> Optional[Dict[str, Any]]:
    if schedule is None:
        return None
    return {
        "season": schedule.season,
        "round": schedule.round,
        "race_name": schedule.race_name,
        "circuit_name": schedule.circuit_name,
        "is_sprint_weekend": schedule.is_sprint_weekend,
        "sessions": {
            session_id: {"date": session.date, "time": session.time}
            for session_id, _, session in schedule.sessions()
            if session is not None
        },
    }


@router.get("/status", dependencies=[Depends(require_admin_key)])
async def admin_status(request: Request):
    """Scheduler jobs, sessions already notified and the last fetched race weekend."""
    scheduler = getattr(request.app.state, "scheduler", None)
    notifier = getattr(request.app.state, "notifier", None)
    fetcher = getattr(request.app.state, "fetcher", None)

    jobs = []
    if scheduler:
        for job in scheduler.get_jobs():
            jobs.append(
                {
                    "id": job.id,
                    "name": job.name,
                    "next_run": str(job.next_run_time) if job.next_run_time else None,
                }
            )

    return {
        "scheduler_running": bool(scheduler and scheduler.running),
        "jobs": jobs,
        "notified_sessions": sorted(notifier.notified) if notifier else [],
        "next_race": _describe_schedule(fetcher.last_schedule if fetcher else None),
    }
