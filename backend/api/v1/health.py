"""Health endpoints."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from core.config import get_settings
from core.database import get_db
from scheduler import get_scheduler_manager
from scheduler.job_tracker import get_all_job_stats
from schemas.job import SchedulerStatusResponse

router = APIRouter()


@router.get("/apis")
async def check_apis():
    """Which providers have credentials. Missing credentials disable that analysis."""
    settings = get_settings()
    return {
        "gemini": {"configured": bool(settings.gemini_api_key), "model": settings.gemini_model},
        "finnhub": {"configured": bool(settings.finnhub_api_key)},
    }


@router.get("/jobs", response_model=SchedulerStatusResponse)
def check_jobs(request: Request, db: Session = Depends(get_db)):
    """Scheduled jobs plus recent execution stats."""
    manager = get_scheduler_manager()
    dispatcher = getattr(request.app.state, "dispatcher", None)
    return {
        "running": manager.is_running,
        "dispatcher_running": bool(dispatcher and dispatcher.is_running),
        "pending_runs": dispatcher.pending_count if dispatcher else 0,
        "jobs": manager.get_jobs() if manager.is_running else [],
        "stats": get_all_job_stats(db),
    }
