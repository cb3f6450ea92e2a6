"""Job / scheduler status schemas."""
from typing import Optional
from pydantic import BaseModel


class AnalyzePostResponse(BaseModel):
    post_id: str
    status: str


class JobLastRun(BaseModel):
    started_at: Optional[str] = None
    status: Optional[str] = None
    attempts: int = 0
    duration_seconds: Optional[float] = None
    error_message: Optional[str] = None


class JobStats(BaseModel):
    job_name: str
    last_run: JobLastRun
    last_success_at: Optional[str] = None
    runs_24h: int
    failures_24h: int


class SchedulerStatusResponse(BaseModel):
    running: bool
    dispatcher_running: bool
    pending_runs: int
    jobs: list[dict]
    stats: list[JobStats]
