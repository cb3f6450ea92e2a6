"""Job execution history persisted to job_execution_logs."""
import logging
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy import select, desc, func, distinct
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.timezone import now_utc
from models.job_execution_log import JobExecutionLog

logger = logging.getLogger(__name__)


class JobTracker:
    """Writes one JobExecutionLog row per run and updates it on each transition.

    Usage:
        dispatcher = JobDispatcher(context, tracker=JobTracker(SessionLocal))
    """

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def record(self, run) -> None:
        db = self.session_factory()
        try:
            log = db.execute(
                select(JobExecutionLog).where(JobExecutionLog.run_id == run.run_id)
            ).scalar_one_or_none()
            if log is None:
                log = JobExecutionLog(
                    run_id=run.run_id,
                    job_name=run.job_name,
                    trigger=run.trigger.value,
                    started_at=run.started_at or now_utc(),
                )
                db.add(log)

            log.status = run.state.value
            log.attempts = run.attempts
            log.error_message = run.error
            if run.started_at:
                log.started_at = run.started_at
            if run.finished_at:
                log.finished_at = run.finished_at
                log.duration_seconds = (run.finished_at - log.started_at).total_seconds()
            db.commit()
        except SQLAlchemyError as e:
            # History is best-effort; the run itself proceeds
            db.rollback()
            logger.warning(f"Failed to record job run {run.run_id}: {e}")
        finally:
            db.close()


def get_last_success(db: Session, job_name: str) -> Optional[datetime]:
    log = db.execute(
        select(JobExecutionLog)
        .where(
            JobExecutionLog.job_name == job_name,
            JobExecutionLog.status == "succeeded",
        )
        .order_by(desc(JobExecutionLog.finished_at))
        .limit(1)
    ).scalar_one_or_none()
    return log.finished_at if log else None


def get_all_job_stats(db: Session, now: Optional[datetime] = None) -> list[dict]:
    """Last run, last success and 24h counts for every job seen in the log."""
    since = (now or now_utc()) - timedelta(hours=24)
    job_names = [row[0] for row in db.execute(select(distinct(JobExecutionLog.job_name))).all()]

    stats = []
    for name in sorted(job_names):
        last_run = db.execute(
            select(JobExecutionLog)
            .where(JobExecutionLog.job_name == name)
            .order_by(desc(JobExecutionLog.started_at))
            .limit(1)
        ).scalar_one_or_none()

        run_count_24h = db.execute(
            select(func.count())
            .select_from(JobExecutionLog)
            .where(
                JobExecutionLog.job_name == name,
                JobExecutionLog.started_at >= since,
            )
        ).scalar() or 0

        fail_count_24h = db.execute(
            select(func.count())
            .select_from(JobExecutionLog)
            .where(
                JobExecutionLog.job_name == name,
                JobExecutionLog.status == "failed_terminal",
                JobExecutionLog.started_at >= since,
            )
        ).scalar() or 0

        last_success_at = get_last_success(db, name)
        stats.append({
            "job_name": name,
            "last_run": {
                "started_at": last_run.started_at.isoformat() if last_run else None,
                "status": last_run.status if last_run else None,
                "attempts": last_run.attempts if last_run else 0,
                "duration_seconds": last_run.duration_seconds if last_run else None,
                "error_message": last_run.error_message if last_run else None,
            },
            "last_success_at": last_success_at.isoformat() if last_success_at else None,
            "runs_24h": run_count_24h,
            "failures_24h": fail_count_24h,
        })

    return stats
