"""APScheduler setup and job registration."""
import logging
from typing import Optional, Any

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent

from core.config import Settings, get_settings
from scheduler.dispatcher import JobDispatcher, JobTrigger
from scheduler.jobs.analyze_post import ANALYZE_POST_RETRIES, analyze_post
from scheduler.jobs.article_cleanup import ARTICLE_CLEANUP_RETRIES, purge_old_articles
from scheduler.jobs.news_sentiment_refresh import NEWS_SENTIMENT_REFRESH_RETRIES, refresh_news_sentiment
from scheduler.jobs.trending_refresh import TRENDING_REFRESH_RETRIES, refresh_trending

logger = logging.getLogger(__name__)


def register_jobs(dispatcher: JobDispatcher) -> None:
    """Register every job body with its retry budget."""
    dispatcher.register("analyze_post", analyze_post, retries=ANALYZE_POST_RETRIES)
    dispatcher.register("refresh_trending", refresh_trending, retries=TRENDING_REFRESH_RETRIES)
    dispatcher.register("refresh_news_sentiment", refresh_news_sentiment, retries=NEWS_SENTIMENT_REFRESH_RETRIES)
    dispatcher.register("purge_old_articles", purge_old_articles, retries=ARTICLE_CLEANUP_RETRIES)


class SchedulerManager:
    """Wraps AsyncIOScheduler.

    Timers never run job bodies directly: each tick submits a run to the
    dispatcher so scheduled jobs share its retry policy and execution log.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self._scheduler: Optional[AsyncIOScheduler] = None
        self._dispatcher: Optional[JobDispatcher] = None
        self._initialized = False

    @property
    def scheduler(self) -> AsyncIOScheduler:
        if self._scheduler is None:
            self._scheduler = AsyncIOScheduler(
                timezone="UTC",
                job_defaults={
                    "coalesce": True,  # run a missed job once
                    "max_instances": 1,
                    "misfire_grace_time": 60,
                }
            )
            self._scheduler.add_listener(
                self._job_listener,
                EVENT_JOB_EXECUTED | EVENT_JOB_ERROR
            )
        return self._scheduler

    def _job_listener(self, event: JobExecutionEvent):
        if event.exception:
            logger.error(
                f"Scheduled submit {event.job_id} failed: {event.exception}",
                exc_info=event.exception
            )
        else:
            logger.debug(f"Scheduled submit {event.job_id} executed")

    def _submitter(self, job_name: str):
        async def submit() -> None:
            self._dispatcher.submit(job_name, trigger=JobTrigger.SCHEDULE)
        submit.__name__ = f"submit_{job_name}"
        return submit

    def add_interval_job(self, job_name: str, minutes: int, **kwargs: Any) -> None:
        self.scheduler.add_job(
            self._submitter(job_name),
            trigger=IntervalTrigger(minutes=minutes),
            id=job_name,
            replace_existing=True,
            **kwargs,
        )
        logger.info(f"Added interval job: {job_name} (every {minutes} minutes)")

    def add_cron_job(
        self,
        job_name: str,
        hour: str = "*",
        minute: str = "0",
        day_of_week: str = "*",
        **kwargs: Any,
    ) -> None:
        self.scheduler.add_job(
            self._submitter(job_name),
            trigger=CronTrigger(
                hour=hour,
                minute=minute,
                day_of_week=day_of_week,
                timezone="UTC",
            ),
            id=job_name,
            replace_existing=True,
            **kwargs,
        )
        logger.info(f"Added cron job: {job_name}")

    def remove_job(self, job_id: str) -> bool:
        if self.scheduler.get_job(job_id) is None:
            return False
        self.scheduler.remove_job(job_id)
        logger.info(f"Removed job: {job_id}")
        return True

    def get_jobs(self) -> list[dict]:
        jobs = []
        for job in self.scheduler.get_jobs():
            next_run_time = getattr(job, "next_run_time", None)
            jobs.append({
                "id": job.id,
                "name": job.name,
                "next_run_time": next_run_time.isoformat() if next_run_time else None,
                "trigger": str(job.trigger),
            })
        return jobs

    def start(self, dispatcher: JobDispatcher) -> None:
        if not self.settings.scheduler_enabled:
            logger.info("Scheduler is disabled by configuration")
            return

        self._dispatcher = dispatcher
        if not self._initialized:
            self._setup_jobs()
            self._initialized = True

        if not self.scheduler.running:
            self.scheduler.start()
            logger.info("Scheduler started")

    def shutdown(self) -> None:
        if self._scheduler and self._scheduler.running:
            self._scheduler.shutdown(wait=False)
            logger.info("Scheduler shutdown")

    def _setup_jobs(self) -> None:
        # Trending (every 5 minutes)
        self.add_interval_job(
            "refresh_trending",
            minutes=self.settings.trending_refresh_interval_minutes,
        )

        # News sentiment for all active tickers (every 30 minutes)
        self.add_interval_job(
            "refresh_news_sentiment",
            minutes=self.settings.news_sentiment_refresh_interval_minutes,
        )

        # Article retention (daily)
        self.add_cron_job(
            "purge_old_articles",
            hour=str(self.settings.article_cleanup_hour),
            minute="0",
        )

    @property
    def is_running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running


_scheduler_manager: Optional[SchedulerManager] = None


def get_scheduler_manager() -> SchedulerManager:
    global _scheduler_manager
    if _scheduler_manager is None:
        _scheduler_manager = SchedulerManager()
    return _scheduler_manager
