"""Queue-driven job dispatcher.

Jobs are registered by name with a retry budget. Event handlers and the
APScheduler timers both call submit(), which enqueues a JobRun and returns
immediately; a small pool of worker tasks drains the queue.

Per run: pending → running → succeeded, or running → failed_retryable →
pending → running ... → failed_terminal once the retry budget is spent.
Exhaustion is recorded on the JobRun and logged, never raised to the
submitter.
"""
import asyncio
import logging
import uuid
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Optional

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_exponential

from core.timezone import now_utc

logger = logging.getLogger(__name__)

MAX_BACKOFF_SECONDS = 60
RUN_HISTORY_LIMIT = 500


class JobState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED_RETRYABLE = "failed_retryable"
    FAILED_TERMINAL = "failed_terminal"


class JobTrigger(str, Enum):
    EVENT = "event"
    SCHEDULE = "schedule"


@dataclass
class JobSpec:
    name: str
    func: Callable[..., Awaitable[Any]]
    retries: int


@dataclass
class JobRun:
    job_name: str
    trigger: JobTrigger
    payload: dict = field(default_factory=dict)
    run_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    attempts: int = 0
    state: JobState = JobState.PENDING
    error: Optional[str] = None
    result: Any = None
    history: list[JobState] = field(default_factory=lambda: [JobState.PENDING])
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def is_finished(self) -> bool:
        return self.state in (JobState.SUCCEEDED, JobState.FAILED_TERMINAL)


class JobDispatcher:
    """Runs registered jobs from an asyncio.Queue with bounded retry.

    Every job function is called as `func(context, **payload)`.
    """

    def __init__(
        self,
        context: Any = None,
        backoff_seconds: float = 2.0,
        tracker=None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
    ):
        self.context = context
        self.backoff_seconds = backoff_seconds
        self.tracker = tracker
        self._sleep = sleep or asyncio.sleep
        self._jobs: dict[str, JobSpec] = {}
        self._runs: "OrderedDict[str, JobRun]" = OrderedDict()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._workers: list[asyncio.Task] = []

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def register(self, name: str, func: Callable[..., Awaitable[Any]], retries: int = 0) -> None:
        if name in self._jobs:
            raise ValueError(f"Job already registered: {name}")
        self._jobs[name] = JobSpec(name=name, func=func, retries=retries)
        logger.info(f"Registered job: {name} (retries={retries})")

    @property
    def job_names(self) -> list[str]:
        return list(self._jobs)

    def get_run(self, run_id: str) -> Optional[JobRun]:
        return self._runs.get(run_id)

    def recent_runs(self, job_name: Optional[str] = None) -> list[JobRun]:
        return [r for r in self._runs.values() if job_name is None or r.job_name == job_name]

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def submit(self, name: str, trigger: JobTrigger = JobTrigger.SCHEDULE, **payload: Any) -> JobRun:
        """Enqueue a run and return without waiting for it."""
        if name not in self._jobs:
            raise KeyError(f"Unknown job: {name}")

        run = JobRun(job_name=name, trigger=trigger, payload=payload)
        self._remember(run)
        self._record(run)
        self._queue.put_nowait(run)
        logger.debug(f"Queued {name} ({run.run_id}, {trigger.value})")
        return run

    async def execute(self, name: str, trigger: JobTrigger = JobTrigger.SCHEDULE, **payload: Any) -> JobRun:
        """Run a job inline (same retry policy), bypassing the queue."""
        if name not in self._jobs:
            raise KeyError(f"Unknown job: {name}")
        run = JobRun(job_name=name, trigger=trigger, payload=payload)
        self._remember(run)
        self._record(run)
        await self.run(run)
        return run

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def run(self, run: JobRun) -> JobRun:
        job = self._jobs[run.job_name]
        run.started_at = now_utc()

        retrying = AsyncRetrying(
            stop=stop_after_attempt(job.retries + 1),
            wait=wait_exponential(multiplier=self.backoff_seconds, max=MAX_BACKOFF_SECONDS),
            sleep=self._sleep,
            before_sleep=lambda state: self._on_retry(run, state),
            reraise=True,
        )

        try:
            async for attempt in retrying:
                with attempt:
                    run.attempts = attempt.retry_state.attempt_number
                    if run.attempts > 1:
                        self._transition(run, JobState.PENDING)
                    self._transition(run, JobState.RUNNING)
                    run.result = await job.func(self.context, **run.payload)
        except Exception as e:
            run.error = str(e)[:2000]
            run.finished_at = now_utc()
            self._transition(run, JobState.FAILED_TERMINAL)
            logger.error(
                f"Job {run.job_name} ({run.run_id}) failed after {run.attempts} attempts: {e}",
                exc_info=True,
            )
            return run

        run.error = None
        run.finished_at = now_utc()
        self._transition(run, JobState.SUCCEEDED)
        logger.info(f"Job {run.job_name} ({run.run_id}) succeeded in {run.attempts} attempt(s)")
        return run

    def _on_retry(self, run: JobRun, state: RetryCallState) -> None:
        exc = state.outcome.exception() if state.outcome else None
        run.error = str(exc)[:2000] if exc else None
        self._transition(run, JobState.FAILED_RETRYABLE)
        logger.warning(
            f"Job {run.job_name} ({run.run_id}) attempt {state.attempt_number} failed: {exc}; "
            f"retrying in {state.next_action.sleep if state.next_action else 0:.1f}s"
        )

    def _transition(self, run: JobRun, state: JobState) -> None:
        run.state = state
        run.history.append(state)
        self._record(run)

    def _record(self, run: JobRun) -> None:
        if self.tracker is not None:
            self.tracker.record(run)

    def _remember(self, run: JobRun) -> None:
        self._runs[run.run_id] = run
        while len(self._runs) > RUN_HISTORY_LIMIT:
            self._runs.popitem(last=False)

    # ------------------------------------------------------------------
    # Worker pool
    # ------------------------------------------------------------------

    async def _worker(self, index: int) -> None:
        while True:
            run = await self._queue.get()
            try:
                await self.run(run)
            finally:
                self._queue.task_done()

    def start(self, workers: int = 2) -> None:
        if self._workers:
            return
        self._workers = [
            asyncio.create_task(self._worker(i), name=f"job-worker-{i}")
            for i in range(workers)
        ]
        logger.info(f"Job dispatcher started with {workers} workers")

    async def join(self) -> None:
        """Wait until every queued run has finished."""
        await self._queue.join()

    async def stop(self) -> None:
        for task in self._workers:
            task.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []
        logger.info("Job dispatcher stopped")

    @property
    def is_running(self) -> bool:
        return bool(self._workers)

    @property
    def pending_count(self) -> int:
        return self._queue.qsize()
