"""Job dispatcher and event routing tests."""
import asyncio

import pytest

from core.event_handlers import register_event_handlers
from core.events import EventBus, EventType, PostCreated
from models import JobExecutionLog, Post, Sentiment
from scheduler import register_jobs
from scheduler.dispatcher import JobDispatcher, JobState, JobTrigger
from scheduler.job_tracker import JobTracker, get_all_job_stats



def _flaky(failures: int):
    calls = []

    async def job(ctx, **payload):
        calls.append(payload)
        if len(calls) <= failures:
            raise RuntimeError(f"boom {len(calls)}")
        return "done"

    return job, calls


class TestRetry:
    @pytest.mark.asyncio
    async def test_succeeds_after_retries(self):
        dispatcher = JobDispatcher(backoff_seconds=0)
        job, calls = _flaky(failures=2)
        dispatcher.register("flaky", job, retries=3)

        run = await dispatcher.execute("flaky", trigger=JobTrigger.SCHEDULE, x=1)

        assert run.state == JobState.SUCCEEDED
        assert run.attempts == 3
        assert run.result == "done"
        assert run.error is None
        assert calls == [{"x": 1}] * 3
        assert run.history == [
            JobState.PENDING,
            JobState.RUNNING,
            JobState.FAILED_RETRYABLE,
            JobState.PENDING,
            JobState.RUNNING,
            JobState.FAILED_RETRYABLE,
            JobState.PENDING,
            JobState.RUNNING,
            JobState.SUCCEEDED,
        ]

    @pytest.mark.asyncio
    async def test_terminal_after_budget(self):
        dispatcher = JobDispatcher(backoff_seconds=0)
        job, calls = _flaky(failures=10)
        dispatcher.register("flaky", job, retries=3)

        run = await dispatcher.execute("flaky")

        assert run.state == JobState.FAILED_TERMINAL
        assert run.attempts == 4
        assert len(calls) == 4
        assert run.error == "boom 4"
        assert run.is_finished

    @pytest.mark.asyncio
    async def test_single_retry(self):
        dispatcher = JobDispatcher(backoff_seconds=0)
        job, calls = _flaky(failures=10)
        dispatcher.register("cleanup", job, retries=1)
        run = await dispatcher.execute("cleanup")
        assert run.attempts == 2
        assert run.state == JobState.FAILED_TERMINAL

    @pytest.mark.asyncio
    async def test_backoff_is_exponential(self):
        waits = []

        async def fake_sleep(seconds):
            waits.append(seconds)

        dispatcher = JobDispatcher(backoff_seconds=2, sleep=fake_sleep)
        job, _ = _flaky(failures=10)
        dispatcher.register("flaky", job, retries=3)
        await dispatcher.execute("flaky")

        assert len(waits) == 3
        assert waits == sorted(waits)
        assert waits[-1] > waits[0]

    def test_unknown_job(self):
        dispatcher = JobDispatcher()
        with pytest.raises(KeyError):
            dispatcher.submit("nope")

    def test_duplicate_registration(self):
        dispatcher = JobDispatcher()
        job, _ = _flaky(0)
        dispatcher.register("a", job)
        with pytest.raises(ValueError):
            dispatcher.register("a", job)


class TestQueue:
    @pytest.mark.asyncio
    async def test_submit_returns_before_run(self):
        dispatcher = JobDispatcher(backoff_seconds=0)
        job, calls = _flaky(failures=0)
        dispatcher.register("work", job)

        run = dispatcher.submit("work", trigger=JobTrigger.EVENT, n=1)
        assert run.state == JobState.PENDING
        assert calls == []

        dispatcher.start(workers=2)
        await asyncio.wait_for(dispatcher.join(), timeout=5)
        await dispatcher.stop()

        assert run.state == JobState.SUCCEEDED
        assert calls == [{"n": 1}]
        assert dispatcher.get_run(run.run_id) is run

    @pytest.mark.asyncio
    async def test_worker_survives_terminal_failure(self):
        dispatcher = JobDispatcher(backoff_seconds=0)
        bad, _ = _flaky(failures=10)
        good, good_calls = _flaky(failures=0)
        dispatcher.register("bad", bad, retries=1)
        dispatcher.register("good", good)

        dispatcher.start(workers=1)
        failed = dispatcher.submit("bad")
        ok = dispatcher.submit("good")
        await asyncio.wait_for(dispatcher.join(), timeout=5)
        await dispatcher.stop()

        assert failed.state == JobState.FAILED_TERMINAL
        assert ok.state == JobState.SUCCEEDED
        assert len(good_calls) == 1


class TestTracker:
    @pytest.mark.asyncio
    async def test_runs_persisted(self, db, job_context):
        dispatcher = JobDispatcher(backoff_seconds=0, tracker=JobTracker(job_context.session_factory))
        job, _ = _flaky(failures=1)
        dispatcher.register("flaky", job, retries=3)

        run = await dispatcher.execute("flaky")

        db.expire_all()
        log = db.query(JobExecutionLog).filter_by(run_id=run.run_id).one()
        assert log.status == "succeeded"
        assert log.attempts == 2
        assert log.trigger == "schedule"
        assert log.finished_at is not None

        stats = get_all_job_stats(db)
        assert stats[0]["job_name"] == "flaky"
        assert stats[0]["runs_24h"] == 1
        assert stats[0]["failures_24h"] == 0


class TestEventBus:
    def test_verify_requires_every_variant(self):
        bus = EventBus()
        with pytest.raises(RuntimeError):
            bus.verify()
        bus.subscribe(EventType.POST_CREATED, lambda event: None)
        bus.verify()

    def test_duplicate_handler(self):
        bus = EventBus()
        bus.subscribe(EventType.POST_CREATED, lambda event: None)
        with pytest.raises(ValueError):
            bus.subscribe(EventType.POST_CREATED, lambda event: None)

    @pytest.mark.asyncio
    async def test_publish_without_handler(self):
        with pytest.raises(LookupError):
            await EventBus().publish(PostCreated(post_id="p", content="c"))

    @pytest.mark.asyncio
    async def test_post_created_enqueues_analysis(self, db, make_post, gemini, job_context):
        post = make_post("$AAPL and $GOOG", Sentiment.BULLISH)
        gemini.response = '{"qualityScore": 0.9, "insightType": "fundamental"}'

        bus = EventBus()
        dispatcher = JobDispatcher(job_context, backoff_seconds=0)
        register_jobs(dispatcher)
        register_event_handlers(dispatcher, bus=bus)

        await bus.publish(PostCreated(post_id=post.id, content=post.content, tickers=("AAPL", "GOOG")))

        runs = dispatcher.recent_runs("analyze_post")
        assert len(runs) == 1
        assert runs[0].trigger == JobTrigger.EVENT
        assert runs[0].state == JobState.PENDING
        assert runs[0].payload["tickers"] == ["AAPL", "GOOG"]

        dispatcher.start(workers=1)
        await asyncio.wait_for(dispatcher.join(), timeout=5)
        await dispatcher.stop()

        assert runs[0].state == JobState.SUCCEEDED
        db.expire_all()
        assert db.get(Post, post.id).quality_score == 0.9
