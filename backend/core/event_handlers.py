"""Event handler registration.

Handlers only enqueue work on the job dispatcher; the publisher never waits
for the job to finish.
- post created → analyze_post job
"""
import logging

from core.events import EventBus, EventType, PostCreated, event_bus
from scheduler.dispatcher import JobDispatcher, JobTrigger

logger = logging.getLogger(__name__)


def make_post_created_handler(dispatcher: JobDispatcher):
    def on_post_created(event: PostCreated):
        run = dispatcher.submit(
            "analyze_post",
            trigger=JobTrigger.EVENT,
            post_id=event.post_id,
            content=event.content,
            tickers=list(event.tickers),
        )
        logger.info(f"[EventBus] post {event.post_id} created → queued analyze_post ({run.run_id})")
        return run

    return on_post_created


def register_event_handlers(dispatcher: JobDispatcher, bus: EventBus = event_bus) -> None:
    """Register one handler per event variant and verify the set is complete."""
    bus.clear()
    bus.subscribe(EventType.POST_CREATED, make_post_created_handler(dispatcher))
    bus.verify()
    logger.info("Event handlers registered")
