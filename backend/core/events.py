import logging
from enum import Enum
from typing import Callable, ClassVar, Dict, Tuple, Union
from dataclasses import dataclass, field
from datetime import datetime

from core.timezone import now_utc

logger = logging.getLogger(__name__)


class EventType(Enum):
    POST_CREATED = "post/created"


@dataclass(frozen=True)
class PostCreated:
    """A post was created (or re-submitted for analysis) by the CRUD layer."""
    type: ClassVar[EventType] = EventType.POST_CREATED

    post_id: str
    content: str
    tickers: Tuple[str, ...] = ()
    created_at: datetime = field(default_factory=now_utc)


# Closed set of domain events. Adding a variant requires a matching EventType
# member and a handler, which EventBus.verify() enforces at startup.
DomainEvent = Union[PostCreated]


class EventBus:
    """Routes each event variant to exactly one handler."""

    def __init__(self):
        self._handlers: Dict[EventType, Callable] = {}

    def subscribe(self, event_type: EventType, handler: Callable) -> None:
        if event_type in self._handlers:
            raise ValueError(f"Handler already registered for {event_type.value}")
        self._handlers[event_type] = handler

    def unsubscribe(self, event_type: EventType) -> None:
        self._handlers.pop(event_type, None)

    def verify(self) -> None:
        """Fail fast when an event type has no handler."""
        missing = [t.value for t in EventType if t not in self._handlers]
        if missing:
            raise RuntimeError(f"No event handler registered for: {', '.join(missing)}")

    def clear(self) -> None:
        self._handlers.clear()

    async def publish(self, event: DomainEvent) -> None:
        handler = self._handlers.get(event.type)
        if handler is None:
            raise LookupError(f"No event handler registered for {event.type.value}")
        try:
            result = handler(event)
            if hasattr(result, '__await__'):
                await result
        except Exception as e:
            logger.error(f"Event handler error for {event.type.value}: {e}", exc_info=True)


event_bus = EventBus()
