"""EventPublisher: ordered publishing sink over an A2A EventQueue."""

import logging
from typing import TYPE_CHECKING, Union

from a2a.types import Message, Task, TaskArtifactUpdateEvent, TaskStatusUpdateEvent

if TYPE_CHECKING:
    from a2a.server.events import EventQueue

logger = logging.getLogger(__name__)

A2AEvent = Union[Message, Task, TaskStatusUpdateEvent, TaskArtifactUpdateEvent]

__all__ = ["A2AEvent", "EventPublisher"]


class EventPublisher:
    """publish() enqueues events in call order; finished() closes the queue once."""

    def __init__(self, event_queue: "EventQueue") -> None:
        self._queue = event_queue
        self._finished = False

    async def publish(self, event: A2AEvent) -> None:
        logger.debug("publish %s", getattr(event, "kind", type(event).__name__))
        await self._queue.enqueue_event(event)

    async def finished(self) -> None:
        if self._finished:
            return
        self._finished = True
        await self._queue.close()
