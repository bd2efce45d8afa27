"""In-process event bus.

Each subscriber owns a bounded asyncio.Queue. publish() never awaits a
subscriber: when a queue is full the oldest message is dropped, so a stalled
observer loses history instead of stalling wager placement.
"""

import asyncio
import logging
from collections import defaultdict
from collections.abc import AsyncIterator
from typing import Any

from src.wg_common.datetime_utils import epoch_ms
from src.wg_realtime.domain.events import RealtimeEvent

logger = logging.getLogger(__name__)


class InMemoryEventBus:
    def __init__(self, queue_size: int = 256) -> None:
        self._queue_size = queue_size
        self._subscribers: dict[str, set[asyncio.Queue[RealtimeEvent]]] = defaultdict(set)

    def subscriber_count(self, topic: str) -> int:
        return len(self._subscribers.get(topic, ()))

    async def publish(self, topic: str, event_type: str, payload: dict[str, Any]) -> None:
        event = RealtimeEvent(
            type=event_type,
            topic=topic,
            data=payload,
            timestamp=epoch_ms(),
        )
        for queue in list(self._subscribers.get(topic, ())):
            if queue.full():
                queue.get_nowait()
                logger.warning("Subscriber on %s is lagging; dropped oldest event", topic)
            queue.put_nowait(event)

    def open(self, topic: str) -> asyncio.Queue[RealtimeEvent]:
        """Register a raw queue. Pair with close(); prefer subscribe()."""
        queue: asyncio.Queue[RealtimeEvent] = asyncio.Queue(maxsize=self._queue_size)
        self._subscribers[topic].add(queue)
        return queue

    def close(self, topic: str, queue: asyncio.Queue[RealtimeEvent]) -> None:
        subscribers = self._subscribers.get(topic)
        if subscribers is None:
            return
        subscribers.discard(queue)
        if not subscribers:
            del self._subscribers[topic]

    async def subscribe(self, topic: str) -> AsyncIterator[RealtimeEvent]:
        queue = self.open(topic)
        try:
            while True:
                yield await queue.get()
        finally:
            self.close(topic, queue)
