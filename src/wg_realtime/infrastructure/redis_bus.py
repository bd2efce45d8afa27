"""Redis pub/sub event bus for multi-process deployments.

Publishing is best-effort from the core's point of view: by the time an event
is published the wager or settlement has already committed, so a Redis outage
is logged and swallowed rather than turned into a failed request.
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Any

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from src.wg_common.datetime_utils import epoch_ms
from src.wg_realtime.domain.events import RealtimeEvent

logger = logging.getLogger(__name__)


class RedisEventBus:
    def __init__(self, client: aioredis.Redis) -> None:
        self._client = client

    async def publish(self, topic: str, event_type: str, payload: dict[str, Any]) -> None:
        event = RealtimeEvent(
            type=event_type,
            topic=topic,
            data=payload,
            timestamp=epoch_ms(),
        )
        try:
            await self._client.publish(topic, json.dumps(event.to_dict()))
        except RedisError:
            logger.warning("Failed to publish %s to %s", event_type, topic, exc_info=True)

    async def subscribe(self, topic: str) -> AsyncIterator[RealtimeEvent]:
        pubsub = self._client.pubsub()
        await pubsub.subscribe(topic)
        try:
            async for message in pubsub.listen():
                if message.get("type") != "message":
                    continue
                try:
                    raw = json.loads(message["data"])
                except (TypeError, ValueError):
                    logger.warning("Dropping malformed message on %s", topic)
                    continue
                yield RealtimeEvent(
                    type=raw["type"],
                    topic=raw["topic"],
                    data=raw["data"],
                    timestamp=raw["timestamp"],
                )
        finally:
            await pubsub.unsubscribe(topic)
            await pubsub.aclose()
