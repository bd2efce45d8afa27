"""Shared Redis connection for the pub/sub event bus.

Balances, wagers and price snapshots never touch Redis; PostgreSQL is the
single source of truth. Redis only carries fan-out messages between worker
processes, so it is opened only when EVENT_BUS=redis.
"""

import logging

import redis.asyncio as aioredis

from config.settings import settings

logger = logging.getLogger(__name__)

_client: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Open the shared client on first use and ping it once.

    A bad REDIS_URL fails application startup instead of surfacing later as
    dropped events. health_check_interval keeps idle subscriber connections
    from being silently cut by the server.
    """
    global _client  # noqa: PLW0603
    if _client is None:
        client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            health_check_interval=30,
        )
        await client.ping()
        logger.info("Connected to Redis for event fan-out")
        _client = client
    return _client


async def close_redis() -> None:
    global _client  # noqa: PLW0603
    if _client is not None:
        await _client.aclose()
        _client = None
