"""Shared Redis connection: ban gate, completion broadcasts and the email queue.

Balances never touch Redis; they live in PostgreSQL under row locks.
"""

import logging

import redis.asyncio as aioredis

from config.settings import settings

logger = logging.getLogger(__name__)

_redis_pool: aioredis.Redis | None = None


async def get_redis() -> aioredis.Redis:
    """Return the process-wide client, creating and pinging it on first use."""
    global _redis_pool  # noqa: PLW0603
    if _redis_pool is None:
        client = aioredis.from_url(
            settings.REDIS_URL,
            decode_responses=True,
            socket_timeout=settings.REDIS_SOCKET_TIMEOUT_SECONDS,
        )
        await client.ping()
        logger.info("Connected to Redis at %s", settings.REDIS_URL.rsplit("@", 1)[-1])
        _redis_pool = client
    return _redis_pool


async def close_redis() -> None:
    global _redis_pool  # noqa: PLW0603
    client, _redis_pool = _redis_pool, None
    if client is not None:
        await client.aclose()
