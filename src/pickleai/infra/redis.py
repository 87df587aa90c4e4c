"""Async Redis client for the application lifespan.

``build_redis`` creates a Redis client, verifies the connection, and
yields ``None`` when Redis is unreachable so the rate-limit store can fall
back to process memory.  The client is closed on exit.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from redis.asyncio import Redis

from pickleai.configs.config import AppConfig

logger = logging.getLogger(__name__)


@asynccontextmanager
async def build_redis(config: AppConfig) -> AsyncGenerator[Redis | None, None]:
    """Create a Redis client; yield ``None`` if unreachable or not wanted."""
    if config.security.backend == "local":
        yield None
        return

    client = Redis.from_url(config.third_party.redis_uri, decode_responses=True)
    verified: Redis | None = None
    try:
        await client.ping()
        verified = client
    except Exception:
        if config.security.backend == "redis":
            await client.aclose()
            raise
        logger.warning(
            "Redis unavailable -- falling back to local rate limiting."
        )

    try:
        yield verified
    finally:
        await client.aclose()
