"""Redis connection utilities.

Provides helper functions for creating Redis connections with configuration
from settings, and a non-blocking lock that keeps periodic tasks from
overlapping across workers.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import redis.asyncio as redis
from loguru import logger

from app.config.settings import settings


def get_redis_client() -> redis.Redis:
    """
    Create a Redis client with settings from config.

    Returns:
        redis.Redis: Configured Redis client with decode_responses=True

    Example:
        >>> redis_client = get_redis_client()
        >>> await redis_client.set("key", "value")
        >>> await redis_client.aclose()
    """
    return redis.Redis(
        host=settings.redis_host,
        port=settings.redis_port,
        password=settings.redis_password,
        db=settings.redis_db,
        decode_responses=True,
    )


def get_redis_url_masked() -> str:
    """
    Build Redis URL with masked password for safe logging.

    Returns:
        str: Redis connection URL with masked password

    Example:
        >>> url = get_redis_url_masked()
        >>> # Returns: "redis://:****@localhost:6379/0"
    """
    if settings.redis_password:
        return f"redis://:****@{settings.redis_host}:{settings.redis_port}/{settings.redis_db}"
    return f"redis://{settings.redis_host}:{settings.redis_port}/{settings.redis_db}"


@asynccontextmanager
async def task_lock(
    client: redis.Redis, name: str, timeout: float = 300
) -> AsyncIterator[bool]:
    """
    Try to take a named lock without waiting.

    Yields:
        True if this worker holds the lock, False if another one does

    Example:
        >>> async with task_lock(client, "auto_withdraw_sweep") as acquired:
        ...     if acquired:
        ...         await sweep()
    """
    lock = client.lock(f"lock:{name}", timeout=timeout, blocking=False)
    acquired = await lock.acquire()
    if not acquired:
        logger.info(f"Lock {name} is held by another worker")
    try:
        yield acquired
    finally:
        if acquired:
            await lock.release()
