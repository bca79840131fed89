"""
Dramatiq broker for MAGNA background jobs.

Workers are started with `dramatiq jobs.broker jobs.tasks.auto_withdraw`;
importing this module first binds the auto-withdraw actor to Redis.
"""

import dramatiq
from dramatiq.brokers.redis import RedisBroker
from dramatiq.middleware import CurrentMessage, Retries, ShutdownNotifications
from loguru import logger

from app.config.logging import setup_logging
from app.config.settings import settings
from app.utils.redis_utils import get_redis_url_masked

setup_logging()

redis_broker = RedisBroker(
    host=settings.redis_host,
    port=settings.redis_port,
    password=settings.redis_password or None,
    db=settings.redis_db,
)

# A sweep interrupted by shutdown is picked up by the next scheduled run
redis_broker.add_middleware(ShutdownNotifications())
redis_broker.add_middleware(CurrentMessage())
# Actors opt out per declaration; the sweep sets max_retries=0
redis_broker.add_middleware(Retries(max_retries=3, min_backoff=1_000, max_backoff=60_000))

dramatiq.set_broker(redis_broker)

broker = redis_broker

logger.bind(service="jobs").info(
    "MAGNA job broker ready",
    extra={"redis": get_redis_url_masked(), "retries": 3},
)
