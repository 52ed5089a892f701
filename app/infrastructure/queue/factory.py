"""Factory for creating job queues based on configuration."""

from typing import Optional

from redis.asyncio import Redis

from infrastructure.logging import get_module_logger
from infrastructure.queue.config import QueueConfig
from infrastructure.queue.redis_store import RedisJobQueue
from infrastructure.queue.store import InMemoryJobQueue, JobQueue

logger = get_module_logger()


def create_job_queue(
    name: str,
    config: QueueConfig,
    backend: str = "memory",
    redis: Optional[Redis] = None,
) -> JobQueue:
    """Create the JobQueue implementation for a backend.

    Args:
        name: Queue name (EMAIL_QUEUE or SMS_QUEUE)
        config: Retry and claim configuration
        backend: "memory" or "redis"
        redis: redis.asyncio client, required for the redis backend

    Raises:
        ValueError: If the backend is unknown or redis is missing
    """
    if backend == "memory":
        logger.info("creating_in_memory_job_queue", queue=name)
        return InMemoryJobQueue(name, config)

    if backend == "redis":
        if redis is None:
            raise ValueError("A Redis client is required for the redis queue backend")
        logger.info("creating_redis_job_queue", queue=name)
        return RedisJobQueue(name, redis, config)

    raise ValueError(f"Unknown queue backend: {backend}. Supported: memory, redis")
