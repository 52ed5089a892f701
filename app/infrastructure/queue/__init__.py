"""Durable job queues for asynchronous delivery channels.

Architecture:
- QueueJob: Job model with a deterministic id per (channel, notification)
- JobQueue: Storage protocol with in-memory and Redis implementations
- QueueWorker: Claims due jobs and hands them to a JobProcessor
- QueueConfig: Retry, backoff and polling configuration

Usage:
    from infrastructure.queue import (
        EMAIL_QUEUE,
        InMemoryJobQueue,
        QueueConfig,
        QueueWorker,
    )

    queue = InMemoryJobQueue(EMAIL_QUEUE, QueueConfig(max_attempts=3))
    worker = QueueWorker(queue, email_processor, queue.config)
    await worker.process_batch()
"""

from infrastructure.queue.config import QueueConfig
from infrastructure.queue.factory import create_job_queue
from infrastructure.queue.models import (
    EMAIL_QUEUE,
    SMS_QUEUE,
    JobState,
    QueueJob,
    job_id_for,
    queue_priority,
)
from infrastructure.queue.redis_store import RedisJobQueue
from infrastructure.queue.store import InMemoryJobQueue, JobQueue
from infrastructure.queue.worker import JobProcessor, QueueWorker

__all__ = [
    "EMAIL_QUEUE",
    "SMS_QUEUE",
    "InMemoryJobQueue",
    "JobProcessor",
    "JobQueue",
    "JobState",
    "QueueConfig",
    "QueueJob",
    "QueueWorker",
    "RedisJobQueue",
    "create_job_queue",
    "job_id_for",
    "queue_priority",
]
