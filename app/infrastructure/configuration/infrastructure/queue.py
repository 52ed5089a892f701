"""Notification job queue settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class QueueSettings(InfrastructureSettings):
    """Job queue configuration for the asynchronous email and SMS channels.

    Environment Variables:
        NOTIFICATION_QUEUE_BACKEND: Queue backend - 'memory' or 'redis'
        NOTIFICATION_QUEUE_CONCURRENCY: Workers per queue (default: 5)
        NOTIFICATION_MAX_RETRIES: Attempts before a job is dead-lettered (default: 3)
        NOTIFICATION_RETRY_DELAY: Base backoff delay in ms (default: 5000)
        NOTIFICATION_RETRY_MAX_DELAY: Backoff cap in ms (default: 300000)
        NOTIFICATION_QUEUE_BATCH_SIZE: Jobs fetched per poll (default: 10)
        NOTIFICATION_QUEUE_CLAIM_LEASE_SECONDS: Claim duration (default: 300)
        NOTIFICATION_QUEUE_POLL_INTERVAL_SECONDS: Idle poll interval (default: 1.0)
        NOTIFICATION_QUEUE_REMOVE_ON_COMPLETE: Completed jobs kept per queue (default: 100)
        NOTIFICATION_QUEUE_REMOVE_ON_FAIL: Dead-lettered jobs kept per queue (default: 50)

    Exponential Backoff:
        Delay calculation: min(retry_delay_ms * (2 ^ attempts), retry_max_delay_ms)

        Example with defaults (base=5s, max=300s):
            Attempt 1: 10s
            Attempt 2: 20s
            Attempt 3: dead-lettered
    """

    backend: str = Field(
        default="memory",
        alias="NOTIFICATION_QUEUE_BACKEND",
        description="Queue backend: 'memory' or 'redis'",
    )
    concurrency: int = Field(
        default=5,
        alias="NOTIFICATION_QUEUE_CONCURRENCY",
        description="Number of concurrent workers per queue",
    )
    max_attempts: int = Field(
        default=3,
        alias="NOTIFICATION_MAX_RETRIES",
        description="Maximum processing attempts before a job is dead-lettered",
    )
    retry_delay_ms: int = Field(
        default=5000,
        alias="NOTIFICATION_RETRY_DELAY",
        description="Base delay for exponential backoff (milliseconds)",
    )
    retry_max_delay_ms: int = Field(
        default=300000,
        alias="NOTIFICATION_RETRY_MAX_DELAY",
        description="Maximum delay for exponential backoff (milliseconds)",
    )
    batch_size: int = Field(
        default=10,
        alias="NOTIFICATION_QUEUE_BATCH_SIZE",
        description="Number of jobs fetched per poll",
    )
    claim_lease_seconds: int = Field(
        default=300,
        alias="NOTIFICATION_QUEUE_CLAIM_LEASE_SECONDS",
        description="Duration a worker holds its claim on a job (seconds)",
    )
    poll_interval_seconds: float = Field(
        default=1.0,
        alias="NOTIFICATION_QUEUE_POLL_INTERVAL_SECONDS",
        description="Sleep between polls when a queue is idle (seconds)",
    )
    remove_on_complete: int = Field(
        default=100,
        alias="NOTIFICATION_QUEUE_REMOVE_ON_COMPLETE",
        description="Most recent completed jobs kept for duplicate detection",
    )
    remove_on_fail: int = Field(
        default=50,
        alias="NOTIFICATION_QUEUE_REMOVE_ON_FAIL",
        description="Most recent dead-lettered jobs kept for inspection",
    )
