"""Fixtures for job queue tests."""

from datetime import datetime, timedelta, timezone

import pytest

from infrastructure.queue import EMAIL_QUEUE, QueueConfig, QueueJob


class MutableClock:
    """Clock returning a settable timezone-aware datetime."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return MutableClock(datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def queue_config():
    return QueueConfig(
        max_attempts=3,
        base_delay_ms=1000,
        max_delay_ms=10000,
        batch_size=10,
        claim_lease_seconds=60,
        poll_interval_seconds=0.01,
    )


@pytest.fixture
def job_factory():
    """Factory for creating QueueJob instances.

    Example:
        job = job_factory("email-n-1", priority=10)
    """

    def _factory(job_id: str = "email-n-1", priority: int = 1, **payload) -> QueueJob:
        return QueueJob(
            id=job_id,
            queue=EMAIL_QUEUE,
            priority=priority,
            payload={"tenant_id": "tenant-1", "notification_id": job_id, **payload},
        )

    return _factory
