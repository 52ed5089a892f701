"""Job queue configuration.

This module defines configuration for queue retry, claiming and polling.
"""

from dataclasses import dataclass

from infrastructure.configuration.infrastructure import QueueSettings


@dataclass
class QueueConfig:
    """Configuration for job queue behavior.

    Attributes:
        max_attempts: Attempts before a job is dead-lettered
        base_delay_ms: Base delay for exponential backoff (first retry)
        max_delay_ms: Cap for exponential backoff
        batch_size: Jobs fetched per worker batch
        claim_lease_seconds: How long a worker holds a claimed job
        poll_interval_seconds: Idle wait between empty batches
        remove_on_complete: Completed jobs kept before the oldest are dropped
        remove_on_fail: Dead-lettered jobs kept before the oldest are dropped

    Example:
        config = QueueConfig(max_attempts=3, base_delay_ms=5000)
    """

    max_attempts: int = 3
    base_delay_ms: int = 5000  # 5 seconds
    max_delay_ms: int = 300000  # 5 minutes
    batch_size: int = 10
    claim_lease_seconds: int = 300
    poll_interval_seconds: float = 1.0
    remove_on_complete: int = 100
    remove_on_fail: int = 50

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay_ms < 0:
            raise ValueError("base_delay_ms must not be negative")
        if self.max_delay_ms < self.base_delay_ms:
            raise ValueError("max_delay_ms must be >= base_delay_ms")
        if self.batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        if self.claim_lease_seconds < 1:
            raise ValueError("claim_lease_seconds must be at least 1")
        if self.poll_interval_seconds <= 0:
            raise ValueError("poll_interval_seconds must be positive")
        if self.remove_on_complete < 0 or self.remove_on_fail < 0:
            raise ValueError("job retention bounds must not be negative")

    @classmethod
    def from_settings(cls, settings: QueueSettings) -> "QueueConfig":
        return cls(
            max_attempts=settings.max_attempts,
            base_delay_ms=settings.retry_delay_ms,
            max_delay_ms=settings.retry_max_delay_ms,
            batch_size=settings.batch_size,
            claim_lease_seconds=settings.claim_lease_seconds,
            poll_interval_seconds=settings.poll_interval_seconds,
            remove_on_complete=settings.remove_on_complete,
            remove_on_fail=settings.remove_on_fail,
        )

    def retry_delay_ms(self, previous_attempts: int) -> int:
        """Exponential backoff: base_delay * 2**previous_attempts, capped."""
        return min(self.base_delay_ms * (2**previous_attempts), self.max_delay_ms)
