"""Rate limit window configuration."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitConfig:
    """Configuration for one sliding-window rate-limit domain.

    Attributes:
        window_ms: Length of the trailing window in milliseconds
        max_requests: Requests allowed inside the window
        key_prefix: Redis key prefix; the full key is ``{key_prefix}:{key}``

    Example:
        config = RateLimitConfig(window_ms=60000, max_requests=100,
                                 key_prefix="tenant_rate_limit:tenant-1")
    """

    window_ms: int
    max_requests: int
    key_prefix: str

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.window_ms < 1:
            raise ValueError("window_ms must be at least 1")
        if self.max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if not self.key_prefix:
            raise ValueError("key_prefix is required")

    def redis_key(self, key: str) -> str:
        return f"{self.key_prefix}:{key}"
