"""Infrastructure settings __init__ - exports all infrastructure settings."""

from infrastructure.configuration.infrastructure.queue import QueueSettings
from infrastructure.configuration.infrastructure.rate_limits import RateLimitSettings
from infrastructure.configuration.infrastructure.redis import RedisSettings

__all__ = [
    "QueueSettings",
    "RateLimitSettings",
    "RedisSettings",
]
