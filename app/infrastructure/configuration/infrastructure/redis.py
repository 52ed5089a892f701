"""Redis connection settings."""

from pydantic import Field

from infrastructure.configuration.base import InfrastructureSettings


class RedisSettings(InfrastructureSettings):
    """Redis connection used by the rate limiter, job queue and realtime push.

    Environment Variables:
        REDIS_URL: Connection URL (default: redis://localhost:6379/0)
        REDIS_MAX_CONNECTIONS: Connection pool size (default: 10)
        REDIS_SOCKET_TIMEOUT: Socket timeout in seconds (default: 5)

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        url = settings.redis.url
        ```
    """

    url: str = Field(
        default="redis://localhost:6379/0",
        alias="REDIS_URL",
        description="Redis connection URL",
    )
    max_connections: int = Field(
        default=10,
        alias="REDIS_MAX_CONNECTIONS",
        description="Maximum connections in the Redis connection pool",
    )
    socket_timeout: float = Field(
        default=5.0,
        alias="REDIS_SOCKET_TIMEOUT",
        description="Socket timeout for Redis commands (seconds)",
    )
