"""Notification engine configuration settings - main aggregator."""

from pydantic_settings import BaseSettings, SettingsConfigDict

# Integration settings
from infrastructure.configuration.integrations import (
    EmailSettings,
    SmsSettings,
)

# Feature settings
from infrastructure.configuration.features import NotificationFeatureSettings

# Infrastructure settings
from infrastructure.configuration.infrastructure import (
    QueueSettings,
    RateLimitSettings,
    RedisSettings,
)


class Settings(BaseSettings):
    """Notification engine configuration settings - main aggregator.

    Aggregates all domain-specific settings into a single configuration object.
    Settings are organized by concern:

    - **Integrations**: Email and SMS provider defaults
    - **Features**: Notification lifecycle (expiry, retention, categories)
    - **Infrastructure**: Redis, job queues and rate limit domains

    Environment Variables:
        PREFIX: Environment prefix for non-production deployments
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
        GIT_SHA: Git commit SHA for deployment tracking

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        # Access integration settings
        provider = settings.email.EMAIL_PROVIDER

        # Access infrastructure settings
        if settings.queue.backend == "redis":
            redis_url = settings.redis.url
        ```
    """

    # Application-level settings
    PREFIX: str = ""
    LOG_LEVEL: str = "INFO"
    GIT_SHA: str = "Unknown"

    # Integration settings
    email: EmailSettings
    sms: SmsSettings

    # Feature settings
    notifications: NotificationFeatureSettings

    # Infrastructure settings
    redis: RedisSettings
    queue: QueueSettings
    rate_limits: RateLimitSettings

    @property
    def is_production(self) -> bool:
        """Check if the application is running in production.

        Returns:
            True if PREFIX is empty (production), False otherwise.
        """
        return not bool(self.PREFIX)

    def __init__(self, **kwargs):
        """Initialize Settings with automatic subsettings instantiation.

        Args:
            **kwargs: Optional overrides for specific settings sections.
        """
        settings_map = {
            # Integrations
            "email": EmailSettings,
            "sms": SmsSettings,
            # Features
            "notifications": NotificationFeatureSettings,
            # Infrastructure
            "redis": RedisSettings,
            "queue": QueueSettings,
            "rate_limits": RateLimitSettings,
        }

        for setting_name, setting_class in settings_map.items():
            if setting_name not in kwargs:
                kwargs[setting_name] = setting_class()

        super().__init__(**kwargs)

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


# Create the singleton settings instance
settings = Settings()
