"""Infrastructure configuration module - public API.

This module provides centralized configuration management for the notification
engine using Pydantic BaseSettings with domain-based organization.

Exports:
    settings: Singleton Settings instance (main configuration object)
    Settings: Main settings class (for testing/overrides)
    QueueSettings: Job queue settings class (for testing)
    RateLimitSettings: Rate limit domain settings class (for testing)

Example:
    ```python
    from infrastructure.services import get_settings

    settings = get_settings()

    concurrency = settings.queue.concurrency
    window = settings.rate_limits.tenant_window_ms
    ```
"""

from infrastructure.configuration.settings import Settings, settings
from infrastructure.configuration.infrastructure import (
    QueueSettings,
    RateLimitSettings,
)

__all__ = ["Settings", "settings", "QueueSettings", "RateLimitSettings"]
