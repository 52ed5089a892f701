"""
Factory functions for application-scoped singletons.
"""

from functools import lru_cache

from infrastructure.configuration import Settings


@lru_cache
def get_settings() -> Settings:
    """
    Get application-scoped settings singleton.

    This is the single source of truth for settings across the entire application.
    The @lru_cache decorator ensures only ONE instance is created per process,
    even if called from multiple packages.

    Usage:
        from infrastructure.services import get_settings
        settings = get_settings()
        window = settings.rate_limits.tenant_window_ms

    Returns:
        Settings: Cached settings instance loaded from environment.
    """
    return Settings()
