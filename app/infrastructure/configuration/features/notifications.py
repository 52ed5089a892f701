"""Notification feature settings."""

from typing import List

from pydantic import Field

from infrastructure.configuration.base import FeatureSettings


class NotificationFeatureSettings(FeatureSettings):
    """Notification lifecycle configuration.

    Environment Variables:
        IN_APP_NOTIFICATION_EXPIRY_DAYS: Default in-app expiry (default: 30)
        NOTIFICATION_RETENTION_DAYS: Retention when no explicit date is set (default: 90)
        AUDIT_LOG_RETENTION_DAYS: Audit log retention (default: 365)
        RETENTION_ENFORCEMENT_TIME: Daily run time, HH:MM (default: 02:00)
        DEFAULT_NOTIFICATION_CATEGORIES: Comma separated categories seeded per user

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()
        days = settings.notifications.retention_days
        categories = settings.notifications.categories
        ```
    """

    in_app_expiry_days: int = Field(
        default=30,
        alias="IN_APP_NOTIFICATION_EXPIRY_DAYS",
        description="Days before an in-app notification expires",
    )
    retention_days: int = Field(
        default=90,
        alias="NOTIFICATION_RETENTION_DAYS",
        description="Retention period for notifications without a retention date",
    )
    audit_log_retention_days: int = Field(
        default=365,
        alias="AUDIT_LOG_RETENTION_DAYS",
        description="Retention period for notification audit logs",
    )
    retention_enforcement_time: str = Field(
        default="02:00",
        alias="RETENTION_ENFORCEMENT_TIME",
        description="Daily time (HH:MM) at which retention is enforced",
    )
    default_categories: str = Field(
        default="user_activity,system,invoice,project,security",
        alias="DEFAULT_NOTIFICATION_CATEGORIES",
        description="Comma separated categories seeded with default preferences",
    )

    @property
    def categories(self) -> List[str]:
        """Default categories as a list."""
        return [c.strip() for c in self.default_categories.split(",") if c.strip()]
