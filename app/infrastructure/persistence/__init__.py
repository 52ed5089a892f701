"""Persistence layer: record models, the store protocol and in-memory adapters."""

from infrastructure.persistence.directory import (
    InMemoryUserDirectory,
    UserContact,
    UserDirectory,
)
from infrastructure.persistence.memory import InMemoryNotificationStore
from infrastructure.persistence.models import (
    AuditAction,
    AuditLog,
    ChannelType,
    DeliveryLog,
    DeliveryStatus,
    Notification,
    NotificationPreference,
    NotificationPriority,
    NotificationTemplate,
    NotificationType,
    TenantNotificationConfig,
)
from infrastructure.persistence.store import NotificationFilter, NotificationStore

__all__ = [
    "AuditAction",
    "AuditLog",
    "ChannelType",
    "DeliveryLog",
    "DeliveryStatus",
    "InMemoryNotificationStore",
    "InMemoryUserDirectory",
    "Notification",
    "NotificationFilter",
    "NotificationPreference",
    "NotificationPriority",
    "NotificationStore",
    "NotificationTemplate",
    "NotificationType",
    "TenantNotificationConfig",
    "UserContact",
    "UserDirectory",
]
