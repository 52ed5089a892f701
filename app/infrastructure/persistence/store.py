"""Record store interface.

The notification engine consumes persistence through the NotificationStore
protocol. Every notification lookup carries the tenant id in its predicate;
the only exception is the cross-tenant retention sweep, which passes
``tenant_id=None`` explicitly.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Optional, Protocol

from infrastructure.persistence.models import (
    AuditLog,
    ChannelType,
    DeliveryLog,
    Notification,
    NotificationPreference,
    NotificationTemplate,
    NotificationType,
    TenantNotificationConfig,
)


@dataclass
class NotificationFilter:
    """Predicate for notification queries.

    Attributes:
        tenant_id: Tenant scope. None only for cross-tenant maintenance.
        user_id: Owning user
        notification_id: Single notification
        type: Notification type
        category: Category name
        unread: True for unread only, False for read only
        search: Case-insensitive substring of title or message
        include_deleted: Include soft-deleted rows
        deleted_only: Only soft-deleted rows
        sensitive_only: Only rows flagged as sensitive
        visible_at: Exclude rows expired or past retention at this instant
        created_before: created_at <= this instant
        retention_due_at: retention_date set and <= this instant
        without_retention_date: retention_date is null
    """

    tenant_id: Optional[str]
    user_id: Optional[str] = None
    notification_id: Optional[str] = None
    type: Optional[NotificationType] = None
    category: Optional[str] = None
    unread: Optional[bool] = None
    search: Optional[str] = None
    include_deleted: bool = False
    deleted_only: bool = False
    sensitive_only: bool = False
    visible_at: Optional[datetime] = None
    created_before: Optional[datetime] = None
    retention_due_at: Optional[datetime] = None
    without_retention_date: bool = False

    def matches(self, n: Notification) -> bool:
        if self.tenant_id is not None and n.tenant_id != self.tenant_id:
            return False
        if self.user_id is not None and n.user_id != self.user_id:
            return False
        if self.notification_id is not None and n.id != self.notification_id:
            return False
        if self.type is not None and n.type != self.type:
            return False
        if self.category is not None and n.category != self.category:
            return False
        if self.unread is True and n.read_at is not None:
            return False
        if self.unread is False and n.read_at is None:
            return False
        if self.search:
            needle = self.search.lower()
            if needle not in n.title.lower() and needle not in n.message.lower():
                return False
        if self.deleted_only:
            if n.deleted_at is None:
                return False
        elif not self.include_deleted and n.deleted_at is not None:
            return False
        if self.sensitive_only and not n.sensitive_data:
            return False
        if self.visible_at is not None and (
            n.is_expired(self.visible_at) or n.is_past_retention(self.visible_at)
        ):
            return False
        if self.created_before is not None and n.created_at > self.created_before:
            return False
        if self.retention_due_at is not None and not n.is_past_retention(
            self.retention_due_at
        ):
            return False
        if self.without_retention_date and n.retention_date is not None:
            return False
        return True


class NotificationStore(Protocol):
    """Transactional record store consumed by the notification engine.

    All methods are coroutines. Returned records are copies.
    """

    async def ping(self) -> bool:
        """Return True if the store is reachable."""
        ...

    # Notifications
    async def create_notification(self, notification: Notification) -> Notification: ...

    async def find_first_notification(
        self, where: NotificationFilter
    ) -> Optional[Notification]: ...

    async def find_notifications(
        self,
        where: NotificationFilter,
        sort_by: str = "created_at",
        descending: bool = True,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> List[Notification]: ...

    async def count_notifications(self, where: NotificationFilter) -> int: ...

    async def update_notification(
        self, tenant_id: str, notification_id: str, **changes: Any
    ) -> Notification:
        """Update one notification.

        Raises:
            NotificationNotFoundError: If no row matches id and tenant
        """
        ...

    async def update_notifications(self, where: NotificationFilter, **changes: Any) -> int:
        """Update every matching notification and return the count."""
        ...

    # Delivery logs
    async def create_delivery_log(self, log: DeliveryLog) -> DeliveryLog: ...

    async def get_delivery_log(self, log_id: str) -> Optional[DeliveryLog]: ...

    async def find_delivery_log(
        self, tenant_id: str, notification_id: str, channel: ChannelType
    ) -> Optional[DeliveryLog]: ...

    async def list_delivery_logs(
        self, tenant_id: str, notification_id: str
    ) -> List[DeliveryLog]: ...

    async def update_delivery_log(self, log_id: str, **changes: Any) -> DeliveryLog:
        """Update a delivery log.

        Raises:
            InvalidDeliveryTransitionError: If ``status`` changes illegally
        """
        ...

    # Preferences
    async def get_preference(
        self, tenant_id: str, user_id: str, category: str
    ) -> Optional[NotificationPreference]: ...

    async def upsert_preference(
        self,
        tenant_id: str,
        user_id: str,
        category: str,
        create: dict,
        update: dict,
    ) -> NotificationPreference: ...

    async def create_preferences(
        self, preferences: List[NotificationPreference], skip_duplicates: bool = True
    ) -> int: ...

    async def list_preferences(
        self, tenant_id: str, user_id: str
    ) -> List[NotificationPreference]: ...

    async def distinct_categories(self, tenant_id: str) -> List[str]: ...

    # Audit logs
    async def create_audit_log(self, log: AuditLog) -> AuditLog: ...

    async def list_audit_logs(
        self, tenant_id: str, notification_id: str
    ) -> List[AuditLog]: ...

    async def delete_audit_logs_before(self, cutoff: datetime) -> int: ...

    # Tenant provider configuration
    async def get_tenant_config(
        self, tenant_id: str
    ) -> Optional[TenantNotificationConfig]: ...

    async def set_tenant_config(
        self, config: TenantNotificationConfig
    ) -> TenantNotificationConfig: ...

    # Templates
    async def create_template(
        self, template: NotificationTemplate
    ) -> NotificationTemplate: ...

    async def get_template(self, template_id: str) -> Optional[NotificationTemplate]: ...

    async def find_active_template(
        self, tenant_id: Optional[str], category: str, channel: ChannelType
    ) -> Optional[NotificationTemplate]: ...

    async def list_templates(self, tenant_id: str) -> List[NotificationTemplate]: ...

    async def update_template(
        self, template_id: str, **changes: Any
    ) -> NotificationTemplate: ...

    async def delete_template(self, template_id: str) -> bool: ...
