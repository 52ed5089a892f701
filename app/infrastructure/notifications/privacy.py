"""Notification privacy and retention.

Soft deletion, restoration, retention dates and audit trails for
notifications flagged as carrying sensitive data. Retention enforcement runs
across every tenant from the maintenance scheduler.
"""

import math
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.exceptions import NotificationNotFoundError
from infrastructure.notifications.models import NotificationPage
from infrastructure.persistence.models import (
    AuditAction,
    AuditLog,
    Notification,
    utc_now,
)
from infrastructure.persistence.store import NotificationFilter, NotificationStore
from infrastructure.tenancy import TenantContext, require_tenant

logger = get_module_logger()

SYSTEM_USER = "system"
DEFAULT_RETENTION_DAYS = 90
DEFAULT_AUDIT_LOG_RETENTION_DAYS = 365


class PrivacyService:
    """Privacy operations on notifications.

    Attributes:
        store: Record store
        retention_days: Age after which notifications without an explicit
            retention date are soft-deleted
        audit_log_retention_days: Age after which audit logs are removed
    """

    def __init__(
        self,
        store: NotificationStore,
        retention_days: int = DEFAULT_RETENTION_DAYS,
        audit_log_retention_days: int = DEFAULT_AUDIT_LOG_RETENTION_DAYS,
    ):
        self.store = store
        self.retention_days = retention_days
        self.audit_log_retention_days = audit_log_retention_days

    async def _get_owned(
        self,
        tenant_id: str,
        notification_id: str,
        user_id: str,
        deleted_only: bool = False,
    ) -> Notification:
        notification = await self.store.find_first_notification(
            NotificationFilter(
                tenant_id=tenant_id,
                user_id=user_id,
                notification_id=notification_id,
                include_deleted=not deleted_only,
                deleted_only=deleted_only,
            )
        )
        if notification is None:
            raise NotificationNotFoundError(
                f"Notification {notification_id} not found"
            )
        return notification

    async def soft_delete_notification(
        self, tenant: TenantContext, notification_id: str, user_id: str
    ) -> Notification:
        """Hide a notification from the user without removing the row.

        Raises:
            NotificationNotFoundError: If the user does not own the notification
        """
        tenant_id = require_tenant(tenant)
        existing = await self._get_owned(tenant_id, notification_id, user_id)

        notification = await self.store.update_notification(
            tenant_id, notification_id, deleted_at=utc_now(), deleted_by=user_id
        )
        if existing.sensitive_data:
            await self.create_audit_log(
                tenant, notification_id, AuditAction.DELETE, user_id
            )

        logger.info(
            "notification_soft_deleted",
            tenant_id=tenant_id,
            notification_id=notification_id,
            user_id=user_id,
        )
        return notification

    async def restore_notification(
        self, tenant: TenantContext, notification_id: str, user_id: str
    ) -> Notification:
        """Undo a soft delete.

        Raises:
            NotificationNotFoundError: If no deleted notification owned by the
                user matches
        """
        tenant_id = require_tenant(tenant)
        existing = await self._get_owned(
            tenant_id, notification_id, user_id, deleted_only=True
        )

        notification = await self.store.update_notification(
            tenant_id, notification_id, deleted_at=None, deleted_by=None
        )
        if existing.sensitive_data:
            await self.create_audit_log(
                tenant, notification_id, AuditAction.RESTORE, user_id
            )

        logger.info(
            "notification_restored",
            tenant_id=tenant_id,
            notification_id=notification_id,
            user_id=user_id,
        )
        return notification

    async def set_retention_date(
        self,
        tenant: TenantContext,
        notification_id: str,
        user_id: str,
        retention_date: Optional[datetime],
    ) -> Notification:
        tenant_id = require_tenant(tenant)
        await self._get_owned(tenant_id, notification_id, user_id)
        return await self.store.update_notification(
            tenant_id, notification_id, retention_date=retention_date
        )

    async def mark_as_sensitive(
        self,
        tenant: TenantContext,
        notification_id: str,
        user_id: str,
        sensitive: bool = True,
    ) -> Notification:
        tenant_id = require_tenant(tenant)
        await self._get_owned(tenant_id, notification_id, user_id)
        notification = await self.store.update_notification(
            tenant_id, notification_id, sensitive_data=sensitive
        )
        await self.create_audit_log(
            tenant,
            notification_id,
            AuditAction.UPDATE,
            user_id,
            metadata={"sensitive_data": sensitive},
        )
        return notification

    async def create_audit_log(
        self,
        tenant: TenantContext,
        notification_id: str,
        action: AuditAction,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        tenant_id = require_tenant(tenant)
        return await self.store.create_audit_log(
            AuditLog(
                tenant_id=tenant_id,
                notification_id=notification_id,
                action=action,
                user_id=user_id,
                ip_address=ip_address,
                user_agent=user_agent,
                metadata=metadata or {},
            )
        )

    async def get_audit_logs(
        self, tenant: TenantContext, notification_id: str
    ) -> List[AuditLog]:
        tenant_id = require_tenant(tenant)
        return await self.store.list_audit_logs(tenant_id, notification_id)

    async def get_notifications_with_privacy_filters(
        self,
        tenant: TenantContext,
        user_id: str,
        include_deleted: bool = False,
        sensitive_only: bool = False,
        page: int = 1,
        limit: int = 20,
    ) -> NotificationPage:
        tenant_id = require_tenant(tenant)
        where = NotificationFilter(
            tenant_id=tenant_id,
            user_id=user_id,
            include_deleted=include_deleted,
            sensitive_only=sensitive_only,
        )
        notifications = await self.store.find_notifications(
            where, skip=(page - 1) * limit, take=limit
        )
        total = await self.store.count_notifications(where)
        return NotificationPage(
            notifications=notifications,
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )

    async def enforce_retention_policy(self, now: Optional[datetime] = None) -> int:
        """Soft-delete notifications whose retention has lapsed, across tenants.

        A notification is due when its retention date has passed, or when it
        has no retention date and is older than ``retention_days``.

        Returns:
            Number of notifications soft-deleted
        """
        now = now or utc_now()
        due: List[Notification] = []
        due.extend(
            await self.store.find_notifications(
                NotificationFilter(tenant_id=None, retention_due_at=now)
            )
        )
        due.extend(
            await self.store.find_notifications(
                NotificationFilter(
                    tenant_id=None,
                    without_retention_date=True,
                    created_before=now - timedelta(days=self.retention_days),
                )
            )
        )

        for notification in due:
            await self.store.update_notification(
                notification.tenant_id,
                notification.id,
                deleted_at=now,
                deleted_by=SYSTEM_USER,
            )
            if notification.sensitive_data:
                await self.store.create_audit_log(
                    AuditLog(
                        tenant_id=notification.tenant_id,
                        notification_id=notification.id,
                        action=AuditAction.DELETE,
                        user_id=SYSTEM_USER,
                        metadata={"reason": "retention_policy"},
                    )
                )

        logger.info("retention_policy_enforced", deleted=len(due))
        return len(due)

    async def cleanup_audit_logs(self, now: Optional[datetime] = None) -> int:
        now = now or utc_now()
        cutoff = now - timedelta(days=self.audit_log_retention_days)
        deleted = await self.store.delete_audit_logs_before(cutoff)
        logger.info("audit_logs_cleaned_up", deleted=deleted, cutoff=cutoff.isoformat())
        return deleted
