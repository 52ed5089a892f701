"""In-memory NotificationStore implementation.

Suitable for single-process deployments, development and tests. Mutations are
serialized with an asyncio.Lock and every record handed out is a deep copy.
"""

import asyncio
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from infrastructure.logging import get_module_logger
from infrastructure.notifications.exceptions import (
    InvalidDeliveryTransitionError,
    NotificationNotFoundError,
)
from infrastructure.persistence.models import (
    AuditLog,
    ChannelType,
    DeliveryLog,
    Notification,
    NotificationPreference,
    NotificationTemplate,
    TenantNotificationConfig,
    utc_now,
)
from infrastructure.persistence.store import NotificationFilter

logger = get_module_logger()

PreferenceKey = Tuple[str, str, str]


class InMemoryNotificationStore:
    """Dict-backed record store.

    Attributes:
        available: When False, ping() reports the store as unreachable
    """

    def __init__(self) -> None:
        self._notifications: Dict[str, Notification] = {}
        self._delivery_logs: Dict[str, DeliveryLog] = {}
        self._preferences: Dict[PreferenceKey, NotificationPreference] = {}
        self._audit_logs: Dict[str, AuditLog] = {}
        self._tenant_configs: Dict[str, TenantNotificationConfig] = {}
        self._templates: Dict[str, NotificationTemplate] = {}
        self._lock = asyncio.Lock()
        self.available = True

    async def ping(self) -> bool:
        return self.available

    # Notifications

    async def create_notification(self, notification: Notification) -> Notification:
        async with self._lock:
            stored = notification.model_copy(deep=True)
            self._notifications[stored.id] = stored
            return stored.model_copy(deep=True)

    async def find_first_notification(
        self, where: NotificationFilter
    ) -> Optional[Notification]:
        rows = await self.find_notifications(where, take=1)
        return rows[0] if rows else None

    async def find_notifications(
        self,
        where: NotificationFilter,
        sort_by: str = "created_at",
        descending: bool = True,
        skip: int = 0,
        take: Optional[int] = None,
    ) -> List[Notification]:
        async with self._lock:
            rows = [n for n in self._notifications.values() if where.matches(n)]

        def sort_key(n: Notification):
            value = getattr(n, sort_by, None)
            # Rows without a value group together, after the rest when descending
            return (value is not None, value if value is not None else "", n.id)

        rows.sort(key=sort_key, reverse=descending)
        end = None if take is None else skip + take
        return [n.model_copy(deep=True) for n in rows[skip:end]]

    async def count_notifications(self, where: NotificationFilter) -> int:
        async with self._lock:
            return sum(1 for n in self._notifications.values() if where.matches(n))

    async def update_notification(
        self, tenant_id: str, notification_id: str, **changes: Any
    ) -> Notification:
        async with self._lock:
            current = self._notifications.get(notification_id)
            if current is None or current.tenant_id != tenant_id:
                raise NotificationNotFoundError(
                    f"Notification {notification_id} not found"
                )
            # id is immutable
            changes.pop("id", None)
            changes.setdefault("updated_at", utc_now())
            updated = current.model_copy(update=changes, deep=True)
            self._notifications[notification_id] = updated
            return updated.model_copy(deep=True)

    async def update_notifications(
        self, where: NotificationFilter, **changes: Any
    ) -> int:
        changes.pop("tenant_id", None)
        changes.pop("id", None)
        changes.setdefault("updated_at", utc_now())
        async with self._lock:
            matched = [n for n in self._notifications.values() if where.matches(n)]
            for n in matched:
                self._notifications[n.id] = n.model_copy(update=changes, deep=True)
            return len(matched)

    # Delivery logs

    async def create_delivery_log(self, log: DeliveryLog) -> DeliveryLog:
        async with self._lock:
            stored = log.model_copy(deep=True)
            self._delivery_logs[stored.id] = stored
            return stored.model_copy(deep=True)

    async def get_delivery_log(self, log_id: str) -> Optional[DeliveryLog]:
        async with self._lock:
            log = self._delivery_logs.get(log_id)
            return log.model_copy(deep=True) if log else None

    async def find_delivery_log(
        self, tenant_id: str, notification_id: str, channel: ChannelType
    ) -> Optional[DeliveryLog]:
        async with self._lock:
            notification = self._notifications.get(notification_id)
            if notification is None or notification.tenant_id != tenant_id:
                return None
            for log in self._delivery_logs.values():
                if log.notification_id == notification_id and log.channel == channel:
                    return log.model_copy(deep=True)
            return None

    async def list_delivery_logs(
        self, tenant_id: str, notification_id: str
    ) -> List[DeliveryLog]:
        async with self._lock:
            notification = self._notifications.get(notification_id)
            if notification is None or notification.tenant_id != tenant_id:
                return []
            return [
                log.model_copy(deep=True)
                for log in self._delivery_logs.values()
                if log.notification_id == notification_id
            ]

    async def update_delivery_log(self, log_id: str, **changes: Any) -> DeliveryLog:
        async with self._lock:
            current = self._delivery_logs.get(log_id)
            if current is None:
                raise NotificationNotFoundError(f"Delivery log {log_id} not found")
            target = changes.get("status")
            if target is not None and target != current.status:
                if not current.can_transition_to(target):
                    raise InvalidDeliveryTransitionError(
                        current.status.value, target.value
                    )
            changes.setdefault("updated_at", utc_now())
            updated = current.model_copy(update=changes, deep=True)
            self._delivery_logs[log_id] = updated
            return updated.model_copy(deep=True)

    # Preferences

    async def get_preference(
        self, tenant_id: str, user_id: str, category: str
    ) -> Optional[NotificationPreference]:
        async with self._lock:
            pref = self._preferences.get((tenant_id, user_id, category))
            return pref.model_copy(deep=True) if pref else None

    async def upsert_preference(
        self,
        tenant_id: str,
        user_id: str,
        category: str,
        create: dict,
        update: dict,
    ) -> NotificationPreference:
        key = (tenant_id, user_id, category)
        async with self._lock:
            current = self._preferences.get(key)
            if current is None:
                pref = NotificationPreference(
                    tenant_id=tenant_id, user_id=user_id, category=category, **create
                )
            else:
                pref = current.model_copy(
                    update={**update, "updated_at": utc_now()}, deep=True
                )
            self._preferences[key] = pref
            return pref.model_copy(deep=True)

    async def create_preferences(
        self, preferences: List[NotificationPreference], skip_duplicates: bool = True
    ) -> int:
        created = 0
        async with self._lock:
            for pref in preferences:
                key = (pref.tenant_id, pref.user_id, pref.category)
                if key in self._preferences:
                    if skip_duplicates:
                        continue
                    raise ValueError(f"Preference already exists: {key}")
                self._preferences[key] = pref.model_copy(deep=True)
                created += 1
        return created

    async def list_preferences(
        self, tenant_id: str, user_id: str
    ) -> List[NotificationPreference]:
        async with self._lock:
            rows = [
                p.model_copy(deep=True)
                for (t, u, _), p in self._preferences.items()
                if t == tenant_id and u == user_id
            ]
        return sorted(rows, key=lambda p: p.category)

    async def distinct_categories(self, tenant_id: str) -> List[str]:
        async with self._lock:
            return sorted({c for (t, _, c) in self._preferences if t == tenant_id})

    # Audit logs

    async def create_audit_log(self, log: AuditLog) -> AuditLog:
        async with self._lock:
            stored = log.model_copy(deep=True)
            self._audit_logs[stored.id] = stored
            return stored.model_copy(deep=True)

    async def list_audit_logs(
        self, tenant_id: str, notification_id: str
    ) -> List[AuditLog]:
        async with self._lock:
            rows = [
                log.model_copy(deep=True)
                for log in self._audit_logs.values()
                if log.tenant_id == tenant_id and log.notification_id == notification_id
            ]
        return sorted(rows, key=lambda log: log.created_at, reverse=True)

    async def delete_audit_logs_before(self, cutoff: datetime) -> int:
        async with self._lock:
            expired = [
                log_id
                for log_id, log in self._audit_logs.items()
                if log.created_at <= cutoff
            ]
            for log_id in expired:
                del self._audit_logs[log_id]
            return len(expired)

    # Tenant provider configuration

    async def get_tenant_config(
        self, tenant_id: str
    ) -> Optional[TenantNotificationConfig]:
        async with self._lock:
            config = self._tenant_configs.get(tenant_id)
            return config.model_copy(deep=True) if config else None

    async def set_tenant_config(
        self, config: TenantNotificationConfig
    ) -> TenantNotificationConfig:
        async with self._lock:
            self._tenant_configs[config.tenant_id] = config.model_copy(deep=True)
            return config.model_copy(deep=True)

    # Templates

    async def create_template(
        self, template: NotificationTemplate
    ) -> NotificationTemplate:
        async with self._lock:
            stored = template.model_copy(deep=True)
            self._templates[stored.id] = stored
            return stored.model_copy(deep=True)

    async def get_template(self, template_id: str) -> Optional[NotificationTemplate]:
        async with self._lock:
            template = self._templates.get(template_id)
            return template.model_copy(deep=True) if template else None

    async def find_active_template(
        self, tenant_id: Optional[str], category: str, channel: ChannelType
    ) -> Optional[NotificationTemplate]:
        async with self._lock:
            candidates = [
                t
                for t in self._templates.values()
                if t.tenant_id == tenant_id
                and t.category == category
                and t.channel == channel
                and t.is_active
            ]
        if not candidates:
            return None
        newest = max(candidates, key=lambda t: t.created_at)
        return newest.model_copy(deep=True)

    async def list_templates(self, tenant_id: str) -> List[NotificationTemplate]:
        async with self._lock:
            rows = [
                t.model_copy(deep=True)
                for t in self._templates.values()
                if t.tenant_id in (tenant_id, None)
            ]
        return sorted(rows, key=lambda t: (t.category, t.channel.value))

    async def update_template(
        self, template_id: str, **changes: Any
    ) -> NotificationTemplate:
        async with self._lock:
            current = self._templates.get(template_id)
            if current is None:
                raise NotificationNotFoundError(f"Template {template_id} not found")
            changes.setdefault("updated_at", utc_now())
            updated = current.model_copy(update=changes, deep=True)
            self._templates[template_id] = updated
            return updated.model_copy(deep=True)

    async def delete_template(self, template_id: str) -> bool:
        async with self._lock:
            return self._templates.pop(template_id, None) is not None
