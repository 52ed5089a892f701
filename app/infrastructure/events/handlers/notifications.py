"""Notification handlers for domain events.

Turns user, project, access, security, system and billing events into
notifications. Each handler builds a NotificationPayload from the event
metadata and hands it to the dispatcher; failures propagate to the event bus,
which logs them and keeps delivering to the remaining handlers.

Usage:
    bus = EventBus()
    NotificationEventHandlers(dispatcher).register(bus)

    await bus.publish(
        Event(
            event_type=EventTypes.USER_CREATED,
            tenant_id="tenant-1",
            user_id="user-1",
            metadata={"user_name": "Ada", "user_email": "ada@example.com"},
        )
    )
"""

from typing import Any, Dict, Optional

from infrastructure.events.dispatcher import EventBus
from infrastructure.events.models import Event, EventTypes
from infrastructure.logging import get_module_logger
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.models import NotificationPayload
from infrastructure.persistence.models import NotificationPriority, NotificationType
from infrastructure.tenancy import TenantContext

logger = get_module_logger()

SEVERITY_PRIORITIES = {
    "low": NotificationPriority.LOW,
    "medium": NotificationPriority.MEDIUM,
    "high": NotificationPriority.HIGH,
    "critical": NotificationPriority.URGENT,
}


class NotificationEventHandlers:
    """Domain event to notification mapping.

    Attributes:
        dispatcher: Dispatcher used to create the notifications
    """

    def __init__(self, dispatcher: NotificationDispatcher):
        self.dispatcher = dispatcher

    def register(self, bus: EventBus) -> None:
        """Subscribe every handler to its event type."""
        handlers = {
            EventTypes.USER_CREATED: self.handle_user_created,
            EventTypes.USER_UPDATED: self.handle_user_updated,
            EventTypes.PROJECT_CREATED: self.handle_project_created,
            EventTypes.PROJECT_UPDATED: self.handle_project_updated,
            EventTypes.PROJECT_DELETED: self.handle_project_deleted,
            EventTypes.ROLE_ASSIGNED: self.handle_role_assigned,
            EventTypes.ROLE_REVOKED: self.handle_role_revoked,
            EventTypes.SECURITY_ALERT: self.handle_security_alert,
            EventTypes.SYSTEM_MAINTENANCE: self.handle_system_maintenance,
            EventTypes.INVOICE_GENERATED: self.handle_invoice_generated,
            EventTypes.PAYMENT_RECEIVED: self.handle_payment_received,
        }
        for event_type, handler in handlers.items():
            bus.subscribe(event_type, handler)
        logger.info("notification_event_handlers_registered", count=len(handlers))

    async def _notify_user(
        self,
        event: Event,
        user_id: Optional[str],
        category: str,
        type: NotificationType,
        title: str,
        message: str,
        priority: NotificationPriority,
        data: Dict[str, Any],
    ) -> None:
        if not user_id:
            logger.warning(
                "event_without_target_user",
                event_type=event.event_type,
                tenant_id=event.tenant_id,
            )
            return
        await self.dispatcher.create(
            TenantContext(event.tenant_id, user_id),
            NotificationPayload(
                user_id=user_id,
                category=category,
                type=type,
                title=title,
                message=message,
                priority=priority,
                data=data,
            ),
        )
        logger.info(
            "event_notification_created",
            event_type=event.event_type,
            tenant_id=event.tenant_id,
            user_id=user_id,
        )

    # User events

    async def handle_user_created(self, event: Event) -> None:
        meta = event.metadata
        await self._notify_user(
            event,
            event.user_id,
            category="user_management",
            type=NotificationType.SUCCESS,
            title="Welcome to the platform!",
            message=(
                f"Welcome {meta.get('user_name', '')}! "
                "Your account has been successfully created."
            ),
            priority=NotificationPriority.MEDIUM,
            data={
                "user_email": meta.get("user_email"),
                "user_name": meta.get("user_name"),
            },
        )

    async def handle_user_updated(self, event: Event) -> None:
        meta = event.metadata
        await self._notify_user(
            event,
            event.user_id,
            category="user_management",
            type=NotificationType.INFO,
            title="Profile Updated",
            message="Your profile information has been successfully updated.",
            priority=NotificationPriority.LOW,
            data={
                "user_email": meta.get("user_email"),
                "user_name": meta.get("user_name"),
                "changes": meta.get("changes", {}),
            },
        )

    # Project events

    async def handle_project_created(self, event: Event) -> None:
        meta = event.metadata
        name = meta.get("project_name", "")
        await self._notify_user(
            event,
            meta.get("created_by") or event.user_id,
            category="project_management",
            type=NotificationType.SUCCESS,
            title="Project Created",
            message=f'Project "{name}" has been successfully created.',
            priority=NotificationPriority.MEDIUM,
            data={
                "project_id": meta.get("project_id"),
                "project_name": name,
                "project_description": meta.get("project_description"),
            },
        )

    async def handle_project_updated(self, event: Event) -> None:
        meta = event.metadata
        name = meta.get("project_name", "")
        await self._notify_user(
            event,
            meta.get("updated_by") or event.user_id,
            category="project_management",
            type=NotificationType.INFO,
            title="Project Updated",
            message=f'Project "{name}" has been updated.',
            priority=NotificationPriority.LOW,
            data={
                "project_id": meta.get("project_id"),
                "project_name": name,
                "changes": meta.get("changes", {}),
            },
        )

    async def handle_project_deleted(self, event: Event) -> None:
        meta = event.metadata
        name = meta.get("project_name", "")
        await self._notify_user(
            event,
            meta.get("deleted_by") or event.user_id,
            category="project_management",
            type=NotificationType.WARNING,
            title="Project Deleted",
            message=f'Project "{name}" has been deleted.',
            priority=NotificationPriority.MEDIUM,
            data={"project_id": meta.get("project_id"), "project_name": name},
        )

    # Access events

    async def handle_role_assigned(self, event: Event) -> None:
        meta = event.metadata
        role = meta.get("role_name", "")
        await self._notify_user(
            event,
            event.user_id,
            category="access_management",
            type=NotificationType.INFO,
            title="Role Assigned",
            message=f'You have been assigned the role "{role}".',
            priority=NotificationPriority.MEDIUM,
            data={
                "role_id": meta.get("role_id"),
                "role_name": role,
                "assigned_by": meta.get("assigned_by"),
            },
        )

    async def handle_role_revoked(self, event: Event) -> None:
        meta = event.metadata
        role = meta.get("role_name", "")
        await self._notify_user(
            event,
            event.user_id,
            category="access_management",
            type=NotificationType.WARNING,
            title="Role Revoked",
            message=f'Your role "{role}" has been revoked.',
            priority=NotificationPriority.HIGH,
            data={
                "role_id": meta.get("role_id"),
                "role_name": role,
                "revoked_by": meta.get("revoked_by"),
            },
        )

    # Security and system events

    async def handle_security_alert(self, event: Event) -> None:
        """Alert the affected user, or every user in the tenant if none is named.

        Severity maps to priority; an alert without a severity is URGENT.
        """
        meta = event.metadata
        severity = meta.get("severity")
        payload = NotificationPayload(
            category="security",
            type=NotificationType.ERROR,
            title="Security Alert",
            message=meta.get("description", "Suspicious activity was detected."),
            priority=SEVERITY_PRIORITIES.get(severity, NotificationPriority.URGENT),
            data={
                "alert_type": meta.get("alert_type"),
                "severity": severity,
                "ip_address": meta.get("ip_address"),
                "user_agent": meta.get("user_agent"),
            },
        )
        tenant = TenantContext(event.tenant_id, event.user_id)

        if event.user_id:
            await self.dispatcher.create(
                tenant, payload.model_copy(update={"user_id": event.user_id})
            )
        else:
            await self.dispatcher.send_to_tenant(tenant, payload)
        logger.info(
            "security_alert_notified",
            tenant_id=event.tenant_id,
            user_id=event.user_id,
            severity=severity,
        )

    async def handle_system_maintenance(self, event: Event) -> None:
        meta = event.metadata
        emergency = meta.get("maintenance_type") == "emergency"
        payload = NotificationPayload(
            category="system",
            type=NotificationType.WARNING,
            title=f"{'Emergency' if emergency else 'Scheduled'} Maintenance",
            message=meta.get("description", ""),
            priority=(
                NotificationPriority.URGENT if emergency else NotificationPriority.HIGH
            ),
            data={
                "maintenance_type": meta.get("maintenance_type"),
                "start_time": meta.get("start_time"),
                "end_time": meta.get("end_time"),
            },
        )
        result = await self.dispatcher.send_to_tenant(
            TenantContext(event.tenant_id), payload
        )
        logger.info(
            "maintenance_notified",
            tenant_id=event.tenant_id,
            sent=result.sent,
            failed=result.failed,
        )

    # Billing events

    async def handle_invoice_generated(self, event: Event) -> None:
        meta = event.metadata
        await self._notify_user(
            event,
            event.user_id,
            category="billing",
            type=NotificationType.INFO,
            title="New Invoice Generated",
            message=(
                f"Invoice #{meta.get('invoice_number', '')} for "
                f"{meta.get('amount', '')} {meta.get('currency', '')} has been generated."
            ),
            priority=NotificationPriority.MEDIUM,
            data={
                key: meta.get(key)
                for key in (
                    "invoice_id",
                    "invoice_number",
                    "amount",
                    "currency",
                    "due_date",
                    "customer_id",
                )
            },
        )

    async def handle_payment_received(self, event: Event) -> None:
        meta = event.metadata
        await self._notify_user(
            event,
            event.user_id,
            category="billing",
            type=NotificationType.SUCCESS,
            title="Payment Received",
            message=(
                f"Payment of {meta.get('amount', '')} {meta.get('currency', '')} "
                f"has been received via {meta.get('payment_method', '')}."
            ),
            priority=NotificationPriority.MEDIUM,
            data={
                key: meta.get(key)
                for key in (
                    "payment_id",
                    "invoice_id",
                    "amount",
                    "currency",
                    "payment_method",
                    "customer_id",
                )
            },
        )
