"""Notification dispatcher with preference-driven multi-channel fan-out.

Centralized notification creation that:
- Resolves enabled channels from the user's preferences
- Persists the notification before any channel runs
- Attempts each channel sequentially in a fixed order
- Records which channels accepted the notification
- Never lets one channel's failure abort its siblings

Usage Example:
    from infrastructure.notifications.dispatcher import NotificationDispatcher
    from infrastructure.tenancy import TenantContext

    dispatcher = NotificationDispatcher(store, registry, preferences, directory)

    notification = await dispatcher.create(
        TenantContext("tenant-1"),
        NotificationPayload(
            user_id="user-1",
            category="project",
            title="Project created",
            message='Project "Apollo" has been created.',
        ),
    )
    notification.channels_sent  # [ChannelType.IN_APP, ChannelType.EMAIL]
"""

from datetime import timedelta
from typing import List, Optional

from infrastructure.events.dispatcher import EventBus
from infrastructure.events.models import Event, EventTypes
from infrastructure.logging import bind_job_context, get_module_logger
from infrastructure.notifications.metrics import NotificationMetrics
from infrastructure.notifications.models import (
    BulkSendResult,
    ChannelResult,
    NotificationPayload,
)
from infrastructure.notifications.preferences import PreferenceResolver
from infrastructure.notifications.registry import ChannelRegistry
from infrastructure.persistence.directory import UserDirectory
from infrastructure.persistence.models import (
    ChannelType,
    Notification,
    NotificationPriority,
    NotificationType,
    utc_now,
)
from infrastructure.persistence.store import NotificationStore
from infrastructure.tenancy import TenantContext, require_tenant

logger = get_module_logger()

DEFAULT_EXPIRY_DAYS = 30


class NotificationDispatcher:
    """Delivery orchestrator.

    A notification counts as created once its record is written. Channel
    skips and failures are logged and reflected in ``channels_sent``; they
    never roll back the record or raise to the caller.

    Attributes:
        store: Record store
        registry: Channel lookup
        preferences: Preference resolver
        directory: User directory (tenant fan-out)
        event_bus: Optional bus receiving ``notification.created``
        metrics: Optional metrics observer
        expiry_days: Default expiry applied when a payload sets none
    """

    def __init__(
        self,
        store: NotificationStore,
        registry: ChannelRegistry,
        preferences: PreferenceResolver,
        directory: UserDirectory,
        event_bus: Optional[EventBus] = None,
        metrics: Optional[NotificationMetrics] = None,
        expiry_days: int = DEFAULT_EXPIRY_DAYS,
    ):
        self.store = store
        self.registry = registry
        self.preferences = preferences
        self.directory = directory
        self.event_bus = event_bus
        self.metrics = metrics
        self.expiry_days = expiry_days

        logger.info(
            "initialized_notification_dispatcher",
            channels=[c.value for c in registry.get_available_channels()],
            events_enabled=event_bus is not None,
        )

    async def create(
        self, tenant: TenantContext, payload: NotificationPayload
    ) -> Notification:
        """Create a notification and fan it out to the enabled channels.

        Process:
        1. Require a tenant context (raises before any side effect)
        2. Resolve enabled channels
        3. Persist the notification with an empty ``channels_sent``
        4. Attempt each channel in order: registered, available, valid, send
        5. Persist the successful channels in a single update
        6. Publish ``notification.created``

        Args:
            tenant: Caller's tenant context; overrides ``payload.tenant_id``
            payload: Notification request

        Returns:
            The persisted notification with ``channels_sent`` populated

        Raises:
            TenantContextRequiredError: If the tenant context is missing
        """
        tenant_id = require_tenant(tenant)
        payload = payload.model_copy(update={"tenant_id": tenant_id})

        with bind_job_context(tenant_id=tenant_id, user_id=payload.user_id):
            channels = await self.preferences.get_enabled_channels(
                tenant, payload.user_id, payload.category
            )

            now = utc_now()
            notification = await self.store.create_notification(
                Notification(
                    tenant_id=tenant_id,
                    user_id=payload.user_id,
                    category=payload.category,
                    type=payload.type or NotificationType.INFO,
                    title=payload.title,
                    message=payload.message,
                    data=payload.data,
                    priority=payload.priority,
                    channels_sent=[],
                    created_at=now,
                    updated_at=now,
                    expires_at=payload.expires_at
                    or now + timedelta(days=self.expiry_days),
                    retention_date=payload.retention_date,
                    sensitive_data=payload.sensitive_data,
                )
            )
            payload = payload.model_copy(update={"notification_id": notification.id})

            results: List[ChannelResult] = []
            for channel_type in channels:
                results.append(await self._attempt(channel_type, payload))

            channels_sent = [r.channel for r in results if r.success]
            notification = await self.store.update_notification(
                tenant_id, notification.id, channels_sent=channels_sent
            )

            logger.info(
                "notification_created",
                notification_id=notification.id,
                category=notification.category,
                enabled_channels=[c.value for c in channels],
                channels_sent=[c.value for c in channels_sent],
                skipped=[r.channel.value for r in results if r.skipped],
                failed=[
                    r.channel.value for r in results if not r.success and not r.skipped
                ],
            )

            if self.metrics is not None:
                for result in results:
                    if result.success:
                        self.metrics.record_delivery(
                            result.channel.value, tenant_id, "accepted"
                        )
                    elif not result.skipped:
                        self.metrics.record_failure(
                            result.channel.value, tenant_id, "channel_error"
                        )

            if self.event_bus is not None:
                await self.event_bus.publish(
                    Event(
                        event_type=EventTypes.NOTIFICATION_CREATED,
                        tenant_id=tenant_id,
                        user_id=notification.user_id,
                        metadata={
                            "notification_id": notification.id,
                            "category": notification.category,
                            "channels_sent": [c.value for c in channels_sent],
                        },
                    )
                )

            return notification

    async def _attempt(
        self, channel_type: ChannelType, payload: NotificationPayload
    ) -> ChannelResult:
        """Run one channel. Never raises."""
        if not self.registry.is_channel_registered(channel_type):
            return self._skip(channel_type, "Channel not registered")

        channel = self.registry.get_channel(channel_type)
        try:
            if not await channel.is_available():
                return self._skip(channel_type, "Channel not available")
            if not channel.validate(payload):
                return self._skip(channel_type, "Payload validation failed")
            result = await channel.send(payload)
        except Exception as e:
            logger.error(
                "notification_channel_exception",
                channel=channel_type.value,
                error=str(e),
                exc_info=True,
            )
            return ChannelResult.failure(channel_type, str(e))

        if not result.success:
            logger.warning(
                "notification_channel_send_failed",
                channel=channel_type.value,
                error=result.error,
            )
        return result

    def _skip(self, channel_type: ChannelType, reason: str) -> ChannelResult:
        logger.info("notification_channel_skipped", channel=channel_type.value, reason=reason)
        return ChannelResult.failure(channel_type, reason, skipped=True)

    async def send_to_user(
        self,
        tenant: TenantContext,
        user_id: str,
        title: str = "Notification",
        message: str = "",
        category: str = "system",
        type: NotificationType = NotificationType.INFO,
        priority: NotificationPriority = NotificationPriority.MEDIUM,
        **extra,
    ) -> Notification:
        """Convenience wrapper filling sensible defaults before ``create``."""
        payload = NotificationPayload(
            user_id=user_id,
            title=title,
            message=message,
            category=category,
            type=type,
            priority=priority,
            **extra,
        )
        return await self.create(tenant, payload)

    async def send_to_tenant(
        self, tenant: TenantContext, payload: NotificationPayload
    ) -> BulkSendResult:
        """Create the notification once per user in the tenant.

        Per-user failures are collected and logged; the fan-out continues.

        Raises:
            TenantContextRequiredError: If the tenant context is missing
        """
        tenant_id = require_tenant(tenant)
        user_ids = await self.directory.list_tenant_users(tenant_id)
        result = BulkSendResult()

        for user_id in user_ids:
            try:
                await self.create(tenant, payload.model_copy(update={"user_id": user_id}))
                result.sent += 1
            except Exception as e:
                result.failed += 1
                result.errors.append(f"User {user_id}: {e}")
                logger.error(
                    "tenant_notification_user_failed",
                    tenant_id=tenant_id,
                    user_id=user_id,
                    error=str(e),
                    exc_info=True,
                )

        logger.info(
            "tenant_notification_sent",
            tenant_id=tenant_id,
            user_count=len(user_ids),
            sent=result.sent,
            failed=result.failed,
        )
        return result
