"""In-app notification channel.

Synchronous delivery: the stored notification is the delivered artefact.
After the write, the channel pushes the notification and the new unread
count to the user's live sessions. Push failures are logged; the stored
rows are authoritative.
"""

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels import activity
from infrastructure.notifications.channels.base import (
    NotificationChannel,
    get_or_create_notification,
)
from infrastructure.notifications.channels.validation import base_payload_errors
from infrastructure.notifications.models import ChannelResult, NotificationPayload
from infrastructure.notifications.realtime import RealtimePublisher
from infrastructure.persistence.models import (
    ChannelType,
    DeliveryLog,
    DeliveryStatus,
    utc_now,
)
from infrastructure.persistence.store import NotificationFilter, NotificationStore

logger = get_module_logger()


class InAppChannel(NotificationChannel):
    def __init__(self, store: NotificationStore, realtime: RealtimePublisher):
        self.store = store
        self.realtime = realtime

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.IN_APP

    def validate(self, payload: NotificationPayload) -> bool:
        errors = base_payload_errors(payload)
        if errors:
            logger.warning("in_app_payload_invalid", errors=errors)
        return not errors

    async def is_available(self) -> bool:
        try:
            return await self.store.ping()
        except Exception as e:
            logger.error("in_app_channel_unavailable", error=str(e), exc_info=True)
            return False

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        activity.log_attempt(self.channel_type, payload)
        try:
            notification = await get_or_create_notification(self.store, payload)
            log = await self.store.create_delivery_log(
                DeliveryLog(
                    notification_id=notification.id,
                    channel=self.channel_type,
                    status=DeliveryStatus.SENT,
                    sent_at=utc_now(),
                )
            )
        except Exception as e:
            return activity.failed(self.channel_type, payload, str(e))

        try:
            await self.realtime.emit_to_user(
                notification.user_id,
                "notification",
                {
                    "id": notification.id,
                    "type": notification.type,
                    "category": notification.category,
                    "title": notification.title,
                    "message": notification.message,
                    "data": notification.data,
                    "created_at": notification.created_at,
                    "expires_at": notification.expires_at,
                },
            )
            unread = await self.store.count_notifications(
                NotificationFilter(
                    tenant_id=notification.tenant_id,
                    user_id=notification.user_id,
                    unread=True,
                    visible_at=utc_now(),
                )
            )
            await self.realtime.emit_unread_count(notification.user_id, unread)
        except Exception as e:
            logger.warning(
                "in_app_realtime_push_failed",
                user_id=notification.user_id,
                notification_id=notification.id,
                error=str(e),
            )

        return activity.succeeded(self.channel_type, payload, notification.id, log.id)
