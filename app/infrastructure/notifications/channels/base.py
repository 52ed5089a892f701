"""Notification channel abstract base class.

All channel implementations (in-app, email, SMS) implement this interface.
Shared validation and logging are free functions in ``validation`` and
``activity``; the base class carries no behaviour.
"""

from abc import ABC, abstractmethod

from infrastructure.notifications.models import ChannelResult, NotificationPayload
from infrastructure.persistence.models import ChannelType, DeliveryLog, Notification
from infrastructure.persistence.store import NotificationFilter, NotificationStore


class NotificationChannel(ABC):
    """Abstract base class for notification channels.

    Each channel handles delivery through one mechanism:
    - InAppChannel: stored notification plus a real-time push
    - EmailChannel: queued email job
    - SmsChannel: queued SMS job

    Example Implementation:
        class InAppChannel(NotificationChannel):

            @property
            def channel_type(self) -> ChannelType:
                return ChannelType.IN_APP

            async def send(self, payload) -> ChannelResult:
                ...
    """

    @property
    @abstractmethod
    def channel_type(self) -> ChannelType:
        """Channel identifier used for routing and logging."""

    @abstractmethod
    async def send(self, payload: NotificationPayload) -> ChannelResult:
        """Deliver or enqueue the notification.

        Must not raise for expected failures (unknown user, invalid address,
        provider errors); return ``ChannelResult.failure`` instead.

        Args:
            payload: Validated payload carrying tenant_id

        Returns:
            ChannelResult. For async channels success means accepted.
        """

    @abstractmethod
    def validate(self, payload: NotificationPayload) -> bool:
        """Structural check of the payload for this channel. No I/O."""

    @abstractmethod
    async def is_available(self) -> bool:
        """Liveness probe for the channel's dependencies."""


async def get_or_create_notification(
    store: NotificationStore, payload: NotificationPayload
) -> Notification:
    """Return the dispatcher's notification, or create one for a standalone send."""
    if payload.notification_id:
        existing = await store.find_first_notification(
            NotificationFilter(
                tenant_id=payload.tenant_id,
                notification_id=payload.notification_id,
                include_deleted=True,
            )
        )
        if existing is not None:
            return existing

    return await store.create_notification(
        Notification(
            tenant_id=payload.tenant_id,
            user_id=payload.user_id,
            category=payload.category,
            type=payload.type,
            title=payload.title,
            message=payload.message,
            data=payload.data,
            priority=payload.priority,
            expires_at=payload.expires_at,
            retention_date=payload.retention_date,
            sensitive_data=payload.sensitive_data,
        )
    )


async def get_or_create_delivery_log(
    store: NotificationStore, notification: Notification, channel: ChannelType
) -> DeliveryLog:
    """Return the notification's log for this channel, creating a PENDING one.

    Queued channels collapse repeat sends onto one job per notification, so
    they must also share one delivery log.
    """
    existing = await store.find_delivery_log(
        notification.tenant_id, notification.id, channel
    )
    if existing is not None:
        return existing
    return await store.create_delivery_log(
        DeliveryLog(notification_id=notification.id, channel=channel)
    )
