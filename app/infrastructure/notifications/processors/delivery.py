"""Delivery log bookkeeping shared by the email and SMS job processors.

One delivery log row exists per (notification, channel). A retried job
reuses the row: FAILED moves back to PENDING, SENT is never left.
"""

from typing import Optional

from infrastructure.logging import get_module_logger
from infrastructure.persistence.models import (
    ChannelType,
    DeliveryLog,
    DeliveryStatus,
    utc_now,
)
from infrastructure.persistence.store import NotificationStore

logger = get_module_logger()


async def prepare_delivery_log(
    store: NotificationStore,
    tenant_id: str,
    notification_id: str,
    channel: ChannelType,
) -> Optional[DeliveryLog]:
    """Return a PENDING log for this attempt, or None if already delivered."""
    log = await store.find_delivery_log(tenant_id, notification_id, channel)
    if log is None:
        return await store.create_delivery_log(
            DeliveryLog(notification_id=notification_id, channel=channel)
        )
    if log.status == DeliveryStatus.SENT:
        logger.info(
            "delivery_already_sent",
            channel=channel.value,
            delivery_log_id=log.id,
        )
        return None
    if log.status == DeliveryStatus.FAILED:
        return await store.update_delivery_log(
            log.id, status=DeliveryStatus.PENDING, error_message=None
        )
    return log


async def mark_sent(
    store: NotificationStore,
    log: DeliveryLog,
    provider: str,
    provider_message_id: Optional[str],
) -> DeliveryLog:
    return await store.update_delivery_log(
        log.id,
        status=DeliveryStatus.SENT,
        provider=provider,
        provider_message_id=provider_message_id,
        error_message=None,
        sent_at=utc_now(),
    )


async def mark_failed(
    store: NotificationStore,
    log: DeliveryLog,
    error: str,
    provider: Optional[str] = None,
) -> DeliveryLog:
    return await store.update_delivery_log(
        log.id,
        status=DeliveryStatus.FAILED,
        provider=provider,
        error_message=error,
    )
