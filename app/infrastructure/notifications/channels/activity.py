"""Attempt, success and failure logging for channel sends."""

from typing import Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.models import ChannelResult, NotificationPayload
from infrastructure.persistence.models import ChannelType

logger = get_module_logger()


def _context(channel: ChannelType, payload: NotificationPayload) -> dict:
    return {
        "channel": channel.value,
        "tenant_id": payload.tenant_id,
        "user_id": payload.user_id,
        "category": payload.category,
    }


def log_attempt(channel: ChannelType, payload: NotificationPayload) -> None:
    logger.info(
        "notification_channel_attempt",
        type=payload.type.value if payload.type else None,
        **_context(channel, payload),
    )


def log_success(
    channel: ChannelType, payload: NotificationPayload, message_id: Optional[str]
) -> None:
    logger.info(
        "notification_channel_succeeded",
        message_id=message_id,
        **_context(channel, payload),
    )


def log_failure(channel: ChannelType, payload: NotificationPayload, error: str) -> None:
    logger.error("notification_channel_failed", error=error, **_context(channel, payload))


def succeeded(
    channel: ChannelType,
    payload: NotificationPayload,
    message_id: Optional[str],
    delivery_log_id: Optional[str],
) -> ChannelResult:
    """Log success and build the result."""
    log_success(channel, payload, message_id)
    return ChannelResult.ok(channel, message_id, delivery_log_id)


def failed(
    channel: ChannelType, payload: NotificationPayload, error: str
) -> ChannelResult:
    """Log failure and build the result."""
    log_failure(channel, payload, error)
    return ChannelResult.failure(channel, error)
