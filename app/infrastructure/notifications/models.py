"""Notification engine request and result models.

Pydantic models for what callers hand to the dispatcher (NotificationPayload)
and what channels and the service hand back (ChannelResult, BulkSendResult,
NotificationPage). Persisted rows live in infrastructure.persistence.models.

Payload fields are optional at construction time on purpose: channel
``validate`` methods decide whether a payload is deliverable and report a
skip instead of raising.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from infrastructure.persistence.models import (
    ChannelType,
    Notification,
    NotificationPriority,
    NotificationType,
)


class NotificationPayload(BaseModel):
    """A request to notify one user.

    Attributes:
        tenant_id: Overwritten with the caller's tenant context by the dispatcher
        user_id: Target user
        category: Free-form category (user_activity, security, invoice, ...)
        type: INFO, SUCCESS, WARNING or ERROR
        title: Short title (email subject, SMS prefix)
        message: Plain-text body
        data: Structured data; ``phone_number`` overrides the SMS destination
        priority: Queue priority for async channels
        expires_at: Optional absolute expiry
        retention_date: Optional hard-delete trigger
        sensitive_data: Audit privacy operations on this notification
        template_id: Template rendered by the email worker
        template_variables: Variables for the template
        notification_id: Set by the dispatcher once the record exists

    Example:
        payload = NotificationPayload(
            user_id="user-1",
            category="security",
            type=NotificationType.ERROR,
            title="New sign-in",
            message="A new device signed in to your account",
            priority=NotificationPriority.URGENT,
        )
    """

    model_config = ConfigDict(extra="ignore")

    tenant_id: Optional[str] = None
    user_id: Optional[str] = None
    category: Optional[str] = None
    type: Optional[NotificationType] = NotificationType.INFO
    title: Optional[str] = None
    message: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    expires_at: Optional[datetime] = None
    retention_date: Optional[datetime] = None
    sensitive_data: bool = False
    template_id: Optional[str] = None
    template_variables: Optional[Dict[str, Any]] = None
    notification_id: Optional[str] = None


class ChannelResult(BaseModel):
    """Result of one channel attempt.

    For async channels ``success`` means accepted for delivery, not delivered.

    Attributes:
        success: Whether the channel accepted or delivered the notification
        channel: Channel that produced the result
        message_id: Notification id (or provider id) on success
        error: Failure or skip reason
        delivery_log_id: Delivery log row created for the attempt
        skipped: True when the dispatcher never called ``send``
    """

    success: bool
    channel: ChannelType
    message_id: Optional[str] = None
    error: Optional[str] = None
    delivery_log_id: Optional[str] = None
    skipped: bool = False

    @classmethod
    def ok(
        cls,
        channel: ChannelType,
        message_id: Optional[str] = None,
        delivery_log_id: Optional[str] = None,
    ) -> "ChannelResult":
        return cls(
            success=True,
            channel=channel,
            message_id=message_id,
            delivery_log_id=delivery_log_id,
        )

    @classmethod
    def failure(
        cls, channel: ChannelType, error: str, skipped: bool = False
    ) -> "ChannelResult":
        return cls(success=False, channel=channel, error=error, skipped=skipped)


class BulkSendResult(BaseModel):
    """Outcome of a tenant-wide fan-out."""

    sent: int = 0
    failed: int = 0
    errors: List[str] = Field(default_factory=list)


class NotificationQuery(BaseModel):
    """Filters for listing a user's notifications."""

    model_config = ConfigDict(extra="ignore")

    page: int = Field(default=1, ge=1)
    limit: int = Field(default=20, ge=1, le=100)
    type: Optional[NotificationType] = None
    category: Optional[str] = None
    unread: Optional[bool] = None
    search: Optional[str] = None
    sort_by: Literal["created_at", "updated_at", "read_at", "title"] = "created_at"
    sort_order: Literal["asc", "desc"] = "desc"


class NotificationPage(BaseModel):
    notifications: List[Notification]
    total: int
    page: int
    limit: int
    total_pages: int


class RenderedContent(BaseModel):
    """Output of template rendering."""

    subject: Optional[str] = None
    html: str
    text: str
