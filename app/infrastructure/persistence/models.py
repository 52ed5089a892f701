"""Persisted record models.

Pydantic models for the rows the notification engine reads and writes:
notifications, delivery logs, preferences, audit logs, tenant provider
configuration and templates. Stores hand out copies of these models, so
mutating a returned record never changes stored state.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_id() -> str:
    return str(uuid.uuid4())


class ChannelType(str, Enum):
    """Delivery channels, in the fixed processing order."""

    IN_APP = "IN_APP"
    EMAIL = "EMAIL"
    SMS = "SMS"


CHANNEL_ORDER = (ChannelType.IN_APP, ChannelType.EMAIL, ChannelType.SMS)


class NotificationType(str, Enum):
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"


class NotificationPriority(str, Enum):
    """Notification priority. Mapped to numeric queue priorities."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class DeliveryStatus(str, Enum):
    """Delivery log status.

    PENDING -> SENT and PENDING -> FAILED on each attempt. A queue retry moves
    FAILED back to PENDING on the same row. SENT is terminal.
    """

    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


ALLOWED_TRANSITIONS = {
    DeliveryStatus.PENDING: {DeliveryStatus.SENT, DeliveryStatus.FAILED},
    DeliveryStatus.FAILED: {DeliveryStatus.PENDING},
    DeliveryStatus.SENT: set(),
}


class AuditAction(str, Enum):
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    RESTORE = "RESTORE"


class Notification(BaseModel):
    """A logical notification event for one user in one tenant."""

    id: str = Field(default_factory=new_id)
    tenant_id: str
    user_id: str
    category: str
    type: NotificationType = NotificationType.INFO
    title: str
    message: str
    data: Dict[str, Any] = Field(default_factory=dict)
    priority: NotificationPriority = NotificationPriority.MEDIUM
    channels_sent: List[ChannelType] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    expires_at: Optional[datetime] = None
    retention_date: Optional[datetime] = None
    read_at: Optional[datetime] = None
    deleted_at: Optional[datetime] = None
    deleted_by: Optional[str] = None
    sensitive_data: bool = False

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at <= now

    def is_past_retention(self, now: datetime) -> bool:
        return self.retention_date is not None and self.retention_date <= now

    def is_visible(self, now: datetime) -> bool:
        """Not soft-deleted, not expired and not past its retention date."""
        return (
            self.deleted_at is None
            and not self.is_expired(now)
            and not self.is_past_retention(now)
        )


class DeliveryLog(BaseModel):
    """One row per (notification, channel)."""

    id: str = Field(default_factory=new_id)
    notification_id: str
    channel: ChannelType
    status: DeliveryStatus = DeliveryStatus.PENDING
    provider: Optional[str] = None
    provider_message_id: Optional[str] = None
    error_message: Optional[str] = None
    sent_at: Optional[datetime] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    def can_transition_to(self, target: DeliveryStatus) -> bool:
        return target in ALLOWED_TRANSITIONS[self.status]


class NotificationPreference(BaseModel):
    """Channel enablement for a (tenant, user, category)."""

    id: str = Field(default_factory=new_id)
    tenant_id: str
    user_id: str
    category: str
    in_app_enabled: bool = True
    email_enabled: bool = True
    sms_enabled: bool = False
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class AuditLog(BaseModel):
    id: str = Field(default_factory=new_id)
    notification_id: str
    action: AuditAction
    user_id: Optional[str] = None
    tenant_id: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utc_now)


class TenantNotificationConfig(BaseModel):
    """Per-tenant provider overrides. Unset fields fall back to settings."""

    tenant_id: str
    email_provider: Optional[str] = None
    email_api_key: Optional[str] = None
    email_from_address: Optional[str] = None
    email_from_name: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: Optional[int] = None
    smtp_secure: Optional[bool] = None
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    sms_provider: Optional[str] = None
    sms_api_key: Optional[str] = None
    sms_api_secret: Optional[str] = None
    sms_from_number: Optional[str] = None


class NotificationTemplate(BaseModel):
    """A reusable subject/body template. ``tenant_id=None`` means global."""

    id: str = Field(default_factory=new_id)
    tenant_id: Optional[str] = None
    category: str
    channel: ChannelType
    subject: Optional[str] = None
    template_body: str
    variables: List[str] = Field(default_factory=list)
    is_active: bool = True
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
