"""Notification engine exceptions.

Only conditions the caller must act on are raised. Expected per-channel
failures (unknown user, invalid address, provider rejection) are returned as
failed ChannelResult objects instead.
"""

from typing import Optional


class NotificationError(Exception):
    """Base class for notification engine errors."""


class TenantContextRequiredError(NotificationError):
    """Raised when a tenant-scoped operation is called without a tenant."""

    def __init__(self, message: str = "Tenant context is required"):
        super().__init__(message)


class ChannelNotRegisteredError(NotificationError):
    """Raised by the registry when no channel is registered for a type."""

    def __init__(self, channel_type: str):
        self.channel_type = channel_type
        super().__init__(f"Channel {channel_type} is not registered")


class NotificationNotFoundError(NotificationError):
    """Raised when a notification (or template) does not exist for the tenant."""


class InvalidDeliveryTransitionError(NotificationError):
    """Raised on an illegal delivery-log status change."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move delivery log from {current} to {target}")


class ProviderSendError(NotificationError):
    """Raised inside queue processors so the queue schedules a retry."""

    def __init__(self, message: str, provider: Optional[str] = None):
        self.provider = provider
        super().__init__(message)


class ProviderConfigurationError(NotificationError):
    """Raised when no usable email or SMS provider configuration exists."""


class TemplateRenderError(NotificationError):
    """Raised when a template cannot be found or rendered."""
