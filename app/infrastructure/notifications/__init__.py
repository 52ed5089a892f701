"""Multi-tenant notification engine.

Preference-driven delivery of notifications over in-app, email and SMS
channels:
- dispatcher: Persists a notification and fans it out to enabled channels
- channels: In-app (synchronous) and email/SMS (queued) channel adapters
- processors: Queue job processors calling the email and SMS providers
- providers: Resend, SMTP, Twilio and Termii adapters with factories
- service: Rate-limited facade plus inbox queries
- privacy: Soft delete, retention and audit trails
- templates: Template storage and rendering

Only the exception hierarchy is exported here; import the components from
their modules.

Usage:
    from infrastructure.notifications.dispatcher import NotificationDispatcher
    from infrastructure.notifications.models import NotificationPayload
    from infrastructure.notifications import TenantContextRequiredError
"""

from infrastructure.notifications.exceptions import (
    ChannelNotRegisteredError,
    InvalidDeliveryTransitionError,
    NotificationError,
    NotificationNotFoundError,
    ProviderConfigurationError,
    ProviderSendError,
    TemplateRenderError,
    TenantContextRequiredError,
)

__all__ = [
    "ChannelNotRegisteredError",
    "InvalidDeliveryTransitionError",
    "NotificationError",
    "NotificationNotFoundError",
    "ProviderConfigurationError",
    "ProviderSendError",
    "TemplateRenderError",
    "TenantContextRequiredError",
]
