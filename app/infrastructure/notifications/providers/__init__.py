"""Email and SMS delivery providers."""

from infrastructure.notifications.providers.base import (
    EmailMessage,
    EmailProvider,
    ProviderResult,
    SmsMessage,
    SmsProvider,
)
from infrastructure.notifications.providers.factory import (
    EmailProviderFactory,
    SmsProviderFactory,
)
from infrastructure.notifications.providers.resend import ResendProvider
from infrastructure.notifications.providers.smtp import SmtpConfig, SmtpProvider
from infrastructure.notifications.providers.termii import TermiiProvider
from infrastructure.notifications.providers.twilio import TwilioProvider

__all__ = [
    "EmailMessage",
    "EmailProvider",
    "ProviderResult",
    "SmsMessage",
    "SmsProvider",
    "EmailProviderFactory",
    "SmsProviderFactory",
    "ResendProvider",
    "SmtpConfig",
    "SmtpProvider",
    "TermiiProvider",
    "TwilioProvider",
]
