"""Provider factories.

Resolution order for both kinds: the tenant's TenantNotificationConfig
override, then the environment settings. Email falls back to the global SMTP
provider when nothing else is usable; SMS has no fallback and raises
ProviderConfigurationError.
"""

from typing import List, Optional, Tuple

import httpx

from infrastructure.configuration.integrations import EmailSettings, SmsSettings
from infrastructure.logging import get_module_logger
from infrastructure.notifications.exceptions import ProviderConfigurationError
from infrastructure.notifications.providers.base import EmailProvider, SmsProvider
from infrastructure.notifications.providers.resend import ResendProvider
from infrastructure.notifications.providers.smtp import SmtpConfig, SmtpProvider
from infrastructure.notifications.providers.termii import TermiiProvider
from infrastructure.notifications.providers.twilio import TwilioProvider
from infrastructure.persistence.models import TenantNotificationConfig

logger = get_module_logger()

EMAIL_PROVIDERS = ("resend", "smtp")
SMS_PROVIDERS = ("twilio", "termii")


class EmailProviderFactory:
    """Builds email providers for a tenant.

    Args:
        settings: Environment email settings
        client: Optional shared httpx.AsyncClient for API providers
    """

    def __init__(
        self, settings: EmailSettings, client: Optional[httpx.AsyncClient] = None
    ):
        self.settings = settings
        self.client = client
        self.global_smtp = SmtpProvider(
            SmtpConfig(
                host=settings.SMTP_HOST,
                port=settings.SMTP_PORT,
                secure=settings.SMTP_SECURE,
                user=settings.SMTP_USER,
                password=settings.SMTP_PASSWORD,
            )
        )

    def create_provider(
        self, tenant_config: Optional[TenantNotificationConfig] = None
    ) -> EmailProvider:
        if tenant_config is not None and tenant_config.email_provider:
            provider = self._from_tenant_config(tenant_config)
            if provider is not None:
                logger.debug(
                    "using_tenant_email_provider",
                    tenant_id=tenant_config.tenant_id,
                    provider=provider.provider_name,
                )
                return provider

        provider = self._from_settings()
        if provider is not None:
            return provider

        logger.warning("email_provider_fallback_to_smtp")
        return self.global_smtp

    def _from_tenant_config(
        self, config: TenantNotificationConfig
    ) -> Optional[EmailProvider]:
        if config.email_provider == "resend":
            if not config.email_api_key:
                logger.warning("tenant_resend_api_key_missing", tenant_id=config.tenant_id)
                return None
            return ResendProvider(config.email_api_key, client=self.client)

        if config.email_provider == "smtp":
            if not (config.smtp_host and config.smtp_user and config.smtp_password):
                logger.warning("tenant_smtp_config_incomplete", tenant_id=config.tenant_id)
                return None
            return SmtpProvider(
                SmtpConfig(
                    host=config.smtp_host,
                    port=config.smtp_port or 587,
                    secure=bool(config.smtp_secure),
                    user=config.smtp_user,
                    password=config.smtp_password,
                )
            )

        logger.warning(
            "unknown_email_provider",
            tenant_id=config.tenant_id,
            provider=config.email_provider,
        )
        return None

    def _from_settings(self) -> Optional[EmailProvider]:
        provider = self.settings.EMAIL_PROVIDER
        if not provider:
            return None
        if provider == "resend":
            if not self.settings.EMAIL_API_KEY:
                logger.warning("global_resend_api_key_missing")
                return None
            return ResendProvider(self.settings.EMAIL_API_KEY, client=self.client)
        if provider == "smtp":
            return self.global_smtp
        logger.warning("unknown_global_email_provider", provider=provider)
        return None

    def get_available_providers(self) -> List[str]:
        return list(EMAIL_PROVIDERS)

    def validate_config(self, config: TenantNotificationConfig) -> Tuple[bool, List[str]]:
        """Check a tenant email configuration.

        Returns:
            (valid, errors)
        """
        errors: List[str] = []
        if not config.email_provider:
            return False, ["Provider type is required"]
        if config.email_provider not in EMAIL_PROVIDERS:
            return False, [f"Invalid provider type: {config.email_provider}"]

        if config.email_provider == "resend":
            if not config.email_api_key:
                errors.append("API key is required for Resend provider")
        else:
            if not config.smtp_host:
                errors.append("Host is required for SMTP provider")
            if not config.smtp_user:
                errors.append("User is required for SMTP provider")
            if not config.smtp_password:
                errors.append("Password is required for SMTP provider")
            if config.smtp_port is not None and not 1 <= config.smtp_port <= 65535:
                errors.append("Port must be between 1 and 65535")

        return not errors, errors


class SmsProviderFactory:
    """Builds SMS providers for a tenant.

    Raises ProviderConfigurationError when neither the tenant nor the
    environment names a usable provider.
    """

    def __init__(self, settings: SmsSettings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self.client = client

    def create_provider(
        self, tenant_config: Optional[TenantNotificationConfig] = None
    ) -> SmsProvider:
        if (
            tenant_config is not None
            and tenant_config.sms_provider
            and tenant_config.sms_api_key
        ):
            return self._build(
                tenant_config.sms_provider,
                tenant_config.sms_api_key,
                tenant_config.sms_api_secret,
                tenant_config.sms_from_number,
            )

        if self.settings.SMS_PROVIDER and self.settings.SMS_API_KEY:
            sender = (
                self.settings.TERMII_SENDER_ID
                if self.settings.SMS_PROVIDER == "termii"
                else self.settings.SMS_FROM_NUMBER
            )
            return self._build(
                self.settings.SMS_PROVIDER,
                self.settings.SMS_API_KEY,
                self.settings.SMS_API_SECRET,
                sender,
            )

        logger.error("sms_provider_not_configured")
        raise ProviderConfigurationError("No SMS provider configuration found")

    def _build(
        self,
        provider: str,
        api_key: str,
        api_secret: Optional[str],
        sender: Optional[str],
    ) -> SmsProvider:
        if provider == "twilio":
            if not api_secret:
                raise ProviderConfigurationError(
                    "Twilio requires both API key (Account SID) and API secret (Auth Token)"
                )
            return TwilioProvider(api_key, api_secret, sender, client=self.client)
        if provider == "termii":
            return TermiiProvider(api_key, sender, client=self.client)
        raise ProviderConfigurationError(f"Unsupported SMS provider: {provider}")

    def get_available_providers(self) -> List[str]:
        return list(SMS_PROVIDERS)

    def validate_config(self, config: TenantNotificationConfig) -> Tuple[bool, List[str]]:
        errors: List[str] = []
        if not config.sms_provider:
            errors.append("Provider type is required")
        elif config.sms_provider not in SMS_PROVIDERS:
            errors.append(f"Invalid provider type: {config.sms_provider}")
        if not config.sms_api_key:
            errors.append("API key is required")
        if config.sms_provider == "twilio" and not config.sms_api_secret:
            errors.append(
                "Twilio requires both API key (Account SID) and API secret (Auth Token)"
            )
        return not errors, errors
