"""Email provider integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class EmailSettings(IntegrationSettings):
    """Environment-level email provider configuration.

    Used when a tenant has no provider override of its own. SMTP settings are
    also used to build the global fallback provider.

    Environment Variables:
        EMAIL_PROVIDER: Provider type - 'resend' or 'smtp'
        EMAIL_API_KEY: API key for API-based providers
        EMAIL_FROM_ADDRESS: Default sender address
        EMAIL_FROM_NAME: Default sender display name
        SMTP_HOST: SMTP server host (default: localhost)
        SMTP_PORT: SMTP server port (default: 587)
        SMTP_SECURE: Use implicit TLS (default: False)
        SMTP_USER: SMTP username
        SMTP_PASSWORD: SMTP password

    Example:
        ```python
        from infrastructure.services import get_settings

        settings = get_settings()

        provider = settings.email.EMAIL_PROVIDER
        sender = settings.email.EMAIL_FROM_ADDRESS
        ```
    """

    EMAIL_PROVIDER: str | None = Field(default=None, alias="EMAIL_PROVIDER")
    EMAIL_API_KEY: str | None = Field(default=None, alias="EMAIL_API_KEY")
    EMAIL_FROM_ADDRESS: str | None = Field(default=None, alias="EMAIL_FROM_ADDRESS")
    EMAIL_FROM_NAME: str | None = Field(default=None, alias="EMAIL_FROM_NAME")

    SMTP_HOST: str = Field(default="localhost", alias="SMTP_HOST")
    SMTP_PORT: int = Field(default=587, alias="SMTP_PORT")
    SMTP_SECURE: bool = Field(default=False, alias="SMTP_SECURE")
    SMTP_USER: str = Field(default="", alias="SMTP_USER")
    SMTP_PASSWORD: str = Field(default="", alias="SMTP_PASSWORD")
