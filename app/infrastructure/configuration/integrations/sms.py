"""SMS provider integration settings."""

from pydantic import Field

from infrastructure.configuration.base import IntegrationSettings


class SmsSettings(IntegrationSettings):
    """Environment-level SMS provider configuration.

    Environment Variables:
        SMS_PROVIDER: Provider type - 'twilio' or 'termii'
        SMS_API_KEY: Account SID (Twilio) or API key (Termii)
        SMS_API_SECRET: Auth token (Twilio only)
        SMS_FROM_NUMBER: Default sender number
        TERMII_SENDER_ID: Default Termii sender id
    """

    SMS_PROVIDER: str | None = Field(default=None, alias="SMS_PROVIDER")
    SMS_API_KEY: str | None = Field(default=None, alias="SMS_API_KEY")
    SMS_API_SECRET: str | None = Field(default=None, alias="SMS_API_SECRET")
    SMS_FROM_NUMBER: str | None = Field(default=None, alias="SMS_FROM_NUMBER")
    TERMII_SENDER_ID: str | None = Field(default=None, alias="TERMII_SENDER_ID")
