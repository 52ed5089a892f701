"""Provider contracts for email and SMS delivery.

Providers never raise for delivery failures: transport and API errors are
reported through ``ProviderResult(success=False, error=...)`` and the
calling job processor decides whether to retry.
"""

from typing import Optional, Protocol

from pydantic import BaseModel

from infrastructure.operations import OperationResult


class EmailMessage(BaseModel):
    to: str
    subject: str
    html: Optional[str] = None
    text: Optional[str] = None
    from_address: Optional[str] = None
    from_name: Optional[str] = None


class SmsMessage(BaseModel):
    to: str
    message: str
    from_: Optional[str] = None


class ProviderResult(BaseModel):
    """Outcome of one provider call.

    Attributes:
        success: Whether the provider accepted the message
        message_id: Provider-assigned message id
        error: Failure description
        retryable: Whether the failure looks transient
    """

    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None
    retryable: bool = False

    @classmethod
    def sent(cls, message_id: Optional[str]) -> "ProviderResult":
        return cls(success=True, message_id=message_id)

    @classmethod
    def from_operation(cls, result: OperationResult) -> "ProviderResult":
        return cls(success=False, error=result.message, retryable=result.is_retryable)


class EmailProvider(Protocol):
    @property
    def provider_name(self) -> str: ...

    async def send(self, message: EmailMessage) -> ProviderResult: ...


class SmsProvider(Protocol):
    @property
    def provider_name(self) -> str: ...

    async def send(self, message: SmsMessage) -> ProviderResult: ...
