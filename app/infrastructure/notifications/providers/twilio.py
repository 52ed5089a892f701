"""Twilio SMS provider using the Messages REST API."""

from typing import Optional

import httpx

from infrastructure.logging import get_module_logger
from infrastructure.notifications.providers.base import ProviderResult, SmsMessage
from infrastructure.operations import classify_http_error

logger = get_module_logger()

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"


class TwilioProvider:
    """Sends SMS through Twilio.

    Args:
        account_sid: Account SID, used as the basic-auth username
        auth_token: Auth token, used as the basic-auth password
        from_number: Default sender number
        client: Optional shared httpx.AsyncClient
    """

    def __init__(
        self,
        account_sid: str,
        auth_token: str,
        from_number: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.account_sid = account_sid
        self.auth_token = auth_token
        self.from_number = from_number
        self.client = client
        self.timeout = timeout

    @property
    def provider_name(self) -> str:
        return "twilio"

    @property
    def messages_url(self) -> str:
        return f"{TWILIO_API_BASE}/Accounts/{self.account_sid}/Messages.json"

    async def send(self, message: SmsMessage) -> ProviderResult:
        form = {
            "To": message.to,
            "From": message.from_ or self.from_number or "",
            "Body": message.message,
        }
        auth = (self.account_sid, self.auth_token)
        try:
            if self.client is not None:
                response = await self.client.post(
                    self.messages_url, data=form, auth=auth, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.messages_url, data=form, auth=auth)
            response.raise_for_status()
        except httpx.HTTPError as e:
            result = classify_http_error(e, provider=self.provider_name)
            logger.error(
                "twilio_send_failed", error=result.message, error_code=result.error_code
            )
            return ProviderResult.from_operation(result)

        sid = response.json().get("sid")
        logger.debug("twilio_sms_sent", message_id=sid)
        return ProviderResult.sent(sid)
