"""Termii SMS provider."""

from typing import Optional

import httpx

from infrastructure.logging import get_module_logger
from infrastructure.notifications.providers.base import ProviderResult, SmsMessage
from infrastructure.operations import classify_http_error

logger = get_module_logger()

TERMII_SEND_URL = "https://api.ng.termii.com/api/sms/send"
DEFAULT_SENDER_ID = "Termii"


class TermiiProvider:
    def __init__(
        self,
        api_key: str,
        sender_id: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.sender_id = sender_id
        self.client = client
        self.timeout = timeout

    @property
    def provider_name(self) -> str:
        return "termii"

    async def send(self, message: SmsMessage) -> ProviderResult:
        body = {
            "to": message.to,
            "from": message.from_ or self.sender_id or DEFAULT_SENDER_ID,
            "sms": message.message,
            "type": "plain",
            "api_key": self.api_key,
            "channel": "generic",
        }
        try:
            if self.client is not None:
                response = await self.client.post(
                    TERMII_SEND_URL, json=body, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(TERMII_SEND_URL, json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            result = classify_http_error(e, provider=self.provider_name)
            logger.error(
                "termii_send_failed", error=result.message, error_code=result.error_code
            )
            return ProviderResult.from_operation(result)

        data = response.json()
        message_id = data.get("message_id")
        if not message_id:
            # Termii can answer 200 without accepting the message
            error = data.get("message") or "Unknown error from Termii API"
            logger.error("termii_send_failed", error=error)
            return ProviderResult(success=False, error=error)

        logger.debug("termii_sms_sent", message_id=message_id)
        return ProviderResult.sent(message_id)
