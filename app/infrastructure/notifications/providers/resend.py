"""Resend email provider (https://resend.com)."""

from typing import Optional

import httpx

from infrastructure.logging import get_module_logger
from infrastructure.notifications.providers.base import EmailMessage, ProviderResult
from infrastructure.operations import classify_http_error

logger = get_module_logger()

RESEND_API_URL = "https://api.resend.com/emails"
DEFAULT_FROM_ADDRESS = "noreply@example.com"


class ResendProvider:
    """Sends email through the Resend REST API.

    Args:
        api_key: Resend API key
        client: Optional shared httpx.AsyncClient
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        api_key: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.client = client
        self.timeout = timeout

    @property
    def provider_name(self) -> str:
        return "resend"

    def _build_body(self, message: EmailMessage) -> dict:
        sender = message.from_address or DEFAULT_FROM_ADDRESS
        if message.from_name:
            sender = f"{message.from_name} <{sender}>"
        body = {
            "from": sender,
            "to": [message.to],
            "subject": message.subject,
            "text": message.text or message.subject or "No content",
        }
        if message.html:
            body["html"] = message.html
        return body

    async def send(self, message: EmailMessage) -> ProviderResult:
        headers = {"Authorization": f"Bearer {self.api_key}"}
        body = self._build_body(message)
        try:
            if self.client is not None:
                response = await self.client.post(
                    RESEND_API_URL, json=body, headers=headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(RESEND_API_URL, json=body, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            result = classify_http_error(e, provider=self.provider_name)
            logger.error(
                "resend_send_failed",
                error=result.message,
                error_code=result.error_code,
            )
            return ProviderResult.from_operation(result)

        message_id = response.json().get("id")
        logger.debug("resend_email_sent", message_id=message_id)
        return ProviderResult.sent(message_id)
