"""SMTP email provider.

smtplib is blocking, so each send runs in a worker thread via
``asyncio.to_thread``.
"""

import asyncio
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage as MimeMessage
from email.utils import formataddr, make_msgid

from infrastructure.logging import get_module_logger
from infrastructure.notifications.providers.base import EmailMessage, ProviderResult

logger = get_module_logger()


@dataclass(frozen=True)
class SmtpConfig:
    host: str = "localhost"
    port: int = 587
    secure: bool = False
    user: str = ""
    password: str = ""
    timeout: float = 10.0


class SmtpProvider:
    def __init__(self, config: SmtpConfig):
        self.config = config

    @property
    def provider_name(self) -> str:
        return "smtp"

    def _build_message(self, message: EmailMessage) -> MimeMessage:
        sender = message.from_address or self.config.user
        mime = MimeMessage()
        mime["From"] = formataddr((message.from_name, sender)) if message.from_name else sender
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime["Message-ID"] = make_msgid()
        mime.set_content(message.text or message.subject)
        if message.html:
            mime.add_alternative(message.html, subtype="html")
        return mime

    def _deliver(self, mime: MimeMessage) -> None:
        smtp_class = smtplib.SMTP_SSL if self.config.secure else smtplib.SMTP
        with smtp_class(
            self.config.host, self.config.port, timeout=self.config.timeout
        ) as server:
            if not self.config.secure:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            if self.config.user and self.config.password:
                server.login(self.config.user, self.config.password)
            server.send_message(mime)

    async def send(self, message: EmailMessage) -> ProviderResult:
        mime = self._build_message(message)
        try:
            await asyncio.to_thread(self._deliver, mime)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(
                "smtp_send_failed",
                host=self.config.host,
                port=self.config.port,
                error=str(e),
                exc_info=True,
            )
            return ProviderResult(
                success=False,
                error=str(e) or type(e).__name__,
                retryable=not isinstance(e, smtplib.SMTPRecipientsRefused),
            )

        logger.debug("smtp_email_sent", message_id=mime["Message-ID"])
        return ProviderResult.sent(mime["Message-ID"])
