"""SMS queue job processor.

Same lifecycle as the email processor. The message is reduced to plain
text and capped at 150 characters before it reaches the provider.
"""

import re
import time
from typing import Optional

from infrastructure.logging import bind_job_context, get_module_logger
from infrastructure.notifications.exceptions import ProviderSendError
from infrastructure.notifications.metrics import NotificationMetrics
from infrastructure.notifications.processors.delivery import (
    mark_failed,
    mark_sent,
    prepare_delivery_log,
)
from infrastructure.notifications.providers import SmsMessage, SmsProviderFactory
from infrastructure.notifications.templates import strip_html, truncate
from infrastructure.persistence.models import ChannelType, TenantNotificationConfig
from infrastructure.persistence.store import NotificationStore
from infrastructure.queue import QueueJob
from infrastructure.tenancy import TenantContext

logger = get_module_logger()

DEFAULT_ERROR = "SMS sending failed"
PHONE_STRIP = re.compile(r"[^\d+]")


def sanitize_phone_number(phone: str) -> str:
    return PHONE_STRIP.sub("", phone)


def prepare_sms_content(message: str) -> str:
    return truncate(strip_html(message))


class SmsJobProcessor:
    def __init__(
        self,
        store: NotificationStore,
        providers: SmsProviderFactory,
        metrics: Optional[NotificationMetrics] = None,
    ):
        self.store = store
        self.providers = providers
        self.metrics = metrics

    async def process(self, job: QueueJob) -> None:
        payload = job.payload
        tenant = TenantContext(payload["tenant_id"], payload.get("user_id"))
        notification_id = payload["notification_id"]
        started = time.perf_counter()

        with bind_job_context(
            tenant_id=tenant.tenant_id,
            user_id=tenant.user_id,
            notification_id=notification_id,
            job_id=job.id,
        ):
            logger.info("queue_processing_started", channel="sms", attempt=job.attempts + 1)
            try:
                log = await prepare_delivery_log(
                    self.store, tenant.tenant_id, notification_id, ChannelType.SMS
                )
                if log is None:
                    return

                provider_name = None
                try:
                    tenant_config = await self.store.get_tenant_config(tenant.tenant_id)
                    provider = self.providers.create_provider(tenant_config)
                    provider_name = provider.provider_name

                    call_started = time.perf_counter()
                    result = await provider.send(
                        SmsMessage(
                            to=sanitize_phone_number(payload["to"]),
                            message=prepare_sms_content(payload.get("message") or ""),
                            from_=self._sender(tenant_config),
                        )
                    )
                    if self.metrics is not None:
                        self.metrics.record_provider_response(
                            provider_name,
                            ChannelType.SMS.value,
                            time.perf_counter() - call_started,
                            result.success,
                        )
                except Exception as e:
                    error = str(e) or DEFAULT_ERROR
                    await self._fail(tenant.tenant_id, log, error, provider_name)
                    raise ProviderSendError(error, provider=provider_name) from e

                if not result.success:
                    error = result.error or DEFAULT_ERROR
                    await self._fail(tenant.tenant_id, log, error, provider_name)
                    raise ProviderSendError(error, provider=provider_name)

                await mark_sent(self.store, log, provider_name, result.message_id)
                if self.metrics is not None:
                    self.metrics.record_delivery(
                        ChannelType.SMS.value, tenant.tenant_id, "sent"
                    )
                logger.info(
                    "sms_delivered",
                    provider=provider_name,
                    provider_message_id=result.message_id,
                )
            finally:
                duration = time.perf_counter() - started
                if self.metrics is not None:
                    self.metrics.record_processing_time(ChannelType.SMS.value, duration)
                logger.info(
                    "queue_processing_completed", channel="sms", duration_seconds=duration
                )

    async def _fail(self, tenant_id: str, log, error: str, provider: Optional[str]) -> None:
        await mark_failed(self.store, log, error, provider)
        if self.metrics is not None:
            self.metrics.record_failure(
                ChannelType.SMS.value, tenant_id, "provider_error"
            )
        logger.error("sms_delivery_failed", error=error, provider=provider)

    def _sender(self, tenant_config: Optional[TenantNotificationConfig]) -> Optional[str]:
        settings = self.providers.settings
        return (
            (tenant_config.sms_from_number if tenant_config else None)
            or settings.SMS_FROM_NUMBER
            or settings.TERMII_SENDER_ID
        )
