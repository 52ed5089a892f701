"""Email queue job processor.

Consumes jobs from the ``email-notifications`` queue, renders content and
hands it to the tenant's email provider. Any failure marks the delivery log
FAILED and raises ProviderSendError so the queue retries with backoff.
"""

import time
from typing import Any, Dict, Optional, Tuple

from infrastructure.logging import bind_job_context, get_module_logger
from infrastructure.notifications.exceptions import ProviderSendError
from infrastructure.notifications.metrics import NotificationMetrics
from infrastructure.notifications.models import RenderedContent
from infrastructure.notifications.processors.delivery import (
    mark_failed,
    mark_sent,
    prepare_delivery_log,
)
from infrastructure.notifications.providers import (
    EmailMessage,
    EmailProviderFactory,
)
from infrastructure.notifications.templates import (
    TemplateService,
    convert_message_to_html,
)
from infrastructure.persistence.models import ChannelType, TenantNotificationConfig
from infrastructure.persistence.store import NotificationStore
from infrastructure.queue import QueueJob
from infrastructure.tenancy import TenantContext

logger = get_module_logger()

DEFAULT_FROM_ADDRESS = "noreply@example.com"
DEFAULT_FROM_NAME = "Notification System"
DEFAULT_ERROR = "Email sending failed"


class EmailJobProcessor:
    """Delivers one email job.

    Attributes:
        store: Record store (delivery logs, tenant config, templates)
        providers: Factory resolving the tenant's email provider
        templates: Template renderer
        metrics: Optional metrics observer
    """

    def __init__(
        self,
        store: NotificationStore,
        providers: EmailProviderFactory,
        templates: TemplateService,
        metrics: Optional[NotificationMetrics] = None,
    ):
        self.store = store
        self.providers = providers
        self.templates = templates
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
            logger.info("queue_processing_started", channel="email", attempt=job.attempts + 1)
            try:
                log = await prepare_delivery_log(
                    self.store, tenant.tenant_id, notification_id, ChannelType.EMAIL
                )
                if log is None:
                    return

                provider_name = None
                try:
                    tenant_config = await self.store.get_tenant_config(tenant.tenant_id)
                    provider = self.providers.create_provider(tenant_config)
                    provider_name = provider.provider_name
                    content = await self._build_content(tenant.tenant_id, payload)
                    from_address, from_name = self._sender(tenant_config)

                    call_started = time.perf_counter()
                    result = await provider.send(
                        EmailMessage(
                            to=payload["to"],
                            subject=content.subject or "",
                            html=content.html,
                            text=content.text,
                            from_address=from_address,
                            from_name=from_name,
                        )
                    )
                    if self.metrics is not None:
                        self.metrics.record_provider_response(
                            provider_name,
                            ChannelType.EMAIL.value,
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
                        ChannelType.EMAIL.value, tenant.tenant_id, "sent"
                    )
                logger.info(
                    "email_delivered",
                    provider=provider_name,
                    provider_message_id=result.message_id,
                )
            finally:
                duration = time.perf_counter() - started
                if self.metrics is not None:
                    self.metrics.record_processing_time(ChannelType.EMAIL.value, duration)
                logger.info(
                    "queue_processing_completed", channel="email", duration_seconds=duration
                )

    async def _fail(self, tenant_id: str, log, error: str, provider: Optional[str]) -> None:
        await mark_failed(self.store, log, error, provider)
        if self.metrics is not None:
            self.metrics.record_failure(
                ChannelType.EMAIL.value, tenant_id, "provider_error"
            )
        logger.error("email_delivery_failed", error=error, provider=provider)

    async def _build_content(
        self, tenant_id: str, payload: Dict[str, Any]
    ) -> RenderedContent:
        """Explicit template, then category template, then plain message.

        Render errors fall back to the plain message.
        """
        subject = payload.get("subject") or ""
        message = payload.get("message") or ""
        variables = payload.get("template_variables") or {}
        try:
            if payload.get("template_id"):
                rendered = await self.templates.render_template(
                    payload["template_id"], variables
                )
                return rendered.model_copy(update={"subject": subject})

            if payload.get("category"):
                rendered = await self.templates.render_category_template(
                    tenant_id, payload["category"], ChannelType.EMAIL, variables
                )
                if rendered is not None:
                    return rendered.model_copy(
                        update={"subject": rendered.subject or subject}
                    )
        except Exception as e:
            logger.warning("email_template_render_failed", error=str(e), exc_info=True)

        return RenderedContent(
            subject=subject, html=convert_message_to_html(message), text=message
        )

    def _sender(
        self, tenant_config: Optional[TenantNotificationConfig]
    ) -> Tuple[str, str]:
        settings = self.providers.settings
        from_address = (
            (tenant_config.email_from_address if tenant_config else None)
            or settings.EMAIL_FROM_ADDRESS
            or DEFAULT_FROM_ADDRESS
        )
        from_name = (
            (tenant_config.email_from_name if tenant_config else None)
            or settings.EMAIL_FROM_NAME
            or DEFAULT_FROM_NAME
        )
        return from_address, from_name
