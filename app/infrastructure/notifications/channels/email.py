"""Email notification channel.

Asynchronous delivery: ``send`` resolves the user's address, records a
PENDING delivery log and enqueues a job on the email queue. The provider
call happens later in EmailJobProcessor.
"""

from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels import activity
from infrastructure.notifications.channels.base import (
    NotificationChannel,
    get_or_create_delivery_log,
    get_or_create_notification,
)
from infrastructure.notifications.channels.validation import (
    base_payload_errors,
    email_payload_errors,
)
from infrastructure.notifications.models import ChannelResult, NotificationPayload
from infrastructure.persistence.directory import UserDirectory, resolve_email
from infrastructure.persistence.models import ChannelType
from infrastructure.persistence.store import NotificationStore
from infrastructure.queue import JobQueue, QueueJob, job_id_for, queue_priority

logger = get_module_logger()


class EmailChannel(NotificationChannel):
    def __init__(
        self, store: NotificationStore, directory: UserDirectory, queue: JobQueue
    ):
        self.store = store
        self.directory = directory
        self.queue = queue

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.EMAIL

    def validate(self, payload: NotificationPayload) -> bool:
        errors = base_payload_errors(payload)
        if not errors:
            errors = email_payload_errors(payload)
        if errors:
            logger.warning("email_payload_invalid", errors=errors)
        return not errors

    async def is_available(self) -> bool:
        try:
            return await self.store.ping() and await self.queue.ping()
        except Exception as e:
            logger.error("email_channel_unavailable", error=str(e), exc_info=True)
            return False

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        activity.log_attempt(self.channel_type, payload)
        try:
            recipient = await resolve_email(
                self.directory, payload.tenant_id, payload.user_id
            )
            if not recipient.is_success:
                return activity.failed(self.channel_type, payload, recipient.message)

            notification = await get_or_create_notification(self.store, payload)
            log = await get_or_create_delivery_log(
                self.store, notification, self.channel_type
            )

            job = QueueJob(
                id=job_id_for(self.channel_type, notification.id),
                queue=self.queue.name,
                priority=queue_priority(payload.priority),
                payload={
                    "tenant_id": payload.tenant_id,
                    "user_id": payload.user_id,
                    "notification_id": notification.id,
                    "category": payload.category,
                    "priority": payload.priority.value,
                    "to": recipient.data,
                    "subject": payload.title,
                    "message": payload.message,
                    "template_id": payload.template_id,
                    "template_variables": payload.template_variables,
                },
            )
            if not await self.queue.enqueue(job):
                logger.info("email_job_already_queued", job_id=job.id)
        except Exception as e:
            return activity.failed(self.channel_type, payload, str(e))

        return activity.succeeded(self.channel_type, payload, notification.id, log.id)
