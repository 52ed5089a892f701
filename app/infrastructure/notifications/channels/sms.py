"""SMS notification channel.

Asynchronous delivery, like email. The destination comes from
``data.phone_number`` when the caller supplies one, otherwise from the user
directory. The job carries the already formatted message.
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
    format_sms_message,
    is_valid_phone,
    normalize_phone,
    phone_override,
    sms_payload_errors,
)
from infrastructure.notifications.models import ChannelResult, NotificationPayload
from infrastructure.persistence.directory import UserDirectory
from infrastructure.persistence.models import ChannelType
from infrastructure.persistence.store import NotificationStore
from infrastructure.queue import JobQueue, QueueJob, job_id_for, queue_priority

logger = get_module_logger()


class SmsChannel(NotificationChannel):
    def __init__(
        self, store: NotificationStore, directory: UserDirectory, queue: JobQueue
    ):
        self.store = store
        self.directory = directory
        self.queue = queue

    @property
    def channel_type(self) -> ChannelType:
        return ChannelType.SMS

    def validate(self, payload: NotificationPayload) -> bool:
        errors = base_payload_errors(payload)
        if not errors:
            errors = sms_payload_errors(payload)
        if errors:
            logger.warning("sms_payload_invalid", errors=errors)
        return not errors

    async def is_available(self) -> bool:
        try:
            return await self.store.ping() and await self.queue.ping()
        except Exception as e:
            logger.error("sms_channel_unavailable", error=str(e), exc_info=True)
            return False

    async def send(self, payload: NotificationPayload) -> ChannelResult:
        activity.log_attempt(self.channel_type, payload)
        try:
            user = await self.directory.get_user(payload.tenant_id, payload.user_id)
            if user is None:
                return activity.failed(self.channel_type, payload, "User not found")

            phone = phone_override(payload) or user.phone_number
            if not phone:
                return activity.failed(
                    self.channel_type, payload, "User phone number not found"
                )
            if not is_valid_phone(phone):
                return activity.failed(
                    self.channel_type, payload, "Invalid phone number format"
                )

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
                    "to": normalize_phone(phone),
                    "message": format_sms_message(payload.title, payload.message),
                },
            )
            if not await self.queue.enqueue(job):
                logger.info("sms_job_already_queued", job_id=job.id)
        except Exception as e:
            return activity.failed(self.channel_type, payload, str(e))

        return activity.succeeded(self.channel_type, payload, notification.id, log.id)
