"""Fixtures for queue job processor tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from infrastructure.notifications.providers import ProviderResult
from infrastructure.persistence import DeliveryLog
from infrastructure.queue import QueueJob, job_id_for


@pytest.fixture
def seed_delivery(store, notification_factory):
    """Seed a notification with a PENDING delivery log and build its job.

    Example:
        notification, log, job = await seed_delivery(
            ChannelType.EMAIL, EMAIL_QUEUE, to="ada@example.com"
        )
    """

    async def _seed(channel, queue, **payload):
        notification = await store.create_notification(notification_factory())
        log = await store.create_delivery_log(
            DeliveryLog(notification_id=notification.id, channel=channel)
        )
        job = QueueJob(
            id=job_id_for(channel, notification.id),
            queue=queue,
            payload={
                "tenant_id": notification.tenant_id,
                "user_id": notification.user_id,
                "notification_id": notification.id,
                "category": notification.category,
                **payload,
            },
        )
        return notification, log, job

    return _seed


@pytest.fixture
def provider_factory():
    """Factory for a provider factory mock returning one spy provider.

    Example:
        factory, provider = provider_factory("resend", settings)
        provider.send.return_value = ProviderResult(success=False, error="boom")
    """

    def _factory(name, settings, result=None):
        provider = MagicMock()
        provider.provider_name = name
        provider.send = AsyncMock(return_value=result or ProviderResult.sent(f"{name}-1"))
        factory = MagicMock()
        factory.settings = settings
        factory.create_provider.return_value = provider
        return factory, provider

    return _factory
