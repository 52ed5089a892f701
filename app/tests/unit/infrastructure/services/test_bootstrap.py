"""Unit tests for the notification engine composition root."""

import asyncio
import json

import httpx
import pytest

from infrastructure.configuration import QueueSettings, Settings
from infrastructure.configuration.integrations import EmailSettings
from infrastructure.events import EventTypes
from infrastructure.notifications.realtime import (
    InMemoryRealtimePublisher,
    RedisRealtimePublisher,
)
from infrastructure.persistence import ChannelType, DeliveryStatus
from infrastructure.queue import InMemoryJobQueue, RedisJobQueue
from infrastructure.services import build_notification_engine, get_settings

pytestmark = pytest.mark.unit


@pytest.fixture
def settings():
    return Settings(
        email=EmailSettings(
            _env_file=None,
            EMAIL_PROVIDER="resend",
            EMAIL_API_KEY="re_key",
            EMAIL_FROM_ADDRESS="alerts@acme.io",
        ),
        queue=QueueSettings(_env_file=None, NOTIFICATION_QUEUE_CONCURRENCY=1),
    )


@pytest.fixture
def resend_client():
    """httpx client answering every Resend call with a message id."""
    requests = []

    def handler(request):
        requests.append(request)
        return httpx.Response(200, json={"id": "re-1"})

    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), requests


class TestBuildNotificationEngine:
    def test_memory_wiring(self, settings):
        engine = build_notification_engine(settings)

        assert engine.registry.count() == 3
        assert isinstance(engine.email_queue, InMemoryJobQueue)
        assert isinstance(engine.sms_queue, InMemoryJobQueue)
        assert isinstance(engine.realtime, InMemoryRealtimePublisher)
        assert engine.rate_limits is None
        assert [worker.worker_id for worker in engine.workers] == [
            "email-notifications-worker-1",
            "sms-notifications-worker-1",
        ]

    def test_redis_wiring(self, fake_redis):
        settings = Settings(
            queue=QueueSettings(_env_file=None, NOTIFICATION_QUEUE_BACKEND="redis")
        )

        engine = build_notification_engine(settings, redis=fake_redis)

        assert isinstance(engine.email_queue, RedisJobQueue)
        assert isinstance(engine.realtime, RedisRealtimePublisher)
        assert engine.rate_limits is not None
        assert len(engine.workers) == 2 * settings.queue.concurrency

    def test_redis_backend_requires_client(self):
        settings = Settings(
            queue=QueueSettings(_env_file=None, NOTIFICATION_QUEUE_BACKEND="redis")
        )

        with pytest.raises(ValueError, match="Redis client is required"):
            build_notification_engine(settings)

    def test_event_handlers_are_registered(self, settings):
        engine = build_notification_engine(settings)

        assert EventTypes.ROLE_ASSIGNED in engine.event_bus.get_registered_events()

    @pytest.mark.asyncio
    async def test_start_workers_stops_on_event(self, settings):
        engine = build_notification_engine(settings)
        stop = asyncio.Event()

        tasks = engine.start_workers(stop)
        stop.set()
        await asyncio.wait_for(asyncio.gather(*tasks), timeout=5)

        assert len(tasks) == 2


class TestEndToEnd:
    @pytest.mark.asyncio
    async def test_send_delivers_in_app_and_email(
        self, settings, directory, tenant, payload_factory, resend_client
    ):
        client, requests = resend_client
        engine = build_notification_engine(settings, directory=directory, http_client=client)

        notification = await engine.notifications.send(tenant, payload_factory())
        stats = await engine.workers[0].process_batch()

        assert stats["successful"] == 1
        body = json.loads(requests[0].content)
        assert body["to"] == ["ada@example.com"]
        assert body["subject"] == "Project created"
        logs = await engine.store.list_delivery_logs("tenant-1", notification.id)
        email_log = next(log for log in logs if log.channel == ChannelType.EMAIL)
        assert email_log.status == DeliveryStatus.SENT
        assert email_log.provider_message_id == "re-1"
        assert engine.metrics.get_delivery_rate(ChannelType.EMAIL.value) == 1.0


def test_get_settings_is_cached():
    assert get_settings() is get_settings()
