"""Test fixtures for notification infrastructure tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from infrastructure.events import EventBus
from infrastructure.notifications.channels import EmailChannel, InAppChannel, SmsChannel
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.metrics import NotificationMetrics
from infrastructure.notifications.models import ChannelResult
from infrastructure.notifications.preferences import PreferenceResolver
from infrastructure.notifications.realtime import InMemoryRealtimePublisher
from infrastructure.notifications.registry import ChannelRegistry
from infrastructure.queue import EMAIL_QUEUE, SMS_QUEUE, InMemoryJobQueue


@pytest.fixture
def realtime():
    return InMemoryRealtimePublisher()


@pytest.fixture
def email_queue():
    return InMemoryJobQueue(EMAIL_QUEUE)


@pytest.fixture
def sms_queue():
    return InMemoryJobQueue(SMS_QUEUE)


@pytest.fixture
def in_app_channel(store, realtime):
    return InAppChannel(store, realtime)


@pytest.fixture
def email_channel(store, directory, email_queue):
    return EmailChannel(store, directory, email_queue)


@pytest.fixture
def sms_channel(store, directory, sms_queue):
    return SmsChannel(store, directory, sms_queue)


@pytest.fixture
def registry(in_app_channel, email_channel, sms_channel):
    """Registry holding the three real channels."""
    registry = ChannelRegistry()
    registry.register_channel(in_app_channel)
    registry.register_channel(email_channel)
    registry.register_channel(sms_channel)
    return registry


@pytest.fixture
def preferences(store):
    return PreferenceResolver(store)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def metrics():
    return NotificationMetrics()


@pytest.fixture
def dispatcher(store, registry, preferences, directory, event_bus, metrics):
    return NotificationDispatcher(
        store,
        registry,
        preferences,
        directory,
        event_bus=event_bus,
        metrics=metrics,
    )


@pytest.fixture
def mock_channel_factory():
    """Factory for spy channels.

    Example:
        channel = mock_channel_factory(ChannelType.EMAIL, available=False)
        registry.register_channel(channel)
        channel.send.assert_not_awaited()
    """

    def _factory(channel_type, available=True, valid=True, result=None):
        channel = MagicMock()
        channel.channel_type = channel_type
        channel.is_available = AsyncMock(return_value=available)
        channel.validate = MagicMock(return_value=valid)
        channel.send = AsyncMock(
            return_value=result or ChannelResult.ok(channel_type, message_id="msg-1")
        )
        return channel

    return _factory
