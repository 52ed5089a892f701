"""Unit tests for the EventBus and Event model."""

from datetime import datetime, timezone
from uuid import UUID

import pytest

from infrastructure.events import Event, EventBus, EventTypes

pytestmark = pytest.mark.unit


@pytest.fixture
def event():
    return Event(
        event_type=EventTypes.USER_CREATED,
        tenant_id="tenant-1",
        user_id="user-1",
        metadata={"user_name": "Ada"},
    )


class TestEventBus:
    @pytest.mark.asyncio
    async def test_publishes_to_sync_and_async_handlers_in_order(self, event):
        bus = EventBus()
        calls = []

        def sync_handler(e):
            calls.append("sync")
            return "sync-result"

        async def async_handler(e):
            calls.append("async")
            return "async-result"

        bus.subscribe(EventTypes.USER_CREATED, sync_handler)
        bus.subscribe(EventTypes.USER_CREATED, async_handler)

        results = await bus.publish(event)

        assert calls == ["sync", "async"]
        assert results == ["sync-result", "async-result"]

    @pytest.mark.asyncio
    async def test_failing_handler_does_not_stop_others(self, event):
        bus = EventBus()
        received = []

        async def broken(e):
            raise RuntimeError("handler crashed")

        bus.subscribe(EventTypes.USER_CREATED, broken)
        bus.subscribe(EventTypes.USER_CREATED, received.append)

        results = await bus.publish(event)

        assert received == [event]
        assert results == [None]

    @pytest.mark.asyncio
    async def test_only_matching_handlers_run(self, event):
        bus = EventBus()
        received = []
        bus.subscribe(EventTypes.PROJECT_CREATED, received.append)

        assert await bus.publish(event) == []
        assert received == []

    def test_unsubscribe(self):
        bus = EventBus()

        def handler(e):
            return None

        bus.subscribe(EventTypes.USER_CREATED, handler)

        assert bus.unsubscribe(EventTypes.USER_CREATED, handler) is True
        assert bus.unsubscribe(EventTypes.USER_CREATED, handler) is False
        assert bus.get_registered_events() == []

    def test_introspection_and_clear(self):
        bus = EventBus()

        def handler(e):
            return None

        bus.subscribe(EventTypes.USER_CREATED, handler)
        bus.subscribe(EventTypes.ROLE_ASSIGNED, handler)

        assert sorted(bus.get_registered_events()) == [
            EventTypes.ROLE_ASSIGNED,
            EventTypes.USER_CREATED,
        ]
        assert bus.get_handlers_for_event(EventTypes.USER_CREATED) == [handler]

        bus.clear_handlers()

        assert bus.get_registered_events() == []


class TestEventModel:
    def test_round_trip(self, event):
        restored = Event.from_dict(event.to_dict())

        assert restored == event

    def test_to_dict_serializes_timestamp_and_correlation_id(self):
        event = Event(
            event_type=EventTypes.PAYMENT_RECEIVED,
            tenant_id="tenant-1",
            timestamp=datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc),
            correlation_id=UUID("12345678-1234-5678-1234-567812345678"),
        )

        data = event.to_dict()

        assert data["timestamp"] == "2024-06-01T12:00:00+00:00"
        assert data["correlation_id"] == "12345678-1234-5678-1234-567812345678"

    def test_from_dict_defaults(self):
        event = Event.from_dict({"event_type": "user.created", "tenant_id": "tenant-1"})

        assert event.user_id is None
        assert event.metadata == {}
        assert isinstance(event.correlation_id, UUID)

    @pytest.mark.parametrize(
        "data",
        [
            {"tenant_id": "tenant-1"},
            {"event_type": "user.created", "tenant_id": "t", "correlation_id": "nope"},
            {"event_type": "user.created", "tenant_id": "t", "timestamp": "yesterday"},
        ],
    )
    def test_from_dict_invalid(self, data):
        with pytest.raises(ValueError, match="Invalid event data"):
            Event.from_dict(data)
