"""Unit tests for NotificationDispatcher fan-out."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from infrastructure.events import EventTypes
from infrastructure.notifications.exceptions import TenantContextRequiredError
from infrastructure.notifications.models import ChannelResult
from infrastructure.persistence import (
    ChannelType,
    DeliveryStatus,
    NotificationFilter,
    NotificationPriority,
    NotificationType,
)
from infrastructure.persistence.models import utc_now
from infrastructure.tenancy import TenantContext

pytestmark = pytest.mark.unit


class TestCreate:
    @pytest.mark.asyncio
    async def test_defaults_deliver_in_app_and_email(
        self, dispatcher, tenant, store, email_queue, payload_factory
    ):
        notification = await dispatcher.create(tenant, payload_factory())

        assert notification.channels_sent == [ChannelType.IN_APP, ChannelType.EMAIL]
        assert notification.tenant_id == "tenant-1"
        stored = await store.find_first_notification(
            NotificationFilter(tenant_id="tenant-1", notification_id=notification.id)
        )
        assert stored.channels_sent == notification.channels_sent
        assert await email_queue.get_job(f"email-{notification.id}") is not None

    @pytest.mark.asyncio
    async def test_one_record_and_one_log_per_channel(
        self, dispatcher, tenant, store, payload_factory
    ):
        notification = await dispatcher.create(tenant, payload_factory())

        assert await store.count_notifications(NotificationFilter(tenant_id="tenant-1")) == 1
        logs = await store.list_delivery_logs("tenant-1", notification.id)
        assert {log.channel: log.status for log in logs} == {
            ChannelType.IN_APP: DeliveryStatus.SENT,
            ChannelType.EMAIL: DeliveryStatus.PENDING,
        }

    @pytest.mark.asyncio
    async def test_unavailable_email_is_skipped(
        self, dispatcher, registry, tenant, mock_channel_factory, payload_factory
    ):
        email = mock_channel_factory(ChannelType.EMAIL, available=False)
        registry.register_channel(email)

        notification = await dispatcher.create(tenant, payload_factory())

        assert notification.channels_sent == [ChannelType.IN_APP]
        email.send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disabled_channel_is_never_called(
        self,
        dispatcher,
        registry,
        preferences,
        tenant,
        mock_channel_factory,
        payload_factory,
    ):
        email = mock_channel_factory(ChannelType.EMAIL)
        registry.register_channel(email)
        await preferences.update_preference(
            tenant, "user-1", "project", email_enabled=False
        )

        notification = await dispatcher.create(tenant, payload_factory())

        assert notification.channels_sent == [ChannelType.IN_APP]
        email.is_available.assert_not_awaited()
        email.send.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("context", [None, TenantContext(""), TenantContext("   ")])
    async def test_tenant_required_before_any_write(
        self, dispatcher, store, context, payload_factory
    ):
        with pytest.raises(TenantContextRequiredError):
            await dispatcher.create(context, payload_factory())

        assert await store.count_notifications(NotificationFilter(tenant_id=None)) == 0

    @pytest.mark.asyncio
    async def test_context_tenant_overrides_payload(
        self, dispatcher, tenant, payload_factory
    ):
        notification = await dispatcher.create(
            tenant, payload_factory(tenant_id="tenant-2")
        )

        assert notification.tenant_id == "tenant-1"
        assert ChannelType.EMAIL in notification.channels_sent

    @pytest.mark.asyncio
    async def test_channel_exception_does_not_stop_siblings(
        self, dispatcher, registry, tenant, mock_channel_factory, payload_factory
    ):
        in_app = mock_channel_factory(ChannelType.IN_APP)
        in_app.send.side_effect = RuntimeError("socket closed")
        registry.register_channel(in_app)

        notification = await dispatcher.create(tenant, payload_factory())

        assert notification.channels_sent == [ChannelType.EMAIL]

    @pytest.mark.asyncio
    async def test_failed_result_is_not_recorded(
        self, dispatcher, registry, tenant, mock_channel_factory, payload_factory
    ):
        email = mock_channel_factory(
            ChannelType.EMAIL,
            result=ChannelResult.failure(ChannelType.EMAIL, "User email not found"),
        )
        registry.register_channel(email)

        notification = await dispatcher.create(tenant, payload_factory())

        assert notification.channels_sent == [ChannelType.IN_APP]
        email.send.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unregistered_channel_is_skipped(
        self, dispatcher, registry, tenant, payload_factory
    ):
        registry.unregister_channel(ChannelType.EMAIL)

        notification = await dispatcher.create(tenant, payload_factory())

        assert notification.channels_sent == [ChannelType.IN_APP]

    @pytest.mark.asyncio
    async def test_invalid_sms_payload_never_sends(
        self, dispatcher, preferences, sms_channel, tenant, monkeypatch, payload_factory
    ):
        send = AsyncMock()
        monkeypatch.setattr(sms_channel, "send", send)
        await preferences.update_preference(tenant, "user-1", "project", sms_enabled=True)

        notification = await dispatcher.create(
            tenant, payload_factory(title="A", message="x" * 1598)
        )

        assert notification.channels_sent == [ChannelType.IN_APP, ChannelType.EMAIL]
        send.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_all_three_channels_when_enabled(
        self, dispatcher, preferences, sms_queue, tenant, payload_factory
    ):
        await preferences.update_preference(tenant, "user-1", "project", sms_enabled=True)

        notification = await dispatcher.create(tenant, payload_factory())

        assert notification.channels_sent == [
            ChannelType.IN_APP,
            ChannelType.EMAIL,
            ChannelType.SMS,
        ]
        assert await sms_queue.get_job(f"sms-{notification.id}") is not None

    @pytest.mark.asyncio
    async def test_default_expiry_applied(self, dispatcher, tenant, payload_factory):
        notification = await dispatcher.create(tenant, payload_factory())

        expected = utc_now() + timedelta(days=30)
        assert abs(notification.expires_at - expected) < timedelta(minutes=1)

    @pytest.mark.asyncio
    async def test_explicit_expiry_kept(self, dispatcher, tenant, payload_factory):
        expires_at = utc_now() + timedelta(days=2)

        notification = await dispatcher.create(
            tenant, payload_factory(expires_at=expires_at)
        )

        assert notification.expires_at == expires_at

    @pytest.mark.asyncio
    async def test_publishes_created_event(
        self, dispatcher, event_bus, tenant, payload_factory
    ):
        received = []
        event_bus.subscribe(EventTypes.NOTIFICATION_CREATED, received.append)

        notification = await dispatcher.create(tenant, payload_factory())

        assert len(received) == 1
        assert received[0].tenant_id == "tenant-1"
        assert received[0].metadata["notification_id"] == notification.id
        assert received[0].metadata["channels_sent"] == ["IN_APP", "EMAIL"]

    @pytest.mark.asyncio
    async def test_records_metrics(
        self, dispatcher, registry, metrics, tenant, mock_channel_factory, payload_factory
    ):
        email = mock_channel_factory(ChannelType.EMAIL)
        email.send.side_effect = RuntimeError("queue down")
        registry.register_channel(email)

        await dispatcher.create(tenant, payload_factory())

        snapshot = metrics.snapshot()
        assert snapshot["deliveries"] == {"IN_APP:accepted": 1}
        assert snapshot["failures"] == {"EMAIL:channel_error": 1}


class TestSendToUser:
    @pytest.mark.asyncio
    async def test_fills_defaults(self, dispatcher, tenant):
        notification = await dispatcher.send_to_user(tenant, "user-1", message="Hello")

        assert notification.title == "Notification"
        assert notification.category == "system"
        assert notification.type == NotificationType.INFO
        assert notification.priority == NotificationPriority.MEDIUM

    @pytest.mark.asyncio
    async def test_passes_overrides(self, dispatcher, tenant):
        notification = await dispatcher.send_to_user(
            tenant,
            "user-1",
            title="Invoice",
            message="Invoice INV-1 is ready",
            category="invoice",
            priority=NotificationPriority.HIGH,
            data={"invoice_id": "INV-1"},
        )

        assert notification.category == "invoice"
        assert notification.priority == NotificationPriority.HIGH
        assert notification.data == {"invoice_id": "INV-1"}


class TestSendToTenant:
    @pytest.mark.asyncio
    async def test_creates_one_notification_per_user(
        self, dispatcher, directory, store, tenant, user_factory, payload_factory
    ):
        await directory.add_user(user_factory(user_id="user-2", email="grace@example.com"))
        await directory.add_user(user_factory(user_id="user-3", tenant_id="tenant-2"))

        result = await dispatcher.send_to_tenant(tenant, payload_factory(user_id=None))

        assert result.sent == 2
        assert result.failed == 0
        rows = await store.find_notifications(NotificationFilter(tenant_id="tenant-1"))
        assert sorted(row.user_id for row in rows) == ["user-1", "user-2"]

    @pytest.mark.asyncio
    async def test_collects_per_user_errors(
        self, dispatcher, directory, tenant, user_factory, monkeypatch, payload_factory
    ):
        await directory.add_user(user_factory(user_id="user-2"))
        create = dispatcher.create

        async def flaky_create(context, payload):
            if payload.user_id == "user-2":
                raise RuntimeError("database unavailable")
            return await create(context, payload)

        monkeypatch.setattr(dispatcher, "create", flaky_create)

        result = await dispatcher.send_to_tenant(tenant, payload_factory())

        assert result.sent == 1
        assert result.failed == 1
        assert result.errors == ["User user-2: database unavailable"]

    @pytest.mark.asyncio
    async def test_empty_tenant(self, dispatcher, payload_factory):
        result = await dispatcher.send_to_tenant(
            TenantContext("tenant-empty"), payload_factory()
        )

        assert result.sent == 0
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_tenant_required(self, dispatcher, payload_factory):
        with pytest.raises(TenantContextRequiredError):
            await dispatcher.send_to_tenant(None, payload_factory())
