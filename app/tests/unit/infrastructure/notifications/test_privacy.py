"""Unit tests for PrivacyService."""

from datetime import timedelta

import pytest

from infrastructure.notifications.exceptions import (
    NotificationNotFoundError,
    TenantContextRequiredError,
)
from infrastructure.notifications.privacy import PrivacyService
from infrastructure.persistence import AuditAction, AuditLog, NotificationFilter

pytestmark = pytest.mark.unit


@pytest.fixture
def privacy(store):
    return PrivacyService(store, retention_days=90, audit_log_retention_days=365)


async def fetch(store, notification_id, tenant_id="tenant-1"):
    return await store.find_first_notification(
        NotificationFilter(
            tenant_id=tenant_id, notification_id=notification_id, include_deleted=True
        )
    )


class TestSoftDelete:
    @pytest.mark.asyncio
    async def test_soft_delete_and_restore(
        self, privacy, store, tenant, notification_factory
    ):
        row = await store.create_notification(notification_factory())

        deleted = await privacy.soft_delete_notification(tenant, row.id, "user-1")
        assert deleted.deleted_at is not None
        assert deleted.deleted_by == "user-1"

        restored = await privacy.restore_notification(tenant, row.id, "user-1")
        assert restored.deleted_at is None
        assert restored.deleted_by is None

    @pytest.mark.asyncio
    async def test_soft_delete_hides_from_default_queries(
        self, privacy, store, tenant, notification_factory
    ):
        row = await store.create_notification(notification_factory())

        await privacy.soft_delete_notification(tenant, row.id, "user-1")

        assert await store.count_notifications(NotificationFilter(tenant_id="tenant-1")) == 0

    @pytest.mark.asyncio
    async def test_only_owner_may_delete(
        self, privacy, store, tenant, notification_factory
    ):
        row = await store.create_notification(notification_factory())

        with pytest.raises(NotificationNotFoundError):
            await privacy.soft_delete_notification(tenant, row.id, "user-2")

    @pytest.mark.asyncio
    async def test_other_tenant_cannot_delete(
        self, privacy, store, other_tenant, notification_factory
    ):
        row = await store.create_notification(notification_factory())

        with pytest.raises(NotificationNotFoundError):
            await privacy.soft_delete_notification(other_tenant, row.id, "user-1")

        assert (await fetch(store, row.id)).deleted_at is None

    @pytest.mark.asyncio
    async def test_restore_requires_deleted_row(
        self, privacy, store, tenant, notification_factory
    ):
        row = await store.create_notification(notification_factory())

        with pytest.raises(NotificationNotFoundError):
            await privacy.restore_notification(tenant, row.id, "user-1")

    @pytest.mark.asyncio
    async def test_sensitive_rows_are_audited(
        self, privacy, store, tenant, notification_factory
    ):
        row = await store.create_notification(notification_factory(sensitive_data=True))

        await privacy.soft_delete_notification(tenant, row.id, "user-1")
        await privacy.restore_notification(tenant, row.id, "user-1")

        logs = await privacy.get_audit_logs(tenant, row.id)
        assert {log.action for log in logs} == {AuditAction.DELETE, AuditAction.RESTORE}
        assert all(log.user_id == "user-1" for log in logs)

    @pytest.mark.asyncio
    async def test_plain_rows_are_not_audited(
        self, privacy, store, tenant, notification_factory
    ):
        row = await store.create_notification(notification_factory())

        await privacy.soft_delete_notification(tenant, row.id, "user-1")

        assert await privacy.get_audit_logs(tenant, row.id) == []

    @pytest.mark.asyncio
    async def test_tenant_required(self, privacy):
        with pytest.raises(TenantContextRequiredError):
            await privacy.soft_delete_notification(None, "n-1", "user-1")


class TestFlags:
    @pytest.mark.asyncio
    async def test_set_retention_date(
        self, privacy, store, tenant, fixed_now, notification_factory
    ):
        row = await store.create_notification(notification_factory())

        updated = await privacy.set_retention_date(tenant, row.id, "user-1", fixed_now)

        assert updated.retention_date == fixed_now

    @pytest.mark.asyncio
    async def test_mark_as_sensitive_is_audited(
        self, privacy, store, tenant, notification_factory
    ):
        row = await store.create_notification(notification_factory())

        updated = await privacy.mark_as_sensitive(tenant, row.id, "user-1")

        assert updated.sensitive_data is True
        (log,) = await privacy.get_audit_logs(tenant, row.id)
        assert log.action == AuditAction.UPDATE
        assert log.metadata == {"sensitive_data": True}

    @pytest.mark.asyncio
    async def test_create_audit_log_records_request_details(
        self, privacy, tenant
    ):
        log = await privacy.create_audit_log(
            tenant,
            "n-1",
            AuditAction.READ,
            user_id="user-1",
            ip_address="203.0.113.7",
            user_agent="pytest",
        )

        assert log.tenant_id == "tenant-1"
        assert log.ip_address == "203.0.113.7"


class TestPrivacyFilters:
    @pytest.mark.asyncio
    async def test_include_deleted_and_sensitive_only(
        self, privacy, store, tenant, fixed_now, notification_factory
    ):
        await store.create_notification(notification_factory())
        await store.create_notification(notification_factory(sensitive_data=True))
        await store.create_notification(notification_factory(deleted_at=fixed_now))

        default = await privacy.get_notifications_with_privacy_filters(tenant, "user-1")
        with_deleted = await privacy.get_notifications_with_privacy_filters(
            tenant, "user-1", include_deleted=True
        )
        sensitive = await privacy.get_notifications_with_privacy_filters(
            tenant, "user-1", sensitive_only=True
        )

        assert default.total == 2
        assert with_deleted.total == 3
        assert sensitive.total == 1

    @pytest.mark.asyncio
    async def test_pagination(self, privacy, store, tenant, notification_factory):
        for _ in range(3):
            await store.create_notification(notification_factory())

        page = await privacy.get_notifications_with_privacy_filters(
            tenant, "user-1", page=2, limit=2
        )

        assert len(page.notifications) == 1
        assert page.total_pages == 2


class TestRetention:
    @pytest.mark.asyncio
    async def test_enforce_retention_policy(
        self, privacy, store, fixed_now, notification_factory
    ):
        lapsed = await store.create_notification(
            notification_factory(retention_date=fixed_now - timedelta(days=1))
        )
        future = await store.create_notification(
            notification_factory(
                created_at=fixed_now - timedelta(days=200),
                retention_date=fixed_now + timedelta(days=1),
            )
        )
        old = await store.create_notification(
            notification_factory(
                tenant_id="tenant-2", created_at=fixed_now - timedelta(days=91)
            )
        )
        recent = await store.create_notification(
            notification_factory(created_at=fixed_now - timedelta(days=10))
        )

        deleted = await privacy.enforce_retention_policy(now=fixed_now)

        assert deleted == 2
        assert (await fetch(store, lapsed.id)).deleted_by == "system"
        assert (await fetch(store, old.id, "tenant-2")).deleted_at == fixed_now
        assert (await fetch(store, future.id)).deleted_at is None
        assert (await fetch(store, recent.id)).deleted_at is None

    @pytest.mark.asyncio
    async def test_retention_audits_sensitive_rows(
        self, privacy, store, tenant, fixed_now, notification_factory
    ):
        row = await store.create_notification(
            notification_factory(
                sensitive_data=True, retention_date=fixed_now - timedelta(hours=1)
            )
        )

        await privacy.enforce_retention_policy(now=fixed_now)

        (log,) = await privacy.get_audit_logs(tenant, row.id)
        assert log.action == AuditAction.DELETE
        assert log.user_id == "system"
        assert log.metadata == {"reason": "retention_policy"}

    @pytest.mark.asyncio
    async def test_already_deleted_rows_are_left_alone(
        self, privacy, store, fixed_now, notification_factory
    ):
        await store.create_notification(
            notification_factory(
                deleted_at=fixed_now - timedelta(days=5),
                retention_date=fixed_now - timedelta(days=1),
            )
        )

        assert await privacy.enforce_retention_policy(now=fixed_now) == 0

    @pytest.mark.asyncio
    async def test_cleanup_audit_logs(self, privacy, store, tenant, fixed_now):
        await store.create_audit_log(
            AuditLog(
                tenant_id="tenant-1",
                notification_id="n-1",
                action=AuditAction.READ,
                created_at=fixed_now - timedelta(days=400),
            )
        )
        await store.create_audit_log(
            AuditLog(
                tenant_id="tenant-1",
                notification_id="n-1",
                action=AuditAction.READ,
                created_at=fixed_now - timedelta(days=30),
            )
        )

        assert await privacy.cleanup_audit_logs(now=fixed_now) == 1
        assert len(await privacy.get_audit_logs(tenant, "n-1")) == 1
