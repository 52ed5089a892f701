"""Notification service facade.

Provides a class-based interface to the notification engine for callers and
tests: rate limiting in front of the dispatcher, plus read-side operations
on a user's inbox.

Usage:
    from infrastructure.services import build_notification_engine

    engine = build_notification_engine(get_settings())
    notification = await engine.notifications.send(tenant, payload)
    page = await engine.notifications.get_user_notifications(
        tenant, "user-1", NotificationQuery(unread=True)
    )
"""

import math
from typing import Dict, Optional

from infrastructure.logging import get_module_logger
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.exceptions import NotificationNotFoundError
from infrastructure.notifications.models import (
    BulkSendResult,
    NotificationPage,
    NotificationPayload,
    NotificationQuery,
)
from infrastructure.notifications.realtime import RealtimePublisher
from infrastructure.persistence.models import Notification, utc_now
from infrastructure.persistence.store import NotificationFilter, NotificationStore
from infrastructure.ratelimit import RateLimitService
from infrastructure.tenancy import TenantContext, require_tenant

logger = get_module_logger()


class NotificationService:
    """Thin facade over the dispatcher and the record store.

    All delivery work is delegated to NotificationDispatcher. When a
    RateLimitService is provided, ``send`` enforces the tenant and
    per-category limits before anything is written.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        store: NotificationStore,
        rate_limits: Optional[RateLimitService] = None,
        realtime: Optional[RealtimePublisher] = None,
    ):
        self.dispatcher = dispatcher
        self.store = store
        self.rate_limits = rate_limits
        self.realtime = realtime

    async def send(
        self, tenant: TenantContext, payload: NotificationPayload
    ) -> Notification:
        """Rate limit, then create and dispatch a notification.

        Raises:
            TenantContextRequiredError: If the tenant context is missing
            RateLimitExceededError: If the tenant or category limit is exhausted
        """
        tenant_id = require_tenant(tenant)
        if self.rate_limits is not None:
            # Narrower limit first so a category denial spends no tenant quota
            await self.rate_limits.check_notification_rate_limit(
                tenant_id, payload.user_id, payload.category
            )
            await self.rate_limits.check_tenant_rate_limit(tenant_id)
        return await self.dispatcher.create(tenant, payload)

    async def send_to_user(
        self, tenant: TenantContext, user_id: str, **partial
    ) -> Notification:
        return await self.dispatcher.send_to_user(tenant, user_id, **partial)

    async def send_to_tenant(
        self, tenant: TenantContext, payload: NotificationPayload
    ) -> BulkSendResult:
        return await self.dispatcher.send_to_tenant(tenant, payload)

    async def mark_as_read(
        self, tenant: TenantContext, notification_id: str, user_id: str
    ) -> Notification:
        """Mark one notification read and push the new unread count.

        Raises:
            NotificationNotFoundError: If the notification does not belong to
                this user in this tenant
        """
        tenant_id = require_tenant(tenant)
        existing = await self.store.find_first_notification(
            NotificationFilter(
                tenant_id=tenant_id, user_id=user_id, notification_id=notification_id
            )
        )
        if existing is None:
            raise NotificationNotFoundError(
                f"Notification {notification_id} not found"
            )

        notification = await self.store.update_notification(
            tenant_id, notification_id, read_at=utc_now()
        )
        await self._push_unread_count(tenant, user_id)
        return notification

    async def mark_all_as_read(self, tenant: TenantContext, user_id: str) -> int:
        tenant_id = require_tenant(tenant)
        count = await self.store.update_notifications(
            NotificationFilter(tenant_id=tenant_id, user_id=user_id, unread=True),
            read_at=utc_now(),
        )
        logger.info(
            "notifications_marked_read", tenant_id=tenant_id, user_id=user_id, count=count
        )
        await self._push_unread_count(tenant, user_id)
        return count

    async def get_user_notifications(
        self,
        tenant: TenantContext,
        user_id: str,
        filters: Optional[NotificationQuery] = None,
    ) -> NotificationPage:
        """List a user's visible notifications, newest first by default.

        Soft-deleted, expired and past-retention rows are always excluded.
        """
        tenant_id = require_tenant(tenant)
        filters = filters or NotificationQuery()
        where = NotificationFilter(
            tenant_id=tenant_id,
            user_id=user_id,
            type=filters.type,
            category=filters.category,
            unread=filters.unread,
            search=filters.search,
            visible_at=utc_now(),
        )

        notifications = await self.store.find_notifications(
            where,
            sort_by=filters.sort_by,
            descending=filters.sort_order == "desc",
            skip=(filters.page - 1) * filters.limit,
            take=filters.limit,
        )
        total = await self.store.count_notifications(where)

        return NotificationPage(
            notifications=notifications,
            total=total,
            page=filters.page,
            limit=filters.limit,
            total_pages=math.ceil(total / filters.limit),
        )

    async def get_unread_count(self, tenant: TenantContext, user_id: str) -> int:
        tenant_id = require_tenant(tenant)
        return await self.store.count_notifications(
            NotificationFilter(
                tenant_id=tenant_id, user_id=user_id, unread=True, visible_at=utc_now()
            )
        )

    async def health_check(self) -> Dict[str, bool]:
        """Availability of every registered channel, keyed by channel value."""
        health = {}
        for channel in self.dispatcher.registry.get_all_channels():
            try:
                health[channel.channel_type.value] = await channel.is_available()
            except Exception as e:
                logger.error(
                    "channel_health_check_failed",
                    channel=channel.channel_type.value,
                    error=str(e),
                    exc_info=True,
                )
                health[channel.channel_type.value] = False
        return health

    async def _push_unread_count(self, tenant: TenantContext, user_id: str) -> None:
        if self.realtime is None:
            return
        count = await self.get_unread_count(tenant, user_id)
        try:
            await self.realtime.emit_unread_count(user_id, count)
        except Exception as e:
            logger.warning(
                "unread_count_push_failed", user_id=user_id, error=str(e), exc_info=True
            )
