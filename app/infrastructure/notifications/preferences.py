"""Preference resolver.

Decides which channels are enabled for a (tenant, user, category). When no
preference row exists the system default applies: in-app and email on, SMS
off. Enabled channels are always returned in the fixed order IN_APP, EMAIL,
SMS so downstream processing is deterministic.
"""

from typing import List, Optional, Sequence

from infrastructure.logging import get_module_logger
from infrastructure.persistence.models import (
    CHANNEL_ORDER,
    ChannelType,
    NotificationPreference,
)
from infrastructure.persistence.store import NotificationStore
from infrastructure.tenancy import TenantContext, require_tenant

logger = get_module_logger()

DEFAULT_CHANNELS = (ChannelType.IN_APP, ChannelType.EMAIL)
DEFAULT_CATEGORIES = ("user_activity", "system", "invoice", "project", "security")

PREFERENCE_DEFAULTS = {
    "in_app_enabled": True,
    "email_enabled": True,
    "sms_enabled": False,
}


def enabled_channels(preference: NotificationPreference) -> List[ChannelType]:
    flags = {
        ChannelType.IN_APP: preference.in_app_enabled,
        ChannelType.EMAIL: preference.email_enabled,
        ChannelType.SMS: preference.sms_enabled,
    }
    return [channel for channel in CHANNEL_ORDER if flags[channel]]


class PreferenceResolver:
    """Per tenant, user and category channel enablement.

    Attributes:
        store: Record store holding preference rows
        default_categories: Categories seeded for new users
    """

    def __init__(
        self,
        store: NotificationStore,
        default_categories: Optional[Sequence[str]] = None,
    ):
        self.store = store
        self.default_categories = list(default_categories or DEFAULT_CATEGORIES)

    async def get_enabled_channels(
        self, tenant: TenantContext, user_id: str, category: str
    ) -> List[ChannelType]:
        tenant_id = require_tenant(tenant)
        preference = await self.store.get_preference(tenant_id, user_id, category)
        if preference is None:
            return list(DEFAULT_CHANNELS)
        return enabled_channels(preference)

    async def update_preference(
        self,
        tenant: TenantContext,
        user_id: str,
        category: str,
        in_app_enabled: Optional[bool] = None,
        email_enabled: Optional[bool] = None,
        sms_enabled: Optional[bool] = None,
    ) -> NotificationPreference:
        """Upsert a preference row.

        Unspecified flags keep their stored value on update and take the
        system defaults on create.
        """
        tenant_id = require_tenant(tenant)
        update = {
            name: value
            for name, value in (
                ("in_app_enabled", in_app_enabled),
                ("email_enabled", email_enabled),
                ("sms_enabled", sms_enabled),
            )
            if value is not None
        }
        create = {**PREFERENCE_DEFAULTS, **update}
        preference = await self.store.upsert_preference(
            tenant_id, user_id, category, create=create, update=update
        )
        logger.info(
            "notification_preference_updated",
            tenant_id=tenant_id,
            user_id=user_id,
            category=category,
            **update,
        )
        return preference

    async def create_default_preferences(
        self, tenant: TenantContext, user_id: str
    ) -> int:
        """Seed rows for the default categories. Existing rows are left alone."""
        tenant_id = require_tenant(tenant)
        rows = [
            NotificationPreference(
                tenant_id=tenant_id,
                user_id=user_id,
                category=category,
                **PREFERENCE_DEFAULTS,
            )
            for category in self.default_categories
        ]
        created = await self.store.create_preferences(rows, skip_duplicates=True)
        logger.info(
            "default_preferences_created",
            tenant_id=tenant_id,
            user_id=user_id,
            created=created,
        )
        return created

    async def get_user_preferences(
        self, tenant: TenantContext, user_id: str
    ) -> List[NotificationPreference]:
        tenant_id = require_tenant(tenant)
        return await self.store.list_preferences(tenant_id, user_id)

    async def get_available_categories(self, tenant: TenantContext) -> List[str]:
        tenant_id = require_tenant(tenant)
        categories = await self.store.distinct_categories(tenant_id)
        return categories or list(self.default_categories)
