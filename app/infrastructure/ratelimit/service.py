"""Rate limit domains and enforcement.

Maps each rate-limit domain to its window configuration from
RateLimitSettings and turns denied checks into RateLimitExceededError.
"""

from enum import Enum
from typing import Optional

from infrastructure.configuration.infrastructure import RateLimitSettings
from infrastructure.logging import get_module_logger
from infrastructure.ratelimit.config import RateLimitConfig
from infrastructure.ratelimit.exceptions import RateLimitExceededError
from infrastructure.ratelimit.limiter import SlidingWindowRateLimiter
from infrastructure.ratelimit.models import RateLimitResult

logger = get_module_logger()

TENANT_MANAGEMENT_PREFIX = "tenant_management_rate_limit"


class RateLimitDomain(Enum):
    """Independent rate-limit domains sharing the sliding-window algorithm."""

    TENANT = "tenant"
    USER = "user"
    NOTIFICATION = "notification"
    TENANT_CREATION = "tenant_creation"
    TENANT_JOINING = "tenant_joining"
    INVITATION_ACCEPTANCE = "invitation_acceptance"


class RateLimitService:
    """Builds per-domain configs and enforces them.

    Usage:
        service = RateLimitService(limiter, settings.rate_limits)
        await service.check_notification_rate_limit(tenant_id, user_id, "security")
    """

    def __init__(
        self, limiter: SlidingWindowRateLimiter, settings: RateLimitSettings
    ):
        self.limiter = limiter
        self.settings = settings

    def get_config(self, domain: RateLimitDomain, scope: str = "") -> RateLimitConfig:
        """Return the window config for a domain.

        Args:
            domain: Rate limit domain
            scope: Key prefix scope (tenant id, or ``user_id:category`` for
                per-category notification limits). Ignored by the tenant
                management domains, which share one prefix.
        """
        s = self.settings
        if domain == RateLimitDomain.TENANT:
            return RateLimitConfig(
                s.tenant_window_ms, s.tenant_max_requests, f"tenant_rate_limit:{scope}"
            )
        if domain == RateLimitDomain.USER:
            return RateLimitConfig(
                s.user_window_ms, s.user_max_requests, f"user_rate_limit:{scope}"
            )
        if domain == RateLimitDomain.NOTIFICATION:
            return RateLimitConfig(
                s.notification_window_ms,
                s.notification_max_requests,
                f"notification_rate_limit:{scope}",
            )
        if domain == RateLimitDomain.TENANT_CREATION:
            return RateLimitConfig(
                s.tenant_creation_window_ms,
                s.tenant_creation_max_requests,
                TENANT_MANAGEMENT_PREFIX,
            )
        if domain == RateLimitDomain.TENANT_JOINING:
            return RateLimitConfig(
                s.tenant_joining_window_ms,
                s.tenant_joining_max_requests,
                TENANT_MANAGEMENT_PREFIX,
            )
        return RateLimitConfig(
            s.invitation_acceptance_window_ms,
            s.invitation_acceptance_max_requests,
            TENANT_MANAGEMENT_PREFIX,
        )

    async def enforce(
        self, domain: RateLimitDomain, key: str, scope: str = ""
    ) -> RateLimitResult:
        """Count a request and raise if the domain denies it.

        Raises:
            RateLimitExceededError: With retry_after in whole seconds
        """
        config = self.get_config(domain, scope)
        result = await self.limiter.check_rate_limit(key, config)
        if not result.allowed:
            retry_after = result.retry_after_seconds(self.limiter.clock())
            logger.warning(
                "rate_limit_exceeded",
                domain=domain.value,
                key_prefix=config.key_prefix,
                limit=config.max_requests,
                retry_after=retry_after,
            )
            raise RateLimitExceededError(
                retry_after=retry_after,
                limit=config.max_requests,
                reset_time=result.reset_time,
            )
        return result

    async def check_tenant_rate_limit(self, tenant_id: str) -> RateLimitResult:
        return await self.enforce(RateLimitDomain.TENANT, "notifications", tenant_id)

    async def check_user_rate_limit(self, tenant_id: str, user_id: str) -> RateLimitResult:
        return await self.enforce(RateLimitDomain.USER, user_id, tenant_id)

    async def check_notification_rate_limit(
        self, tenant_id: str, user_id: str, category: str
    ) -> RateLimitResult:
        return await self.enforce(
            RateLimitDomain.NOTIFICATION, tenant_id, f"{user_id}:{category}"
        )

    async def check_tenant_creation(self, user_id: str) -> RateLimitResult:
        return await self.enforce(
            RateLimitDomain.TENANT_CREATION, f"tenant_creation:{user_id}"
        )

    async def check_tenant_joining(self, user_id: str) -> RateLimitResult:
        return await self.enforce(
            RateLimitDomain.TENANT_JOINING, f"tenant_joining:{user_id}"
        )

    async def check_invitation_acceptance(self, user_id: str) -> RateLimitResult:
        return await self.enforce(
            RateLimitDomain.INVITATION_ACCEPTANCE, f"invitation_acceptance:{user_id}"
        )

    async def get_status(
        self, domain: RateLimitDomain, key: str, scope: str = ""
    ) -> RateLimitResult:
        """Read a domain's window for a key without counting a request."""
        return await self.limiter.get_rate_limit_status(
            key, self.get_config(domain, scope)
        )

    async def reset(
        self, domain: RateLimitDomain, key: str, scope: Optional[str] = ""
    ) -> None:
        config = self.get_config(domain, scope or "")
        await self.limiter.reset_rate_limit(key, config.key_prefix)
