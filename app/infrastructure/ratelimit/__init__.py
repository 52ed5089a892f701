"""Distributed sliding-window rate limiting.

Usage:
    from infrastructure.ratelimit import RateLimitService, RateLimitDomain

    await rate_limits.enforce(RateLimitDomain.TENANT_CREATION, f"tenant_creation:{user_id}")
"""

from infrastructure.ratelimit.config import RateLimitConfig
from infrastructure.ratelimit.exceptions import RateLimitExceededError
from infrastructure.ratelimit.limiter import SlidingWindowRateLimiter
from infrastructure.ratelimit.models import RateLimitResult
from infrastructure.ratelimit.service import RateLimitDomain, RateLimitService

__all__ = [
    "RateLimitConfig",
    "RateLimitDomain",
    "RateLimitExceededError",
    "RateLimitResult",
    "RateLimitService",
    "SlidingWindowRateLimiter",
]
