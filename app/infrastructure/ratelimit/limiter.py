"""Redis-backed sliding-window rate limiter.

Each key is a sorted set of ``"{now_ms}-{random}"`` members scored by their
millisecond timestamp. A check trims entries older than the window, counts
what is left, adds the current request and refreshes the key's TTL, all in
one transactional pipeline.

If Redis cannot be reached the limiter fails open: the request is allowed
and the error is logged.

Usage:
    from infrastructure.ratelimit import RateLimitConfig, SlidingWindowRateLimiter

    limiter = SlidingWindowRateLimiter(redis_client)
    result = await limiter.check_rate_limit(
        "tenant-1", RateLimitConfig(60000, 100, "tenant_rate_limit:tenant-1")
    )
    if not result.allowed:
        ...
"""

import math
import secrets
import time
from typing import Callable, Optional

from redis.asyncio import Redis

from infrastructure.logging import get_module_logger
from infrastructure.ratelimit.config import RateLimitConfig
from infrastructure.ratelimit.models import RateLimitResult

logger = get_module_logger()


def _now_ms() -> int:
    return int(time.time() * 1000)


class SlidingWindowRateLimiter:
    """Sliding-window counter shared by every rate-limit domain.

    Attributes:
        redis: redis.asyncio client holding the sorted sets
        clock: Callable returning the current time in epoch milliseconds
    """

    def __init__(self, redis: Redis, clock: Optional[Callable[[], int]] = None):
        self.redis = redis
        self.clock = clock or _now_ms

    async def check_rate_limit(
        self, key: str, config: RateLimitConfig
    ) -> RateLimitResult:
        """Count this request against the window and decide whether it may proceed.

        The count is taken before the new entry is added. A denied request
        has its entry removed again so it does not count against later
        windows.

        Args:
            key: Identifier within the domain (user id, tenant id, ...)
            config: Window, limit and key prefix for the domain

        Returns:
            RateLimitResult. Always allowed when the counting pipeline fails.
        """
        now = self.clock()
        window = config.window_ms
        limit = config.max_requests
        redis_key = config.redis_key(key)
        member = f"{now}-{secrets.token_hex(8)}"

        try:
            async with self.redis.pipeline(transaction=True) as pipe:
                pipe.zremrangebyscore(redis_key, 0, now - window)
                pipe.zcard(redis_key)
                pipe.zadd(redis_key, {member: now})
                pipe.expire(redis_key, math.ceil(window / 1000))
                results = await pipe.execute()
        except Exception as e:
            logger.error(
                "rate_limit_check_failed",
                redis_key=redis_key,
                error=str(e),
                exc_info=True,
            )
            return RateLimitResult(
                allowed=True,
                remaining=limit - 1,
                reset_time=now + window,
                total_hits=1,
            )

        current_count = int(results[1])
        allowed = current_count < limit

        if not allowed:
            # The count already says deny; a failed cleanup must not flip it
            try:
                await self.redis.zrem(redis_key, member)
            except Exception as e:
                logger.warning(
                    "rate_limit_entry_removal_failed",
                    redis_key=redis_key,
                    error=str(e),
                    exc_info=True,
                )

        logger.debug(
            "rate_limit_checked",
            redis_key=redis_key,
            current_count=current_count,
            limit=limit,
            allowed=allowed,
        )

        return RateLimitResult(
            allowed=allowed,
            remaining=max(0, limit - current_count - (1 if allowed else 0)),
            reset_time=now + window,
            total_hits=current_count + (1 if allowed else 0),
        )

    async def reset_rate_limit(self, key: str, key_prefix: str) -> None:
        """Delete the window for a key. Errors are logged, not raised."""
        redis_key = f"{key_prefix}:{key}"
        try:
            await self.redis.delete(redis_key)
            logger.debug("rate_limit_reset", redis_key=redis_key)
        except Exception as e:
            logger.error(
                "rate_limit_reset_failed",
                redis_key=redis_key,
                error=str(e),
                exc_info=True,
            )

    async def get_rate_limit_status(
        self, key: str, config: RateLimitConfig
    ) -> RateLimitResult:
        """Read the current window without counting a request."""
        now = self.clock()
        redis_key = config.redis_key(key)

        try:
            await self.redis.zremrangebyscore(redis_key, 0, now - config.window_ms)
            current_count = int(await self.redis.zcard(redis_key))
            return RateLimitResult(
                allowed=current_count < config.max_requests,
                remaining=max(0, config.max_requests - current_count),
                reset_time=now + config.window_ms,
                total_hits=current_count,
            )
        except Exception as e:
            logger.error(
                "rate_limit_status_failed",
                redis_key=redis_key,
                error=str(e),
                exc_info=True,
            )
            return RateLimitResult(
                allowed=True,
                remaining=config.max_requests,
                reset_time=now + config.window_ms,
                total_hits=0,
            )
