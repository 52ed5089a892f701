"""Rate limit result models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a rate-limit check.

    Attributes:
        allowed: Whether the request may proceed
        remaining: Requests left in the current window
        reset_time: Epoch milliseconds when the window resets
        total_hits: Requests counted in the window, including this one if allowed
    """

    allowed: bool
    remaining: int
    reset_time: int
    total_hits: int

    def retry_after_seconds(self, now_ms: int) -> int:
        """Seconds until the window resets, never below one."""
        delta = self.reset_time - now_ms
        return max(1, -(-delta // 1000))
