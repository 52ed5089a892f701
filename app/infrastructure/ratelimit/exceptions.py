"""Rate limiting exceptions."""

from infrastructure.notifications.exceptions import NotificationError


class RateLimitExceededError(NotificationError):
    """Throttling signal raised when a rate-limit domain denies a request.

    Attributes:
        retry_after: Seconds until the caller may retry
        limit: Maximum requests allowed in the window
        reset_time: Epoch milliseconds when the window resets
    """

    def __init__(self, retry_after: int, limit: int, reset_time: int):
        self.retry_after = retry_after
        self.limit = limit
        self.reset_time = reset_time
        super().__init__(f"Rate limit exceeded. Retry after {retry_after} seconds")
