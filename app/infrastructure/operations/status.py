"""Operation status enumeration.

Classifies the outcome of directory lookups, provider calls and provider
configuration checks so callers can decide between skipping, retrying and
failing permanently.
"""

from enum import Enum


class OperationStatus(Enum):
    """Status codes for operation results.

    Attributes:
        SUCCESS: Operation completed successfully
        TRANSIENT_ERROR: Retryable error (network, timeout, rate limit, 5xx)
        PERMANENT_ERROR: Non-retryable error (validation, bad request)
        UNAUTHORIZED: Provider rejected the credentials
        NOT_FOUND: User, contact detail or resource not found
    """

    SUCCESS = "success"
    TRANSIENT_ERROR = "transient_error"
    PERMANENT_ERROR = "permanent_error"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
