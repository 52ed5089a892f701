"""Custom log processors for structured logging.

Usage:
    from infrastructure.logging.formatters import mask_sensitive_data

Dependencies:
    - structlog processors
"""

from typing import Any


# Keys whose values are masked in logs. Provider credentials and recipient
# contact details both appear in delivery logs.
SENSITIVE_PATTERNS = frozenset(
    {
        "password",
        "secret",
        "token",
        "api_key",
        "apikey",
        "authorization",
        "credential",
        "private_key",
        "phone",
        "recipient",
    }
)


def mask_sensitive_data(
    mask_value: str = "***REDACTED***",
    additional_patterns: frozenset[str] | None = None,
):
    """Create a processor that masks sensitive data in log entries.

    Values are masked for keys that contain any sensitive pattern
    (case-insensitive matching).

    Args:
        mask_value: The string to replace sensitive values with.
        additional_patterns: Extra patterns to consider sensitive.

    Returns:
        A structlog processor function.
    """
    patterns = SENSITIVE_PATTERNS
    if additional_patterns:
        patterns = patterns | additional_patterns

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        masked_dict = {}
        for key, value in event_dict.items():
            key_lower = key.lower()
            is_sensitive = any(pattern in key_lower for pattern in patterns)
            if is_sensitive and value is not None:
                masked_dict[key] = mask_value
            else:
                masked_dict[key] = value
        return masked_dict

    return processor


def truncate_large_values(max_length: int = 500):
    """Create a processor that truncates overly large string values.

    Notification bodies can be long; this keeps a single log entry bounded.

    Args:
        max_length: Maximum string length before truncation.

    Returns:
        A structlog processor function.
    """

    def processor(
        logger: Any, method_name: str, event_dict: dict[str, Any]
    ) -> dict[str, Any]:
        for key, value in event_dict.items():
            if isinstance(value, str) and len(value) > max_length:
                event_dict[key] = (
                    value[:max_length] + f"...[truncated, {len(value)} chars total]"
                )
        return event_dict

    return processor
