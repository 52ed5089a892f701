"""Structured logging infrastructure.

This package provides centralized logging configuration and utilities
for the notification engine using structlog.

Public API:
    - configure_logging(): Initialize logging for the application
    - get_module_logger(): Get a logger for the calling module
    - bind_job_context(): Context manager for tenant/job scoped logging
    - get_correlation_id(): Get current correlation ID from context
    - clear_job_context(): Clear all bound context

Processors:
    - mask_sensitive_data(): Redact credentials and contact details
    - truncate_large_values(): Limit string lengths

Example:
    from infrastructure.logging import (
        configure_logging,
        get_module_logger,
        bind_job_context,
    )

    configure_logging()

    logger = get_module_logger()
    with bind_job_context(tenant_id="tenant-1", job_id="email-123"):
        logger.info("queue_processing_started")
"""

from infrastructure.logging.setup import (
    configure_logging,
    get_module_logger,
)

from infrastructure.logging.context import (
    bind_job_context,
    clear_job_context,
    get_correlation_id,
)

from infrastructure.logging.formatters import (
    mask_sensitive_data,
    truncate_large_values,
    SENSITIVE_PATTERNS,
)

__all__ = [
    "configure_logging",
    "get_module_logger",
    "bind_job_context",
    "clear_job_context",
    "get_correlation_id",
    "mask_sensitive_data",
    "truncate_large_values",
    "SENSITIVE_PATTERNS",
]
