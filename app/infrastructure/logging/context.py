"""Job context binding for structured logging.

Binds tenant, notification and job identifiers to structlog's context
variables so every log entry emitted while a job or dispatch is in flight
carries them. This is log correlation only; services always receive the
tenant explicitly as a parameter.

Usage:
    from infrastructure.logging import bind_job_context

    with bind_job_context(tenant_id="t-1", job_id="email-n-1"):
        logger.info("queue_processing_started")

Dependencies:
    - structlog.contextvars
"""

import uuid
from contextlib import contextmanager
from typing import Any, Generator, Optional

import structlog


@contextmanager
def bind_job_context(
    correlation_id: Optional[str] = None,
    tenant_id: Optional[str] = None,
    user_id: Optional[str] = None,
    notification_id: Optional[str] = None,
    job_id: Optional[str] = None,
    **extra_context: Any,
) -> Generator[None, None, None]:
    """Bind job-scoped context to all logs within the context manager.

    Args:
        correlation_id: Unique identifier. Auto-generated if not provided.
        tenant_id: Tenant the work belongs to.
        user_id: Target user of the notification.
        notification_id: Notification being dispatched or delivered.
        job_id: Queue job identifier.
        **extra_context: Additional key-value pairs to include in logs.

    Yields:
        None - context is bound to structlog's context vars.

    Example:
        with bind_job_context(tenant_id=job.payload["tenant_id"], job_id=job.id):
            await processor.process(job)
    """
    context: dict[str, Any] = {"correlation_id": correlation_id or str(uuid.uuid4())}

    if tenant_id is not None:
        context["tenant_id"] = tenant_id
    if user_id is not None:
        context["user_id"] = user_id
    if notification_id is not None:
        context["notification_id"] = notification_id
    if job_id is not None:
        context["job_id"] = job_id

    context.update(extra_context)

    structlog.contextvars.bind_contextvars(**context)
    try:
        yield
    finally:
        structlog.contextvars.unbind_contextvars(*context.keys())


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from the logging context.

    Returns:
        The correlation ID if set, None otherwise.
    """
    ctx = structlog.contextvars.get_contextvars()
    return ctx.get("correlation_id")


def clear_job_context() -> None:
    """Clear all job-scoped context from the logging context."""
    structlog.contextvars.clear_contextvars()
