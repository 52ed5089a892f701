"""Infrastructure modules for the notification engine.

Centralized infrastructure components:
- configuration: Settings management (settings, QueueSettings, RateLimitSettings)
- logging: Structured logging (get_module_logger, bind_job_context)
- operations: Operation results and error classification
- tenancy: Explicit tenant context
- persistence: Record store protocol, models and in-memory store
- queue: Durable job queues and workers
- ratelimit: Sliding-window rate limiting
- events: In-process event bus and domain event handlers
- notifications: Channels, dispatcher, providers and job processors
- services: Engine wiring (build_notification_engine, get_settings)
"""

# Configuration
from infrastructure.configuration import settings

# Logging
from infrastructure.logging import get_module_logger

# Operations
from infrastructure.operations.result import OperationResult
from infrastructure.operations.status import OperationStatus

__all__ = [
    # Configuration
    "settings",
    # Logging
    "get_module_logger",
    # Operations
    "OperationResult",
    "OperationStatus",
]
