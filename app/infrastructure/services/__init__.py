"""
Engine wiring services.

Provides the cached settings provider and the composition root that builds
a fully wired notification engine.
"""

from infrastructure.services.bootstrap import (
    NotificationEngine,
    build_notification_engine,
)
from infrastructure.services.providers import get_settings

__all__ = [
    "NotificationEngine",
    "build_notification_engine",
    "get_settings",
]
