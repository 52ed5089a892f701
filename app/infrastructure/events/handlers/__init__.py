"""Event handlers for the domain event bus."""

from infrastructure.events.handlers.notifications import NotificationEventHandlers

__all__ = ["NotificationEventHandlers"]
