"""Domain event system - in-process event bus.

The event bus delivers domain events (user, project, access, security,
system and billing) to subscribed handlers, most notably the notification
handlers that turn events into notifications.

Usage:

    from infrastructure.events import Event, EventBus, EventTypes

    bus = EventBus()

    async def on_user_created(event: Event) -> None:
        ...

    bus.subscribe(EventTypes.USER_CREATED, on_user_created)

    await bus.publish(
        Event(
            event_type=EventTypes.USER_CREATED,
            tenant_id="tenant-1",
            user_id="user-1",
            metadata={"user_name": "Ada"},
        )
    )
"""

from infrastructure.events.dispatcher import EventBus, EventHandler
from infrastructure.events.models import Event, EventTypes

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "EventTypes",
]
