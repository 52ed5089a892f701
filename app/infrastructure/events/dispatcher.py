"""Event bus for domain events.

Handlers subscribe per event type and are invoked in subscription order
when an event is published. A failing handler is logged and skipped; the
remaining handlers still run. Handlers may be plain functions or
coroutine functions.
"""

import inspect
from typing import Any, Callable, Dict, List

from infrastructure.events.models import Event
from infrastructure.logging import get_module_logger

logger = get_module_logger()

EventHandler = Callable[[Event], Any]


class EventBus:
    def __init__(self) -> None:
        self._handlers: Dict[str, List[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Register a handler for an event type."""
        self._handlers.setdefault(event_type, []).append(handler)
        logger.debug(
            "registered_event_handler",
            handler=getattr(handler, "__name__", "unknown"),
            event_type=event_type,
            total_handlers=len(self._handlers[event_type]),
        )

    def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        handlers = self._handlers.get(event_type, [])
        if handler in handlers:
            handlers.remove(handler)
            return True
        return False

    async def publish(self, event: Event) -> List[Any]:
        """Dispatch an event to all handlers for its type.

        Args:
            event: The event to dispatch.

        Returns:
            List of return values from the handlers that succeeded.
        """
        results = []
        handlers = list(self._handlers.get(event.event_type, []))

        logger.info(
            "dispatching_event",
            event_type=event.event_type,
            handler_count=len(handlers),
            tenant_id=event.tenant_id,
            correlation_id=str(event.correlation_id),
        )

        for handler in handlers:
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    result = await result
                results.append(result)
            except Exception as e:
                logger.error(
                    "event_handler_failed",
                    handler=getattr(handler, "__name__", "unknown"),
                    event_type=event.event_type,
                    error=str(e),
                    correlation_id=str(event.correlation_id),
                    exc_info=True,
                )

        return results

    def get_registered_events(self) -> List[str]:
        return [event_type for event_type, h in self._handlers.items() if h]

    def get_handlers_for_event(self, event_type: str) -> List[EventHandler]:
        return list(self._handlers.get(event_type, []))

    def clear_handlers(self) -> None:
        """Clear all registered handlers."""
        self._handlers.clear()
        logger.debug("cleared_all_event_handlers")
