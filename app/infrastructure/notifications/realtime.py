"""Real-time push to connected user sessions.

The WebSocket gateway lives outside this package; the engine publishes
events to a Redis pub/sub channel per user and the gateway relays them.
Publishing is fire-and-forget: callers log failures and carry on.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Protocol, Tuple

from redis.asyncio import Redis

from infrastructure.logging import get_module_logger

logger = get_module_logger()


def user_channel(user_id: str) -> str:
    return f"notifications:user:{user_id}"


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, "value"):
        return value.value
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class RealtimePublisher(Protocol):
    async def emit_to_user(self, user_id: str, event: str, data: Dict[str, Any]) -> None: ...

    async def emit_unread_count(self, user_id: str, count: int) -> None: ...


class RedisRealtimePublisher:
    """Publishes JSON events to ``notifications:user:{user_id}``."""

    def __init__(self, redis: Redis):
        self.redis = redis

    async def emit_to_user(self, user_id: str, event: str, data: Dict[str, Any]) -> None:
        message = json.dumps({"event": event, "data": data}, default=_default)
        receivers = await self.redis.publish(user_channel(user_id), message)
        logger.debug(
            "realtime_event_published",
            user_id=user_id,
            realtime_event=event,
            receivers=receivers,
        )

    async def emit_unread_count(self, user_id: str, count: int) -> None:
        await self.emit_to_user(user_id, "unread_count", {"count": count})


class InMemoryRealtimePublisher:
    """Records published events; used when no Redis is configured and in tests."""

    def __init__(self) -> None:
        self.events: List[Tuple[str, str, Dict[str, Any]]] = []

    async def emit_to_user(self, user_id: str, event: str, data: Dict[str, Any]) -> None:
        self.events.append((user_id, event, data))

    async def emit_unread_count(self, user_id: str, count: int) -> None:
        await self.emit_to_user(user_id, "unread_count", {"count": count})
