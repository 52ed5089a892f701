"""Shared fixtures for the notification engine test suite.

Provides:
- FakeRedis: in-process stand-in for redis.asyncio with the commands the
  rate limiter, the Redis job queue and the realtime publisher use
- Tenant, store, directory and payload factories
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from infrastructure.notifications.models import NotificationPayload
from infrastructure.persistence import (
    InMemoryNotificationStore,
    InMemoryUserDirectory,
    Notification,
    NotificationType,
    UserContact,
)
from infrastructure.tenancy import TenantContext


class FakePipeline:
    """Queues commands and runs them in order on ``execute``."""

    def __init__(self, redis: "FakeRedis"):
        self.redis = redis
        self.commands: List[tuple] = []

    async def __aenter__(self) -> "FakePipeline":
        return self

    async def __aexit__(self, *exc_info) -> bool:
        self.commands = []
        return False

    def __getattr__(self, name: str):
        method = getattr(self.redis, name)

        def queue(*args, **kwargs):
            self.commands.append((method, args, kwargs))
            return self

        return queue

    async def execute(self) -> List[Any]:
        results = []
        for method, args, kwargs in self.commands:
            results.append(await method(*args, **kwargs))
        self.commands = []
        return results


class FakeRedis:
    """Async Redis double.

    Attributes:
        fail: When True every command raises redis ConnectionError
        ttls: Last TTL set per key (seconds)
        published: (channel, message) pairs sent with ``publish``
    """

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.strings: Dict[str, str] = {}
        self.hashes: Dict[str, Dict[str, str]] = {}
        self.zsets: Dict[str, Dict[str, float]] = {}
        self.lists: Dict[str, List[str]] = {}
        self.ttls: Dict[str, int] = {}
        self.published: List[tuple] = []

    def _check(self) -> None:
        if self.fail:
            raise RedisConnectionError("Connection refused")

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    async def ping(self) -> bool:
        self._check()
        return True

    async def aclose(self) -> None:
        return None

    # Strings

    async def set(self, key, value, nx: bool = False, ex: Optional[int] = None):
        self._check()
        if nx and key in self.strings:
            return None
        self.strings[key] = value
        if ex is not None:
            self.ttls[key] = ex
        return True

    async def get(self, key):
        self._check()
        return self.strings.get(key)

    async def delete(self, *keys) -> int:
        self._check()
        removed = 0
        for key in keys:
            for store in (self.strings, self.hashes, self.zsets, self.lists):
                if key in store:
                    del store[key]
                    removed += 1
        return removed

    async def expire(self, key, seconds: int) -> bool:
        self._check()
        self.ttls[key] = seconds
        return True

    # Hashes

    async def hsetnx(self, key, field, value) -> int:
        self._check()
        table = self.hashes.setdefault(key, {})
        if field in table:
            return 0
        table[field] = value
        return 1

    async def hset(self, key, field, value) -> int:
        self._check()
        table = self.hashes.setdefault(key, {})
        created = 0 if field in table else 1
        table[field] = value
        return created

    async def hget(self, key, field):
        self._check()
        return self.hashes.get(key, {}).get(field)

    async def hvals(self, key) -> List[str]:
        self._check()
        return list(self.hashes.get(key, {}).values())

    async def hdel(self, key, *fields) -> int:
        self._check()
        table = self.hashes.get(key, {})
        return sum(1 for field in fields if table.pop(field, None) is not None)

    # Sorted sets

    async def zadd(self, key, mapping: Dict[str, float]) -> int:
        self._check()
        zset = self.zsets.setdefault(key, {})
        added = sum(1 for member in mapping if member not in zset)
        zset.update(mapping)
        return added

    async def zrem(self, key, *members) -> int:
        self._check()
        zset = self.zsets.get(key, {})
        removed = 0
        for member in members:
            if zset.pop(member, None) is not None:
                removed += 1
        return removed

    async def zcard(self, key) -> int:
        self._check()
        return len(self.zsets.get(key, {}))

    async def zremrangebyscore(self, key, min_score, max_score) -> int:
        self._check()
        zset = self.zsets.get(key, {})
        doomed = [m for m, s in zset.items() if min_score <= s <= max_score]
        for member in doomed:
            del zset[member]
        return len(doomed)

    async def zrangebyscore(
        self, key, min_score, max_score, start: Optional[int] = None, num: Optional[int] = None
    ) -> List[str]:
        self._check()
        zset = self.zsets.get(key, {})
        members = sorted(
            (m for m, s in zset.items() if min_score <= s <= max_score),
            key=lambda m: (zset[m], m),
        )
        if start is not None and num is not None:
            members = members[start : start + num]
        return members

    # Lists

    async def rpush(self, key, *values) -> int:
        self._check()
        items = self.lists.setdefault(key, [])
        items.extend(values)
        return len(items)

    async def lrange(self, key, start: int, end: int) -> List[str]:
        self._check()
        items = self.lists.get(key, [])
        stop = None if end == -1 else end + 1
        return items[start:stop]

    async def llen(self, key) -> int:
        self._check()
        return len(self.lists.get(key, []))

    async def ltrim(self, key, start: int, end: int) -> bool:
        self._check()
        items = self.lists.get(key, [])
        stop = None if end == -1 else end + 1
        self.lists[key] = items[start:stop]
        return True

    # Pub/sub

    async def publish(self, channel, message) -> int:
        self._check()
        self.published.append((channel, message))
        return 1


@pytest.fixture
def fake_redis():
    """Working FakeRedis instance."""
    return FakeRedis()


@pytest.fixture
def broken_redis():
    """FakeRedis whose every command raises ConnectionError."""
    return FakeRedis(fail=True)


@pytest.fixture
def tenant():
    return TenantContext("tenant-1")


@pytest.fixture
def other_tenant():
    return TenantContext("tenant-2")


@pytest.fixture
def store():
    return InMemoryNotificationStore()


@pytest.fixture
def user_factory():
    """Factory for creating UserContact instances.

    Example:
        user = user_factory(user_id="user-2", phone_number=None)
    """

    def _factory(
        user_id: str = "user-1",
        tenant_id: str = "tenant-1",
        email: Optional[str] = "ada@example.com",
        phone_number: Optional[str] = "+15551234567",
        first_name: Optional[str] = "Ada",
        last_name: Optional[str] = "Lovelace",
    ) -> UserContact:
        return UserContact(
            user_id=user_id,
            tenant_id=tenant_id,
            email=email,
            phone_number=phone_number,
            first_name=first_name,
            last_name=last_name,
        )

    return _factory


@pytest.fixture
def directory(user_factory):
    """Directory holding user-1 in tenant-1."""
    return InMemoryUserDirectory([user_factory()])


@pytest.fixture
def payload_factory():
    """Factory for creating NotificationPayload instances.

    Example:
        payload = payload_factory(category="security", title="New sign-in")
    """

    def _factory(**overrides: Any) -> NotificationPayload:
        fields = {
            "user_id": "user-1",
            "category": "project",
            "type": NotificationType.INFO,
            "title": "Project created",
            "message": 'Project "Apollo" has been created.',
        }
        fields.update(overrides)
        return NotificationPayload(**fields)

    return _factory


@pytest.fixture
def notification_factory():
    """Factory for creating Notification records to seed a store.

    Example:
        await store.create_notification(notification_factory(title="Hi"))
    """

    def _factory(**overrides: Any) -> Notification:
        fields = {
            "tenant_id": "tenant-1",
            "user_id": "user-1",
            "category": "project",
            "type": NotificationType.INFO,
            "title": "Project created",
            "message": 'Project "Apollo" has been created.',
        }
        fields.update(overrides)
        return Notification(**fields)

    return _factory


@pytest.fixture
def fixed_now():
    return datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
