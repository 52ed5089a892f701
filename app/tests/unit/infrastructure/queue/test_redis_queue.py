"""Unit tests for RedisJobQueue and the queue factory."""

import json
from dataclasses import replace

import pytest

from infrastructure.queue import (
    EMAIL_QUEUE,
    InMemoryJobQueue,
    JobState,
    RedisJobQueue,
    create_job_queue,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def queue(fake_redis, queue_config, clock):
    return RedisJobQueue(EMAIL_QUEUE, fake_redis, queue_config, clock=clock)


class TestRedisJobQueue:
    @pytest.mark.asyncio
    async def test_enqueue_stores_job_and_schedules_it(self, queue, fake_redis, job_factory):
        assert await queue.enqueue(job_factory()) is True

        raw = fake_redis.hashes[f"queue:{EMAIL_QUEUE}:jobs"]["email-n-1"]
        assert json.loads(raw)["state"] == "waiting"
        assert "email-n-1" in fake_redis.zsets[f"queue:{EMAIL_QUEUE}:due"]

    @pytest.mark.asyncio
    async def test_duplicate_enqueue_is_rejected(self, queue, job_factory):
        await queue.enqueue(job_factory())

        assert await queue.enqueue(job_factory()) is False
        assert (await queue.get_stats())["waiting"] == 1

    @pytest.mark.asyncio
    async def test_fetch_due_orders_by_priority(self, queue, job_factory):
        await queue.enqueue(job_factory("email-a", priority=1))
        await queue.enqueue(job_factory("email-b", priority=10))

        jobs = await queue.fetch_due()

        assert [job.id for job in jobs] == ["email-b", "email-a"]
        assert jobs[0].payload["tenant_id"] == "tenant-1"

    @pytest.mark.asyncio
    async def test_claim_is_exclusive(self, queue, job_factory):
        await queue.enqueue(job_factory())

        assert await queue.claim("email-n-1", "worker-1", 60) is True
        assert await queue.claim("email-n-1", "worker-2", 60) is False

        job = await queue.get_job("email-n-1")
        assert job.state == JobState.ACTIVE
        assert job.claimed_by == "worker-1"
        assert await queue.fetch_due() == []

    @pytest.mark.asyncio
    async def test_complete_removes_job_from_schedule(self, queue, fake_redis, job_factory):
        await queue.enqueue(job_factory())
        await queue.claim("email-n-1", "worker-1", 60)

        await queue.complete("email-n-1")

        assert (await queue.get_job("email-n-1")).state == JobState.COMPLETED
        assert "email-n-1" not in fake_redis.zsets[f"queue:{EMAIL_QUEUE}:due"]
        assert await queue.enqueue(job_factory()) is False

    @pytest.mark.asyncio
    async def test_fail_reschedules_with_backoff(self, queue, job_factory, clock):
        await queue.enqueue(job_factory())
        await queue.claim("email-n-1", "worker-1", 60)

        state = await queue.fail("email-n-1", "timeout")

        assert state == JobState.WAITING
        assert await queue.fetch_due() == []
        clock.advance(seconds=1)
        assert [job.id for job in await queue.fetch_due()] == ["email-n-1"]
        assert await queue.claim("email-n-1", "worker-2", 60) is True

    @pytest.mark.asyncio
    async def test_exhausted_job_is_dead_lettered(self, queue, job_factory, clock):
        await queue.enqueue(job_factory())

        for _ in range(3):
            clock.advance(seconds=10)
            await queue.claim("email-n-1", "worker-1", 60)
            state = await queue.fail("email-n-1", "rejected")

        assert state == JobState.FAILED
        dead = await queue.get_dead_letters()
        assert [job.id for job in dead] == ["email-n-1"]
        assert dead[0].last_error == "rejected"
        assert (await queue.get_stats())["failed"] == 1

    @pytest.mark.asyncio
    async def test_claim_of_finished_job_fails(self, queue, job_factory):
        await queue.enqueue(job_factory())
        await queue.claim("email-n-1", "worker-1", 60)
        await queue.complete("email-n-1")

        assert await queue.claim("email-n-1", "worker-2", 60) is False

    @pytest.mark.asyncio
    async def test_completed_jobs_beyond_retention_are_pruned(
        self, fake_redis, queue_config, clock, job_factory
    ):
        config = replace(queue_config, remove_on_complete=2)
        queue = RedisJobQueue(EMAIL_QUEUE, fake_redis, config, clock=clock)
        for job_id in ("email-a", "email-b", "email-c"):
            await queue.enqueue(job_factory(job_id))
            await queue.claim(job_id, "worker-1", 60)
            await queue.complete(job_id)

        assert await queue.get_job("email-a") is None
        assert fake_redis.lists[f"queue:{EMAIL_QUEUE}:completed"] == [
            "email-b",
            "email-c",
        ]
        assert (await queue.get_stats())["completed"] == 2
        assert await queue.enqueue(job_factory("email-a")) is True
        assert await queue.enqueue(job_factory("email-c")) is False

    @pytest.mark.asyncio
    async def test_dead_letters_beyond_retention_are_pruned(
        self, fake_redis, queue_config, clock, job_factory
    ):
        config = replace(queue_config, max_attempts=1, remove_on_fail=1)
        queue = RedisJobQueue(EMAIL_QUEUE, fake_redis, config, clock=clock)
        for job_id in ("email-a", "email-b"):
            await queue.enqueue(job_factory(job_id))
            await queue.claim(job_id, "worker-1", 60)
            await queue.fail(job_id, "rejected")

        dead = await queue.get_dead_letters()
        assert [job.id for job in dead] == ["email-b"]
        assert await queue.get_job("email-a") is None

    @pytest.mark.asyncio
    async def test_ping_reports_outage(self, broken_redis, queue_config):
        queue = RedisJobQueue(EMAIL_QUEUE, broken_redis, queue_config)

        assert await queue.ping() is False


class TestCreateJobQueue:
    def test_memory_backend(self, queue_config):
        queue = create_job_queue(EMAIL_QUEUE, queue_config, "memory")

        assert isinstance(queue, InMemoryJobQueue)
        assert queue.name == EMAIL_QUEUE

    def test_redis_backend(self, queue_config, fake_redis):
        queue = create_job_queue(EMAIL_QUEUE, queue_config, "redis", fake_redis)

        assert isinstance(queue, RedisJobQueue)

    def test_redis_backend_requires_client(self, queue_config):
        with pytest.raises(ValueError, match="Redis client is required"):
            create_job_queue(EMAIL_QUEUE, queue_config, "redis")

    def test_unknown_backend(self, queue_config):
        with pytest.raises(ValueError, match="Unknown queue backend"):
            create_job_queue(EMAIL_QUEUE, queue_config, "kafka")
