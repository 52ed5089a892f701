import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from jobs.scheduled_tasks import MaintenanceScheduler, safe_run

pytestmark = pytest.mark.unit


@pytest.fixture
def privacy():
    privacy = MagicMock()
    privacy.enforce_retention_policy = AsyncMock(return_value=4)
    privacy.cleanup_audit_logs = AsyncMock(return_value=2)
    return privacy


@pytest.fixture
def scheduler(privacy, store):
    scheduler = MaintenanceScheduler(privacy, store, retention_time="02:30")
    scheduler.init()
    return scheduler


def test_init_registers_maintenance_jobs(scheduler):
    jobs = scheduler.scheduler.get_jobs()

    assert [job.job_func.__name__ for job in jobs] == [
        "enforce_retention",
        "cleanup_audit_logs",
        "heartbeat",
    ]
    assert jobs[0].unit == "days"
    assert str(jobs[0].at_time) == "02:30:00"
    assert jobs[1].start_day == "sunday"
    assert (jobs[2].interval, jobs[2].unit) == (5, "minutes")


@pytest.mark.asyncio
async def test_run_all_spawns_jobs(scheduler, privacy):
    scheduler.scheduler.run_all()
    await scheduler.drain()

    privacy.enforce_retention_policy.assert_awaited_once()
    privacy.cleanup_audit_logs.assert_awaited_once()


@pytest.mark.asyncio
async def test_failing_job_does_not_stop_others(scheduler, privacy):
    privacy.enforce_retention_policy.side_effect = RuntimeError("store unavailable")

    scheduler.scheduler.run_all()
    await scheduler.drain()

    privacy.cleanup_audit_logs.assert_awaited_once()


@pytest.mark.asyncio
async def test_job_results(scheduler):
    assert await scheduler.enforce_retention() == 4
    assert await scheduler.cleanup_audit_logs() == 2
    assert await scheduler.heartbeat() is True


@pytest.mark.asyncio
async def test_safe_run_returns_none_on_error():
    async def broken():
        raise ValueError("boom")

    async def working(value):
        return value

    assert await safe_run(broken)() is None
    assert await safe_run(working)("ok") == "ok"


@pytest.mark.asyncio
async def test_run_exits_when_stopped(scheduler):
    stop = asyncio.Event()
    stop.set()

    await asyncio.wait_for(scheduler.run(stop, interval=0.01), timeout=5)


@pytest.mark.asyncio
async def test_run_ticks_until_stopped(scheduler, privacy):
    stop = asyncio.Event()

    async def stop_soon():
        await asyncio.sleep(0.05)
        stop.set()

    await asyncio.gather(scheduler.run(stop, interval=0.01), stop_soon())

    privacy.enforce_retention_policy.assert_not_awaited()
