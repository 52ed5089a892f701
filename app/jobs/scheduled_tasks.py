"""Maintenance jobs for the notification engine.

Jobs are registered on a dedicated ``schedule.Scheduler`` and ticked from an
asyncio task. Each due job is started as its own task wrapped in
``safe_run`` so a failing job is logged and the scheduler keeps running.
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional, Set

import schedule

from infrastructure.logging import get_module_logger
from infrastructure.notifications.privacy import PrivacyService
from infrastructure.persistence.store import NotificationStore

logger = get_module_logger()

AsyncJob = Callable[..., Awaitable[object]]


def safe_run(job: AsyncJob) -> AsyncJob:
    async def wrapper(*args, **kwargs):
        try:
            return await job(*args, **kwargs)
        except Exception as e:
            logger.error(
                "scheduled_job_failed",
                job=getattr(job, "__name__", "unknown"),
                error=str(e),
                exc_info=True,
            )
            return None

    return wrapper


class MaintenanceScheduler:
    """Retention, audit cleanup and heartbeat jobs.

    Attributes:
        privacy: Privacy service enforcing retention
        store: Record store checked by the heartbeat
        retention_time: Daily HH:MM time for retention enforcement
        tick_seconds: Interval between ``run_pending`` calls
    """

    def __init__(
        self,
        privacy: PrivacyService,
        store: NotificationStore,
        retention_time: str = "02:00",
        tick_seconds: float = 1.0,
    ):
        self.privacy = privacy
        self.store = store
        self.retention_time = retention_time
        self.tick_seconds = tick_seconds
        self.scheduler = schedule.Scheduler()
        self._tasks: Set[asyncio.Task] = set()

    def init(self) -> None:
        logger.info("scheduled_tasks_initialized", retention_time=self.retention_time)
        self.scheduler.every().day.at(self.retention_time).do(
            self._spawn(self.enforce_retention)
        )
        self.scheduler.every().sunday.at("03:00").do(self._spawn(self.cleanup_audit_logs))
        self.scheduler.every(5).minutes.do(self._spawn(self.heartbeat))

    def _spawn(self, job: AsyncJob) -> Callable[[], None]:
        def start() -> None:
            task = asyncio.get_running_loop().create_task(safe_run(job)())
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

        start.__name__ = job.__name__
        return start

    async def enforce_retention(self) -> int:
        deleted = await self.privacy.enforce_retention_policy()
        logger.info("scheduled_retention_completed", deleted=deleted)
        return deleted

    async def cleanup_audit_logs(self) -> int:
        deleted = await self.privacy.cleanup_audit_logs()
        logger.info("scheduled_audit_cleanup_completed", deleted=deleted)
        return deleted

    async def heartbeat(self) -> bool:
        healthy = await self.store.ping()
        logger.info("scheduler_heartbeat", time=time.ctime(), store_healthy=healthy)
        return healthy

    async def drain(self) -> None:
        """Wait for every job started so far."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks))

    async def run(self, stop_event: asyncio.Event, interval: Optional[float] = None) -> None:
        """Run pending jobs every ``interval`` seconds until ``stop_event`` is set.

        Missed runs are not replayed: a job that should have run several times
        while the loop was blocked runs once.
        """
        interval = interval if interval is not None else self.tick_seconds
        logger.info("maintenance_scheduler_started", jobs=len(self.scheduler.get_jobs()))
        while not stop_event.is_set():
            self.scheduler.run_pending()
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
        await self.drain()
        logger.info("maintenance_scheduler_stopped")
