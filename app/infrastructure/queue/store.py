"""Job queue storage.

This module provides the JobQueue protocol and an in-memory implementation.
The protocol-based design allows multiple backends (in-memory, Redis).
"""

import asyncio
from collections import deque
from datetime import datetime, timedelta, timezone
from typing import Callable, Deque, Dict, List, Optional, Protocol

from infrastructure.logging import get_module_logger
from infrastructure.queue.config import QueueConfig
from infrastructure.queue.models import JobState, QueueJob

logger = get_module_logger()


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class JobQueue(Protocol):
    """Named, priority-ordered job queue with retry and dead-lettering.

    Implementations must provide atomic claim semantics so a job is processed
    by one worker at a time.

    Methods:
        enqueue: Add a job; False if a job with the same id already exists
        fetch_due: Return due, unclaimed jobs in priority order
        claim: Attempt to claim a job for processing
        complete: Mark a claimed job as done
        fail: Record a failed attempt; reschedule or dead-letter
        get_job: Look up a job by id
        get_dead_letters: Jobs whose retry budget is exhausted
        get_stats: Counts per state
        ping: Liveness probe
    """

    name: str

    async def enqueue(self, job: QueueJob) -> bool: ...

    async def fetch_due(self, limit: int = 10) -> List[QueueJob]: ...

    async def claim(self, job_id: str, worker_id: str, lease_seconds: int) -> bool: ...

    async def complete(self, job_id: str) -> None: ...

    async def fail(self, job_id: str, error: str) -> JobState:
        """Increment attempts and reschedule with backoff.

        Returns:
            JobState.WAITING if rescheduled, JobState.FAILED if dead-lettered
        """
        ...

    async def get_job(self, job_id: str) -> Optional[QueueJob]: ...

    async def get_dead_letters(self) -> List[QueueJob]: ...

    async def get_stats(self) -> Dict[str, int]: ...

    async def ping(self) -> bool: ...


class InMemoryJobQueue:
    """In-memory JobQueue with exponential backoff and a dead letter list.

    Suitable for single-process deployments, development and tests. The most
    recent completed and dead-lettered jobs are kept so a later enqueue with
    the same id is still recognised as a duplicate. Older ones are dropped
    once config.remove_on_complete or config.remove_on_fail is exceeded.

    Attributes:
        name: Queue name
        config: QueueConfig controlling retry behavior
    """

    def __init__(
        self,
        name: str,
        config: Optional[QueueConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.name = name
        self.config = config or QueueConfig()
        self._clock = clock or _utc_now
        self._jobs: Dict[str, QueueJob] = {}
        self._finished: Dict[JobState, Deque[str]] = {
            JobState.COMPLETED: deque(),
            JobState.FAILED: deque(),
        }
        self._lock = asyncio.Lock()

    async def enqueue(self, job: QueueJob) -> bool:
        """Add a job unless one with the same id already exists."""
        async with self._lock:
            if job.id in self._jobs:
                logger.info(
                    "queue_job_duplicate",
                    queue=self.name,
                    job_id=job.id,
                    existing_state=self._jobs[job.id].state.value,
                )
                return False
            now = self._clock()
            job.state = JobState.WAITING
            job.attempts = 0
            job.created_at = now
            job.updated_at = now
            job.next_run_at = now
            self._jobs[job.id] = job
            logger.info(
                "queue_job_enqueued",
                queue=self.name,
                job_id=job.id,
                priority=job.priority,
            )
            return True

    def _is_due(self, job: QueueJob, now: datetime) -> bool:
        if job.state == JobState.WAITING:
            return job.next_run_at <= now
        if job.state == JobState.ACTIVE:
            # Lease lapsed; the claiming worker is presumed gone
            return job.lease_expires_at is not None and job.lease_expires_at <= now
        return False

    async def fetch_due(self, limit: int = 10) -> List[QueueJob]:
        """Return due jobs, highest priority first, then oldest due time."""
        async with self._lock:
            now = self._clock()
            due = [job for job in self._jobs.values() if self._is_due(job, now)]
            due.sort(key=lambda job: (-job.priority, job.next_run_at))
            logger.debug(
                "queue_fetched_due_jobs",
                queue=self.name,
                count=min(len(due), limit),
                total_jobs=len(self._jobs),
            )
            return due[:limit]

    async def claim(self, job_id: str, worker_id: str, lease_seconds: int) -> bool:
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                logger.warning("queue_claim_failed_not_found", job_id=job_id)
                return False
            now = self._clock()
            if not self._is_due(job, now):
                logger.debug(
                    "queue_claim_failed_not_due",
                    job_id=job_id,
                    state=job.state.value,
                    current_worker=job.claimed_by,
                )
                return False
            job.state = JobState.ACTIVE
            job.claimed_by = worker_id
            job.lease_expires_at = now + timedelta(seconds=lease_seconds)
            job.updated_at = now
            logger.debug("queue_job_claimed", job_id=job_id, worker=worker_id)
            return True

    async def complete(self, job_id: str) -> None:
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None or job.state == JobState.COMPLETED:
                return
            job.state = JobState.COMPLETED
            job.claimed_by = None
            job.lease_expires_at = None
            job.updated_at = self._clock()
            logger.info(
                "queue_job_completed",
                queue=self.name,
                job_id=job_id,
                attempts=job.attempts,
            )
            self._retain(job)

    async def fail(self, job_id: str, error: str) -> JobState:
        async with self._lock:
            job = self._jobs.get(job_id)
            if job is None:
                logger.warning("queue_fail_not_found", job_id=job_id)
                return JobState.FAILED
            if job.state == JobState.FAILED:
                return JobState.FAILED

            previous_attempts = job.attempts
            job.attempts += 1
            job.last_error = error
            job.claimed_by = None
            job.lease_expires_at = None
            job.updated_at = self._clock()

            if job.attempts >= self.config.max_attempts:
                job.state = JobState.FAILED
                logger.warning(
                    "queue_job_dead_lettered",
                    queue=self.name,
                    job_id=job_id,
                    attempts=job.attempts,
                    reason=error,
                )
                self._retain(job)
                return JobState.FAILED

            delay_ms = self.config.retry_delay_ms(previous_attempts)
            job.state = JobState.WAITING
            job.next_run_at = job.updated_at + timedelta(milliseconds=delay_ms)
            logger.info(
                "queue_job_retry_scheduled",
                queue=self.name,
                job_id=job_id,
                attempts=job.attempts,
                max_attempts=self.config.max_attempts,
                next_retry_in_ms=delay_ms,
            )
            return JobState.WAITING

    def _retain(self, job: QueueJob) -> None:
        """Record a finished job and drop the oldest past the retention bound.

        Caller must hold the lock.
        """
        if job.state == JobState.COMPLETED:
            keep = self.config.remove_on_complete
        else:
            keep = self.config.remove_on_fail
        finished = self._finished[job.state]
        finished.append(job.id)
        while len(finished) > keep:
            pruned = finished.popleft()
            self._jobs.pop(pruned, None)
            logger.debug(
                "queue_job_pruned",
                queue=self.name,
                job_id=pruned,
                state=job.state.value,
            )

    async def get_job(self, job_id: str) -> Optional[QueueJob]:
        async with self._lock:
            return self._jobs.get(job_id)

    async def get_dead_letters(self) -> List[QueueJob]:
        """Get all dead-lettered jobs (for monitoring)."""
        async with self._lock:
            return [j for j in self._jobs.values() if j.state == JobState.FAILED]

    async def get_stats(self) -> Dict[str, int]:
        async with self._lock:
            stats = {state.value: 0 for state in JobState}
            for job in self._jobs.values():
                stats[job.state.value] += 1
            return stats

    async def ping(self) -> bool:
        return True
