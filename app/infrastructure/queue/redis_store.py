"""Redis-backed JobQueue.

Layout per queue name:
    queue:{name}:jobs          hash of job id -> job JSON
    queue:{name}:due           sorted set of job ids scored by next run (ms)
    queue:{name}:completed     list of completed job ids, oldest first
    queue:{name}:dead          list of dead-lettered job ids, oldest first
    queue:{name}:claim:{id}    claim key holding the worker id, with a TTL

A claimed job stays in the due set, rescored to its lease expiry, so a job
whose worker disappears becomes due again once the lease lapses.

Only the most recent completed and dead-lettered jobs are kept. Past
config.remove_on_complete or config.remove_on_fail the oldest are removed
from both their list and the jobs hash.
"""

import json
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, List, Optional

from redis.asyncio import Redis

from infrastructure.logging import get_module_logger
from infrastructure.queue.config import QueueConfig
from infrastructure.queue.models import JobState, QueueJob

logger = get_module_logger()

# Due jobs read per fetch before priority ordering is applied
FETCH_WINDOW_MULTIPLIER = 5


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _ms(value: datetime) -> int:
    return int(value.timestamp() * 1000)


class RedisJobQueue:
    """JobQueue implementation on redis.asyncio, shared across processes."""

    def __init__(
        self,
        name: str,
        redis: Redis,
        config: Optional[QueueConfig] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.name = name
        self.redis = redis
        self.config = config or QueueConfig()
        self._clock = clock or _utc_now
        self._jobs_key = f"queue:{name}:jobs"
        self._due_key = f"queue:{name}:due"
        self._completed_key = f"queue:{name}:completed"
        self._dead_key = f"queue:{name}:dead"

    def _claim_key(self, job_id: str) -> str:
        return f"queue:{self.name}:claim:{job_id}"

    async def _load(self, job_id: str) -> Optional[QueueJob]:
        raw = await self.redis.hget(self._jobs_key, job_id)
        if raw is None:
            return None
        return QueueJob.from_dict(json.loads(raw))

    async def _save(self, job: QueueJob) -> None:
        await self.redis.hset(self._jobs_key, job.id, json.dumps(job.to_dict()))

    async def enqueue(self, job: QueueJob) -> bool:
        now = self._clock()
        job.state = JobState.WAITING
        job.attempts = 0
        job.created_at = now
        job.updated_at = now
        job.next_run_at = now

        created = await self.redis.hsetnx(
            self._jobs_key, job.id, json.dumps(job.to_dict())
        )
        if not created:
            logger.info("queue_job_duplicate", queue=self.name, job_id=job.id)
            return False

        await self.redis.zadd(self._due_key, {job.id: _ms(now)})
        logger.info(
            "queue_job_enqueued", queue=self.name, job_id=job.id, priority=job.priority
        )
        return True

    async def fetch_due(self, limit: int = 10) -> List[QueueJob]:
        now = self._clock()
        job_ids = await self.redis.zrangebyscore(
            self._due_key, 0, _ms(now), start=0, num=limit * FETCH_WINDOW_MULTIPLIER
        )
        jobs: List[QueueJob] = []
        for job_id in job_ids:
            job = await self._load(job_id)
            if job is not None and job.state in (JobState.WAITING, JobState.ACTIVE):
                jobs.append(job)
        jobs.sort(key=lambda job: (-job.priority, job.next_run_at))
        logger.debug("queue_fetched_due_jobs", queue=self.name, count=len(jobs[:limit]))
        return jobs[:limit]

    async def claim(self, job_id: str, worker_id: str, lease_seconds: int) -> bool:
        acquired = await self.redis.set(
            self._claim_key(job_id), worker_id, nx=True, ex=lease_seconds
        )
        if not acquired:
            logger.debug("queue_claim_failed_already_claimed", job_id=job_id)
            return False

        job = await self._load(job_id)
        if job is None or job.state in (JobState.COMPLETED, JobState.FAILED):
            await self.redis.delete(self._claim_key(job_id))
            logger.debug("queue_claim_failed_not_due", job_id=job_id)
            return False

        now = self._clock()
        job.state = JobState.ACTIVE
        job.claimed_by = worker_id
        job.lease_expires_at = now + timedelta(seconds=lease_seconds)
        job.updated_at = now
        await self._save(job)
        await self.redis.zadd(self._due_key, {job_id: _ms(job.lease_expires_at)})
        logger.debug("queue_job_claimed", job_id=job_id, worker=worker_id)
        return True

    async def complete(self, job_id: str) -> None:
        job = await self._load(job_id)
        if job is None or job.state == JobState.COMPLETED:
            return
        job.state = JobState.COMPLETED
        job.claimed_by = None
        job.lease_expires_at = None
        job.updated_at = self._clock()
        await self._save(job)
        await self.redis.zrem(self._due_key, job_id)
        await self.redis.rpush(self._completed_key, job_id)
        await self.redis.delete(self._claim_key(job_id))
        logger.info(
            "queue_job_completed", queue=self.name, job_id=job_id, attempts=job.attempts
        )
        await self._trim(self._completed_key, self.config.remove_on_complete)

    async def fail(self, job_id: str, error: str) -> JobState:
        job = await self._load(job_id)
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
            await self._save(job)
            await self.redis.zrem(self._due_key, job_id)
            await self.redis.rpush(self._dead_key, job_id)
            await self.redis.delete(self._claim_key(job_id))
            logger.warning(
                "queue_job_dead_lettered",
                queue=self.name,
                job_id=job_id,
                attempts=job.attempts,
                reason=error,
            )
            await self._trim(self._dead_key, self.config.remove_on_fail)
            return JobState.FAILED

        delay_ms = self.config.retry_delay_ms(previous_attempts)
        job.state = JobState.WAITING
        job.next_run_at = job.updated_at + timedelta(milliseconds=delay_ms)
        await self._save(job)
        await self.redis.zadd(self._due_key, {job_id: _ms(job.next_run_at)})
        await self.redis.delete(self._claim_key(job_id))
        logger.info(
            "queue_job_retry_scheduled",
            queue=self.name,
            job_id=job_id,
            attempts=job.attempts,
            max_attempts=self.config.max_attempts,
            next_retry_in_ms=delay_ms,
        )
        return JobState.WAITING

    async def _trim(self, list_key: str, keep: int) -> None:
        """Drop the oldest finished jobs beyond ``keep`` from the list and hash."""
        excess = await self.redis.llen(list_key) - keep
        if excess <= 0:
            return
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.lrange(list_key, 0, excess - 1)
            pipe.ltrim(list_key, excess, -1)
            pruned, _ = await pipe.execute()
        if pruned:
            await self.redis.hdel(self._jobs_key, *pruned)
        logger.debug(
            "queue_jobs_pruned", queue=self.name, list_key=list_key, count=len(pruned)
        )

    async def get_job(self, job_id: str) -> Optional[QueueJob]:
        return await self._load(job_id)

    async def get_dead_letters(self) -> List[QueueJob]:
        job_ids = await self.redis.lrange(self._dead_key, 0, -1)
        jobs = []
        for job_id in job_ids:
            job = await self._load(job_id)
            if job is not None:
                jobs.append(job)
        return jobs

    async def get_stats(self) -> Dict[str, int]:
        stats = {state.value: 0 for state in JobState}
        for raw in await self.redis.hvals(self._jobs_key):
            stats[json.loads(raw)["state"]] += 1
        return stats

    async def ping(self) -> bool:
        try:
            return bool(await self.redis.ping())
        except Exception as e:
            logger.error("queue_ping_failed", queue=self.name, error=str(e), exc_info=True)
            return False
