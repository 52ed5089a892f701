"""Queue worker and job processor protocol.

This module provides the worker infrastructure for consuming queue jobs.
Channel-specific delivery is implemented via the JobProcessor protocol.
"""

import asyncio
from typing import Optional, Protocol

from infrastructure.logging import get_module_logger
from infrastructure.queue.config import QueueConfig
from infrastructure.queue.models import JobState, QueueJob
from infrastructure.queue.store import JobQueue

logger = get_module_logger()


class JobProcessor(Protocol):
    """Protocol for channel-specific job processing.

    ``process`` returns normally when the job is done and raises to request
    a retry. The worker turns the exception into ``queue.fail``.

    Example:
        class EmailJobProcessor:
            async def process(self, job: QueueJob) -> None:
                result = await provider.send(message)
                if not result.success:
                    raise ProviderSendError(result.error)
    """

    async def process(self, job: QueueJob) -> None: ...


class QueueWorker:
    """Worker that drains one queue through a JobProcessor.

    This worker handles the mechanics of queue consumption:
    - Fetching due jobs in priority order
    - Claiming jobs to prevent duplicate processing
    - Delegating to a JobProcessor
    - Completing, rescheduling or dead-lettering based on the outcome

    Attributes:
        queue: JobQueue to consume
        processor: JobProcessor for the queue's channel
        config: QueueConfig controlling batch size, lease and polling
        worker_id: Identifier for this worker instance
    """

    def __init__(
        self,
        queue: JobQueue,
        processor: JobProcessor,
        config: Optional[QueueConfig] = None,
        worker_id: str = "queue-worker-1",
    ) -> None:
        self.queue = queue
        self.processor = processor
        self.config = config or QueueConfig()
        self.worker_id = worker_id
        self.log = logger.bind(
            component="queue_worker", worker_id=worker_id, queue=queue.name
        )

    async def process_batch(self) -> dict:
        """Process one batch of due jobs.

        Returns:
            Dictionary with processing statistics:
                - processed: Jobs handed to the processor
                - successful: Jobs completed
                - retried: Jobs rescheduled after a failure
                - dead_lettered: Jobs whose retry budget ran out
                - skipped: Jobs another worker claimed first
        """
        stats = {
            "processed": 0,
            "successful": 0,
            "retried": 0,
            "dead_lettered": 0,
            "skipped": 0,
        }

        jobs = await self.queue.fetch_due(limit=self.config.batch_size)
        if not jobs:
            self.log.debug("queue_batch_no_jobs")
            return stats

        self.log.info("queue_batch_start", job_count=len(jobs))

        for job in jobs:
            claimed = await self.queue.claim(
                job.id, self.worker_id, self.config.claim_lease_seconds
            )
            if not claimed:
                self.log.debug("queue_job_skipped_claim_failed", job_id=job.id)
                stats["skipped"] += 1
                continue

            stats["processed"] += 1
            try:
                await self.processor.process(job)
            except Exception as e:
                self.log.error(
                    "queue_job_failed",
                    job_id=job.id,
                    attempt=job.attempts + 1,
                    error=str(e),
                    exc_info=True,
                )
                state = await self.queue.fail(job.id, str(e))
                if state == JobState.FAILED:
                    stats["dead_lettered"] += 1
                else:
                    stats["retried"] += 1
                continue

            await self.queue.complete(job.id)
            stats["successful"] += 1

        self.log.info("queue_batch_complete", **stats)
        return stats

    async def run(self, stop_event: asyncio.Event) -> None:
        """Poll the queue until ``stop_event`` is set."""
        self.log.info("queue_worker_started")
        while not stop_event.is_set():
            try:
                stats = await self.process_batch()
            except Exception as e:
                self.log.error("queue_batch_error", error=str(e), exc_info=True)
                stats = {"processed": 0, "skipped": 0}

            if stats["processed"] == 0 and stats["skipped"] == 0:
                try:
                    await asyncio.wait_for(
                        stop_event.wait(), timeout=self.config.poll_interval_seconds
                    )
                except asyncio.TimeoutError:
                    continue
        self.log.info("queue_worker_stopped")
