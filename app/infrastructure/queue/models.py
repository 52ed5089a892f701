"""Queue job models.

A job is produced by an async channel (email, SMS) and consumed by exactly
one worker at a time. Job ids are derived from the notification id, so a
second enqueue for the same notification and channel collapses into the
first.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from infrastructure.persistence.models import ChannelType, NotificationPriority

EMAIL_QUEUE = "email-notifications"
SMS_QUEUE = "sms-notifications"

QUEUE_PRIORITIES = {
    NotificationPriority.URGENT: 10,
    NotificationPriority.HIGH: 5,
    NotificationPriority.MEDIUM: 1,
    NotificationPriority.LOW: 0,
}


def queue_priority(priority: Optional[NotificationPriority]) -> int:
    """Map a notification priority to the numeric queue priority."""
    return QUEUE_PRIORITIES.get(priority or NotificationPriority.MEDIUM, 1)


def job_id_for(channel: ChannelType, notification_id: str) -> str:
    """Deterministic job id used as the idempotency key."""
    return f"{channel.value.lower()}-{notification_id}"


class JobState(Enum):
    """Lifecycle of a queue job.

    Values:
        WAITING: Due now or scheduled for a later retry
        ACTIVE: Claimed by a worker
        COMPLETED: Processed successfully (kept for duplicate detection)
        FAILED: Retry budget exhausted, dead-lettered
    """

    WAITING = "waiting"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class QueueJob:
    """A unit of async delivery work.

    Fields:
        id: Deterministic job id (see job_id_for)
        queue: Queue name (EMAIL_QUEUE or SMS_QUEUE)
        payload: Email or SMS job payload
        priority: Numeric priority, higher runs first
        attempts: Failed attempts so far
        last_error: Last error message recorded by a failed attempt
        state: JobState
        next_run_at: Earliest time the job may be processed
        claimed_by: Worker holding the claim, if any
        lease_expires_at: When the current claim lapses
    """

    id: str
    queue: str
    payload: Dict[str, Any]
    priority: int = 1

    attempts: int = 0
    last_error: Optional[str] = None
    state: JobState = JobState.WAITING

    created_at: datetime = field(default_factory=_now)
    updated_at: datetime = field(default_factory=_now)
    next_run_at: datetime = field(default_factory=_now)

    claimed_by: Optional[str] = None
    lease_expires_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        """Validate required fields."""
        if not self.id:
            raise ValueError("id is required")
        if not self.queue:
            raise ValueError("queue is required")
        if not isinstance(self.payload, dict):
            raise ValueError("payload must be a dictionary")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to a JSON-compatible dict."""

        def iso(value: Optional[datetime]) -> Optional[str]:
            return value.isoformat() if value else None

        return {
            "id": self.id,
            "queue": self.queue,
            "payload": self.payload,
            "priority": self.priority,
            "attempts": self.attempts,
            "last_error": self.last_error,
            "state": self.state.value,
            "created_at": iso(self.created_at),
            "updated_at": iso(self.updated_at),
            "next_run_at": iso(self.next_run_at),
            "claimed_by": self.claimed_by,
            "lease_expires_at": iso(self.lease_expires_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QueueJob":
        """Deserialize from to_dict() output.

        Raises:
            ValueError: If required fields are missing or invalid.
        """

        def parse(value: Optional[str]) -> Optional[datetime]:
            return datetime.fromisoformat(value) if value else None

        try:
            return cls(
                id=data["id"],
                queue=data["queue"],
                payload=data["payload"],
                priority=int(data.get("priority", 1)),
                attempts=int(data.get("attempts", 0)),
                last_error=data.get("last_error"),
                state=JobState(data.get("state", JobState.WAITING.value)),
                created_at=parse(data.get("created_at")) or _now(),
                updated_at=parse(data.get("updated_at")) or _now(),
                next_run_at=parse(data.get("next_run_at")) or _now(),
                claimed_by=data.get("claimed_by"),
                lease_expires_at=parse(data.get("lease_expires_at")),
            )
        except (KeyError, ValueError) as e:
            raise ValueError(f"Invalid job data: {e}")
