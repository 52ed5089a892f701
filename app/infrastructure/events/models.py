"""Event models for the domain event bus.

Provides the Event dataclass and the event type names published and
consumed by the notification engine.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from uuid import UUID, uuid4


class EventTypes:
    """Event type names."""

    NOTIFICATION_CREATED = "notification.created"
    NOTIFICATION_READ = "notification.read"

    USER_CREATED = "user.created"
    USER_UPDATED = "user.updated"
    PROJECT_CREATED = "project.created"
    PROJECT_UPDATED = "project.updated"
    PROJECT_DELETED = "project.deleted"
    ROLE_ASSIGNED = "role.assigned"
    ROLE_REVOKED = "role.revoked"
    SECURITY_ALERT = "security.alert"
    SYSTEM_MAINTENANCE = "system.maintenance"
    INVOICE_GENERATED = "invoice.generated"
    PAYMENT_RECEIVED = "payment.received"


@dataclass
class Event:
    """A domain event.

    Events are immutable records of something that happened in a tenant,
    used to trigger notifications and for cross-module communication.
    """

    event_type: str
    """The type of event (e.g., 'user.created')."""

    tenant_id: str
    """Tenant the event happened in."""

    user_id: Optional[str] = None
    """User the event concerns, if any."""

    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    """When the event occurred."""

    correlation_id: UUID = field(default_factory=uuid4)
    """Unique ID to track related events across the system."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """Custom data for this event type."""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize event to dictionary.

        Returns:
            Dictionary with ISO format timestamp and UUID as string.
        """
        data = asdict(self)
        data["timestamp"] = self.timestamp.isoformat()
        data["correlation_id"] = str(self.correlation_id)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Event":
        """Deserialize event from dictionary.

        Raises:
            ValueError: If required fields are missing or invalid.
        """
        try:
            if isinstance(data.get("timestamp"), str):
                timestamp = datetime.fromisoformat(data["timestamp"])
            else:
                timestamp = data.get("timestamp") or datetime.now(timezone.utc)

            correlation_id = data.get("correlation_id")
            if isinstance(correlation_id, str):
                correlation_id = UUID(correlation_id)
            elif correlation_id is None:
                correlation_id = uuid4()

            return cls(
                event_type=data["event_type"],
                tenant_id=data["tenant_id"],
                user_id=data.get("user_id"),
                timestamp=timestamp,
                correlation_id=correlation_id,
                metadata=data.get("metadata", {}),
            )
        except (KeyError, ValueError) as e:
            raise ValueError(f"Invalid event data: {e}")
