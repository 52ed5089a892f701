"""Notification metrics observer.

Keeps in-process counters and emits one structured log event per
observation, so log-based dashboards and the counters agree.
"""

import threading
from collections import Counter, defaultdict
from typing import Dict, List, Optional

from infrastructure.logging import get_module_logger

logger = get_module_logger()


class NotificationMetrics:
    def __init__(self) -> None:
        self._deliveries: Counter = Counter()
        self._failures: Counter = Counter()
        self._processing_times: Dict[str, List[float]] = defaultdict(list)
        self._provider_calls: Counter = Counter()
        self._lock = threading.Lock()

    def record_delivery(self, channel: str, tenant_id: Optional[str], status: str) -> None:
        with self._lock:
            self._deliveries[(channel, status)] += 1
        logger.info(
            "notification_delivery_recorded",
            channel=channel,
            tenant_id=tenant_id,
            status=status,
        )

    def record_failure(
        self, channel: str, tenant_id: Optional[str], error_type: str
    ) -> None:
        with self._lock:
            self._failures[(channel, error_type)] += 1
        logger.warning(
            "notification_failure_recorded",
            channel=channel,
            tenant_id=tenant_id,
            error_type=error_type,
        )

    def record_processing_time(self, channel: str, seconds: float) -> None:
        with self._lock:
            self._processing_times[channel].append(seconds)
        logger.debug(
            "notification_processing_time", channel=channel, duration_seconds=seconds
        )

    def record_provider_response(
        self, provider: str, channel: str, seconds: float, success: bool
    ) -> None:
        with self._lock:
            self._provider_calls[(provider, channel, success)] += 1
        logger.info(
            "notification_provider_response",
            provider=provider,
            channel=channel,
            duration_seconds=seconds,
            success=success,
        )

    def get_delivery_rate(self, channel: str) -> float:
        """Share of delivery attempts on a channel that succeeded (0.0 to 1.0)."""
        with self._lock:
            sent = sum(
                count
                for (ch, status), count in self._deliveries.items()
                if ch == channel and status == "sent"
            )
            failed = sum(
                count for (ch, _), count in self._failures.items() if ch == channel
            )
        total = sent + failed
        return sent / total if total else 0.0

    def snapshot(self) -> dict:
        with self._lock:
            return {
                "deliveries": {
                    f"{channel}:{status}": count
                    for (channel, status), count in self._deliveries.items()
                },
                "failures": {
                    f"{channel}:{error_type}": count
                    for (channel, error_type), count in self._failures.items()
                },
                "processing_time_avg": {
                    channel: sum(times) / len(times)
                    for channel, times in self._processing_times.items()
                    if times
                },
                "provider_calls": {
                    f"{provider}:{channel}:{'ok' if success else 'error'}": count
                    for (provider, channel, success), count in self._provider_calls.items()
                },
            }
