"""Notification engine composition root.

Builds every component with explicit constructor injection and returns them
in a NotificationEngine container. Nothing here is a process-wide singleton;
tests build as many engines as they need.

Usage:
    from infrastructure.services import build_notification_engine, get_settings

    engine = build_notification_engine(get_settings())
    stop = asyncio.Event()
    tasks = engine.start_workers(stop)

    await engine.notifications.send(TenantContext("tenant-1"), payload)
"""

import asyncio
from dataclasses import dataclass, field
from typing import List, Optional

import httpx
from redis.asyncio import Redis

from infrastructure.configuration import Settings
from infrastructure.events import EventBus
from infrastructure.events.handlers import NotificationEventHandlers
from infrastructure.logging import get_module_logger
from infrastructure.notifications.channels import (
    EmailChannel,
    InAppChannel,
    SmsChannel,
)
from infrastructure.notifications.dispatcher import NotificationDispatcher
from infrastructure.notifications.metrics import NotificationMetrics
from infrastructure.notifications.preferences import PreferenceResolver
from infrastructure.notifications.privacy import PrivacyService
from infrastructure.notifications.processors import EmailJobProcessor, SmsJobProcessor
from infrastructure.notifications.providers import (
    EmailProviderFactory,
    SmsProviderFactory,
)
from infrastructure.notifications.realtime import (
    InMemoryRealtimePublisher,
    RealtimePublisher,
    RedisRealtimePublisher,
)
from infrastructure.notifications.registry import ChannelRegistry
from infrastructure.notifications.service import NotificationService
from infrastructure.notifications.templates import TemplateService
from infrastructure.persistence import (
    InMemoryNotificationStore,
    InMemoryUserDirectory,
    NotificationStore,
    UserDirectory,
)
from infrastructure.queue import (
    EMAIL_QUEUE,
    SMS_QUEUE,
    JobQueue,
    QueueConfig,
    QueueWorker,
    create_job_queue,
)
from infrastructure.ratelimit import RateLimitService, SlidingWindowRateLimiter

logger = get_module_logger()


@dataclass
class NotificationEngine:
    """Fully wired notification engine."""

    settings: Settings
    store: NotificationStore
    directory: UserDirectory
    registry: ChannelRegistry
    preferences: PreferenceResolver
    dispatcher: NotificationDispatcher
    notifications: NotificationService
    privacy: PrivacyService
    templates: TemplateService
    event_bus: EventBus
    metrics: NotificationMetrics
    realtime: RealtimePublisher
    email_queue: JobQueue
    sms_queue: JobQueue
    workers: List[QueueWorker] = field(default_factory=list)
    rate_limits: Optional[RateLimitService] = None
    redis: Optional[Redis] = None

    def start_workers(self, stop_event: asyncio.Event) -> List[asyncio.Task]:
        """Start every queue worker as an independent task."""
        tasks = [
            asyncio.create_task(worker.run(stop_event), name=worker.worker_id)
            for worker in self.workers
        ]
        logger.info("queue_workers_started", count=len(tasks))
        return tasks


def create_redis_client(settings: Settings) -> Redis:
    return Redis.from_url(
        settings.redis.url,
        decode_responses=True,
        max_connections=settings.redis.max_connections,
        socket_timeout=settings.redis.socket_timeout,
    )


def build_notification_engine(
    settings: Settings,
    store: Optional[NotificationStore] = None,
    directory: Optional[UserDirectory] = None,
    redis: Optional[Redis] = None,
    realtime: Optional[RealtimePublisher] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> NotificationEngine:
    """Wire the notification engine.

    Args:
        settings: Application settings
        store: Record store (defaults to an in-memory store)
        directory: User directory (defaults to an empty in-memory directory)
        redis: redis.asyncio client (decode_responses=True). Enables rate
            limiting, the Redis realtime publisher and the redis queue backend.
        realtime: Realtime publisher override
        http_client: Shared httpx client for the API providers

    Returns:
        NotificationEngine container

    Raises:
        ValueError: If the redis queue backend is configured without a client
    """
    store = store or InMemoryNotificationStore()
    directory = directory or InMemoryUserDirectory()
    if realtime is None:
        realtime = (
            RedisRealtimePublisher(redis) if redis is not None else InMemoryRealtimePublisher()
        )

    queue_config = QueueConfig.from_settings(settings.queue)
    email_queue = create_job_queue(
        EMAIL_QUEUE, queue_config, settings.queue.backend, redis
    )
    sms_queue = create_job_queue(SMS_QUEUE, queue_config, settings.queue.backend, redis)

    registry = ChannelRegistry()
    registry.register_channel(InAppChannel(store, realtime))
    registry.register_channel(EmailChannel(store, directory, email_queue))
    registry.register_channel(SmsChannel(store, directory, sms_queue))

    metrics = NotificationMetrics()
    event_bus = EventBus()
    preferences = PreferenceResolver(store, settings.notifications.categories)
    dispatcher = NotificationDispatcher(
        store,
        registry,
        preferences,
        directory,
        event_bus=event_bus,
        metrics=metrics,
        expiry_days=settings.notifications.in_app_expiry_days,
    )
    NotificationEventHandlers(dispatcher).register(event_bus)

    rate_limits = None
    if redis is not None:
        rate_limits = RateLimitService(
            SlidingWindowRateLimiter(redis), settings.rate_limits
        )
    else:
        logger.warning("rate_limiting_disabled", reason="no_redis_client")

    templates = TemplateService(store)
    email_processor = EmailJobProcessor(
        store, EmailProviderFactory(settings.email, http_client), templates, metrics
    )
    sms_processor = SmsJobProcessor(
        store, SmsProviderFactory(settings.sms, http_client), metrics
    )

    workers = []
    for queue, processor in ((email_queue, email_processor), (sms_queue, sms_processor)):
        for index in range(settings.queue.concurrency):
            workers.append(
                QueueWorker(
                    queue,
                    processor,
                    queue_config,
                    worker_id=f"{queue.name}-worker-{index + 1}",
                )
            )

    engine = NotificationEngine(
        settings=settings,
        store=store,
        directory=directory,
        registry=registry,
        preferences=preferences,
        dispatcher=dispatcher,
        notifications=NotificationService(dispatcher, store, rate_limits, realtime),
        privacy=PrivacyService(
            store,
            retention_days=settings.notifications.retention_days,
            audit_log_retention_days=settings.notifications.audit_log_retention_days,
        ),
        templates=templates,
        event_bus=event_bus,
        metrics=metrics,
        realtime=realtime,
        email_queue=email_queue,
        sms_queue=sms_queue,
        workers=workers,
        rate_limits=rate_limits,
        redis=redis,
    )
    logger.info(
        "notification_engine_built",
        queue_backend=settings.queue.backend,
        workers=len(workers),
        channels=registry.count(),
        rate_limiting=rate_limits is not None,
    )
    return engine
