import asyncio
import signal

from dotenv import load_dotenv

from infrastructure.logging import configure_logging, get_module_logger
from infrastructure.services import build_notification_engine, get_settings
from infrastructure.services.bootstrap import create_redis_client
from jobs.scheduled_tasks import MaintenanceScheduler

load_dotenv()

logger = get_module_logger()


def list_configs(settings):
    """List all configuration settings keys"""
    config_settings = {"settings": []}

    for key, value in settings.model_dump().items():
        if isinstance(value, dict):
            config_settings[key] = list(value.keys())
        else:
            config_settings["settings"].append({key: value})

    logger.info("configuration_initialized", base_settings=config_settings["settings"])
    for key, value in config_settings.items():
        if key != "settings":
            logger.info("configuration_loaded", config_setting=key, keys=value)


async def main():
    """Start the queue workers and the maintenance scheduler."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.is_production)
    logger.info("application_startup", git_sha=settings.GIT_SHA)
    list_configs(settings)

    redis = create_redis_client(settings)
    engine = build_notification_engine(settings, redis=redis)

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    tasks = engine.start_workers(stop_event)

    # Maintenance only runs in production
    if settings.is_production:
        scheduler = MaintenanceScheduler(
            engine.privacy,
            engine.store,
            retention_time=settings.notifications.retention_enforcement_time,
        )
        scheduler.init()
        tasks.append(asyncio.create_task(scheduler.run(stop_event)))

    await stop_event.wait()
    logger.info("application_shutdown")
    await asyncio.gather(*tasks)
    await redis.aclose()


if __name__ == "__main__":
    asyncio.run(main())
