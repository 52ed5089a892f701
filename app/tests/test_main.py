from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import main
from infrastructure.configuration import Settings


def test_list_configs_logs_sections():
    with patch("main.logger") as mock_logger:
        main.list_configs(Settings(PREFIX="dev-"))

    base_call = mock_logger.info.call_args_list[0]
    assert base_call.args == ("configuration_initialized",)
    assert {"PREFIX": "dev-"} in base_call.kwargs["base_settings"]
    loaded = {
        c.kwargs["config_setting"]: c.kwargs["keys"]
        for c in mock_logger.info.call_args_list[1:]
    }
    assert set(loaded) == {"email", "sms", "notifications", "redis", "queue", "rate_limits"}


@pytest.mark.asyncio
@patch("main.MaintenanceScheduler")
@patch("main.build_notification_engine")
@patch("main.create_redis_client")
@patch("main.get_settings")
async def test_main_starts_workers_and_shuts_down(
    mock_get_settings, mock_create_redis, mock_build_engine, mock_scheduler
):
    mock_get_settings.return_value = Settings(PREFIX="dev-")
    redis = MagicMock()
    redis.aclose = AsyncMock()
    mock_create_redis.return_value = redis
    engine = MagicMock()

    def start_workers(stop_event):
        stop_event.set()
        return []

    engine.start_workers.side_effect = start_workers
    mock_build_engine.return_value = engine

    await main.main()

    mock_build_engine.assert_called_once_with(mock_get_settings.return_value, redis=redis)
    mock_scheduler.assert_not_called()
    redis.aclose.assert_awaited_once()
