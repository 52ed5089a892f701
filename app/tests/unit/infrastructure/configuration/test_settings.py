"""Unit tests for infrastructure.configuration.settings module.

Tests cover:
- Settings aggregation and subsettings instantiation
- Environment overrides through alias names
- Derived properties (is_production, categories)
"""

import pytest

from infrastructure.configuration import QueueSettings, RateLimitSettings, Settings
from infrastructure.configuration.features import NotificationFeatureSettings
from infrastructure.configuration.infrastructure import RedisSettings
from infrastructure.configuration.integrations import EmailSettings, SmsSettings
from infrastructure.queue import QueueConfig

pytestmark = pytest.mark.unit


class TestQueueSettings:
    """Test suite for QueueSettings configuration."""

    def test_defaults(self):
        queue = QueueSettings(_env_file=None)

        assert queue.backend == "memory"
        assert queue.concurrency == 5
        assert queue.max_attempts == 3
        assert queue.retry_delay_ms == 5000
        assert queue.retry_max_delay_ms == 300000
        assert queue.claim_lease_seconds == 300
        assert queue.remove_on_complete == 100
        assert queue.remove_on_fail == 50

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("NOTIFICATION_QUEUE_BACKEND", "redis")
        monkeypatch.setenv("NOTIFICATION_MAX_RETRIES", "5")
        monkeypatch.setenv("NOTIFICATION_QUEUE_POLL_INTERVAL_SECONDS", "0.25")

        queue = QueueSettings(_env_file=None)

        assert queue.backend == "redis"
        assert queue.max_attempts == 5
        assert queue.poll_interval_seconds == 0.25
        # Defaults preserved
        assert queue.concurrency == 5

    def test_retention_bounds_reach_queue_config(self):
        queue = QueueSettings(
            _env_file=None,
            NOTIFICATION_QUEUE_REMOVE_ON_COMPLETE=10,
            NOTIFICATION_QUEUE_REMOVE_ON_FAIL=5,
        )

        config = QueueConfig.from_settings(queue)

        assert config.remove_on_complete == 10
        assert config.remove_on_fail == 5


class TestRateLimitSettings:
    def test_defaults(self):
        limits = RateLimitSettings(_env_file=None)

        assert (limits.tenant_window_ms, limits.tenant_max_requests) == (60000, 100)
        assert (limits.user_window_ms, limits.user_max_requests) == (60000, 50)
        assert limits.notification_window_ms == 3600000
        assert limits.notification_max_requests == 10
        assert limits.tenant_creation_max_requests == 3

    def test_alias_construction(self):
        limits = RateLimitSettings(_env_file=None, TENANT_RATE_LIMIT_MAX_REQUESTS=2)

        assert limits.tenant_max_requests == 2


class TestProviderSettings:
    def test_email_defaults(self):
        email = EmailSettings(_env_file=None)

        assert email.EMAIL_PROVIDER is None
        assert email.SMTP_HOST == "localhost"
        assert email.SMTP_PORT == 587
        assert email.SMTP_SECURE is False

    def test_email_environment_override(self, monkeypatch):
        monkeypatch.setenv("EMAIL_PROVIDER", "resend")
        monkeypatch.setenv("SMTP_SECURE", "true")
        monkeypatch.setenv("SMTP_PORT", "465")

        email = EmailSettings(_env_file=None)

        assert email.EMAIL_PROVIDER == "resend"
        assert email.SMTP_SECURE is True
        assert email.SMTP_PORT == 465

    def test_sms_environment_override(self, monkeypatch):
        monkeypatch.setenv("SMS_PROVIDER", "termii")
        monkeypatch.setenv("TERMII_SENDER_ID", "Acme")

        sms = SmsSettings(_env_file=None)

        assert sms.SMS_PROVIDER == "termii"
        assert sms.TERMII_SENDER_ID == "Acme"
        assert sms.SMS_API_SECRET is None


class TestNotificationFeatureSettings:
    def test_defaults(self):
        feature = NotificationFeatureSettings(_env_file=None)

        assert feature.in_app_expiry_days == 30
        assert feature.retention_days == 90
        assert feature.audit_log_retention_days == 365
        assert feature.retention_enforcement_time == "02:00"
        assert feature.categories == [
            "user_activity",
            "system",
            "invoice",
            "project",
            "security",
        ]

    def test_categories_are_trimmed(self, monkeypatch):
        monkeypatch.setenv("DEFAULT_NOTIFICATION_CATEGORIES", " billing , ,alerts ")

        feature = NotificationFeatureSettings(_env_file=None)

        assert feature.categories == ["billing", "alerts"]


class TestSettings:
    """Test suite for the aggregated Settings class."""

    def test_instantiates_every_section(self):
        settings = Settings()

        assert isinstance(settings.email, EmailSettings)
        assert isinstance(settings.sms, SmsSettings)
        assert isinstance(settings.notifications, NotificationFeatureSettings)
        assert isinstance(settings.redis, RedisSettings)
        assert isinstance(settings.queue, QueueSettings)
        assert isinstance(settings.rate_limits, RateLimitSettings)

    def test_section_override(self):
        queue = QueueSettings(_env_file=None, NOTIFICATION_QUEUE_CONCURRENCY=1)

        settings = Settings(queue=queue)

        assert settings.queue is queue
        assert settings.queue.concurrency == 1

    @pytest.mark.parametrize(
        "prefix, expected",
        [("", True), ("dev-", False)],
    )
    def test_is_production(self, prefix, expected):
        assert Settings(PREFIX=prefix).is_production is expected

    def test_redis_url_from_environment(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/2")

        settings = Settings()

        assert settings.redis.url == "redis://cache:6379/2"
