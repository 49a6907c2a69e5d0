"""Unit tests for settings loading and component wiring."""

import pytest
from pydantic import ValidationError

from config import Settings, get_settings
from infrastructure.ingest.smtp_session import SMTPBackendConfig
from infrastructure.publishing import InMemoryPublisher, RedisPublisher
from main import create_backend, create_publisher


class TestSettings:
    """Test defaults and validation"""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.SMTP_SERVER_PORT == 2525
        assert settings.SMTP_MAX_MESSAGE_BYTES == 1_048_576
        assert settings.MESSAGE_LIMIT == 4096
        assert settings.SMTP_SERVER_ADDR_PREFIX == ""
        assert settings.PUBLISHER == "redis"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("SMTP_SERVER_DOMAIN", "ntfy.example.com")
        monkeypatch.setenv("SMTP_SERVER_ADDR_PREFIX", "ntfy-")
        monkeypatch.setenv("MESSAGE_LIMIT", "512")
        settings = Settings(_env_file=None)
        assert settings.SMTP_SERVER_DOMAIN == "ntfy.example.com"
        assert settings.SMTP_SERVER_ADDR_PREFIX == "ntfy-"
        assert settings.MESSAGE_LIMIT == 512

    def test_empty_domain_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, SMTP_SERVER_DOMAIN="  ")

    @pytest.mark.parametrize("field", ["MESSAGE_LIMIT", "SMTP_MAX_MESSAGE_BYTES"])
    def test_non_positive_limits_rejected(self, field):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, **{field: 0})

    def test_publisher_normalized(self):
        assert Settings(_env_file=None, PUBLISHER="Memory").PUBLISHER == "memory"

    def test_unknown_publisher_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, PUBLISHER="kafka")

    def test_invalid_topic_pattern_rejected(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, TOPIC_PATTERN="([a-z")

    def test_get_settings_is_cached(self):
        get_settings.cache_clear()
        try:
            assert get_settings() is get_settings()
        finally:
            get_settings.cache_clear()


class TestWiring:
    """Test publisher and backend creation from settings"""

    def test_memory_publisher(self):
        settings = Settings(_env_file=None, PUBLISHER="memory")
        assert isinstance(create_publisher(settings), InMemoryPublisher)

    def test_redis_publisher(self):
        settings = Settings(_env_file=None, REDIS_URL="redis://redis.internal:6380/2", PUBLISH_CHANNEL_PREFIX="ntfy:")
        publisher = create_publisher(settings)
        assert isinstance(publisher, RedisPublisher)
        assert publisher.channel_for("alerts") == "ntfy:alerts"

    def test_backend_from_settings(self):
        settings = Settings(
            _env_file=None,
            SMTP_SERVER_DOMAIN="ntfy.example.com",
            SMTP_SERVER_ADDR_PREFIX="ntfy-",
            MESSAGE_LIMIT=256,
        )
        publisher = InMemoryPublisher()
        backend = create_backend(settings, publisher)
        assert backend.publisher is publisher
        assert backend.config == SMTPBackendConfig(
            domain="ntfy.example.com",
            address_prefix="ntfy-",
            message_limit=256,
            topic_pattern=settings.TOPIC_PATTERN,
        )
        assert backend.counters() == (0, 0)
