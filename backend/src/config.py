"""Application configuration via environment variables.

Provides type-safe settings loading using pydantic-settings.
Environment variables can be loaded from a .env file.
"""

import re
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables.

    Environment Variables:
        SMTP_SERVER_HOST: SMTP bind address
        SMTP_SERVER_PORT: SMTP listen port
        SMTP_SERVER_DOMAIN: Domain mail is accepted for (ntfy-alerts@<domain>)
        SMTP_SERVER_ADDR_PREFIX: Required local-part prefix ('' disables it)
        SMTP_MAX_MESSAGE_BYTES: Max size of a complete email (headers, all parts)
        MESSAGE_LIMIT: Max length of the published message body (characters)
        TOPIC_PATTERN: Regex a topic name must fully match
        PUBLISHER: Publisher backend, "redis" or "memory" (in-process, development)
        REDIS_URL: Redis connection string for publishing
        PUBLISH_CHANNEL_PREFIX: Redis channel prefix ('<prefix><topic>')
        HTTP_HOST / HTTP_PORT: Bind address of the observability API
        LOG_LEVEL: Logging level (default INFO)
        LOG_JSON: Emit JSON log lines (default True)
    """

    # SMTP server
    SMTP_SERVER_HOST: str = "0.0.0.0"
    SMTP_SERVER_PORT: int = 2525
    SMTP_SERVER_DOMAIN: str = "localhost"
    SMTP_SERVER_ADDR_PREFIX: str = ""
    SMTP_MAX_MESSAGE_BYTES: int = 1_048_576  # Must be much larger than MESSAGE_LIMIT (headers, multipart)

    # Messages
    MESSAGE_LIMIT: int = 4096
    TOPIC_PATTERN: str = r"^[-_A-Za-z0-9]{1,64}$"

    # Publishing
    PUBLISHER: str = "redis"  # redis|memory
    REDIS_URL: str = "redis://localhost:6379/0"
    PUBLISH_CHANNEL_PREFIX: str = "topic:"

    # Observability API
    HTTP_HOST: str = "0.0.0.0"
    HTTP_PORT: int = 8080

    # Application
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = True

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"

    @field_validator("SMTP_SERVER_DOMAIN")
    @classmethod
    def domain_not_empty(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("SMTP_SERVER_DOMAIN must not be empty")
        return value

    @field_validator("MESSAGE_LIMIT", "SMTP_MAX_MESSAGE_BYTES")
    @classmethod
    def positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value

    @field_validator("PUBLISHER")
    @classmethod
    def known_publisher(cls, value: str) -> str:
        value = value.lower()
        if value not in ("redis", "memory"):
            raise ValueError("PUBLISHER must be 'redis' or 'memory'")
        return value

    @field_validator("TOPIC_PATTERN")
    @classmethod
    def valid_pattern(cls, value: str) -> str:
        try:
            re.compile(value)
        except re.error as e:
            raise ValueError(f"invalid topic pattern: {e}") from e
        return value


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Uses lru_cache for singleton behavior.
    Call get_settings.cache_clear() to reload settings.
    """
    return Settings()
