"""Redis Publisher - Implementation of PublisherPort using Redis pub/sub.

Each message is published as JSON on channel '<channel_prefix><topic>'.

Architecture: Hexagonal - Adapter implementation in infrastructure layer
"""

import logging

from redis import Redis
from redis.exceptions import RedisError

from domain.errors import PublishError
from domain.messages import OutboundMessage, PublisherPort

logger = logging.getLogger(__name__)

DEFAULT_CHANNEL_PREFIX = "topic:"


class RedisPublisher(PublisherPort):
    """Publish outbound messages to Redis channels.

    Example:
        publisher = RedisPublisher.from_url("redis://localhost:6379/0")
        publisher.publish(OutboundMessage(topic="alerts", message="disk full"))
        # -> PUBLISH topic:alerts '{"id": ..., "topic": "alerts", ...}'
    """

    def __init__(self, client: Redis, channel_prefix: str = DEFAULT_CHANNEL_PREFIX):
        """Initialize publisher.

        Args:
            client: Redis client
            channel_prefix: Prefix prepended to the topic to form the channel name
        """
        self.client = client
        self.channel_prefix = channel_prefix

    @classmethod
    def from_url(cls, redis_url: str, channel_prefix: str = DEFAULT_CHANNEL_PREFIX) -> "RedisPublisher":
        return cls(Redis.from_url(redis_url, decode_responses=True), channel_prefix)

    def channel_for(self, topic: str) -> str:
        return f"{self.channel_prefix}{topic}"

    def publish(self, message: OutboundMessage) -> None:
        channel = self.channel_for(message.topic)
        try:
            receivers = self.client.publish(channel, message.to_json())
        except RedisError as e:
            logger.error(f"Failed to publish message {message.id} to {channel}: {e}")
            raise PublishError(f"redis publish to {channel} failed: {e}") from e

        logger.info(
            f"Published message {message.id} to {channel} ({receivers} subscribers)"
        )

    def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            return bool(self.client.ping())
        except RedisError as e:
            logger.warning(f"Redis ping failed: {e}")
            return False
