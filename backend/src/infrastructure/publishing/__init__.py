"""Publisher adapters for the topic messaging bus."""

from .memory_publisher import InMemoryPublisher
from .redis_publisher import RedisPublisher

__all__ = ["InMemoryPublisher", "RedisPublisher"]
