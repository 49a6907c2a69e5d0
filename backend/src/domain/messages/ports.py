"""Publisher Port - Domain interface for the topic messaging bus.

Adapters implement this port to hand assembled messages to a concrete bus
(Redis pub/sub, in-process fan-out, ...).

Architecture: Hexagonal - Port interface in domain layer
"""

from abc import ABC, abstractmethod

from .models import OutboundMessage


class PublisherPort(ABC):
    """Port interface for publishing messages to a topic.

    Publishing is synchronous from the caller's point of view: publish()
    returns once the bus accepted the message and raises otherwise.

    Example Usage:
        publisher = RedisPublisher(Redis.from_url(url))
        publisher.publish(OutboundMessage(topic="alerts", message="disk full"))
    """

    @abstractmethod
    def publish(self, message: OutboundMessage) -> None:
        """Publish a message to message.topic.

        Args:
            message: Assembled outbound message

        Raises:
            PublishError: If the bus did not accept the message
        """
        pass

    def __call__(self, message: OutboundMessage) -> None:
        self.publish(message)
