"""In-process publisher keeping messages in memory.

Used for local development (no Redis) and tests. Subscribers registered for a
topic are called synchronously for every message published to it.
"""

import logging
import threading
from collections import defaultdict
from typing import Callable, DefaultDict, List, Optional

from domain.messages import OutboundMessage, PublisherPort

logger = logging.getLogger(__name__)

Subscriber = Callable[[OutboundMessage], None]


class InMemoryPublisher(PublisherPort):
    """Publisher recording every message and fanning it out per topic."""

    def __init__(self):
        self._lock = threading.Lock()
        self._messages: List[OutboundMessage] = []
        self._subscribers: DefaultDict[str, List[Subscriber]] = defaultdict(list)

    def subscribe(self, topic: str, callback: Subscriber) -> None:
        with self._lock:
            self._subscribers[topic].append(callback)

    def publish(self, message: OutboundMessage) -> None:
        with self._lock:
            self._messages.append(message)
            subscribers = list(self._subscribers.get(message.topic, []))
        for callback in subscribers:
            callback(message)
        logger.info(f"Published message {message.id} to topic {message.topic}")

    def messages(self, topic: Optional[str] = None) -> List[OutboundMessage]:
        """Return published messages, optionally only those for topic."""
        with self._lock:
            if topic is None:
                return list(self._messages)
            return [m for m in self._messages if m.topic == topic]
