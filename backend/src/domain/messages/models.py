"""Outbound message published to the topic bus.

One OutboundMessage is built per accepted DATA command, handed to the
publisher and then discarded.
"""

import json
import secrets
import string
import time
from dataclasses import dataclass, field
from typing import Any, Dict

EVENT_MESSAGE = "message"
MESSAGE_ID_LENGTH = 12

_ID_ALPHABET = string.ascii_letters + string.digits


def generate_message_id() -> str:
    """Generate a random alphanumeric message ID."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(MESSAGE_ID_LENGTH))


@dataclass
class OutboundMessage:
    """Message event routed to a topic.

    Attributes:
        topic: Destination topic (validated by the resolver)
        message: Message body
        title: Optional title (decoded Subject)
        id: Random message identifier
        time: Unix timestamp in seconds
        event: Event type, always 'message' for mail-originated events
    """
    topic: str
    message: str = ""
    title: str = ""
    id: str = field(default_factory=generate_message_id)
    time: int = field(default_factory=lambda: int(time.time()))
    event: str = EVENT_MESSAGE

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "time": self.time,
            "event": self.event,
            "topic": self.topic,
        }
        if self.title:
            data["title"] = self.title
        data["message"] = self.message
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


def new_default_message(topic: str, message: str) -> OutboundMessage:
    """Create a message event for topic with a fresh ID and timestamp."""
    return OutboundMessage(topic=topic, message=message)
