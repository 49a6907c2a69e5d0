"""Messages domain module - outbound message model and publisher port."""

from .models import EVENT_MESSAGE, OutboundMessage, generate_message_id, new_default_message
from .ports import PublisherPort

__all__ = [
    "EVENT_MESSAGE",
    "OutboundMessage",
    "generate_message_id",
    "new_default_message",
    "PublisherPort",
]
