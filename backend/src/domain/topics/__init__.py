"""Topics domain module - recipient address to topic resolution."""

from .resolver import TOPIC_PATTERN, TOPIC_REGEX, parse_address_list, resolve_topic

__all__ = [
    "TOPIC_PATTERN",
    "TOPIC_REGEX",
    "parse_address_list",
    "resolve_topic",
]
