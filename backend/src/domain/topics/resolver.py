"""Recipient address to topic resolution.

Turns the untrusted RCPT TO value into a topic name:

    <prefix><topic>@<domain>  ->  <topic>

Examples (domain="ntfy.example.com", prefix="ntfy-"):
    ntfy-alerts@ntfy.example.com       -> 'alerts'
    "Ops" <ntfy-ops@ntfy.example.com>  -> 'ops'
    alerts@ntfy.example.com            -> InvalidAddressError
    ntfy-alerts@other.example.com      -> InvalidDomainError
"""

import re
from email.errors import HeaderParseError
from email.utils import getaddresses
from typing import List, Optional, Pattern, Union

from ..errors import (
    AddressParseError,
    InvalidAddressError,
    InvalidDomainError,
    InvalidTopicError,
    TooManyRecipientsError,
)

TOPIC_PATTERN = r"^[-_A-Za-z0-9]{1,64}$"
TOPIC_REGEX = re.compile(TOPIC_PATTERN)


def parse_address_list(value: str) -> List[str]:
    """Parse a recipient header value into bare addresses.

    Args:
        value: Raw value, e.g. '<a@example.com>' or 'A <a@example.com>, b@example.com'

    Returns:
        List[str]: Addresses without display names

    Raises:
        AddressParseError: If the value is not a syntactically valid address list
    """
    if value is None or not value.strip():
        raise AddressParseError("mail: no address")
    try:
        pairs = getaddresses([value])
    except (HeaderParseError, TypeError, ValueError) as e:
        raise AddressParseError(f"mail: {e}") from e

    addresses = []
    for _name, address in pairs:
        # getaddresses signals unparsable input with an empty pair
        if not address or "@" not in address:
            raise AddressParseError(f"mail: invalid address list {value!r}")
        addresses.append(address)
    return addresses


def resolve_topic(
    recipient: str,
    domain: str,
    prefix: Optional[str] = "",
    topic_pattern: Union[str, Pattern[str], None] = None,
) -> str:
    """Resolve a recipient address to a topic name.

    Args:
        recipient: RCPT TO value supplied by the remote client
        domain: Domain the gateway accepts mail for
        prefix: Required local-part prefix (empty disables the check)
        topic_pattern: Topic validation pattern (defaults to TOPIC_PATTERN)

    Returns:
        str: Validated topic name

    Raises:
        AddressParseError: Malformed address syntax
        TooManyRecipientsError: Zero or several addresses
        InvalidDomainError: Address not under @domain
        InvalidAddressError: Local part does not start with prefix
        InvalidTopicError: Remainder is not a valid topic name
    """
    addresses = parse_address_list(recipient)
    if len(addresses) != 1:
        raise TooManyRecipientsError()

    address = addresses[0]
    suffix = "@" + domain
    if not address.endswith(suffix):
        raise InvalidDomainError()
    topic = address[:-len(suffix)]

    if prefix:
        if not topic.startswith(prefix):
            raise InvalidAddressError()
        topic = topic[len(prefix):]

    if topic_pattern is None:
        regex = TOPIC_REGEX
    elif isinstance(topic_pattern, str):
        regex = re.compile(topic_pattern)
    else:
        regex = topic_pattern
    if not regex.fullmatch(topic):
        raise InvalidTopicError()

    return topic
