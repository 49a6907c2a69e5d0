"""Build the outbound message for one accepted email.

Steps:
1. Extract the plain-text body and strip surrounding whitespace
2. Hard truncate it to the configured message limit
3. Decode the Subject header (RFC 2047 encoded words) into the title
4. Subject-only mail: move the title into the message body
"""

import binascii
import logging
import re
from email.errors import HeaderParseError
from email.header import decode_header, make_header
from email.message import EmailMessage
from typing import Optional

from domain.errors import HeaderDecodeError
from domain.messages import OutboundMessage, new_default_message

from .mime_parser import parse_mime_message, read_mail_body

logger = logging.getLogger(__name__)

_FOLDING_RE = re.compile(r"\r?\n(?=[ \t])")


def raw_header(msg: EmailMessage, name: str) -> Optional[str]:
    """Return the first raw (undecoded, unfolded) value of header name.

    8-bit header bytes (SMTPUTF8 clients) are read as UTF-8.
    """
    for key, value in msg.raw_items():
        if key.lower() == name.lower():
            text = str(value).encode("utf-8", "surrogateescape").decode("utf-8", "replace")
            return _FOLDING_RE.sub("", text)
    return None


def decode_subject(subject: str) -> str:
    """Decode RFC 2047 encoded words in a header value.

    Examples:
        '=?utf-8?q?Caf=C3=A9_open?=' -> 'Café open'
        'Plain subject'               -> 'Plain subject'

    Raises:
        HeaderDecodeError: Malformed encoded word or unknown charset
    """
    try:
        return str(make_header(decode_header(subject)))
    except (HeaderParseError, LookupError, UnicodeDecodeError, binascii.Error) as e:
        raise HeaderDecodeError(f"mime: invalid encoded word in {subject!r}: {e}") from e


def truncate(text: str, limit: int) -> str:
    """Cut text to at most limit characters."""
    if len(text) > limit:
        return text[:limit]
    return text


def build_message(topic: str, msg: EmailMessage, message_limit: int) -> OutboundMessage:
    """Assemble the outbound message from a parsed email.

    Args:
        topic: Topic resolved during RCPT
        msg: Parsed email
        message_limit: Maximum body length in characters

    Returns:
        OutboundMessage: Message ready to publish

    Raises:
        ExtractionError: Body could not be extracted
        HeaderDecodeError: Subject could not be decoded
    """
    body = truncate(read_mail_body(msg).strip(), message_limit)
    message = new_default_message(topic, body)

    subject = (raw_header(msg, "Subject") or "").strip()
    if subject:
        message.title = decode_subject(subject)

    if message.title and not message.message:
        message.message = message.title  # Subject-only mail reads better as a body
        message.title = ""
    return message


def assemble_message(topic: str, raw_mime: bytes, message_limit: int) -> OutboundMessage:
    """Parse raw DATA bytes and assemble the outbound message."""
    return build_message(topic, parse_mime_message(raw_mime), message_limit)
