"""MIME Parser for plain-text body extraction.

Locates the single text/plain payload of an incoming email:
- text/plain messages: the whole body
- multipart/* messages: the first direct text/plain part (one level only,
  nested multiparts are not descended into)
- anything else: rejected

Content-Type headers are parsed strictly. A missing or malformed header is an
error rather than the RFC default of text/plain, both at the top level and
for every scanned part.
"""

import email.policy
import logging
import re
from email import errors as email_errors
from email.message import EmailMessage
from email.parser import BytesParser
from typing import Dict, Tuple

from domain.errors import (
    BodyReadError,
    ContentTypeParseError,
    MultipartReadError,
    NoPlainTextPartError,
    UnsupportedContentTypeError,
)

logger = logging.getLogger(__name__)

_MEDIA_TYPE_RE = re.compile(r"^[!#$%&'*+.^_`|~0-9A-Za-z-]+/[!#$%&'*+.^_`|~0-9A-Za-z-]+$")


def parse_mime_message(raw_mime: bytes) -> EmailMessage:
    """Parse raw MIME bytes into an EmailMessage.

    Args:
        raw_mime: Raw message bytes as received by DATA

    Returns:
        EmailMessage: Parsed message

    Raises:
        BodyReadError: If the bytes cannot be parsed at all
    """
    try:
        return BytesParser(policy=email.policy.default).parsebytes(raw_mime)
    except (TypeError, ValueError, email_errors.MessageError) as e:
        raise BodyReadError(f"Invalid MIME message: {e}") from e


def parse_media_type(value) -> Tuple[str, Dict[str, str]]:
    """Parse a Content-Type value into (media type, params).

    Args:
        value: Header value, e.g. 'multipart/alternative; boundary="b1"'

    Returns:
        Tuple[str, Dict[str, str]]: Lowercased media type and parameters

    Raises:
        ContentTypeParseError: If the value is missing, empty or malformed
    """
    text = str(value).strip() if value is not None else ""
    if not text:
        raise ContentTypeParseError("mime: no media type")

    media_type = text.split(";", 1)[0].strip()
    if not _MEDIA_TYPE_RE.match(media_type):
        raise ContentTypeParseError(f"mime: invalid media type {text!r}")

    # A trailing ';' without parameters is tolerated
    header = email.policy.default.header_factory("content-type", text.rstrip(";"))
    if any(isinstance(d, email_errors.InvalidHeaderDefect) for d in header.defects):
        raise ContentTypeParseError(f"mime: invalid media parameter in {text!r}")

    params = {k.lower(): v for k, v in header.params.items()}
    return header.content_type.lower(), params


def _read_text(part: EmailMessage) -> str:
    """Undo the part's transfer encoding and decode it with its charset.

    Bodies without a charset parameter are read as UTF-8.
    """
    payload = part.get_payload(decode=True)
    if payload is None:
        raise BodyReadError("Message body is not readable")
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except LookupError:
        logger.warning(f"Unknown charset {charset!r}, decoding body as UTF-8")
        return payload.decode("utf-8", errors="replace")


def read_mail_body(msg: EmailMessage) -> str:
    """Return the plain-text body of a parsed message.

    Args:
        msg: Parsed message

    Returns:
        str: Plain-text body

    Raises:
        ContentTypeParseError: Missing or malformed Content-Type
        UnsupportedContentTypeError: Neither text/plain nor multipart/*
        MultipartReadError: Multipart structure unreadable
        NoPlainTextPartError: No direct text/plain part
    """
    content_type, params = parse_media_type(msg.get("Content-Type"))

    if content_type == "text/plain":
        return _read_text(msg)

    if content_type.startswith("multipart/"):
        if not params.get("boundary"):
            raise MultipartReadError("multipart: boundary is empty")
        if not msg.is_multipart():
            raise MultipartReadError("multipart: NextPart: EOF")

        for index, part in enumerate(msg.iter_parts()):
            part_type, _ = parse_media_type(part.get("Content-Type"))
            if part_type != "text/plain":
                logger.debug(f"Skipping part {index} of type {part_type}")
                continue
            return _read_text(part)

        raise NoPlainTextPartError()

    raise UnsupportedContentTypeError()


def extract_plain_text_body(raw_mime: bytes) -> str:
    """Parse raw MIME bytes and return the plain-text body.

    Args:
        raw_mime: Raw message bytes

    Returns:
        str: Plain-text body
    """
    return read_mail_body(parse_mime_message(raw_mime))
