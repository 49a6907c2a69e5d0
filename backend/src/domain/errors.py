"""Gateway exception hierarchy.

Every error raised while handling RCPT or DATA derives from GatewayError so the
SMTP handler can translate it into a protocol reply and the session can count
it as a failed delivery.
"""


class GatewayError(Exception):
    """Base class for all email-to-topic gateway errors."""


# Recipient / topic resolution

class RecipientError(GatewayError):
    """Recipient address cannot be turned into a topic."""


class AddressParseError(RecipientError):
    """Recipient header value is not a valid address list."""


class TooManyRecipientsError(RecipientError):
    """Address list does not contain exactly one address."""

    def __init__(self, message: str = "too many recipients"):
        super().__init__(message)


class InvalidDomainError(RecipientError):
    """Recipient is not addressed to the configured domain."""

    def __init__(self, message: str = "invalid domain"):
        super().__init__(message)


class InvalidAddressError(RecipientError):
    """Recipient local part does not start with the configured prefix."""

    def __init__(self, message: str = "invalid address"):
        super().__init__(message)


class InvalidTopicError(RecipientError):
    """Remaining local part is not a valid topic name."""

    def __init__(self, message: str = "invalid topic"):
        super().__init__(message)


class NoRecipientError(GatewayError):
    """DATA was received before a recipient was accepted."""

    def __init__(self, message: str = "no valid recipient"):
        super().__init__(message)


# Body extraction

class ExtractionError(GatewayError):
    """Plain-text body cannot be extracted from the message."""


class ContentTypeParseError(ExtractionError):
    """Content-Type header is missing or malformed."""


class UnsupportedContentTypeError(ExtractionError):
    """Top-level media type is neither text/plain nor multipart/*."""

    def __init__(self, message: str = "unsupported content type"):
        super().__init__(message)


class BodyReadError(ExtractionError):
    """Message body cannot be read or decoded."""


class MultipartReadError(BodyReadError):
    """Multipart structure cannot be iterated."""


class NoPlainTextPartError(MultipartReadError):
    """All parts were scanned without finding text/plain (end of parts)."""

    def __init__(self, message: str = "multipart: no text/plain part (end of parts)"):
        super().__init__(message)


# Assembly / publishing

class HeaderDecodeError(GatewayError):
    """Subject header contains a malformed encoded word."""


class PublishError(GatewayError):
    """Message bus rejected or failed to accept the message."""
