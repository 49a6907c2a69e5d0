"""SMTP backend and per-connection session state machine.

The SMTP engine drives one SMTPSession per connection through

    mail -> rcpt -> data -> (reset | logout)

States:
    IDLE               - no recipient accepted (initial, after data/reset/logout)
    RECIPIENT_ACCEPTED - topic resolved by rcpt, waiting for data

Every rcpt/data step reports its outcome to the backend's DeliveryCounters,
errors are re-raised unchanged so the engine can reject the command. A failed
step never invalidates the session; the next transaction starts from IDLE.
"""

import logging
import re
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Tuple, TypeVar, Union

from domain.delivery import DeliveryCounters
from domain.errors import NoRecipientError, PublishError
from domain.messages import OutboundMessage, PublisherPort
from domain.topics import resolve_topic

from .message_assembler import assemble_message

logger = logging.getLogger(__name__)

T = TypeVar("T")

Publisher = Union[PublisherPort, Callable[[OutboundMessage], Any]]


class SessionState(str, Enum):
    """Session state enum."""
    IDLE = "IDLE"
    RECIPIENT_ACCEPTED = "RECIPIENT_ACCEPTED"


@dataclass
class SMTPBackendConfig:
    """Settings the session pipeline depends on.

    Attributes:
        domain: Domain mail is accepted for (e.g. 'ntfy.example.com')
        address_prefix: Required local-part prefix, '' to disable
        message_limit: Maximum message body length in characters
        topic_pattern: Topic name validation pattern
    """
    domain: str
    address_prefix: str = ""
    message_limit: int = 4096
    topic_pattern: Optional[str] = None

    def __post_init__(self):
        if not self.domain:
            raise ValueError("SMTP server domain must not be empty")
        if self.message_limit <= 0:
            raise ValueError("message limit must be a positive integer")
        if self.topic_pattern is not None:
            try:
                re.compile(self.topic_pattern)
            except re.error as e:
                raise ValueError(f"invalid topic pattern: {e}") from e

    @classmethod
    def from_settings(cls, settings) -> "SMTPBackendConfig":
        return cls(
            domain=settings.SMTP_SERVER_DOMAIN,
            address_prefix=settings.SMTP_SERVER_ADDR_PREFIX,
            message_limit=settings.MESSAGE_LIMIT,
            topic_pattern=settings.TOPIC_PATTERN,
        )


class SMTPBackend:
    """Creates sessions and owns the shared delivery counters.

    Logins are always accepted; delivery authorization is keyed on the
    recipient topic, not on the SMTP user.
    """

    def __init__(
        self,
        config: SMTPBackendConfig,
        publisher: Publisher,
        counters: Optional[DeliveryCounters] = None,
    ):
        """Initialize backend.

        Args:
            config: Gateway settings
            publisher: PublisherPort or callable receiving OutboundMessage
            counters: Shared counters (a fresh instance if omitted)
        """
        self.config = config
        self.publisher = publisher
        self.delivery_counters = counters if counters is not None else DeliveryCounters()

    def login(self, username: str, password: str) -> "SMTPSession":
        logger.debug(f"Login accepted for user {username!r}")
        return SMTPSession(self)

    def anonymous_login(self) -> "SMTPSession":
        return SMTPSession(self)

    def counters(self) -> Tuple[int, int]:
        """Return (success, failure) delivery counts."""
        return self.delivery_counters.snapshot()

    def publish(self, message: OutboundMessage) -> None:
        if isinstance(self.publisher, PublisherPort):
            self.publisher.publish(message)
        else:
            self.publisher(message)


class SMTPSession:
    """State of one SMTP connection."""

    def __init__(self, backend: SMTPBackend):
        self.backend = backend
        self._lock = threading.Lock()
        self._topic = ""

    @property
    def topic(self) -> str:
        with self._lock:
            return self._topic

    @property
    def state(self) -> SessionState:
        with self._lock:
            return SessionState.RECIPIENT_ACCEPTED if self._topic else SessionState.IDLE

    def auth_plain(self, username: str, password: str) -> None:
        """Accept any credentials."""
        return None

    def mail(self, sender: str, options: Optional[Any] = None) -> None:
        """Accept any sender."""
        return None

    def rcpt(self, to: str) -> str:
        """Resolve the recipient to a topic and remember it.

        Args:
            to: RCPT TO address

        Returns:
            str: Resolved topic

        Raises:
            RecipientError: Address rejected (counted as a failure)
        """
        def resolve() -> str:
            conf = self.backend.config
            topic = resolve_topic(to, conf.domain, conf.address_prefix, conf.topic_pattern)
            with self._lock:
                self._topic = topic
            return topic

        return self._with_fail_count(resolve)

    def data(self, raw_mime: bytes) -> OutboundMessage:
        """Turn the message into an outbound message and publish it.

        Args:
            raw_mime: Complete message (headers and body), size-limited by the engine

        Returns:
            OutboundMessage: Published message

        Raises:
            NoRecipientError: No recipient accepted in this transaction
            ExtractionError: Body could not be extracted
            HeaderDecodeError: Subject could not be decoded
            PublishError: Publisher failed
        """
        def deliver() -> OutboundMessage:
            with self._lock:
                topic = self._topic
            if not topic:
                raise NoRecipientError()
            try:
                message = assemble_message(topic, raw_mime, self.backend.config.message_limit)
                self._publish(message)
            finally:
                with self._lock:
                    self._topic = ""
            return message

        return self._with_fail_count(deliver, count_success=True)

    def reset(self) -> None:
        with self._lock:
            self._topic = ""

    def logout(self) -> None:
        with self._lock:
            self._topic = ""

    def _publish(self, message: OutboundMessage) -> None:
        try:
            self.backend.publish(message)
        except PublishError:
            raise
        except Exception as e:
            raise PublishError(f"publish to topic {message.topic!r} failed: {e}") from e

    def _with_fail_count(self, fn: Callable[[], T], count_success: bool = False) -> T:
        """Run fn, counting a raised error as a failed delivery."""
        try:
            result = fn()
        except Exception as e:
            self.backend.delivery_counters.record_outcome(e)
            raise
        if count_success:
            self.backend.delivery_counters.record_outcome(None)
        return result
