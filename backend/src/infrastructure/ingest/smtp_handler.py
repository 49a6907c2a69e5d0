"""SMTP Handler for email-to-topic ingestion.

Implements the aiosmtpd handler hooks on top of SMTPBackend/SMTPSession:

    MAIL FROM  -> SMTPSession.mail
    RCPT TO    -> SMTPSession.rcpt   (recipient resolved to a topic)
    DATA       -> SMTPSession.data   (body extracted, message published)
    RSET       -> SMTPSession.reset
    QUIT       -> SMTPSession.logout

One gateway session is kept per aiosmtpd session (i.e. per connection). It is
created by AUTH through SMTPBackend.login, or anonymously on first use.

Architecture: Hexagonal - Infrastructure adapter implementing email ingestion
"""

import asyncio
import contextvars
import functools
import logging
import weakref
from typing import List, Optional

from aiosmtpd.smtp import SMTP, AuthResult, Envelope, LoginPassword, Session

from domain.errors import GatewayError, NoRecipientError, PublishError, RecipientError
from observability.metrics import smtp_sessions_active
from observability.request_id import generate_session_id, set_session_id

from .smtp_session import SMTPBackend, SMTPSession

logger = logging.getLogger(__name__)

MAX_RECIPIENTS = 1


class TopicSMTPHandler:
    """aiosmtpd handler routing each accepted email to a topic.

    Recipient handling:
    - ntfy-alerts@example.com -> topic 'alerts' (prefix 'ntfy-', domain 'example.com')
    - only one recipient per transaction, further RCPTs get 452
    - rejected recipients get 550, the transaction can be retried

    Authentication is accepted for any credentials (see authenticate()).
    """

    def __init__(self, backend: SMTPBackend):
        """Initialize SMTP handler.

        Args:
            backend: Backend owning configuration, publisher and counters
        """
        self.backend = backend
        self._sessions: "weakref.WeakKeyDictionary[Session, SMTPSession]" = weakref.WeakKeyDictionary()
        self._session_ids: "weakref.WeakKeyDictionary[Session, str]" = weakref.WeakKeyDictionary()

    def gateway_session(self, session: Session) -> SMTPSession:
        """Return the gateway session for an aiosmtpd session, creating it anonymously."""
        gateway_session = self._sessions.get(session)
        if gateway_session is None:
            gateway_session = self._bind(session, self.backend.anonymous_login())
        set_session_id(self._session_ids[session])
        return gateway_session

    def _bind(self, session: Session, gateway_session: SMTPSession) -> SMTPSession:
        if session not in self._sessions:
            smtp_sessions_active.inc()
            weakref.finalize(session, smtp_sessions_active.dec)
        session_id = generate_session_id()
        self._sessions[session] = gateway_session
        self._session_ids[session] = session_id
        set_session_id(session_id)
        peer = getattr(session, "peer", None)
        logger.info(f"SMTP session started (peer={peer})")
        return gateway_session

    def authenticate(
        self,
        server: SMTP,
        session: Session,
        envelope: Envelope,
        mechanism: str,
        auth_data,
    ) -> AuthResult:
        """aiosmtpd authenticator accepting every login."""
        username = ""
        password = ""
        if isinstance(auth_data, LoginPassword):
            username = auth_data.login.decode("utf-8", errors="replace")
            password = auth_data.password.decode("utf-8", errors="replace")
        gateway_session = self._bind(session, self.backend.login(username, password))
        gateway_session.auth_plain(username, password)
        return AuthResult(success=True, auth_data=auth_data)

    async def handle_MAIL(
        self,
        server: SMTP,
        session: Session,
        envelope: Envelope,
        address: str,
        mail_options: List[str],
    ) -> str:
        self.gateway_session(session).mail(address, mail_options)
        envelope.mail_from = address
        envelope.mail_options.extend(mail_options)
        return "250 OK"

    async def handle_RCPT(
        self,
        server: SMTP,
        session: Session,
        envelope: Envelope,
        address: str,
        rcpt_options: List[str],
    ) -> str:
        """Handle RCPT TO: resolve the recipient to a topic.

        Returns:
            str: '250 OK', '452 ...' (too many recipients) or '550 ...' (rejected)
        """
        gateway_session = self.gateway_session(session)
        if len(envelope.rcpt_tos) >= MAX_RECIPIENTS:
            logger.warning(f"Rejecting additional recipient {address}")
            return "452 4.5.3 Too many recipients"

        try:
            topic = gateway_session.rcpt(address)
        except RecipientError as e:
            logger.warning(f"Recipient {address} rejected: {e}")
            return f"550 5.1.1 Recipient rejected: {e}"

        envelope.rcpt_tos.append(address)
        envelope.rcpt_options.extend(rcpt_options)
        logger.info(f"Recipient {address} accepted for topic {topic}")
        return "250 OK"

    async def handle_DATA(
        self,
        server: SMTP,
        session: Session,
        envelope: Envelope,
    ) -> str:
        """Handle DATA: extract, assemble and publish the message.

        The session runs in the default executor so a blocking publisher does
        not hold up other connections.

        Returns:
            str: '250 ...' on success
                 '503 ...' DATA without accepted recipient
                 '451 ...' publisher failure (temporary)
                 '554 ...' message content rejected
        """
        gateway_session = self.gateway_session(session)
        content = envelope.content
        if isinstance(content, str):
            content = content.encode("utf-8", errors="surrogateescape")

        loop = asyncio.get_running_loop()
        ctx = contextvars.copy_context()
        try:
            message = await loop.run_in_executor(
                None, functools.partial(ctx.run, gateway_session.data, content)
            )
        except NoRecipientError as e:
            logger.warning(f"DATA rejected: {e}")
            return "503 5.5.1 Error: need RCPT command"
        except PublishError as e:
            logger.error(f"Publishing failed: {e}")
            return f"451 4.3.0 Error: {e}"
        except GatewayError as e:
            logger.warning(f"Message from {envelope.mail_from} rejected: {e}")
            return f"554 5.6.0 Message rejected: {e}"

        logger.info(
            f"Received mail: from={envelope.mail_from}, topic={message.topic}, "
            f"id={message.id}, size={len(content)} bytes"
        )
        return "250 Message accepted for delivery"

    async def handle_RSET(
        self,
        server: SMTP,
        session: Session,
        envelope: Envelope,
    ) -> str:
        self.gateway_session(session).reset()
        return "250 OK"

    async def handle_QUIT(
        self,
        server: SMTP,
        session: Session,
        envelope: Envelope,
    ) -> str:
        gateway_session: Optional[SMTPSession] = self._sessions.pop(session, None)
        if gateway_session is not None:
            gateway_session.logout()
        self._session_ids.pop(session, None)
        logger.info("SMTP session closed")
        return "221 Bye"
