"""SMTP session ID management for log correlation.

Every SMTP connection gets a short session ID that is attached to all log
records emitted while handling it.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

# Context variable for session_id (async-safe, one asyncio task per connection)
session_id_var: ContextVar[Optional[str]] = ContextVar("session_id", default=None)


def generate_session_id() -> str:
    """Generate a new unique session ID.

    Returns:
        str: First 12 hex characters of a UUID v4
    """
    return uuid.uuid4().hex[:12]


def get_session_id() -> str:
    """Get current session ID from context.

    Returns:
        str: Current session ID or "no-session-id" if not set
    """
    return session_id_var.get() or "no-session-id"


def set_session_id(session_id: str) -> None:
    session_id_var.set(session_id)
