"""Pytest fixtures for gateway testing.

Provides reusable test fixtures for:
- Gateway configuration and SMTP backend with an in-memory publisher
- Raw email builders (plain, multipart)

Usage:
    def test_delivery(backend, publisher, plain_email):
        session = backend.anonymous_login()
        session.rcpt("ntfy-alerts@ntfy.example.com")
        session.data(plain_email("Disk full"))
        assert publisher.messages("alerts")
"""

import sys
from pathlib import Path

import pytest

# Adjust imports based on project structure
backend_src = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(backend_src))

from infrastructure.ingest.smtp_session import SMTPBackend, SMTPBackendConfig
from infrastructure.publishing import InMemoryPublisher


TEST_DOMAIN = "ntfy.example.com"
TEST_PREFIX = "ntfy-"


def build_plain_email(body: str, subject: str = None, content_type: str = "text/plain; charset=utf-8") -> bytes:
    """Build a single-part email."""
    lines = [
        "From: Monitoring <monitor@example.org>",
        f"To: {TEST_PREFIX}alerts@{TEST_DOMAIN}",
    ]
    if subject is not None:
        lines.append(f"Subject: {subject}")
    if content_type is not None:
        lines.append(f"Content-Type: {content_type}")
    lines.append("")
    lines.append(body)
    return "\r\n".join(lines).encode("utf-8")


def build_multipart_email(parts, subject: str = None, subtype: str = "alternative", boundary: str = "XYZ-boundary") -> bytes:
    """Build a multipart email from (content_type, body) pairs.

    A content_type of None omits the part's Content-Type header.
    """
    lines = [
        "From: Monitoring <monitor@example.org>",
        f"To: {TEST_PREFIX}alerts@{TEST_DOMAIN}",
    ]
    if subject is not None:
        lines.append(f"Subject: {subject}")
    lines.append("MIME-Version: 1.0")
    lines.append(f'Content-Type: multipart/{subtype}; boundary="{boundary}"')
    lines.append("")
    for content_type, body in parts:
        lines.append(f"--{boundary}")
        if content_type is not None:
            lines.append(f"Content-Type: {content_type}")
        lines.append("")
        lines.append(body)
    lines.append(f"--{boundary}--")
    lines.append("")
    return "\r\n".join(lines).encode("utf-8")


@pytest.fixture
def gateway_config() -> SMTPBackendConfig:
    """Gateway configuration with prefix and a small message limit."""
    return SMTPBackendConfig(
        domain=TEST_DOMAIN,
        address_prefix=TEST_PREFIX,
        message_limit=100,
    )


@pytest.fixture
def publisher() -> InMemoryPublisher:
    return InMemoryPublisher()


@pytest.fixture
def backend(gateway_config, publisher) -> SMTPBackend:
    """SMTP backend with fresh counters and in-memory publisher."""
    return SMTPBackend(gateway_config, publisher)


@pytest.fixture
def plain_email():
    return build_plain_email


@pytest.fixture
def multipart_email():
    return build_multipart_email
