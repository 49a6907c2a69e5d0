"""Observability module for the email-to-topic gateway.

Provides structured logging, SMTP session correlation, metrics and health
checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import smtp_deliveries_total, smtp_sessions_active
from .request_id import session_id_var, get_session_id, set_session_id, generate_session_id
from .health import HealthStatus, ComponentHealth

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "smtp_deliveries_total",
    "smtp_sessions_active",
    # Session ID
    "session_id_var",
    "get_session_id",
    "set_session_id",
    "generate_session_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
]
