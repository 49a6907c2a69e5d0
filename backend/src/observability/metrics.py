"""Prometheus metrics for the email-to-topic gateway.

Defines and exposes operational metrics for monitoring and alerting.
"""

from prometheus_client import Counter, Gauge

# SMTP delivery outcomes (mirrors DeliveryCounters)
smtp_deliveries_total = Counter(
    "topicmail_smtp_deliveries_total",
    "Total SMTP RCPT/DATA outcomes",
    ["status"]  # status: success|failure
)

# Active SMTP sessions
smtp_sessions_active = Gauge(
    "topicmail_smtp_sessions_active",
    "Number of open SMTP sessions"
)
