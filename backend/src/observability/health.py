"""Health check utilities for the gateway.

Provides health checks for the publisher and the SMTP backend.
"""

import time
from enum import Enum
from typing import Dict, Optional
from dataclasses import dataclass

from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    """Health check status enum."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"
    DEGRADED = "degraded"


@dataclass
class ComponentHealth:
    """Health status for a single component."""
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None


def check_publisher_health(publisher) -> ComponentHealth:
    """Check publisher connectivity.

    Publishers exposing ping() (e.g. RedisPublisher) are probed, others are
    in-process and always healthy.

    Args:
        publisher: Configured publisher

    Returns:
        ComponentHealth: Publisher health status
    """
    ping = getattr(publisher, "ping", None)
    if ping is None:
        return ComponentHealth(status=HealthStatus.HEALTHY, message="In-process publisher")

    start = time.time()
    ok = ping()
    latency_ms = (time.time() - start) * 1000
    if ok:
        return ComponentHealth(
            status=HealthStatus.HEALTHY,
            message="Publisher connection OK",
            latency_ms=round(latency_ms, 2)
        )
    logger.error("Publisher health check failed")
    return ComponentHealth(
        status=HealthStatus.UNHEALTHY,
        message="Publisher not reachable"
    )


def check_smtp_health(success: int, failure: int) -> ComponentHealth:
    """Report SMTP delivery health from the delivery counters.

    The backend is degraded when failures outnumber successes.
    """
    message = f"{success} successful, {failure} failed deliveries"
    if failure > success:
        return ComponentHealth(status=HealthStatus.DEGRADED, message=message)
    return ComponentHealth(status=HealthStatus.HEALTHY, message=message)


def get_overall_health(components: Dict[str, ComponentHealth]) -> HealthStatus:
    """Determine overall health from component statuses.

    Args:
        components: Dictionary of component health statuses

    Returns:
        HealthStatus: Overall system health
    """
    if all(c.status == HealthStatus.HEALTHY for c in components.values()):
        return HealthStatus.HEALTHY

    if any(c.status == HealthStatus.UNHEALTHY for c in components.values()):
        return HealthStatus.UNHEALTHY

    return HealthStatus.DEGRADED
