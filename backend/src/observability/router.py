"""Observability API endpoints.

Provides metrics, health checks and SMTP delivery statistics for monitoring.
The SMTP backend and publisher are read from app.state.
"""

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from .health import (
    check_publisher_health,
    check_smtp_health,
    get_overall_health,
    HealthStatus,
)
from .logging_config import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Observability"])


@router.get(
    "/metrics",
    summary="Prometheus metrics endpoint",
    include_in_schema=False,
)
def metrics():
    """Expose Prometheus metrics in text exposition format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


@router.get(
    "/stats",
    summary="SMTP delivery statistics",
)
def stats(request: Request):
    """Return the SMTP success/failure counters.

    Returns:
        dict: {"smtp": {"success": int, "failure": int}}
    """
    success, failure = request.app.state.backend.counters()
    return {"smtp": {"success": success, "failure": failure}}


@router.get(
    "/health",
    summary="Health check endpoint",
    status_code=200,
)
def health_check(request: Request):
    """Check health of the publisher and the SMTP backend.

    Returns 200 OK unless a component is unhealthy, 503 otherwise.
    """
    backend = request.app.state.backend
    success, failure = backend.counters()
    components = {
        "publisher": check_publisher_health(backend.publisher),
        "smtp": check_smtp_health(success, failure),
    }

    overall_status = get_overall_health(components)
    response_data = {
        "status": overall_status.value,
        "components": {
            name: {
                "status": comp.status.value,
                "message": comp.message,
                "latency_ms": comp.latency_ms,
            }
            for name, comp in components.items()
        }
    }

    status_code = 200 if overall_status != HealthStatus.UNHEALTHY else 503
    return JSONResponse(
        content=response_data,
        status_code=status_code
    )
