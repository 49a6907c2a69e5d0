"""Gateway observability API and component wiring.

Builds the SMTP backend (publisher, counters) from settings and the FastAPI
app exposing /metrics, /health and /stats for it.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from config import Settings
from infrastructure.ingest.smtp_session import Publisher, SMTPBackend, SMTPBackendConfig
from infrastructure.publishing import InMemoryPublisher, RedisPublisher
from observability.router import router as observability_router

logger = logging.getLogger(__name__)


def create_publisher(settings: Settings) -> Publisher:
    """Create the publisher selected by settings.PUBLISHER."""
    if settings.PUBLISHER == "memory":
        logger.warning("Using in-process publisher, messages are not delivered to Redis")
        return InMemoryPublisher()
    return RedisPublisher.from_url(settings.REDIS_URL, settings.PUBLISH_CHANNEL_PREFIX)


def create_backend(settings: Settings, publisher: Optional[Publisher] = None) -> SMTPBackend:
    """Create the SMTP backend.

    Args:
        settings: Application settings
        publisher: Publisher to use (created from settings if omitted)
    """
    if publisher is None:
        publisher = create_publisher(settings)
    return SMTPBackend(SMTPBackendConfig.from_settings(settings), publisher)


def create_app(backend: SMTPBackend) -> FastAPI:
    """Create the observability app for backend."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Observability API starting up...")
        yield
        success, failure = backend.counters()
        logger.info(f"Observability API shutting down (SMTP: {success} successful, {failure} failed)")

    app = FastAPI(
        title="topicmail",
        description="Email-to-topic gateway",
        version="0.1.0",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.backend = backend
    app.include_router(observability_router)
    return app
