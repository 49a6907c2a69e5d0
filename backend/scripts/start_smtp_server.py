#!/usr/bin/env python3
"""SMTP Server Startup Script for the email-to-topic gateway.

Starts an aiosmtpd server with TopicSMTPHandler and the observability API
(/metrics, /health, /stats) on uvicorn.

Usage:
    python scripts/start_smtp_server.py

Environment Variables: see config.Settings
    SMTP_SERVER_HOST / SMTP_SERVER_PORT: SMTP bind address (default: 0.0.0.0:2525)
    SMTP_SERVER_DOMAIN: Domain mail is accepted for
    SMTP_SERVER_ADDR_PREFIX: Required recipient prefix (e.g. 'ntfy-')
    SMTP_MAX_MESSAGE_BYTES: Max email size in bytes (default: 1 MB)
    PUBLISHER / REDIS_URL: Where messages are published
    HTTP_HOST / HTTP_PORT: Observability API bind address
"""

import asyncio
import logging
import os
import sys

import uvicorn
from aiosmtpd.controller import Controller

# Add backend/src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from config import get_settings
from infrastructure.ingest.smtp_handler import TopicSMTPHandler
from main import create_app, create_backend
from observability.logging_config import configure_logging

logger = logging.getLogger(__name__)


async def main():
    """Start SMTP server and observability API."""
    settings = get_settings()
    configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

    logger.info("=== Email-to-topic gateway starting ===")
    logger.info(f"SMTP Bind: {settings.SMTP_SERVER_HOST}:{settings.SMTP_SERVER_PORT}")
    logger.info(f"SMTP Domain: {settings.SMTP_SERVER_DOMAIN}")
    logger.info(f"Max Message Size: {settings.SMTP_MAX_MESSAGE_BYTES} bytes")
    logger.info(f"Message Limit: {settings.MESSAGE_LIMIT} characters")
    logger.info(f"Publisher: {settings.PUBLISHER}")

    backend = create_backend(settings)
    smtp_handler = TopicSMTPHandler(backend)

    controller = Controller(
        smtp_handler,
        hostname=settings.SMTP_SERVER_HOST,
        port=settings.SMTP_SERVER_PORT,
        server_hostname=settings.SMTP_SERVER_DOMAIN,
        data_size_limit=settings.SMTP_MAX_MESSAGE_BYTES,
        authenticator=smtp_handler.authenticate,
        # All logins are accepted, no credentials need protecting
        auth_require_tls=False,
        enable_SMTPUTF8=True,
    )
    controller.start()

    logger.info(f"SMTP server started on {settings.SMTP_SERVER_HOST}:{settings.SMTP_SERVER_PORT}")
    logger.info(
        f"Accepting emails to: {settings.SMTP_SERVER_ADDR_PREFIX}<topic>@{settings.SMTP_SERVER_DOMAIN}"
    )

    server = uvicorn.Server(uvicorn.Config(
        create_app(backend),
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        log_config=None,
    ))
    try:
        await server.serve()
    finally:
        logger.info("Shutting down SMTP server...")
        controller.stop()
        success, failure = backend.counters()
        logger.info(f"SMTP server stopped ({success} successful, {failure} failed)")


if __name__ == '__main__':
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, exiting")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Gateway failed: {e}", exc_info=True)
        sys.exit(1)
