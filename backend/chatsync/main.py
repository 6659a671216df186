"""Punto de entrada HTTP para disparar la sincronización desde un scheduler."""

import logging

from fastapi import FastAPI

from chatsync.api.routes.health import router as health_router
from chatsync.api.routes.jobs import router as jobs_router
from chatsync.core.config import settings
from chatsync.core.logging import configure_logging, resolve_log_level


def create_app() -> FastAPI:
    """Crea y configura la instancia de FastAPI."""
    default_log_level = logging.DEBUG if settings.environment != "production" else logging.INFO
    configure_logging(
        level=resolve_log_level(settings.log_level, default=default_log_level),
        log_file=settings.log_file_path,
    )

    app = FastAPI(title="Chatsync", version="0.1.0")
    app.include_router(health_router)
    app.include_router(jobs_router)
    return app


app = create_app()
