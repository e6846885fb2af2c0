"""FastAPI application entrypoint wired with fault translation."""

from __future__ import annotations

import logging

from fastapi import FastAPI

from api_faults.core.config import FaultSettings
from api_faults.core.config import get_fault_settings
from api_faults.core.dispatcher import build_dispatcher
from api_faults.core.handlers import register_error_handlers
from api_faults.core.log_setup import configure_logging

logger = logging.getLogger(__name__)


def create_app(settings: FaultSettings | None = None) -> FastAPI:
    """Build an application whose every failure answers with the shared envelope."""
    settings = settings or get_fault_settings()
    configure_logging(settings.log_level)
    logger.info("Starting api-faults with settings=%s", settings.safe_for_logging())

    app = FastAPI(title="api-faults")
    register_error_handlers(app, build_dispatcher(settings))

    @app.get("/health")
    def health() -> dict[str, str]:
        """Health check stub endpoint for service readiness."""
        return {"status": "ok"}

    return app


app = create_app()
