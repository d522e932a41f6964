# src/wardpickup/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance, owns the store/ledger lifecycle (built at
startup, closed at shutdown) and maps domain errors to HTTP responses.
Business logic lives in `wardpickup.engine`; endpoints live in `wardpickup.api.routes`.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware

from wardpickup.config.settings import Settings, get_settings
from wardpickup.core.errors import PickupError
from wardpickup.core.logging import configure_logging
from wardpickup.engine.services import Services, build_services

from .routes import router
from .worker_routes import router as worker_router

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Build the API. Pass `services` to run against pre-built (e.g. in-memory) handles."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = services is None
        app.state.services = services if services is not None else build_services(settings)
        logger.info("Store backend=%s ledger backend=%s", settings.store.backend, settings.ledger.backend)
        try:
            yield
        finally:
            if owned:
                app.state.services.close()

    app = FastAPI(title=f"{settings.app.name} API", version="0.1.0", lifespan=lifespan)

    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_credentials=False,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.exception_handler(PickupError)
    async def _pickup_error(request: Request, exc: PickupError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.as_detail()})

    app.include_router(router)
    app.include_router(worker_router)
    return app


configure_logging()

app = create_app()
