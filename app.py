"""
app.py: FastAPI application factory.

This is the ASGI application object imported by uvicorn.
It wires the production-mix service and registers the solver router.

Usage (via launcher):
    python main.py

Usage (direct uvicorn):
    uvicorn app:app --reload
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from prodmix.controllers.solver_controller import router as solver_router
from prodmix.services.production_service import ProductionMixService
from prodmix.utils.config import Settings, get_settings
from prodmix.utils.logger import get_logger


logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build and wire the FastAPI application.

    Services are attached to app.state; controllers resolve them per request
    through the providers in prodmix.controllers.dependencies.
    """
    resolved_settings = settings or get_settings()
    production_service = ProductionMixService(settings=resolved_settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "Startup complete | app=%s | version=%s | tolerance=%s | iteration_factor=%s",
            resolved_settings.app_name,
            resolved_settings.app_version,
            resolved_settings.solver_tolerance,
            resolved_settings.solver_iteration_factor,
        )
        yield

    app = FastAPI(
        title=resolved_settings.app_name,
        version=resolved_settings.app_version,
        lifespan=lifespan,
    )
    app.include_router(solver_router)

    app.state.settings = resolved_settings
    app.state.production_service = production_service

    return app


# Module-level app object for uvicorn
app = create_app()
