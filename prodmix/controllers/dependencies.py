"""Shared FastAPI dependency providers for controller layer."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from prodmix.domain.constraints import SolverConfig
from prodmix.services.production_service import ProductionMixService
from prodmix.services.simplex_service import solver_config_from_settings
from prodmix.utils.config import Settings, get_settings


def get_app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        settings = get_settings()
        request.app.state.settings = settings
    return settings


def get_production_service(request: Request) -> ProductionMixService:
    service = getattr(request.app.state, "production_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Production service is not initialized",
        )
    return service


def get_solver_config(request: Request) -> SolverConfig:
    service = getattr(request.app.state, "production_service", None)
    if service is not None:
        return service.solver_config
    return solver_config_from_settings(get_app_settings(request))
