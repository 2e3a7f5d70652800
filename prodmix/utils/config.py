"""Environment-driven application settings."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env_float(name: str, default: float) -> float:
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        return float(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw_value!r}") from exc


def _env_int(name: str, default: int) -> int:
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return default
    try:
        return int(raw_value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw_value!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Immutable runtime settings shared by every layer."""

    app_name: str = "Production Mix Optimizer"
    app_version: str = "1.0.0"
    log_level: str = "INFO"
    solver_log_level: str = "INFO"
    solver_tolerance: float = 1e-9
    solver_iteration_factor: int = 10


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process; call ``cache_clear`` to reload."""
    defaults = Settings()
    return Settings(
        app_name=os.getenv("APP_NAME", defaults.app_name),
        app_version=os.getenv("APP_VERSION", defaults.app_version),
        log_level=os.getenv("LOG_LEVEL", defaults.log_level),
        solver_log_level=os.getenv("SOLVER_LOG_LEVEL", defaults.solver_log_level),
        solver_tolerance=_env_float("SOLVER_TOLERANCE", defaults.solver_tolerance),
        solver_iteration_factor=_env_int(
            "SOLVER_ITERATION_FACTOR",
            defaults.solver_iteration_factor,
        ),
    )
