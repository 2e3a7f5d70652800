"""HTTP controller layer for LP solving and production-mix planning."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from prodmix.controllers.dependencies import (
    get_app_settings,
    get_production_service,
    get_solver_config,
)
from prodmix.domain.constraints import SolverConfig
from prodmix.domain.models import Product, ProductionPlan, Resource
from prodmix.services.production_service import (
    ProductionMixService,
    ProductionValidationError,
    default_scenario,
)
from prodmix.services.simplex_service import (
    IterationLimitExceededError,
    ProblemValidationError,
    solve,
)
from prodmix.utils.config import Settings
from prodmix.utils.logger import get_logger


logger = get_logger(__name__)

router = APIRouter(tags=["solver"])

# Pivot loop hit its cap for this input.
ITERATION_LIMIT_STATUS_CODE = 422


class SolveRequest(BaseModel):
    """Raw LP in maximization form; every row is a <= constraint."""

    profits: list[float]
    constraints: list[list[float]] = Field(default_factory=list)
    availabilities: list[float] = Field(default_factory=list)
    num_variables: int | None = Field(default=None, ge=0)
    num_constraints: int | None = Field(default=None, ge=0)


class SolveResponse(BaseModel):
    optimal: bool
    status: str
    objective_value: float
    variables: list[float]
    slacks: list[float]
    dual_prices: list[float]
    iterations: int = Field(ge=0)


class ResourcePayload(BaseModel):
    name: str = Field(min_length=1)
    available: float = Field(allow_inf_nan=False)
    cost: float = Field(default=0.0, ge=0.0, allow_inf_nan=False)
    requirements: list[float]

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("resource name must be non-empty")
        return value

    def to_domain(self) -> Resource:
        return Resource(
            name=self.name,
            available=self.available,
            cost=self.cost,
            requirements=tuple(self.requirements),
        )


class ProductPayload(BaseModel):
    name: str = Field(min_length=1)
    profit: float = Field(allow_inf_nan=False)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("product name must be non-empty")
        return value

    def to_domain(self) -> Product:
        return Product(name=self.name, profit=self.profit)


class ScenarioPayload(BaseModel):
    resources: list[ResourcePayload]
    products: list[ProductPayload]


class ProductOutputResponse(BaseModel):
    name: str
    profit: float
    production: float = Field(ge=0.0)


class ResourceSensitivityResponse(BaseModel):
    name: str
    available: float
    used: float = Field(ge=0.0)
    slack: float
    dual_price: float
    unit_cost: float = Field(ge=0.0)
    limiting: bool
    marginal_gain: float


class ProductionPlanResponse(BaseModel):
    status: str
    optimal: bool
    total_profit: float
    total_resource_cost: float = Field(ge=0.0)
    products: list[ProductOutputResponse]
    resources: list[ResourceSensitivityResponse]


class SimulateRequest(ScenarioPayload):
    availability_override: dict[str, float] | None = None
    profit_override: dict[str, float] | None = None

    @field_validator("availability_override")
    @classmethod
    def validate_availability_override(
        cls,
        value: dict[str, float] | None,
    ) -> dict[str, float] | None:
        if value is None:
            return None
        for name, available in value.items():
            if not name.strip():
                raise ValueError("availability_override resource key must be non-empty")
            if available < 0.0:
                raise ValueError("availability_override values must be >= 0")
        return value


class SimulateResponse(BaseModel):
    baseline: ProductionPlanResponse
    scenario: ProductionPlanResponse
    profit_change: float
    production_change: dict[str, float]


class HealthResponse(BaseModel):
    status: str
    app_name: str
    app_version: str


def _plan_response(plan: ProductionPlan) -> ProductionPlanResponse:
    return ProductionPlanResponse(
        status=plan.status.value,
        optimal=plan.optimal,
        total_profit=plan.total_profit,
        total_resource_cost=plan.total_resource_cost,
        products=[
            ProductOutputResponse(
                name=item.name,
                profit=item.profit,
                production=item.production,
            )
            for item in plan.products
        ],
        resources=[
            ResourceSensitivityResponse(
                name=item.name,
                available=item.available,
                used=item.used,
                slack=item.slack,
                dual_price=item.dual_price,
                unit_cost=item.unit_cost,
                limiting=item.limiting,
                marginal_gain=item.marginal_gain,
            )
            for item in plan.resources
        ],
    )


def _to_domain(payload: ScenarioPayload) -> tuple[list[Resource], list[Product]]:
    return (
        [item.to_domain() for item in payload.resources],
        [item.to_domain() for item in payload.products],
    )


@router.get("/health", response_model=HealthResponse)
def health(settings: Settings = Depends(get_app_settings)) -> HealthResponse:
    return HealthResponse(
        status="ok",
        app_name=settings.app_name,
        app_version=settings.app_version,
    )


@router.get("/default_scenario", response_model=ScenarioPayload)
def get_default_scenario() -> ScenarioPayload:
    """Starting records for the production-mix form."""
    resources, products = default_scenario()
    return ScenarioPayload(
        resources=[
            ResourcePayload(
                name=item.name,
                available=item.available,
                cost=item.cost,
                requirements=list(item.requirements),
            )
            for item in resources
        ],
        products=[ProductPayload(name=item.name, profit=item.profit) for item in products],
    )


@router.post(
    "/solve",
    response_model=SolveResponse,
    status_code=status.HTTP_200_OK,
)
def solve_lp(
    payload: SolveRequest,
    config: SolverConfig = Depends(get_solver_config),
) -> SolveResponse:
    """Solve a raw LP; the blocking solve runs on the worker threadpool."""
    try:
        solution = solve(
            payload.profits,
            payload.constraints,
            payload.availabilities,
            config=config,
            num_variables=payload.num_variables,
            num_constraints=payload.num_constraints,
        )
        return SolveResponse(**solution.to_dict())
    except ProblemValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except IterationLimitExceededError as exc:
        raise HTTPException(
            status_code=ITERATION_LIMIT_STATUS_CODE,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected solve failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to solve linear program",
        ) from exc


@router.post(
    "/production_plan",
    response_model=ProductionPlanResponse,
    status_code=status.HTTP_200_OK,
)
def production_plan(
    payload: ScenarioPayload,
    service: ProductionMixService = Depends(get_production_service),
) -> ProductionPlanResponse:
    resources, products = _to_domain(payload)
    try:
        return _plan_response(service.plan(resources, products))
    except (ProductionValidationError, ProblemValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except IterationLimitExceededError as exc:
        raise HTTPException(
            status_code=ITERATION_LIMIT_STATUS_CODE,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected production planning failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to build production plan",
        ) from exc


@router.post(
    "/simulate",
    response_model=SimulateResponse,
    status_code=status.HTTP_200_OK,
)
def simulate(
    payload: SimulateRequest,
    service: ProductionMixService = Depends(get_production_service),
) -> SimulateResponse:
    """Compare the submitted records against a what-if variant."""
    resources, products = _to_domain(payload)
    try:
        comparison = service.simulate(
            resources,
            products,
            availability_override=payload.availability_override,
            profit_override=payload.profit_override,
        )
        return SimulateResponse(
            baseline=_plan_response(comparison.baseline),
            scenario=_plan_response(comparison.scenario),
            profit_change=comparison.profit_change,
            production_change=comparison.production_change,
        )
    except (ProductionValidationError, ProblemValidationError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except IterationLimitExceededError as exc:
        raise HTTPException(
            status_code=ITERATION_LIMIT_STATUS_CODE,
            detail=str(exc),
        ) from exc
    except Exception as exc:  # pragma: no cover - defensive fallback
        logger.exception("Unexpected simulation failure")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to run simulation",
        ) from exc
