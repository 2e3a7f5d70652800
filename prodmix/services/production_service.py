"""Production-mix planning on top of the simplex solver.

Resources and products arrive as the records an operator edits (available
quantity, unit cost, per-product requirements, unit profit). This module
reshapes them into a ``Problem``, solves it and decorates the raw solution
with per-resource sensitivity data. What-if scenarios are evaluated on
copies of the records and never alter the caller's inputs.
"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional, Sequence

from prodmix.domain.constraints import SolverConfig
from prodmix.domain.models import (
    Problem,
    Product,
    ProductionPlan,
    ProductOutput,
    Resource,
    ResourceSensitivity,
    ScenarioComparison,
    Solution,
)
from prodmix.services.simplex_service import solve_problem, solver_config_from_settings
from prodmix.utils.config import Settings, get_settings
from prodmix.utils.logger import get_logger


logger = get_logger(__name__)


class ProductionValidationError(Exception):
    """Raised when resource or product records are inconsistent."""


DEFAULT_RESOURCES: tuple[Resource, ...] = (
    Resource(name="Materia prima", available=200.0, cost=20.0, requirements=(4.0, 2.0, 1.5)),
    Resource(name="Horas-hombre", available=480.0, cost=100.0, requirements=(8.0, 6.0, 1.0)),
    Resource(name="Horas-máquina", available=80.0, cost=18.0, requirements=(2.0, 1.5, 0.5)),
)

DEFAULT_PRODUCTS: tuple[Product, ...] = (
    Product(name="A1", profit=120.0),
    Product(name="A2", profit=60.0),
    Product(name="A3", profit=40.0),
)


def default_scenario() -> tuple[list[Resource], list[Product]]:
    return list(DEFAULT_RESOURCES), list(DEFAULT_PRODUCTS)


def _validate_names(kind: str, names: Sequence[str]) -> None:
    seen: set[str] = set()
    for name in names:
        if not name.strip():
            raise ProductionValidationError(f"{kind} names must be non-empty")
        if name in seen:
            raise ProductionValidationError(f"duplicate {kind} name: {name}")
        seen.add(name)


def _validate_records(resources: Sequence[Resource], products: Sequence[Product]) -> None:
    _validate_names("product", [product.name for product in products])
    _validate_names("resource", [resource.name for resource in resources])

    for product in products:
        if not math.isfinite(product.profit):
            raise ProductionValidationError(f"profit of {product.name} must be finite")

    for resource in resources:
        if len(resource.requirements) != len(products):
            raise ProductionValidationError(
                f"resource {resource.name} lists {len(resource.requirements)} requirements "
                f"for {len(products)} products"
            )
        if not math.isfinite(resource.available):
            raise ProductionValidationError(f"availability of {resource.name} must be finite")
        if not math.isfinite(resource.cost) or resource.cost < 0.0:
            raise ProductionValidationError(f"cost of {resource.name} must be >= 0")
        if not all(math.isfinite(value) for value in resource.requirements):
            raise ProductionValidationError(f"requirements of {resource.name} must be finite")


def build_problem(resources: Sequence[Resource], products: Sequence[Product]) -> Problem:
    """One variable per product, one <= row per resource."""
    _validate_records(resources, products)
    return Problem.from_sequences(
        profits=[product.profit for product in products],
        constraints=[resource.requirements for resource in resources],
        availabilities=[resource.available for resource in resources],
    )


def build_plan(
    *,
    resources: Sequence[Resource],
    products: Sequence[Product],
    solution: Solution,
    tolerance: float,
) -> ProductionPlan:
    product_outputs = [
        ProductOutput(name=product.name, profit=product.profit, production=quantity)
        for product, quantity in zip(products, solution.variables)
    ]

    sensitivities: list[ResourceSensitivity] = []
    total_resource_cost = 0.0
    for resource, slack, dual_price in zip(resources, solution.slacks, solution.dual_prices):
        used = max(0.0, resource.available - slack) if solution.optimal else 0.0
        total_resource_cost += used * resource.cost
        sensitivities.append(
            ResourceSensitivity(
                name=resource.name,
                available=resource.available,
                used=used,
                slack=slack,
                dual_price=dual_price,
                unit_cost=resource.cost,
                limiting=solution.optimal and abs(slack) <= tolerance,
                marginal_gain=dual_price - resource.cost if solution.optimal else 0.0,
            )
        )

    return ProductionPlan(
        status=solution.status,
        optimal=solution.optimal,
        total_profit=solution.objective_value,
        total_resource_cost=total_resource_cost,
        products=product_outputs,
        resources=sensitivities,
    )


def apply_overrides(
    resources: Sequence[Resource],
    products: Sequence[Product],
    availability_override: Optional[dict[str, float]] = None,
    profit_override: Optional[dict[str, float]] = None,
) -> tuple[list[Resource], list[Product]]:
    """Return copies of the records with the overrides applied."""
    availability_override = availability_override or {}
    profit_override = profit_override or {}

    unknown_resources = set(availability_override) - {resource.name for resource in resources}
    if unknown_resources:
        raise ProductionValidationError(
            f"unknown resources in availability_override: {sorted(unknown_resources)}"
        )
    unknown_products = set(profit_override) - {product.name for product in products}
    if unknown_products:
        raise ProductionValidationError(
            f"unknown products in profit_override: {sorted(unknown_products)}"
        )

    adjusted_resources = [
        replace(resource, available=float(availability_override[resource.name]))
        if resource.name in availability_override
        else resource
        for resource in resources
    ]
    adjusted_products = [
        replace(product, profit=float(profit_override[product.name]))
        if product.name in profit_override
        else product
        for product in products
    ]
    return adjusted_resources, adjusted_products


class ProductionMixService:
    """Builds production plans and what-if comparisons."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        solver_config: Optional[SolverConfig] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._solver_config = solver_config or solver_config_from_settings(self._settings)

    @property
    def solver_config(self) -> SolverConfig:
        return self._solver_config

    def plan(
        self,
        resources: Sequence[Resource],
        products: Sequence[Product],
    ) -> ProductionPlan:
        problem = build_problem(resources, products)
        solution = solve_problem(problem, self._solver_config)
        plan = build_plan(
            resources=resources,
            products=products,
            solution=solution,
            tolerance=self._solver_config.tolerance,
        )
        logger.info(
            "Production plan built | status=%s | total_profit=%.6f | limiting_resources=%s",
            plan.status.value,
            plan.total_profit,
            [item.name for item in plan.resources if item.limiting],
        )
        return plan

    def simulate(
        self,
        resources: Sequence[Resource],
        products: Sequence[Product],
        availability_override: Optional[dict[str, float]] = None,
        profit_override: Optional[dict[str, float]] = None,
    ) -> ScenarioComparison:
        scenario_resources, scenario_products = apply_overrides(
            resources,
            products,
            availability_override=availability_override,
            profit_override=profit_override,
        )
        baseline = self.plan(resources, products)
        scenario = self.plan(scenario_resources, scenario_products)

        production_change = {
            after.name: after.production - before.production
            for before, after in zip(baseline.products, scenario.products)
        }
        profit_change = scenario.total_profit - baseline.total_profit
        logger.info(
            "Scenario compared | profit_change=%.6f | baseline_status=%s | scenario_status=%s",
            profit_change,
            baseline.status.value,
            scenario.status.value,
        )
        return ScenarioComparison(
            baseline=baseline,
            scenario=scenario,
            profit_change=profit_change,
            production_change=production_change,
        )
