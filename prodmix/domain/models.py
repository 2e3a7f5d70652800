"""Domain models for linear programs and production-mix planning."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Sequence


class SolveStatus(str, Enum):
    OPTIMAL = "optimal"
    UNBOUNDED = "unbounded"
    INFEASIBLE = "infeasible"


@dataclass(frozen=True)
class Problem:
    """Maximize ``profits · x`` subject to ``constraints · x <= availabilities``, x >= 0."""

    profits: tuple[float, ...]
    constraints: tuple[tuple[float, ...], ...]
    availabilities: tuple[float, ...]

    @classmethod
    def from_sequences(
        cls,
        profits: Sequence[float],
        constraints: Sequence[Sequence[float]],
        availabilities: Sequence[float],
    ) -> "Problem":
        return cls(
            profits=tuple(float(value) for value in profits),
            constraints=tuple(tuple(float(value) for value in row) for row in constraints),
            availabilities=tuple(float(value) for value in availabilities),
        )

    @property
    def num_variables(self) -> int:
        return len(self.profits)

    @property
    def num_constraints(self) -> int:
        return len(self.constraints)


@dataclass(frozen=True)
class Solution:
    optimal: bool
    status: SolveStatus
    objective_value: float
    variables: tuple[float, ...]
    slacks: tuple[float, ...]
    dual_prices: tuple[float, ...]
    iterations: int = 0

    def to_dict(self) -> dict[str, object]:
        return {
            "optimal": self.optimal,
            "status": self.status.value,
            "objective_value": self.objective_value,
            "variables": list(self.variables),
            "slacks": list(self.slacks),
            "dual_prices": list(self.dual_prices),
            "iterations": self.iterations,
        }


@dataclass(frozen=True)
class Resource:
    """A limited input, with per-product consumption in ``requirements``."""

    name: str
    available: float
    cost: float
    requirements: tuple[float, ...]


@dataclass(frozen=True)
class Product:
    name: str
    profit: float


@dataclass(frozen=True)
class ProductOutput:
    name: str
    profit: float
    production: float


@dataclass(frozen=True)
class ResourceSensitivity:
    name: str
    available: float
    used: float
    slack: float
    dual_price: float
    unit_cost: float
    limiting: bool
    marginal_gain: float


@dataclass(frozen=True)
class ProductionPlan:
    status: SolveStatus
    optimal: bool
    total_profit: float
    total_resource_cost: float
    products: list[ProductOutput]
    resources: list[ResourceSensitivity]


@dataclass(frozen=True)
class ScenarioComparison:
    baseline: ProductionPlan
    scenario: ProductionPlan
    profit_change: float
    production_change: dict[str, float]
