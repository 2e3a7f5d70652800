"""Domain-level validation rules for the simplex solver."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class SolverConfig:
    tolerance: float = 1e-9
    iteration_factor: int = 10

    def max_iterations(self, num_variables: int, num_constraints: int) -> int:
        return self.iteration_factor * (num_variables + num_constraints)


def validate_solver_config(config: SolverConfig) -> None:
    if not math.isfinite(config.tolerance) or config.tolerance <= 0.0:
        raise ValueError("tolerance must be a finite value > 0")
    if config.tolerance >= 1.0:
        raise ValueError("tolerance must be < 1")
    if config.iteration_factor <= 0:
        raise ValueError("iteration_factor must be > 0")


def find_shape_violation(
    profits: Sequence[float],
    constraints: Sequence[Sequence[float]],
    availabilities: Sequence[float],
    num_variables: Optional[int] = None,
    num_constraints: Optional[int] = None,
) -> Optional[str]:
    """Return a description of the first shape violation, or ``None``."""
    n = len(profits)
    m = len(constraints)
    if num_variables is not None and num_variables != n:
        return f"expected {num_variables} profits, got {n}"
    if num_constraints is not None and num_constraints != m:
        return f"expected {num_constraints} constraint rows, got {m}"
    if len(availabilities) != m:
        return (
            f"constraints has {m} rows but availabilities has "
            f"{len(availabilities)} entries"
        )
    for index, row in enumerate(constraints):
        if len(row) != n:
            return f"constraint row {index} has {len(row)} entries, expected {n}"
    return None
