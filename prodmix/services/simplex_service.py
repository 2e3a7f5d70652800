"""Primal simplex solver for maximization problems with <= constraints."""

from __future__ import annotations

import math
from typing import Optional, Sequence

import numpy as np

from prodmix.domain.constraints import (
    SolverConfig,
    find_shape_violation,
    validate_solver_config,
)
from prodmix.domain.models import Problem, Solution, SolveStatus
from prodmix.utils.config import Settings, get_settings
from prodmix.utils.logger import get_logger


logger = get_logger(__name__)


class SolverError(Exception):
    """Base exception for simplex solve failures."""


class ProblemValidationError(SolverError):
    """Raised when problem data or solver configuration is unusable."""


class ShapeMismatchError(ProblemValidationError):
    """Raised when profits, constraints and availabilities disagree in shape."""


class IterationLimitExceededError(SolverError):
    """Raised when the pivot loop does not converge within its cap."""


def solver_config_from_settings(settings: Optional[Settings] = None) -> SolverConfig:
    resolved = settings or get_settings()
    return SolverConfig(
        tolerance=resolved.solver_tolerance,
        iteration_factor=resolved.solver_iteration_factor,
    )


def _build_problem(
    profits: Sequence[float],
    constraints: Sequence[Sequence[float]],
    availabilities: Sequence[float],
    num_variables: Optional[int],
    num_constraints: Optional[int],
) -> Problem:
    try:
        violation = find_shape_violation(
            profits,
            constraints,
            availabilities,
            num_variables=num_variables,
            num_constraints=num_constraints,
        )
    except TypeError as exc:
        raise ShapeMismatchError("profits, constraint rows and availabilities must be sequences") from exc
    if violation is not None:
        raise ShapeMismatchError(violation)

    try:
        problem = Problem.from_sequences(profits, constraints, availabilities)
    except (TypeError, ValueError) as exc:
        raise ProblemValidationError("problem coefficients must be numeric") from exc

    values = [
        *problem.profits,
        *problem.availabilities,
        *(value for row in problem.constraints for value in row),
    ]
    if not all(math.isfinite(value) for value in values):
        raise ProblemValidationError("problem coefficients must be finite")
    return problem


def build_tableau(problem: Problem, tolerance: float) -> np.ndarray:
    """Return the initial all-slack tableau.

    Layout is ``(m + 1) x (n + m + 1)``: constraint rows first, the objective
    row last (holding ``-profits``), right-hand side in the last column.
    """
    n = problem.num_variables
    m = problem.num_constraints
    coefficients = np.asarray(problem.constraints, dtype=float).reshape(m, n)
    rhs = np.asarray(problem.availabilities, dtype=float).reshape(m)

    tableau = np.zeros((m + 1, n + m + 1), dtype=float)
    tableau[:m, :n] = coefficients
    tableau[:m, n : n + m] = np.eye(m)
    tableau[:m, -1] = np.where(np.abs(rhs) < tolerance, 0.0, rhs)
    tableau[-1, :n] = -np.asarray(problem.profits, dtype=float)
    return tableau


def choose_entering_column(tableau: np.ndarray, tolerance: float) -> Optional[int]:
    """Column with the most positive reduced cost, lowest index on ties."""
    objective_row = tableau[-1, :-1]
    if objective_row.size == 0:
        return None
    column = int(np.argmin(objective_row))
    if objective_row[column] >= -tolerance:
        return None
    return column


def choose_leaving_row(
    tableau: np.ndarray,
    column: int,
    tolerance: float,
) -> Optional[int]:
    """Minimum-ratio test, lowest row index on exact ties."""
    best_row: Optional[int] = None
    best_ratio = math.inf
    for row in range(tableau.shape[0] - 1):
        coefficient = tableau[row, column]
        if coefficient <= tolerance:
            continue
        ratio = tableau[row, -1] / coefficient
        if best_row is None or ratio < best_ratio:
            best_row = row
            best_ratio = ratio
    return best_row


def pivot(tableau: np.ndarray, row: int, column: int) -> None:
    """Gauss-Jordan elimination on ``tableau[row, column]`` in place."""
    tableau[row, :] /= tableau[row, column]
    for other in range(tableau.shape[0]):
        if other == row:
            continue
        factor = tableau[other, column]
        if factor != 0.0:
            tableau[other, :] -= factor * tableau[row, :]


def clamp_rhs(tableau: np.ndarray, tolerance: float) -> None:
    """Zero right-hand sides pushed just below zero by round-off."""
    rhs = tableau[:-1, -1]
    rhs[(rhs < 0.0) & (rhs > -tolerance)] = 0.0


def _snap(value: float, tolerance: float) -> float:
    return 0.0 if abs(value) < tolerance else float(value)


def _read_solution(
    *,
    tableau: np.ndarray,
    basis: list[int],
    problem: Problem,
    status: SolveStatus,
    iterations: int,
    tolerance: float,
) -> Solution:
    n = problem.num_variables
    m = problem.num_constraints
    values = np.zeros(n + m, dtype=float)
    for row, column in enumerate(basis):
        values[column] = tableau[row, -1]

    variables = tuple(_snap(value, tolerance) for value in values[:n])
    slacks = tuple(_snap(value, tolerance) for value in values[n:])

    dual_prices: list[float] = []
    for index in range(m):
        if slacks[index] > tolerance:
            dual_prices.append(0.0)
        else:
            dual_prices.append(_snap(tableau[-1, n + index], tolerance))

    return Solution(
        optimal=status is SolveStatus.OPTIMAL,
        status=status,
        objective_value=_snap(tableau[-1, -1], tolerance),
        variables=variables,
        slacks=slacks,
        dual_prices=tuple(dual_prices),
        iterations=iterations,
    )


def _infeasible_solution(problem: Problem) -> Solution:
    return Solution(
        optimal=False,
        status=SolveStatus.INFEASIBLE,
        objective_value=0.0,
        variables=tuple(0.0 for _ in range(problem.num_variables)),
        slacks=tuple(0.0 for _ in range(problem.num_constraints)),
        dual_prices=tuple(0.0 for _ in range(problem.num_constraints)),
        iterations=0,
    )


def solve_problem(problem: Problem, config: Optional[SolverConfig] = None) -> Solution:
    """Run the simplex pivot loop on an already validated ``Problem``."""
    resolved = config or solver_config_from_settings()
    try:
        validate_solver_config(resolved)
    except ValueError as exc:
        raise ProblemValidationError(str(exc)) from exc

    tolerance = resolved.tolerance
    n = problem.num_variables
    m = problem.num_constraints

    if any(value < -tolerance for value in problem.availabilities):
        logger.warning(
            "LP infeasible | negative availabilities=%s",
            [index for index, value in enumerate(problem.availabilities) if value < -tolerance],
        )
        return _infeasible_solution(problem)

    tableau = build_tableau(problem, tolerance)
    basis = list(range(n, n + m))
    max_iterations = resolved.max_iterations(n, m)
    iterations = 0

    while True:
        column = choose_entering_column(tableau, tolerance)
        if column is None:
            status = SolveStatus.OPTIMAL
            break
        row = choose_leaving_row(tableau, column, tolerance)
        if row is None:
            status = SolveStatus.UNBOUNDED
            break
        if iterations >= max_iterations:
            raise IterationLimitExceededError(
                f"simplex did not converge within {max_iterations} pivots"
            )
        pivot(tableau, row, column)
        clamp_rhs(tableau, tolerance)
        basis[row] = column
        iterations += 1
        logger.debug(
            "Pivot | iteration=%s | entering=%s | leaving_row=%s | objective=%.6f",
            iterations,
            column,
            row,
            tableau[-1, -1],
        )

    solution = _read_solution(
        tableau=tableau,
        basis=basis,
        problem=problem,
        status=status,
        iterations=iterations,
        tolerance=tolerance,
    )
    if status is SolveStatus.UNBOUNDED:
        logger.warning(
            "LP unbounded | entering_column=%s | iterations=%s",
            column,
            iterations,
        )
    else:
        logger.info(
            "LP solved | objective_value=%.6f | iterations=%s | variables=%s | constraints=%s",
            solution.objective_value,
            iterations,
            n,
            m,
        )
    return solution


def solve(
    profits: Sequence[float],
    constraints: Sequence[Sequence[float]],
    availabilities: Sequence[float],
    *,
    config: Optional[SolverConfig] = None,
    num_variables: Optional[int] = None,
    num_constraints: Optional[int] = None,
) -> Solution:
    """Maximize ``profits · x`` subject to ``constraints · x <= availabilities``, x >= 0.

    Shape and coefficient problems raise before any pivoting. Infeasible and
    unbounded programs come back as a ``Solution`` with ``optimal=False`` and
    the matching ``status``.
    """
    problem = _build_problem(
        profits,
        constraints,
        availabilities,
        num_variables,
        num_constraints,
    )
    return solve_problem(problem, config)
