#!/usr/bin/env python3
"""Validate local production-mix environment readiness."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from prodmix.services.production_service import ProductionMixService, default_scenario
from prodmix.services.simplex_service import solve
from prodmix.utils.config import get_settings

SEPARATOR_LINE = "=" * 44
RUNTIME_PACKAGES = ["fastapi", "uvicorn", "pydantic", "numpy"]
TEST_PACKAGES = ["httpx", "pytest"]


def _print_result(name: str, success: bool, detail: str = "") -> tuple[bool, str]:
    if success:
        return True, f"[PASS] {name}{detail}"
    return False, f"[FAIL] {name}: {detail}"


def _check_packages(label: str, package_specs: list[str]) -> tuple[bool, str]:
    import_errors: list[str] = []
    for module_name in package_specs:
        try:
            importlib.import_module(module_name)
        except ImportError as exc:
            import_errors.append(f"{module_name} ({exc})")
    if import_errors:
        return _print_result(
            label,
            False,
            "missing/unimportable -> " + "; ".join(import_errors),
        )
    return _print_result(f"{label}: all importable", True)


def main() -> int:
    results: list[str] = []
    all_passed = True

    # CHECK 1: Python version >= 3.10
    if sys.version_info >= (3, 10):
        ok, line = _print_result("Python " + sys.version.split()[0], True)
    else:
        ok, line = _print_result(
            "Python version >= 3.10",
            False,
            f"found {sys.version.split()[0]}",
        )
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 2: Runtime packages importable
    ok, line = _check_packages("Required packages", RUNTIME_PACKAGES)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 3: Test packages (pip install -e ".[test]")
    ok, line = _check_packages("Test packages", TEST_PACKAGES)
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 4: Settings load from environment
    try:
        settings = get_settings()
        ok, line = _print_result(
            "Settings",
            True,
            f": tolerance={settings.solver_tolerance} iteration_factor={settings.solver_iteration_factor}",
        )
    except ValueError as exc:
        ok, line = _print_result("Settings", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 5: Reference LP solves to the known optimum
    try:
        solution = solve(
            [120.0, 60.0, 40.0],
            [[4.0, 2.0, 1.5], [8.0, 6.0, 1.0], [2.0, 1.5, 0.5]],
            [200.0, 480.0, 80.0],
        )
        if not solution.optimal or abs(solution.objective_value - 5600.0) > 1e-6:
            raise RuntimeError(f"expected objective 5600, got {solution.objective_value}")
        ok, line = _print_result("Reference LP", True, f": objective={solution.objective_value:.2f}")
    except Exception as exc:
        ok, line = _print_result("Reference LP", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    # CHECK 6: Default production scenario plans
    try:
        resources, products = default_scenario()
        plan = ProductionMixService().plan(resources, products)
        limiting = [item.name for item in plan.resources if item.limiting]
        ok, line = _print_result("Default scenario", True, f": limiting={limiting}")
    except Exception as exc:
        ok, line = _print_result("Default scenario", False, str(exc))
    results.append(line)
    all_passed = all_passed and ok

    print(SEPARATOR_LINE)
    print(" Production Mix Environment Validation")
    print(SEPARATOR_LINE)
    for line in results:
        print(f" {line}")
    print(SEPARATOR_LINE)
    if all_passed:
        print(" All checks passed. Environment is ready.")
        print(SEPARATOR_LINE)
        return 0
    print(" One or more checks failed.")
    print(SEPARATOR_LINE)
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
