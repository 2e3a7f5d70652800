from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest


SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "validate_environment.py"


@pytest.fixture(scope="module")
def validate_environment():
    spec = importlib.util.spec_from_file_location("validate_environment", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_runtime_check_lists_only_install_requirements(validate_environment) -> None:
    assert validate_environment.RUNTIME_PACKAGES == ["fastapi", "uvicorn", "pydantic", "numpy"]
    assert validate_environment.TEST_PACKAGES == ["httpx", "pytest"]
    assert not set(validate_environment.RUNTIME_PACKAGES) & set(validate_environment.TEST_PACKAGES)


def test_package_check_reports_missing_modules(validate_environment) -> None:
    ok, line = validate_environment._check_packages("Test packages", ["numpy", "no_such_module_xyz"])

    assert not ok
    assert line.startswith("[FAIL] Test packages")
    assert "no_such_module_xyz" in line


def test_main_reports_runtime_and_test_packages_separately(validate_environment, capsys) -> None:
    assert validate_environment.main() == 0

    output = capsys.readouterr().out
    assert "[PASS] Required packages: all importable" in output
    assert "[PASS] Test packages: all importable" in output
    assert "objective=5600.00" in output
