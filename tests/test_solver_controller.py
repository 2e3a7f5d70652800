from __future__ import annotations

from dataclasses import replace

from fastapi import FastAPI
from fastapi.testclient import TestClient

from app import create_app
from prodmix.controllers.solver_controller import router
from prodmix.services.production_service import ProductionMixService
from prodmix.utils.config import get_settings


DEFAULT_PAYLOAD = {
    "resources": [
        {"name": "Materia prima", "available": 200, "cost": 20, "requirements": [4, 2, 1.5]},
        {"name": "Horas-hombre", "available": 480, "cost": 100, "requirements": [8, 6, 1]},
        {"name": "Horas-máquina", "available": 80, "cost": 18, "requirements": [2, 1.5, 0.5]},
    ],
    "products": [
        {"name": "A1", "profit": 120},
        {"name": "A2", "profit": 60},
        {"name": "A3", "profit": 40},
    ],
}


def _build_test_client(**setting_overrides) -> TestClient:
    settings = replace(get_settings(), **setting_overrides)
    app = FastAPI()
    app.include_router(router)
    app.state.settings = settings
    app.state.production_service = ProductionMixService(settings=settings)
    return TestClient(app)


def test_solve_endpoint_returns_optimum() -> None:
    client = _build_test_client()
    response = client.post(
        "/solve",
        json={
            "profits": [120, 60, 40],
            "constraints": [[4, 2, 1.5], [8, 6, 1], [2, 1.5, 0.5]],
            "availabilities": [200, 480, 80],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["optimal"] is True
    assert body["status"] == "optimal"
    assert abs(body["objective_value"] - 5600.0) < 1e-6
    assert [round(value, 6) for value in body["variables"]] == [20.0, 0.0, 80.0]
    assert [round(value, 6) for value in body["slacks"]] == [0.0, 240.0, 0.0]
    assert [round(value, 6) for value in body["dual_prices"]] == [20.0, 0.0, 20.0]


def test_solve_endpoint_reports_unbounded() -> None:
    client = _build_test_client()
    response = client.post("/solve", json={"profits": [1.0]})

    assert response.status_code == 200
    body = response.json()
    assert body["optimal"] is False
    assert body["status"] == "unbounded"


def test_solve_endpoint_reports_infeasible() -> None:
    client = _build_test_client()
    response = client.post(
        "/solve",
        json={"profits": [1.0], "constraints": [[1.0]], "availabilities": [-3.0]},
    )

    assert response.status_code == 200
    assert response.json()["status"] == "infeasible"


def test_solve_endpoint_rejects_shape_mismatch() -> None:
    client = _build_test_client()
    response = client.post(
        "/solve",
        json={"profits": [1.0, 2.0], "constraints": [[1.0]], "availabilities": [3.0]},
    )

    assert response.status_code == 400
    assert "row 0" in response.json()["detail"]


def test_solve_endpoint_reports_iteration_limit() -> None:
    client = _build_test_client(solver_iteration_factor=1)
    response = client.post(
        "/solve",
        json={
            "profits": [100, 10, 1],
            "constraints": [[1, 0, 0], [20, 1, 0], [200, 20, 1]],
            "availabilities": [1, 100, 10000],
        },
    )

    assert response.status_code == 422
    assert "pivots" in response.json()["detail"]


def test_production_plan_endpoint() -> None:
    client = _build_test_client()
    response = client.post("/production_plan", json=DEFAULT_PAYLOAD)

    assert response.status_code == 200
    body = response.json()
    assert body["optimal"] is True
    assert abs(body["total_profit"] - 5600.0) < 1e-6
    limiting = {item["name"]: item["limiting"] for item in body["resources"]}
    assert limiting == {"Materia prima": True, "Horas-hombre": False, "Horas-máquina": True}


def test_production_plan_endpoint_rejects_bad_requirements() -> None:
    client = _build_test_client()
    payload = {
        "resources": [{"name": "Steel", "available": 10, "cost": 1, "requirements": [1, 2]}],
        "products": [{"name": "A1", "profit": 3}],
    }
    response = client.post("/production_plan", json=payload)

    assert response.status_code == 400


def test_production_plan_endpoint_rejects_negative_cost() -> None:
    client = _build_test_client()
    payload = {
        "resources": [{"name": "Steel", "available": 10, "cost": -1, "requirements": [1]}],
        "products": [{"name": "A1", "profit": 3}],
    }
    response = client.post("/production_plan", json=payload)

    assert response.status_code == 422


def test_simulate_endpoint() -> None:
    client = _build_test_client()
    response = client.post(
        "/simulate",
        json={**DEFAULT_PAYLOAD, "availability_override": {"Materia prima": 220}},
    )

    assert response.status_code == 200
    body = response.json()
    assert abs(body["profit_change"] - 400.0) < 1e-6
    assert abs(body["scenario"]["total_profit"] - 6000.0) < 1e-6
    assert set(body["production_change"]) == {"A1", "A2", "A3"}


def test_simulate_endpoint_rejects_unknown_resource() -> None:
    client = _build_test_client()
    response = client.post(
        "/simulate",
        json={**DEFAULT_PAYLOAD, "availability_override": {"Energía": 50}},
    )

    assert response.status_code == 400


def test_default_scenario_round_trips_through_plan() -> None:
    client = _build_test_client()
    scenario = client.get("/default_scenario")
    assert scenario.status_code == 200
    assert [item["name"] for item in scenario.json()["products"]] == ["A1", "A2", "A3"]

    plan = client.post("/production_plan", json=scenario.json())
    assert plan.status_code == 200
    assert [round(item["production"], 6) for item in plan.json()["products"]] == [20.0, 0.0, 80.0]


def test_missing_production_service_returns_503() -> None:
    app = FastAPI()
    app.include_router(router)
    client = TestClient(app)

    response = client.post("/production_plan", json=DEFAULT_PAYLOAD)

    assert response.status_code == 503


def test_create_app_wires_services() -> None:
    settings = replace(get_settings(), app_name="Mix Test", app_version="9.9.9")
    app = create_app(settings)

    with TestClient(app) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "app_name": "Mix Test", "app_version": "9.9.9"}
    assert isinstance(app.state.production_service, ProductionMixService)
