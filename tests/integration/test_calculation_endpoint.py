"""Integration tests for the tax calculation REST endpoint."""

from __future__ import annotations

import json
from http import HTTPStatus
from pathlib import Path
from typing import Dict, Iterable

import pytest
from flask.testing import FlaskClient

from multitax.backend.models import TaxBreakdown

DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


def _load_scenarios() -> Iterable[Dict[str, object]]:
    with DATA_PATH.open("r", encoding="utf-8") as handle:
        return json.load(handle)


@pytest.mark.parametrize("scenario", _load_scenarios(), ids=lambda item: item["name"])
def test_calculation_endpoint_matches_regression_scenarios(
    client: FlaskClient, scenario: Dict[str, object]
) -> None:
    """Each regression scenario should remain stable over time."""

    response = client.post("/api/v1/calculations", json=scenario["payload"])
    assert response.status_code == HTTPStatus.OK

    result = response.get_json()
    breakdown = result["breakdown"]
    assert set(breakdown) == set(TaxBreakdown.model_fields)
    for key, value in scenario["expectations"].items():
        assert breakdown[key] == pytest.approx(value, abs=0.01), key
    assert result["meta"]["jurisdiction"] == scenario["payload"]["jurisdiction"]


def test_lowercase_jurisdiction_is_accepted(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"jurisdiction": "in", "year": 2024, "gross_income": 500_000},
    )

    assert response.status_code == HTTPStatus.OK
    assert response.get_json()["meta"]["currency"] == "INR"


def test_calculation_endpoint_rejects_non_json(client: FlaskClient) -> None:
    """Invalid payloads should return a structured 400 response."""

    response = client.post(
        "/api/v1/calculations",
        data="not-json",
        content_type="text/plain",
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    assert response.get_json()["error"] == "bad_request"


def test_invalid_input_returns_problem_payload(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"jurisdiction": "DE", "year": 2025, "gross_income": -100},
    )

    assert response.status_code == HTTPStatus.BAD_REQUEST
    payload = response.get_json()
    assert payload["error"] == "invalid_input"
    assert "gross_income" in payload["message"]
    assert "breakdown" not in payload


def test_unsupported_year_returns_not_found(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={"jurisdiction": "US", "year": 2010, "gross_income": 100},
    )

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json() == {
        "error": "unsupported_year",
        "message": "No tax rules registered for US 2010",
        "jurisdiction": "US",
        "year": 2010,
    }


def test_unknown_deduction_returns_unprocessable(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={
            "jurisdiction": "US",
            "year": 2025,
            "gross_income": 100,
            "deductions": {"mortgage": 10},
        },
    )

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    payload = response.get_json()
    assert payload["error"] == "unknown_deduction_kind"
    assert payload["kind"] == "mortgage"


def test_regime_conflict_returns_unprocessable(client: FlaskClient) -> None:
    response = client.post(
        "/api/v1/calculations",
        json={
            "jurisdiction": "IN",
            "year": 2025,
            "gross_income": 2_000_000,
            "regime": "new",
            "deductions": {"section_80c": 150_000},
        },
    )

    assert response.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    payload = response.get_json()
    assert payload["error"] == "regime_conflict"
    assert payload["regime"] == "new"
