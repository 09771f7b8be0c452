"""Integration coverage for rule set metadata endpoints."""

from http import HTTPStatus

import pytest
from flask.testing import FlaskClient


def test_list_years_endpoint(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/years")

    assert response.status_code == HTTPStatus.OK
    jurisdictions = response.get_json()["jurisdictions"]
    assert set(jurisdictions) == {"DE", "IN", "US"}
    assert [entry["year"] for entry in jurisdictions["DE"]] == [2025, 2026]
    assert jurisdictions["US"][0]["source"] == "IRS Rev. Proc. 2023-34"
    assert all(entry["status"] == "active" for entry in jurisdictions["IN"])


def test_rule_set_endpoint_returns_parameters(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/DE/2025")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["jurisdiction"] == "DE"
    assert payload["income_tax"]["allowance"] == 12_096
    assert payload["solidarity"]["rate"] == pytest.approx(0.055)


def test_rule_set_endpoint_accepts_lowercase_codes(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/us/2024")

    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["standard_deduction"]["married"] == 29_200
    assert payload["brackets"]["single"][-1]["upper_bound"] is None


def test_rule_set_endpoint_unknown_year(client: FlaskClient) -> None:
    response = client.get("/api/v1/config/IN/1999")

    assert response.status_code == HTTPStatus.NOT_FOUND
    assert response.get_json()["error"] == "unsupported_year"
