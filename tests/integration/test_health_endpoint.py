"""Integration tests for application endpoints."""

from http import HTTPStatus

from flask.testing import FlaskClient

from multitax.backend.version import get_project_version


def test_health_endpoint(client: FlaskClient) -> None:
    """Ensure the health endpoint returns a successful status payload."""
    response = client.get("/health")
    assert response.status_code == HTTPStatus.OK
    payload = response.get_json()
    assert payload["status"] == "ok"
    assert payload["version"] == get_project_version()
    assert payload["supported_years"] == {
        "DE": [2025, 2026],
        "IN": [2024, 2025],
        "US": [2024, 2025],
    }
    assert response.mimetype == "application/json"
