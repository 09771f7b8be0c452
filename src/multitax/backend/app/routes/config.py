"""Expose the bundled rule sets and manifest metadata.

Clients use these endpoints to discover which jurisdiction/year pairs can be
calculated and to inspect the parameters behind a result.
"""

from __future__ import annotations

from typing import Any

from flask import Blueprint, jsonify

from multitax.backend.config.year_config import default_repository
from multitax.backend.version import get_project_version

blueprint = Blueprint("config", __name__, url_prefix="/api/v1/config")


def get_configuration_metadata() -> dict[str, Any]:
    """Expose runtime metadata derived from the configuration manifest."""

    repository = default_repository()
    return {
        "version": get_project_version(),
        "supported_years": {
            jurisdiction: list(repository.available_years(jurisdiction))
            for jurisdiction in repository.jurisdictions()
        },
    }


@blueprint.get("/years")
def list_years() -> tuple[Any, int]:
    """Return manifest entries grouped by jurisdiction."""

    manifest = default_repository().manifest
    grouped: dict[str, list[dict[str, Any]]] = {}
    for entry in sorted(manifest.years, key=lambda item: (item.jurisdiction, item.year)):
        grouped.setdefault(entry.jurisdiction, []).append(
            {"year": entry.year, "status": entry.status, "source": entry.source}
        )
    return jsonify({"jurisdictions": grouped}), 200


@blueprint.get("/<jurisdiction>/<int:year>")
def get_rules(jurisdiction: str, year: int) -> tuple[Any, int]:
    """Return the full rule set for one jurisdiction and year."""

    rules = default_repository().rules(jurisdiction.upper(), year)
    return jsonify(rules.model_dump(mode="json")), 200
