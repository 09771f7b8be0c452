"""Regression coverage ensuring calculator outputs stay stable."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from multitax.backend.services.calculation_service import calculate_tax, compute_breakdown

_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"


@pytest.mark.parametrize(
    "scenario",
    json.loads(_DATA_PATH.read_text("utf-8")),
    ids=lambda item: item["name"],
)
def test_calculate_tax_matches_regression_scenario(scenario: dict[str, object]) -> None:
    """The calculation service returns the expected results for known payloads."""

    payload = scenario["payload"]
    expectations = scenario["expectations"]

    result = calculate_tax(payload)
    unrounded = compute_breakdown(payload)

    breakdown = result["breakdown"]
    for key, value in expectations.items():
        assert breakdown[key] == pytest.approx(value, abs=0.01), key
        assert getattr(unrounded, key) == pytest.approx(value, abs=0.01), key
