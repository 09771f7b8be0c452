"""Orchestrate request validation, rule lookup and jurisdiction calculators.

Every rejection happens before any monetary computation: the payload is
validated, the rule set for the exact jurisdiction/year pair is resolved and
the deduction claims and state selectors are checked against it. Only then is
the calculator for the jurisdiction invoked.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any

from multitax.backend.config.year_config import (
    RuleRepository,
    TaxYearRules,
    default_repository,
)
from multitax.backend.errors import InvalidInput
from multitax.backend.models import (
    CalculationResponse,
    ResponseMeta,
    TaxBreakdown,
    TaxInputBase,
    parse_tax_input,
)

from .calculators import (
    calculate_germany,
    calculate_india,
    calculate_united_states,
    round_currency,
    round_rate,
    validate_deduction_claims,
    validate_selectors,
)

_LOGGER = logging.getLogger(__name__)

Calculator = Callable[[Any, Any], TaxBreakdown]

CALCULATORS: Mapping[str, Calculator] = {
    "DE": calculate_germany,
    "US": calculate_united_states,
    "IN": calculate_india,
}

_RATE_FIELDS = frozenset({"effective_rate", "marginal_rate"})
_UNROUNDED_FIELDS = frozenset({"jurisdiction", "year", "filing_status", "regime", "currency"})


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("MULTITAX_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _validate_against_rules(tax_input: TaxInputBase, rules: TaxYearRules) -> None:
    if tax_input.filing_status not in rules.filing_statuses:
        allowed = ", ".join(rules.filing_statuses)
        raise InvalidInput(
            f"Filing status '{tax_input.filing_status}' is not supported "
            f"for {rules.jurisdiction} {rules.year} (expected one of: {allowed})",
            filing_status=tax_input.filing_status,
        )
    validate_deduction_claims(tax_input, rules)
    validate_selectors(tax_input, rules)


def _run_pipeline(
    tax_input: TaxInputBase | Mapping[str, Any],
    repository: RuleRepository,
    timings: dict[str, float] | None,
) -> TaxBreakdown:
    with _profile_section("validate", timings):
        validated = parse_tax_input(tax_input)
        rules = repository.rules(validated.jurisdiction, validated.year)
        _validate_against_rules(validated, rules)

    with _profile_section("calculate", timings):
        return CALCULATORS[rules.jurisdiction](validated, rules)


def compute_breakdown(
    tax_input: TaxInputBase | Mapping[str, Any],
    repository: RuleRepository | None = None,
) -> TaxBreakdown:
    """Return the unrounded breakdown for ``tax_input``.

    ``repository`` defaults to the bundled rule sets.
    """

    return _run_pipeline(tax_input, repository or default_repository(), None)


def round_breakdown(breakdown: TaxBreakdown) -> dict[str, Any]:
    """Round currency amounts to cents and rates to four decimals."""

    rounded: dict[str, Any] = {}
    for name, value in breakdown.model_dump(mode="python").items():
        if name in _UNROUNDED_FIELDS or value is None:
            rounded[name] = value
        elif name in _RATE_FIELDS:
            rounded[name] = round_rate(value)
        else:
            rounded[name] = round_currency(value)
    return rounded


def calculate_tax(
    payload: Mapping[str, Any] | TaxInputBase,
    repository: RuleRepository | None = None,
) -> dict[str, Any]:
    """Compute the JSON-ready breakdown and metadata for ``payload``."""

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    repo = repository or default_repository()

    breakdown = _run_pipeline(payload, repo, timings)

    entry = repo.manifest.get_entry(breakdown.jurisdiction, breakdown.year)
    response_model = CalculationResponse(
        breakdown=TaxBreakdown.model_validate(round_breakdown(breakdown)),
        meta=ResponseMeta(
            jurisdiction=breakdown.jurisdiction,
            year=breakdown.year,
            currency=breakdown.currency,
            source=entry.source,
        ),
    )

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "calculate_tax timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    return response_model.model_dump(mode="json")


__all__ = ["CALCULATORS", "calculate_tax", "compute_breakdown", "round_breakdown"]
