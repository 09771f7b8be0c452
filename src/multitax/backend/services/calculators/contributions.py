"""Capped social and payroll contributions."""

from __future__ import annotations

from multitax.backend.config.year_config import ContributionCategory, TaxYearRules
from multitax.backend.models import ContributionResult, TaxInputBase

from .utils import capped


def contribution_base(gross_income: float, category: ContributionCategory) -> float:
    """Income subject to ``category``, never above its ceiling."""

    return capped(gross_income * category.wage_share, category.ceiling)


def contribution_rate(category: ContributionCategory, dependents: int) -> float:
    """Employee rate for ``category`` adjusted for the number of children.

    Childless contributors pay the surcharge; from the second child on, each
    child lowers the rate by the discount up to ``max_discounted_children``.
    """

    rate = category.rate + category.supplementary_rate
    if dependents == 0:
        return rate + category.childless_surcharge
    discounted = min(dependents - 1, category.max_discounted_children)
    return max(0.0, rate - category.child_discount * discounted)


def top_up_amount(gross_income: float, category: ContributionCategory, filing_status: str) -> float:
    """Extra contribution charged only on income above the top-up threshold."""

    if category.top_up is None:
        return 0.0
    threshold = category.top_up.threshold.for_status(filing_status)
    excess = gross_income - threshold
    if excess <= 0:
        return 0.0
    return excess * category.top_up.rate


def resolve_contributions(
    gross_income: float, tax_input: TaxInputBase, rules: TaxYearRules
) -> ContributionResult:
    """Compute every contribution category independently of income tax."""

    amounts: dict[str, float] = {}
    bases: dict[str, float] = {}
    for category in rules.contributions:
        base = contribution_base(gross_income, category)
        rate = contribution_rate(category, tax_input.dependents)
        bases[category.id] = base
        amounts[category.id] = base * rate + top_up_amount(
            gross_income, category, tax_input.filing_status
        )
    return ContributionResult(amounts=amounts, bases=bases)


__all__ = [
    "contribution_base",
    "contribution_rate",
    "resolve_contributions",
    "top_up_amount",
]
