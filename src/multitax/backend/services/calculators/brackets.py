"""Marginal-rate bracket evaluation shared by the bracket-table jurisdictions."""

from __future__ import annotations

from collections.abc import Sequence

from multitax.backend.config.year_config import TaxBracket


def apply_brackets(taxable_income: float, brackets: Sequence[TaxBracket]) -> float:
    """Calculate progressive tax for ``taxable_income`` using ``brackets``.

    Each bracket entered contributes ``rate * (min(income, upper) - lower)``;
    evaluation stops at the first bracket whose lower bound is not below the
    income.
    """

    total = 0.0
    for bracket in brackets:
        if taxable_income <= bracket.lower_bound:
            break
        upper = bracket.upper_bound
        top = taxable_income if upper is None else min(taxable_income, upper)
        total += (top - bracket.lower_bound) * bracket.rate
    return total


def marginal_bracket_rate(taxable_income: float, brackets: Sequence[TaxBracket]) -> float:
    """Return the rate of the bracket containing ``taxable_income``.

    Ranges are treated as ``(lower, upper]`` so income sitting exactly on a
    boundary reports the lower bracket's rate.
    """

    if not brackets:
        return 0.0
    for bracket in brackets:
        if bracket.upper_bound is None or taxable_income <= bracket.upper_bound:
            return bracket.rate
    return brackets[-1].rate


__all__ = ["apply_brackets", "marginal_bracket_rate"]
