"""Continuous zone formula used for German income tax (§32a EStG).

The formula has a tax-free allowance, quadratic zones in a normalised variable
``v = (income - zone_start) / divisor`` and flat zones ``rate * income -
constant``. Taxable income is rounded down to whole euros before the formula
runs and the resulting tax is truncated the same way.
"""

from __future__ import annotations

import math

from multitax.backend.config.year_config import ZoneFormula


def _untruncated_tax(income: float, formula: ZoneFormula) -> float:
    if income <= formula.allowance:
        return 0.0

    start = formula.allowance
    for zone in formula.progressive:
        if income <= zone.upper_bound:
            v = (income - start) / formula.divisor
            return (zone.coefficient * v + zone.linear) * v + zone.constant
        start = zone.upper_bound

    flat_zone = formula.flat[-1]
    for candidate in formula.flat:
        if candidate.upper_bound is None or income <= candidate.upper_bound:
            flat_zone = candidate
            break
    return flat_zone.rate * income - flat_zone.constant


def apply_zone_formula(taxable_income: float, formula: ZoneFormula) -> int:
    """Return the tax for a single filer, truncated to a whole currency unit."""

    return math.floor(_untruncated_tax(math.floor(taxable_income), formula))


def apply_splitting(taxable_income: float, formula: ZoneFormula) -> int:
    """Joint filing: tax half the combined income, then double the result.

    The combined income is floored first; the half is floored again by
    :func:`apply_zone_formula`.
    """

    return 2 * apply_zone_formula(math.floor(taxable_income) / 2, formula)


def zone_marginal_rate(taxable_income: float, formula: ZoneFormula) -> float:
    """Statutory rate on the next unit of income.

    Inside a quadratic zone the rate rises linearly from the zone's entry rate
    to the entry rate of the following zone.
    """

    if taxable_income <= formula.allowance:
        return 0.0

    start = formula.allowance
    zones = list(formula.progressive)
    for index, zone in enumerate(zones):
        if taxable_income <= zone.upper_bound:
            if index + 1 < len(zones):
                exit_rate = zones[index + 1].entry_rate
            else:
                exit_rate = formula.flat[0].rate
            progress = (taxable_income - start) / (zone.upper_bound - start)
            return zone.entry_rate + progress * (exit_rate - zone.entry_rate)
        start = zone.upper_bound

    for flat_zone in formula.flat:
        if flat_zone.upper_bound is None or taxable_income <= flat_zone.upper_bound:
            return flat_zone.rate
    return formula.flat[-1].rate


__all__ = ["apply_splitting", "apply_zone_formula", "zone_marginal_rate"]
