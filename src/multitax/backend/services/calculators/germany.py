"""German income tax, solidarity surcharge, church tax and social insurance."""

from __future__ import annotations

from multitax.backend.config.year_config import GermanyRules
from multitax.backend.models import GermanyTaxInput, TaxBreakdown

from .aggregate import aggregate
from .contributions import resolve_contributions
from .deductions import resolve_deductions
from .surcharges import resolve_surcharges
from .zone_formula import apply_splitting, apply_zone_formula, zone_marginal_rate


def calculate_germany(tax_input: GermanyTaxInput, rules: GermanyRules) -> TaxBreakdown:
    """Return the itemized German breakdown for ``tax_input``.

    Joint filers are taxed by splitting: the formula runs on half the combined
    taxable income and the truncated result is doubled. Child benefit is a
    refundable payment added to net income.

    Social insurance is assessed on the combined gross against a single
    earner's ceilings, so two-earner households with incomes above one
    ceiling are understated.
    """

    deductions = resolve_deductions(tax_input, rules)
    taxable_income = deductions.taxable_income
    formula = rules.income_tax

    if tax_input.is_joint:
        income_tax = apply_splitting(taxable_income, formula)
        marginal_rate = zone_marginal_rate(taxable_income / 2, formula)
    else:
        income_tax = apply_zone_formula(taxable_income, formula)
        marginal_rate = zone_marginal_rate(taxable_income, formula)

    surcharges = resolve_surcharges(income_tax, tax_input, rules, taxable_income)
    contributions = resolve_contributions(tax_input.gross_income, tax_input, rules)
    child_benefit = tax_input.dependents * rules.child_benefit_monthly * 12

    return aggregate(
        float(income_tax),
        surcharges,
        contributions,
        tax_input,
        rules=rules,
        deductions=deductions,
        marginal_rate=marginal_rate,
        refundable_credit=child_benefit,
    )


__all__ = ["calculate_germany"]
