"""Indian income tax under the new or old regime."""

from __future__ import annotations

from multitax.backend.config.year_config import IndiaRules
from multitax.backend.models import IndiaTaxInput, TaxBreakdown

from .aggregate import aggregate
from .brackets import apply_brackets, marginal_bracket_rate
from .contributions import resolve_contributions
from .deductions import resolve_deductions, selected_regime
from .surcharges import apply_rebate, resolve_surcharges


def calculate_india(tax_input: IndiaTaxInput, rules: IndiaRules) -> TaxBreakdown:
    """Return the itemized Indian breakdown.

    The rebate runs on the bracket tax before surcharge and cess, which are
    both derived from the post-rebate amount.
    """

    regime_name = selected_regime(tax_input, rules)
    regime = rules.regime(regime_name)

    deductions = resolve_deductions(tax_input, rules)
    taxable_income = deductions.taxable_income

    bracket_tax = apply_brackets(taxable_income, regime.brackets)
    base_tax = apply_rebate(bracket_tax, taxable_income, regime.rebate)

    surcharges = resolve_surcharges(base_tax, tax_input, rules, taxable_income)
    contributions = resolve_contributions(tax_input.gross_income, tax_input, rules)

    return aggregate(
        base_tax,
        surcharges,
        contributions,
        tax_input,
        rules=rules,
        deductions=deductions,
        marginal_rate=marginal_bracket_rate(taxable_income, regime.brackets),
        regime=regime_name,
        rebate=bracket_tax - base_tax,
    )


__all__ = ["calculate_india"]
