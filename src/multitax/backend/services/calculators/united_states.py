"""US federal income tax with flat state tax and FICA."""

from __future__ import annotations

from multitax.backend.config.year_config import UnitedStatesRules
from multitax.backend.models import TaxBreakdown, UnitedStatesTaxInput

from .aggregate import aggregate
from .brackets import apply_brackets, marginal_bracket_rate
from .contributions import resolve_contributions
from .deductions import resolve_deductions
from .surcharges import resolve_surcharges


def calculate_united_states(
    tax_input: UnitedStatesTaxInput, rules: UnitedStatesRules
) -> TaxBreakdown:
    """Return the itemized US breakdown; ``income_tax`` holds federal tax."""

    deductions = resolve_deductions(tax_input, rules)
    taxable_income = deductions.taxable_income
    brackets = rules.brackets_for(tax_input.filing_status)

    federal_tax = apply_brackets(taxable_income, brackets)
    surcharges = resolve_surcharges(federal_tax, tax_input, rules, taxable_income)
    contributions = resolve_contributions(tax_input.gross_income, tax_input, rules)

    return aggregate(
        federal_tax,
        surcharges,
        contributions,
        tax_input,
        rules=rules,
        deductions=deductions,
        marginal_rate=marginal_bracket_rate(taxable_income, brackets),
    )


__all__ = ["calculate_united_states"]
