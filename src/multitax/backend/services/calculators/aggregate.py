"""Assemble resolver outputs into the public breakdown."""

from __future__ import annotations

from multitax.backend.config.year_config import TaxYearRules
from multitax.backend.models import (
    ContributionResult,
    DeductionResult,
    SurchargeResult,
    TaxBreakdown,
    TaxInputBase,
)

# Every id in CONTRIBUTION_IDS must map onto a breakdown field.
CONTRIBUTION_FIELDS = {
    "pension": "pension_insurance",
    "health": "health_insurance",
    "unemployment": "unemployment_insurance",
    "care": "care_insurance",
    "social_security": "social_security",
    "medicare": "medicare",
    "provident_fund": "provident_fund",
}


def aggregate(
    primary_tax: float,
    surcharges: SurchargeResult,
    contributions: ContributionResult,
    tax_input: TaxInputBase,
    *,
    rules: TaxYearRules,
    deductions: DeductionResult,
    marginal_rate: float,
    regime: str | None = None,
    rebate: float = 0.0,
    refundable_credit: float = 0.0,
) -> TaxBreakdown:
    """Build the breakdown, deriving totals, net income and rates.

    Refundable credits are paid out after tax: they raise net income but are
    never subtracted from taxable income.
    """

    gross_income = tax_input.gross_income
    total_tax = primary_tax + surcharges.total
    total_contributions = contributions.total
    total_deductions = total_tax + total_contributions
    net_income = gross_income - total_deductions + refundable_credit
    effective_rate = total_deductions / gross_income if gross_income > 0 else 0.0

    contribution_fields = {
        CONTRIBUTION_FIELDS[category_id]: amount
        for category_id, amount in contributions.amounts.items()
    }

    return TaxBreakdown(
        jurisdiction=rules.jurisdiction,
        year=rules.year,
        filing_status=tax_input.filing_status,
        regime=regime,
        currency=rules.currency,
        gross_income=gross_income,
        standard_deduction=deductions.standard_deduction,
        itemized_deductions=deductions.itemized_total,
        total_deduction=deductions.total_deduction,
        taxable_income=deductions.taxable_income,
        income_tax=primary_tax,
        rebate=rebate,
        solidarity_surcharge=surcharges.solidarity_surcharge,
        church_tax=surcharges.church_tax,
        state_tax=surcharges.state_tax,
        surcharge=surcharges.surcharge,
        cess=surcharges.cess,
        child_benefit=refundable_credit,
        total_tax=total_tax,
        total_contributions=total_contributions,
        total_deductions=total_deductions,
        net_income=net_income,
        net_monthly_income=net_income / 12,
        effective_rate=effective_rate,
        marginal_rate=marginal_rate,
        **contribution_fields,
    )


__all__ = ["CONTRIBUTION_FIELDS", "aggregate"]
