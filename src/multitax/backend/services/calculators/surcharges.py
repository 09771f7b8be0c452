"""Secondary levies computed from the primary tax result."""

from __future__ import annotations

from collections.abc import Mapping, Sequence

from multitax.backend.config.year_config import (
    ChurchTaxConfig,
    GermanyRules,
    IndiaRules,
    RebateConfig,
    SolidarityConfig,
    TaxBracket,
    TaxYearRules,
    UnitedStatesRules,
)
from multitax.backend.errors import InvalidInput
from multitax.backend.models import SurchargeResult, TaxInputBase

from .brackets import marginal_bracket_rate
from .deductions import selected_regime


def validate_selectors(tax_input: TaxInputBase, rules: TaxYearRules) -> None:
    """Reject state selectors the rule set does not know about."""

    state = getattr(tax_input, "state", None)
    if isinstance(rules, GermanyRules):
        if state is not None and state not in rules.states:
            raise InvalidInput(f"Unknown federal state '{state}'")
    elif isinstance(rules, UnitedStatesRules):
        if state not in rules.state_tax_rates:
            raise InvalidInput(f"Unknown state '{state}'")


def apply_rebate(primary_tax: float, taxable_income: float, rebate: RebateConfig | None) -> float:
    """Return the primary tax after low-income forgiveness.

    ``full`` rebates zero the tax at or below the ceiling; ``credit`` rebates
    subtract a fixed amount, never going below zero.
    """

    if rebate is None or taxable_income > rebate.ceiling:
        return primary_tax
    if rebate.mode == "full":
        return 0.0
    return max(0.0, primary_tax - rebate.amount)


def solidarity_surcharge(
    primary_tax: float, filing_status: str, config: SolidarityConfig
) -> float:
    """Surcharge on tax above a threshold, softened just above it."""

    threshold = config.threshold * 2 if filing_status == "married" else config.threshold
    if primary_tax <= threshold:
        return 0.0
    excess = primary_tax - threshold
    return min(primary_tax * config.rate, excess * config.softening_rate)


def church_tax(
    primary_tax: float, church_member: bool, state: str | None, config: ChurchTaxConfig
) -> float:
    if not church_member:
        return 0.0
    return primary_tax * config.rate_for_state(state)


def income_surcharge(
    primary_tax: float, taxable_income: float, surcharge_brackets: Sequence[TaxBracket]
) -> float:
    """Surcharge whose rate is chosen by the band containing taxable income."""

    return primary_tax * marginal_bracket_rate(taxable_income, surcharge_brackets)


def cess(primary_tax: float, surcharge: float, rate: float) -> float:
    """Flat levy on primary tax plus surcharge."""

    return (primary_tax + surcharge) * rate


def state_tax(taxable_income: float, state: str, rates: Mapping[str, float]) -> float:
    return taxable_income * rates[state]


def resolve_surcharges(
    primary_tax: float,
    tax_input: TaxInputBase,
    rules: TaxYearRules,
    taxable_income: float,
) -> SurchargeResult:
    """Compute every secondary component for the jurisdiction of ``rules``."""

    if isinstance(rules, GermanyRules):
        return SurchargeResult(
            solidarity_surcharge=solidarity_surcharge(
                primary_tax, tax_input.filing_status, rules.solidarity
            ),
            church_tax=church_tax(
                primary_tax,
                getattr(tax_input, "church_member", False),
                getattr(tax_input, "state", None),
                rules.church_tax,
            ),
        )

    if isinstance(rules, UnitedStatesRules):
        return SurchargeResult(
            state_tax=state_tax(taxable_income, tax_input.state, rules.state_tax_rates)
        )

    if isinstance(rules, IndiaRules):
        regime = rules.regime(selected_regime(tax_input, rules))
        surcharge = income_surcharge(primary_tax, taxable_income, regime.surcharge_brackets)
        return SurchargeResult(
            surcharge=surcharge,
            cess=cess(primary_tax, surcharge, rules.cess_rate),
        )

    return SurchargeResult()


__all__ = [
    "apply_rebate",
    "cess",
    "church_tax",
    "income_surcharge",
    "resolve_surcharges",
    "solidarity_surcharge",
    "state_tax",
    "validate_selectors",
]
