"""Standard and itemized deduction handling ahead of the primary tax."""

from __future__ import annotations

from multitax.backend.config.year_config import IndiaRules, TaxYearRules
from multitax.backend.errors import InvalidInput, RegimeConflict, UnknownDeductionKind
from multitax.backend.models import DeductionResult, TaxInputBase


def selected_regime(tax_input: TaxInputBase, rules: TaxYearRules) -> str | None:
    """Return the regime name in force for ``tax_input`` (``None`` if not applicable)."""

    if not isinstance(rules, IndiaRules):
        return None
    regime = getattr(tax_input, "regime", None) or rules.default_regime
    if regime not in rules.regimes:
        allowed = ", ".join(sorted(rules.regimes))
        raise InvalidInput(f"Unknown regime '{regime}' (expected one of: {allowed})")
    return regime


def validate_deduction_claims(tax_input: TaxInputBase, rules: TaxYearRules) -> None:
    """Reject unknown deduction kinds and claims the regime does not permit."""

    known = rules.deduction_kinds
    for kind in tax_input.deductions:
        if kind not in known:
            raise UnknownDeductionKind(kind, rules.jurisdiction)

    regime = selected_regime(tax_input, rules)
    if regime is not None and tax_input.deductions and not rules.regime(regime).allow_itemized:
        raise RegimeConflict(next(iter(tax_input.deductions)), regime)


def _allows_itemized(tax_input: TaxInputBase, rules: TaxYearRules) -> bool:
    if isinstance(rules, IndiaRules):
        return rules.regime(selected_regime(tax_input, rules)).allow_itemized
    return True


def _standard_deduction(tax_input: TaxInputBase, rules: TaxYearRules) -> float:
    if isinstance(rules, IndiaRules):
        return rules.regime(selected_regime(tax_input, rules)).standard_deduction
    return rules.standard_deduction.for_status(tax_input.filing_status)


def resolve_deductions(tax_input: TaxInputBase, rules: TaxYearRules) -> DeductionResult:
    """Apply the standard deduction and clamp each itemized claim to its cap.

    Caps are independent: unused headroom in one category never spills over
    into another.
    """

    standard = _standard_deduction(tax_input, rules)

    itemized: dict[str, float] = {}
    claims = tax_input.deductions if _allows_itemized(tax_input, rules) else {}
    for kind, claimed in claims.items():
        cap = rules.deductions[kind].for_status(tax_input.filing_status)
        itemized[kind] = min(claimed, cap)

    total = standard + sum(itemized.values())
    taxable_income = tax_input.gross_income - total
    if taxable_income < 0:
        taxable_income = 0.0

    return DeductionResult(
        standard_deduction=standard,
        itemized=itemized,
        taxable_income=taxable_income,
    )


__all__ = ["resolve_deductions", "selected_regime", "validate_deduction_claims"]
