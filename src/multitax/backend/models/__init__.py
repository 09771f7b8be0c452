"""Typed request/response models shared across the calculation services.

Requests and the final breakdown are Pydantic models so validation and
serialisation stay in one place; the intermediate results handed between
resolvers are lightweight frozen dataclasses.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field

from .api import (
    MAX_DEPENDENTS,
    CalculationResponse,
    GermanyTaxInput,
    IndiaTaxInput,
    ResponseMeta,
    TaxBreakdown,
    TaxInput,
    TaxInputBase,
    UnitedStatesTaxInput,
    format_validation_error,
    parse_tax_input,
)

__all__ = [
    "MAX_DEPENDENTS",
    "CalculationResponse",
    "ContributionResult",
    "DeductionResult",
    "GermanyTaxInput",
    "IndiaTaxInput",
    "ResponseMeta",
    "SurchargeResult",
    "TaxBreakdown",
    "TaxInput",
    "TaxInputBase",
    "UnitedStatesTaxInput",
    "format_validation_error",
    "parse_tax_input",
]


@dataclass(frozen=True, slots=True)
class DeductionResult:
    """Deductions applied before the primary tax is computed."""

    standard_deduction: float
    itemized: Mapping[str, float]
    taxable_income: float

    @property
    def itemized_total(self) -> float:
        return sum(self.itemized.values())

    @property
    def total_deduction(self) -> float:
        return self.standard_deduction + self.itemized_total


@dataclass(frozen=True, slots=True)
class SurchargeResult:
    """Secondary levies derived from the post-rebate primary tax."""

    solidarity_surcharge: float = 0.0
    church_tax: float = 0.0
    state_tax: float = 0.0
    surcharge: float = 0.0
    cess: float = 0.0

    @property
    def total(self) -> float:
        return (
            self.solidarity_surcharge
            + self.church_tax
            + self.state_tax
            + self.surcharge
            + self.cess
        )


@dataclass(frozen=True, slots=True)
class ContributionResult:
    """Payroll contributions keyed by category identifier."""

    amounts: Mapping[str, float] = field(default_factory=dict)
    bases: Mapping[str, float] = field(default_factory=dict)

    @property
    def total(self) -> float:
        return sum(self.amounts.values())

    def amount(self, category_id: str) -> float:
        return self.amounts.get(category_id, 0.0)
