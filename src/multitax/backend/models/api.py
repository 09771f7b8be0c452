"""Pydantic models describing the public API surface."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Literal, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)

from multitax.backend.errors import InvalidInput

__all__ = [
    "MAX_DEPENDENTS",
    "CalculationResponse",
    "GermanyTaxInput",
    "IndiaTaxInput",
    "ResponseMeta",
    "TaxBreakdown",
    "TaxInput",
    "TaxInputBase",
    "UnitedStatesTaxInput",
    "format_validation_error",
    "parse_tax_input",
]

MAX_DEPENDENTS = 20

MonetaryAmount = Annotated[float, Field(ge=0, allow_inf_nan=False)]


class TaxInputBase(BaseModel):
    """Facts shared by every jurisdiction's calculation request."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    year: int
    gross_income: MonetaryAmount
    dependents: int = Field(default=0, ge=0, le=MAX_DEPENDENTS)
    deductions: dict[str, MonetaryAmount] = Field(default_factory=dict)

    @field_validator("deductions", mode="before")
    @classmethod
    def _normalise_deductions(cls, value: Any) -> Any:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return {str(key): amount for key, amount in value.items()}
        raise ValueError("Deductions must be an object mapping kinds to amounts")

    @property
    def is_joint(self) -> bool:
        return getattr(self, "filing_status", "single") == "married"


class GermanyTaxInput(TaxInputBase):
    """Request for a German income tax estimate.

    ``gross_income`` is the combined household income when filing jointly.
    """

    jurisdiction: Literal["DE"]
    filing_status: Literal["single", "married"] = "single"
    church_member: bool = False
    state: str | None = None


class UnitedStatesTaxInput(TaxInputBase):
    """Request for a US federal, state and FICA estimate."""

    jurisdiction: Literal["US"]
    filing_status: Literal["single", "married"] = "single"
    state: str = "none"


class IndiaTaxInput(TaxInputBase):
    """Request for an Indian income tax estimate under a chosen regime."""

    jurisdiction: Literal["IN"]
    filing_status: Literal["single"] = "single"
    regime: str | None = None


TaxInput = Annotated[
    Union[GermanyTaxInput, UnitedStatesTaxInput, IndiaTaxInput],
    Field(discriminator="jurisdiction"),
]

_TAX_INPUT_ADAPTER: TypeAdapter[TaxInput] = TypeAdapter(TaxInput)


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if "greater than or equal to 0" in message.lower():
            message = "value cannot be negative"
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"


def parse_tax_input(payload: Any) -> TaxInputBase:
    """Validate ``payload`` into the jurisdiction-specific input model."""

    if isinstance(payload, TaxInputBase):
        return payload
    if not isinstance(payload, Mapping):
        raise InvalidInput("Payload must be a mapping")
    try:
        return _TAX_INPUT_ADAPTER.validate_python(dict(payload))
    except ValidationError as exc:
        raise InvalidInput(format_validation_error(exc)) from exc


class TaxBreakdown(BaseModel):
    """Itemized result of a single calculation.

    Every component is present for every jurisdiction; components that do not
    apply are zero. ``income_tax`` is the primary tax (federal tax in the US).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    jurisdiction: str
    year: int
    filing_status: str
    regime: str | None = None
    currency: str

    gross_income: float
    standard_deduction: float = 0.0
    itemized_deductions: float = 0.0
    total_deduction: float = 0.0
    taxable_income: float = 0.0

    income_tax: float = 0.0
    rebate: float = 0.0
    solidarity_surcharge: float = 0.0
    church_tax: float = 0.0
    state_tax: float = 0.0
    surcharge: float = 0.0
    cess: float = 0.0

    pension_insurance: float = 0.0
    health_insurance: float = 0.0
    unemployment_insurance: float = 0.0
    care_insurance: float = 0.0
    social_security: float = 0.0
    medicare: float = 0.0
    provident_fund: float = 0.0

    child_benefit: float = 0.0

    total_tax: float = 0.0
    total_contributions: float = 0.0
    total_deductions: float = 0.0
    net_income: float = 0.0
    net_monthly_income: float = 0.0
    effective_rate: float = 0.0
    marginal_rate: float = 0.0


class ResponseMeta(BaseModel):
    """Metadata returned alongside the calculation output."""

    model_config = ConfigDict(extra="forbid")

    jurisdiction: str
    year: int
    currency: str
    source: str | None = None


class CalculationResponse(BaseModel):
    """Full response payload produced by the calculation service."""

    model_config = ConfigDict(extra="forbid")

    breakdown: TaxBreakdown
    meta: ResponseMeta
