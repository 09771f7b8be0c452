"""Typed failures raised before any tax computation begins.

Every error carries a stable ``code`` so the HTTP layer and library callers
can render guidance without parsing messages.
"""

from __future__ import annotations

from typing import Any, Mapping


class TaxCalculationError(ValueError):
    """Base class for rejected calculation requests."""

    code = "tax_calculation_error"
    status = 400

    def __init__(self, message: str, **details: Any) -> None:
        super().__init__(message)
        self.message = message
        self.details: Mapping[str, Any] = details

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        payload.update(self.details)
        return payload


class InvalidInput(TaxCalculationError):
    """Income, dependents or filing status are not acceptable."""

    code = "invalid_input"
    status = 400


class UnsupportedYear(TaxCalculationError):
    """No rule set is registered for the jurisdiction/year pair."""

    code = "unsupported_year"
    status = 404

    def __init__(self, jurisdiction: str, year: int) -> None:
        super().__init__(
            f"No tax rules registered for {jurisdiction} {year}",
            jurisdiction=jurisdiction,
            year=year,
        )
        self.jurisdiction = jurisdiction
        self.year = year


class UnknownDeductionKind(TaxCalculationError):
    """A deduction key is not recognised for the jurisdiction."""

    code = "unknown_deduction_kind"
    status = 422

    def __init__(self, kind: str, jurisdiction: str) -> None:
        super().__init__(
            f"Deduction '{kind}' is not recognised for {jurisdiction}",
            kind=kind,
            jurisdiction=jurisdiction,
        )
        self.kind = kind


class RegimeConflict(TaxCalculationError):
    """An itemized deduction was claimed under a regime that forbids it."""

    code = "regime_conflict"
    status = 422

    def __init__(self, kind: str, regime: str) -> None:
        super().__init__(
            f"Deduction '{kind}' cannot be claimed under the {regime} regime",
            kind=kind,
            regime=regime,
        )
        self.kind = kind
        self.regime = regime


__all__ = [
    "InvalidInput",
    "RegimeConflict",
    "TaxCalculationError",
    "UnknownDeductionKind",
    "UnsupportedYear",
]
