"""Problem-style JSON error payloads shared across blueprints."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from flask import jsonify

from multitax.backend.errors import TaxCalculationError


@dataclass(frozen=True)
class ProblemResponse:
    """Error payload with a machine-readable ``error`` code and HTTP status."""

    error: str
    status: int
    message: str | None = None
    extra: Mapping[str, Any] | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.error}
        if self.message:
            payload["message"] = self.message
        if self.extra:
            payload.update(self.extra)
        return payload

    def to_response(self) -> tuple[Any, int]:
        return jsonify(self.as_dict()), self.status


def problem_response(
    error: str,
    *,
    status: int,
    message: str | None = None,
    **extra: Any,
) -> ProblemResponse:
    """Build a :class:`ProblemResponse` from keyword details."""

    additional: Mapping[str, Any] | None = extra or None
    return ProblemResponse(error=error, status=status, message=message, extra=additional)


def problem_from_error(error: TaxCalculationError) -> ProblemResponse:
    """Translate a calculation failure into its problem payload."""

    return problem_response(
        error.code, status=error.status, message=error.message, **dict(error.details)
    )


__all__ = ["ProblemResponse", "problem_from_error", "problem_response"]
