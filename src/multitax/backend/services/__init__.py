"""Service-layer helpers for the MultiTax backend."""

from .calculation_service import calculate_tax, compute_breakdown
from .request_parser import parse_calculation_payload
from .response_builder import build_calculation_response

__all__ = [
    "calculate_tax",
    "compute_breakdown",
    "parse_calculation_payload",
    "build_calculation_response",
]
