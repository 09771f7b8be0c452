"""Domain-specific calculation helpers."""

from .aggregate import aggregate
from .brackets import apply_brackets, marginal_bracket_rate
from .contributions import resolve_contributions
from .deductions import resolve_deductions, validate_deduction_claims
from .germany import calculate_germany
from .india import calculate_india
from .surcharges import resolve_surcharges, validate_selectors
from .united_states import calculate_united_states
from .utils import round_currency, round_rate
from .zone_formula import apply_splitting, apply_zone_formula, zone_marginal_rate

__all__ = [
    "aggregate",
    "apply_brackets",
    "apply_splitting",
    "apply_zone_formula",
    "calculate_germany",
    "calculate_india",
    "calculate_united_states",
    "marginal_bracket_rate",
    "resolve_contributions",
    "resolve_deductions",
    "resolve_surcharges",
    "round_currency",
    "round_rate",
    "validate_deduction_claims",
    "validate_selectors",
    "zone_marginal_rate",
]
