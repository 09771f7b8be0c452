"""Pydantic models describing the tax rule set schema."""

from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Sequence, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self

FILING_STATUSES = ("single", "married")

# Contribution identifiers that map onto itemized breakdown fields.
CONTRIBUTION_IDS = frozenset(
    {
        "pension",
        "health",
        "unemployment",
        "care",
        "social_security",
        "medicare",
        "provident_fund",
    }
)


class ConfigurationError(ValueError):
    """Raised when rule set values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TaxBracket(ImmutableModel):
    """A contiguous income range taxed at a single marginal rate."""

    lower_bound: float = Field(default=0.0, alias="lower")
    upper_bound: float | None = Field(default=None, alias="upper")
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.rate < 0:
            raise ConfigurationError("Tax rates must be non-negative")
        if self.lower_bound < 0:
            raise ConfigurationError("Lower bounds must be non-negative")
        if self.upper_bound is not None and self.upper_bound <= self.lower_bound:
            raise ConfigurationError("Upper bounds must exceed lower bounds")
        return self


def validate_bracket_sequence(brackets: Sequence[TaxBracket]) -> None:
    """Ensure ``brackets`` are contiguous, ascending and end unbounded."""

    if not brackets:
        raise ConfigurationError("At least one tax bracket must be defined")
    previous: TaxBracket | None = None
    for bracket in brackets:
        if previous is not None:
            if previous.upper_bound is None:
                raise ConfigurationError("Only the final tax bracket may be unbounded")
            if bracket.lower_bound != previous.upper_bound:
                raise ConfigurationError(
                    "Tax brackets must be contiguous: "
                    f"{bracket.lower_bound} does not follow {previous.upper_bound}"
                )
        previous = bracket
    if brackets[-1].upper_bound is not None:
        raise ConfigurationError("Final tax bracket must have an open upper bound")


class FilingAmount(ImmutableModel):
    """Amount that may differ between single and joint filers."""

    single: float
    married: float | None = None

    @model_validator(mode="before")
    @classmethod
    def _coerce_scalar(cls, data: Any) -> Any:
        if isinstance(data, (Mapping, FilingAmount)):
            return data
        return {"single": data}

    @model_validator(mode="after")
    def _validate_amounts(self) -> FilingAmount:
        if self.single < 0 or (self.married is not None and self.married < 0):
            raise ConfigurationError("Filing amounts must be non-negative")
        return self

    def for_status(self, filing_status: str) -> float:
        if filing_status == "married" and self.married is not None:
            return self.married
        return self.single


class PolynomialZone(ImmutableModel):
    """Quadratic zone ``(coefficient * v + linear) * v + constant``."""

    upper_bound: float = Field(alias="end")
    coefficient: float
    linear: float
    constant: float = 0.0
    entry_rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> PolynomialZone:
        if self.entry_rate < 0:
            raise ConfigurationError("Zone entry rates must be non-negative")
        return self


class FlatZone(ImmutableModel):
    """Linear zone ``rate * income - constant``."""

    upper_bound: float | None = Field(default=None, alias="end")
    rate: float
    constant: float

    @model_validator(mode="after")
    def _validate_values(self) -> FlatZone:
        if self.rate < 0:
            raise ConfigurationError("Flat zone rates must be non-negative")
        return self


class ZoneFormula(ImmutableModel):
    """Continuous progressive formula with an allowance and ordered zones."""

    allowance: float
    divisor: float = 10_000.0
    progressive: Sequence[PolynomialZone]
    flat: Sequence[FlatZone]

    @model_validator(mode="after")
    def _validate_zones(self) -> ZoneFormula:
        if self.allowance < 0:
            raise ConfigurationError("The tax-free allowance must be non-negative")
        if self.divisor <= 0:
            raise ConfigurationError("Zone divisor must be positive")
        if not self.progressive or not self.flat:
            raise ConfigurationError(
                "Zone formulas require at least one progressive and one flat zone"
            )
        start = self.allowance
        for zone in self.progressive:
            if zone.upper_bound <= start:
                raise ConfigurationError("Progressive zones must be in ascending order")
            start = zone.upper_bound
        for zone in self.flat[:-1]:
            if zone.upper_bound is None or zone.upper_bound <= start:
                raise ConfigurationError("Flat zones must be in ascending order")
            start = zone.upper_bound
        if self.flat[-1].upper_bound is not None:
            raise ConfigurationError("Final flat zone must have an open upper bound")
        return self


class SolidarityConfig(ImmutableModel):
    """Surcharge levied on primary tax above a filing-status threshold."""

    rate: float
    threshold: float
    softening_rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> SolidarityConfig:
        if min(self.rate, self.threshold, self.softening_rate) < 0:
            raise ConfigurationError("Solidarity settings must be non-negative")
        return self


class ChurchTaxConfig(ImmutableModel):
    """Confession-based tax as a percentage of primary tax."""

    default_rate: float
    state_rates: Mapping[str, float] = Field(default_factory=dict)

    @field_validator("state_rates", mode="before")
    @classmethod
    def _coerce_state_rates(cls, value: Any) -> Mapping[str, float]:
        if value is None:
            return {}
        if isinstance(value, Mapping):
            return {str(key): float(rate) for key, rate in value.items()}
        raise ConfigurationError("Church tax 'state_rates' must be a mapping")

    def rate_for_state(self, state: str | None) -> float:
        if state is not None and state in self.state_rates:
            return self.state_rates[state]
        return self.default_rate


class RebateConfig(ImmutableModel):
    """Low-income forgiveness applied before surcharges."""

    ceiling: float
    mode: Literal["full", "credit"]
    amount: float = 0.0

    @model_validator(mode="after")
    def _validate_values(self) -> RebateConfig:
        if self.ceiling < 0 or self.amount < 0:
            raise ConfigurationError("Rebate ceilings and amounts must be non-negative")
        if self.mode == "credit" and self.amount <= 0:
            raise ConfigurationError("Credit rebates require a positive 'amount'")
        return self


class TopUpConfig(ImmutableModel):
    """Additional rate charged only on income above a threshold."""

    rate: float
    threshold: FilingAmount


class ContributionCategory(ImmutableModel):
    """Capped, rate-based payroll contribution."""

    id: str
    rate: float
    ceiling: float | None = None
    wage_share: float = 1.0
    supplementary_rate: float = 0.0
    top_up: TopUpConfig | None = None
    childless_surcharge: float = 0.0
    child_discount: float = 0.0
    max_discounted_children: int = 0

    @model_validator(mode="after")
    def _validate_values(self) -> ContributionCategory:
        if self.id not in CONTRIBUTION_IDS:
            known = ", ".join(sorted(CONTRIBUTION_IDS))
            raise ConfigurationError(
                f"Unknown contribution id '{self.id}' (expected one of: {known})"
            )
        if self.rate < 0 or self.supplementary_rate < 0:
            raise ConfigurationError(f"Contribution '{self.id}' rates must be non-negative")
        if self.ceiling is not None and self.ceiling < 0:
            raise ConfigurationError(f"Contribution '{self.id}' ceiling must be non-negative")
        if not 0 < self.wage_share <= 1:
            raise ConfigurationError(
                f"Contribution '{self.id}' wage_share must be within (0, 1]"
            )
        if self.max_discounted_children < 0:
            raise ConfigurationError(
                f"Contribution '{self.id}' max_discounted_children must be non-negative"
            )
        return self


class RuleSetBase(ImmutableModel):
    """Fields shared by every jurisdiction's rule set."""

    year: int
    currency: str
    meta: Mapping[str, Any] = Field(default_factory=dict)
    filing_statuses: Sequence[str] = FILING_STATUSES
    contributions: Sequence[ContributionCategory] = Field(default_factory=tuple)
    deductions: Mapping[str, FilingAmount] = Field(default_factory=dict)

    @field_validator("meta", "deductions", mode="before")
    @classmethod
    def _default_mapping(cls, value: Any) -> Any:
        return {} if value is None else value

    @model_validator(mode="after")
    def _validate_common(self) -> Self:
        unknown = [status for status in self.filing_statuses if status not in FILING_STATUSES]
        if unknown:
            raise ConfigurationError(f"Unknown filing statuses: {unknown}")
        ids = [category.id for category in self.contributions]
        if len(ids) != len(set(ids)):
            raise ConfigurationError("Contribution identifiers must be unique")
        return self

    @property
    def deduction_kinds(self) -> frozenset[str]:
        return frozenset(self.deductions)


class GermanyRules(RuleSetBase):
    """Rule set evaluated with the continuous zone formula."""

    jurisdiction: Literal["DE"]
    income_tax: ZoneFormula
    standard_deduction: FilingAmount
    solidarity: SolidarityConfig
    church_tax: ChurchTaxConfig
    states: Sequence[str]
    child_benefit_monthly: float = 0.0


class UnitedStatesRules(RuleSetBase):
    """Federal bracket tables plus flat state rates."""

    jurisdiction: Literal["US"]
    brackets: Mapping[str, Sequence[TaxBracket]]
    standard_deduction: FilingAmount
    state_tax_rates: Mapping[str, float]

    @model_validator(mode="after")
    def _validate_brackets(self) -> UnitedStatesRules:
        for status in self.filing_statuses:
            table = self.brackets.get(status)
            if table is None:
                raise ConfigurationError(f"Missing bracket table for '{status}' filers")
            validate_bracket_sequence(table)
        return self

    def brackets_for(self, filing_status: str) -> Sequence[TaxBracket]:
        return self.brackets[filing_status]


class IndiaRegimeRules(ImmutableModel):
    """One selectable regime within the Indian rule set."""

    brackets: Sequence[TaxBracket]
    standard_deduction: float
    allow_itemized: bool = False
    rebate: RebateConfig | None = None
    surcharge_brackets: Sequence[TaxBracket]

    @model_validator(mode="after")
    def _validate_tables(self) -> IndiaRegimeRules:
        validate_bracket_sequence(self.brackets)
        validate_bracket_sequence(self.surcharge_brackets)
        if self.standard_deduction < 0:
            raise ConfigurationError("Standard deductions must be non-negative")
        return self


class IndiaRules(RuleSetBase):
    """Regime-based bracket rules with rebate, surcharge and cess."""

    jurisdiction: Literal["IN"]
    filing_statuses: Sequence[str] = ("single",)
    default_regime: str = "new"
    regimes: Mapping[str, IndiaRegimeRules]
    cess_rate: float

    @model_validator(mode="after")
    def _validate_regimes(self) -> IndiaRules:
        if self.default_regime not in self.regimes:
            raise ConfigurationError(
                f"Default regime '{self.default_regime}' is not defined"
            )
        if self.cess_rate < 0:
            raise ConfigurationError("Cess rate must be non-negative")
        return self

    def regime(self, name: str | None) -> IndiaRegimeRules:
        return self.regimes[name or self.default_regime]


TaxYearRules = Annotated[
    Union[GermanyRules, UnitedStatesRules, IndiaRules],
    Field(discriminator="jurisdiction"),
]

TAX_YEAR_RULES_ADAPTER: TypeAdapter[TaxYearRules] = TypeAdapter(TaxYearRules)


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported rule set in the manifest."""

    jurisdiction: str
    year: int
    filename: str | None = None
    status: str = "active"
    source: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.jurisdiction.lower()}-{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available rule set files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[tuple[str, int]] = set()
        for entry in self.years:
            key = (entry.jurisdiction, entry.year)
            if key in seen:
                raise ConfigurationError(
                    f"Duplicate rule set {entry.jurisdiction} {entry.year} declared "
                    "in the configuration manifest"
                )
            seen.add(key)
        return self

    def get_entry(self, jurisdiction: str, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.jurisdiction == jurisdiction and entry.year == year:
                return entry
        raise KeyError((jurisdiction, year))

    def supported_years(self, jurisdiction: str | None = None) -> tuple[int, ...]:
        return tuple(
            sorted(
                {
                    entry.year
                    for entry in self.years
                    if jurisdiction is None or entry.jurisdiction == jurisdiction
                }
            )
        )

    @computed_field
    @property
    def jurisdictions(self) -> tuple[str, ...]:
        return tuple(sorted({entry.jurisdiction for entry in self.years}))


__all__ = [
    "CONTRIBUTION_IDS",
    "FILING_STATUSES",
    "TAX_YEAR_RULES_ADAPTER",
    "ChurchTaxConfig",
    "ConfigurationError",
    "ContributionCategory",
    "FilingAmount",
    "FlatZone",
    "GermanyRules",
    "ImmutableModel",
    "IndiaRegimeRules",
    "IndiaRules",
    "PolynomialZone",
    "RebateConfig",
    "RuleSetBase",
    "SolidarityConfig",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "TaxYearRules",
    "TopUpConfig",
    "UnitedStatesRules",
    "ValidationError",
    "ZoneFormula",
    "validate_bracket_sequence",
]
