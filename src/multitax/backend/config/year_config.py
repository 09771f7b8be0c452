"""Rule repository wrapping the YAML rule sets and their manifest."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Sequence

import yaml
from pydantic import ValidationError

from multitax.backend.errors import UnsupportedYear

from .schema import (
    TAX_YEAR_RULES_ADAPTER,
    CONTRIBUTION_IDS,
    ChurchTaxConfig,
    ConfigurationError,
    ContributionCategory,
    FilingAmount,
    FlatZone,
    GermanyRules,
    IndiaRegimeRules,
    IndiaRules,
    PolynomialZone,
    RebateConfig,
    SolidarityConfig,
    TaxBracket,
    TaxYearManifest,
    TaxYearManifestEntry,
    TaxYearRules,
    TopUpConfig,
    UnitedStatesRules,
    ZoneFormula,
)

_LOGGER = logging.getLogger(__name__)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILENAME = "manifest.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


def load_manifest(directory: Path = CONFIG_DIRECTORY) -> TaxYearManifest:
    """Load and validate the manifest stored in ``directory``."""

    manifest_file = directory / MANIFEST_FILENAME
    if not manifest_file.exists():
        raise FileNotFoundError(f"Configuration manifest not found in {directory}")

    try:
        return TaxYearManifest.model_validate(_load_yaml(manifest_file))
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


def load_rule_file(path: Path, entry: TaxYearManifestEntry) -> TaxYearRules:
    """Parse a single rule set file and check it against its manifest entry."""

    if not path.exists():
        raise FileNotFoundError(
            f"Rule set for {entry.jurisdiction} {entry.year} missing: {path.name}"
        )

    raw_rules = _load_yaml(path)
    raw_rules.setdefault("jurisdiction", entry.jurisdiction)
    raw_rules.setdefault("year", entry.year)

    try:
        rules = TAX_YEAR_RULES_ADAPTER.validate_python(raw_rules)
    except ValidationError as error:
        raise ConfigurationError(
            f"Rule set validation failed for {entry.jurisdiction} {entry.year}: {error}"
        ) from error

    if (rules.jurisdiction, rules.year) != (entry.jurisdiction, entry.year):
        raise ConfigurationError(
            f"Rule set mismatch: expected {entry.jurisdiction} {entry.year}, "
            f"found {rules.jurisdiction} {rules.year}"
        )

    return rules


class RuleRepository:
    """Immutable, year-indexed collection of rule sets.

    Every rule set declared in the manifest is loaded and validated when the
    repository is built; lookups afterwards never touch the filesystem, so a
    single instance can be shared freely between threads.
    """

    def __init__(self, directory: Path = CONFIG_DIRECTORY) -> None:
        self._directory = directory
        self._manifest = load_manifest(directory)
        rules: dict[tuple[str, int], TaxYearRules] = {}
        for entry in self._manifest.years:
            path = directory / entry.resolved_filename
            _LOGGER.debug("Loading rule set %s %s from %s", entry.jurisdiction, entry.year, path)
            rules[(entry.jurisdiction, entry.year)] = load_rule_file(path, entry)
        self._rules: Mapping[tuple[str, int], TaxYearRules] = MappingProxyType(rules)
        _LOGGER.info("Loaded %d rule sets from %s", len(rules), directory)

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def manifest(self) -> TaxYearManifest:
        return self._manifest

    def rules(self, jurisdiction: str, year: int) -> TaxYearRules:
        """Return the rule set for ``jurisdiction`` and ``year`` exactly."""

        try:
            return self._rules[(jurisdiction, year)]
        except KeyError:
            raise UnsupportedYear(jurisdiction, year) from None

    def available_years(self, jurisdiction: str | None = None) -> Sequence[int]:
        return self._manifest.supported_years(jurisdiction)

    def jurisdictions(self) -> Sequence[str]:
        return self._manifest.jurisdictions


@lru_cache(maxsize=1)
def default_repository() -> RuleRepository:
    """Return the process-wide repository built from the bundled rule sets."""

    return RuleRepository(CONFIG_DIRECTORY)


__all__ = [
    "CONFIG_DIRECTORY",
    "CONTRIBUTION_IDS",
    "ChurchTaxConfig",
    "ConfigurationError",
    "ContributionCategory",
    "FilingAmount",
    "FlatZone",
    "GermanyRules",
    "IndiaRegimeRules",
    "IndiaRules",
    "MANIFEST_FILENAME",
    "PolynomialZone",
    "RebateConfig",
    "RuleRepository",
    "SolidarityConfig",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "TaxYearRules",
    "TopUpConfig",
    "UnitedStatesRules",
    "ZoneFormula",
    "default_repository",
    "load_manifest",
    "load_rule_file",
]
