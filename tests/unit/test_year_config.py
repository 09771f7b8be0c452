"""Unit coverage for rule set discovery and parsing utilities."""

from __future__ import annotations

from pathlib import Path
from shutil import copytree

import pytest
import yaml
from pydantic import ValidationError

from multitax.backend.config import year_config
from multitax.backend.config.year_config import (
    CONTRIBUTION_IDS,
    ConfigurationError,
    RuleRepository,
    default_repository,
    load_manifest,
)
from multitax.backend.errors import UnsupportedYear
from multitax.backend.models import TaxBreakdown
from multitax.backend.services.calculators.aggregate import CONTRIBUTION_FIELDS


@pytest.fixture()
def isolated_config_directory(tmp_path: Path) -> Path:
    """Return a writable copy of the bundled rule sets."""

    target = tmp_path / "data"
    copytree(year_config.CONFIG_DIRECTORY, target)
    return target


def _append_manifest_entry(directory: Path, entry: dict[str, object]) -> None:
    manifest_path = directory / "manifest.yaml"
    manifest = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    manifest["years"].append(entry)
    manifest_path.write_text(
        yaml.safe_dump(manifest, sort_keys=False, allow_unicode=True), encoding="utf-8"
    )


def test_bundled_repository_lists_every_jurisdiction() -> None:
    repository = default_repository()

    assert repository.jurisdictions() == ("DE", "IN", "US")
    assert repository.available_years("DE") == (2025, 2026)
    assert repository.available_years("US") == (2024, 2025)
    assert repository.available_years("IN") == (2024, 2025)
    assert repository.available_years() == (2024, 2025, 2026)


def test_default_repository_is_shared() -> None:
    assert default_repository() is default_repository()


def test_rules_are_immutable() -> None:
    rules = default_repository().rules("DE", 2025)

    with pytest.raises(ValidationError):
        rules.year = 2030  # type: ignore[misc]


def test_unknown_pair_raises_unsupported_year() -> None:
    with pytest.raises(UnsupportedYear) as excinfo:
        default_repository().rules("IN", 2023)

    assert excinfo.value.jurisdiction == "IN"
    assert excinfo.value.year == 2023


def test_new_year_is_a_content_change(isolated_config_directory: Path) -> None:
    source = isolated_config_directory / "us-2025.yaml"
    data = yaml.safe_load(source.read_text(encoding="utf-8"))
    data["year"] = 2030
    (isolated_config_directory / "us-2030.yaml").write_text(
        yaml.safe_dump(data, sort_keys=False), encoding="utf-8"
    )
    _append_manifest_entry(isolated_config_directory, {"jurisdiction": "US", "year": 2030})

    repository = RuleRepository(isolated_config_directory)

    assert repository.available_years("US") == (2024, 2025, 2030)
    assert repository.rules("US", 2030).year == 2030


def test_explicit_filename_is_honoured(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "in-2025.yaml").rename(
        isolated_config_directory / "india-fy2025.yaml"
    )
    manifest_path = isolated_config_directory / "manifest.yaml"
    manifest = yaml.safe_load(manifest_path.read_text(encoding="utf-8"))
    for entry in manifest["years"]:
        if entry["jurisdiction"] == "IN" and entry["year"] == 2025:
            entry["filename"] = "india-fy2025.yaml"
    manifest_path.write_text(yaml.safe_dump(manifest, sort_keys=False), encoding="utf-8")

    repository = RuleRepository(isolated_config_directory)

    assert repository.rules("IN", 2025).cess_rate == pytest.approx(0.04)


def test_missing_rule_file_fails_loading(isolated_config_directory: Path) -> None:
    _append_manifest_entry(isolated_config_directory, {"jurisdiction": "DE", "year": 2031})

    with pytest.raises(FileNotFoundError):
        RuleRepository(isolated_config_directory)


def test_missing_manifest_fails_loading(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_manifest(tmp_path)


def test_duplicate_manifest_entries_are_rejected(isolated_config_directory: Path) -> None:
    _append_manifest_entry(isolated_config_directory, {"jurisdiction": "DE", "year": 2025})

    with pytest.raises(ConfigurationError):
        load_manifest(isolated_config_directory)


def test_year_mismatch_is_rejected(isolated_config_directory: Path) -> None:
    path = isolated_config_directory / "de-2026.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data["year"] = 2025
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="mismatch"):
        RuleRepository(isolated_config_directory)


def test_gapped_brackets_are_rejected(isolated_config_directory: Path) -> None:
    path = isolated_config_directory / "us-2024.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data["brackets"]["single"][1]["lower"] = data["brackets"]["single"][1]["lower"] + 100
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="contiguous"):
        RuleRepository(isolated_config_directory)


def test_open_final_bracket_is_required(isolated_config_directory: Path) -> None:
    path = isolated_config_directory / "in-2024.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data["regimes"]["new"]["brackets"][-1]["upper"] = 99_000_000
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="open upper bound"):
        RuleRepository(isolated_config_directory)


def test_unknown_rule_fields_are_rejected(isolated_config_directory: Path) -> None:
    path = isolated_config_directory / "de-2025.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data["wealth_tax"] = 0.01
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    with pytest.raises(ConfigurationError):
        RuleRepository(isolated_config_directory)


def test_top_level_must_be_mapping(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "de-2025.yaml").write_text("- 1\n- 2\n", encoding="utf-8")

    with pytest.raises(ConfigurationError, match="mapping"):
        RuleRepository(isolated_config_directory)


def test_unknown_contribution_ids_are_rejected(isolated_config_directory: Path) -> None:
    path = isolated_config_directory / "de-2025.yaml"
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    data["contributions"][0]["id"] = "pensions"
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")

    with pytest.raises(ConfigurationError, match="Unknown contribution id 'pensions'"):
        RuleRepository(isolated_config_directory)


def test_every_contribution_id_maps_onto_a_breakdown_field() -> None:
    assert set(CONTRIBUTION_FIELDS) == set(CONTRIBUTION_IDS)
    assert set(CONTRIBUTION_FIELDS.values()) <= set(TaxBreakdown.model_fields)
