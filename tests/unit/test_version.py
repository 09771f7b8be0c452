"""Unit coverage for the project version helper."""

from __future__ import annotations

from importlib import metadata
from pathlib import Path

import pytest

from multitax.backend.version import _read_version_from_pyproject, get_project_version

PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def read_pyproject_version() -> str:
    current_section: str | None = None
    for raw_line in PYPROJECT.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if line.startswith("[") and line.endswith("]"):
            current_section = line.strip("[]")
            continue
        if current_section == "project" and line.startswith("version"):
            return line.partition("=")[2].strip().strip('"')
    raise RuntimeError("Version not found in pyproject.toml")


def test_get_project_version_prefers_metadata(monkeypatch: pytest.MonkeyPatch) -> None:
    get_project_version.cache_clear()
    monkeypatch.setattr(metadata, "version", lambda package: "9.9.9")

    assert get_project_version() == "9.9.9"
    get_project_version.cache_clear()


def test_get_project_version_falls_back_to_pyproject(monkeypatch: pytest.MonkeyPatch) -> None:
    get_project_version.cache_clear()

    def raise_package_not_found(_: str) -> str:
        raise metadata.PackageNotFoundError

    monkeypatch.setattr(metadata, "version", raise_package_not_found)

    assert get_project_version() == read_pyproject_version()
    get_project_version.cache_clear()


def test_missing_version_line_is_an_error(tmp_path: Path) -> None:
    pyproject = tmp_path / "pyproject.toml"
    pyproject.write_text('[project]\nname = "multitax"\n', encoding="utf-8")

    with pytest.raises(RuntimeError):
        _read_version_from_pyproject(pyproject)


def test_missing_pyproject_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(RuntimeError):
        _read_version_from_pyproject(tmp_path / "absent.toml")
