"""Utilities for exposing the project version consistently."""

from __future__ import annotations

from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Final

PACKAGE_NAME: Final = "multitax"


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed version, falling back to ``pyproject.toml``."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return _read_version_from_pyproject()


def _read_version_from_pyproject(
    pyproject_path: Path | None = None,
) -> str:
    """Read ``version`` from the ``[project]`` table of ``pyproject.toml``."""

    if pyproject_path is None:
        pyproject_path = Path(__file__).resolve().parents[3] / "pyproject.toml"
    if not pyproject_path.exists():
        msg = f"Unable to locate project metadata at {pyproject_path}"
        raise RuntimeError(msg)

    current_section: str | None = None
    for raw_line in pyproject_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if line.startswith("[") and line.endswith("]"):
            current_section = line.strip("[]")
            continue
        if current_section == "project" and line.startswith("version"):
            _, _, value = line.partition("=")
            version = value.strip().strip('"')
            if not version:
                break
            return version

    msg = f"Unable to determine project version from {pyproject_path.name}"
    raise RuntimeError(msg)


__all__ = ["PACKAGE_NAME", "get_project_version"]
