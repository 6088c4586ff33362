"""Project version and runtime metadata helpers."""

from __future__ import annotations

import tomllib
from functools import lru_cache
from importlib import metadata
from pathlib import Path
from typing import Any, Final

from fincalc.backend.config.year_config import load_manifest

PACKAGE_NAME: Final = "fincalc"
PYPROJECT_PATH: Final = Path(__file__).resolve().parents[3] / "pyproject.toml"


@lru_cache(maxsize=1)
def get_project_version() -> str:
    """Return the installed version, or the ``pyproject.toml`` one for a checkout."""

    try:
        return metadata.version(PACKAGE_NAME)
    except metadata.PackageNotFoundError:
        return _read_version_from_pyproject()


def _read_version_from_pyproject() -> str:
    if not PYPROJECT_PATH.exists():  # pragma: no cover - repository invariant
        raise RuntimeError(f"Unable to locate project metadata at {PYPROJECT_PATH}")

    with PYPROJECT_PATH.open("rb") as handle:
        project = tomllib.load(handle).get("project", {})

    version = project.get("version")
    if not isinstance(version, str) or not version:
        raise RuntimeError("Unable to determine project version from pyproject.toml")
    return version


def get_runtime_metadata() -> dict[str, Any]:
    """Describe the running version and the income years it can calculate."""

    manifest = load_manifest()
    supported_years = list(manifest.supported_years)
    return {
        "version": get_project_version(),
        "supported_years": supported_years,
        "default_year": supported_years[-1] if supported_years else None,
    }


__all__ = ["get_project_version", "get_runtime_metadata"]
