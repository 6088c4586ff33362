"""Configuration loader wrapping the shared schema models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    ConfigurationError,
    IncomeTaxSchedule,
    LowIncomeOffsetConfig,
    MedicareLevyConfig,
    OffsetPhaseOut,
    SurchargeTier,
    TaxBracket,
    TaxYearManifest,
    TaxYearManifestEntry,
    YearConfiguration,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_manifest() -> TaxYearManifest:
    """Load and cache the configuration manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(MANIFEST_FILE)

    try:
        return TaxYearManifest.model_validate(raw_manifest)
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


@lru_cache(maxsize=8)
def load_year_configuration(year: int) -> YearConfiguration:
    """Load configuration for the specified income year from disk."""

    manifest = load_manifest()
    try:
        manifest_entry = manifest.get_entry(year)
    except KeyError as exc:
        raise FileNotFoundError(f"Configuration for year {year} not declared in manifest") from exc

    config_file = CONFIG_DIRECTORY / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for year {year} missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("year", year)
    if manifest_entry.label:
        meta = raw_config.setdefault("meta", {})
        if isinstance(meta, dict):
            meta.setdefault("label", manifest_entry.label)

    try:
        configuration = YearConfiguration.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(f"Configuration validation failed for {year}: {error}") from error

    if configuration.year != year:
        raise ConfigurationError(
            f"Configuration year mismatch: expected {year}, found {configuration.year}"
        )

    return configuration


def available_years() -> Sequence[int]:
    """Return the income years declared in the manifest."""

    return load_manifest().supported_years


def default_year() -> int:
    """Return the most recent configured income year."""

    return load_manifest().default_year


def load_income_tax_schedule(year: int | None = None) -> IncomeTaxSchedule:
    """Return the income tax schedule for ``year`` (latest year when omitted)."""

    target = default_year() if year is None else year
    return load_year_configuration(target).income_tax


__all__ = [
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "IncomeTaxSchedule",
    "LowIncomeOffsetConfig",
    "MANIFEST_FILE",
    "MedicareLevyConfig",
    "OffsetPhaseOut",
    "SurchargeTier",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "YearConfiguration",
    "available_years",
    "default_year",
    "load_income_tax_schedule",
    "load_manifest",
    "load_year_configuration",
]
