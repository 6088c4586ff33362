"""Unit coverage for income year configuration discovery and parsing."""

from __future__ import annotations

from pathlib import Path
from shutil import copy2

import pytest
import yaml

from fincalc.backend.config import year_config


@pytest.fixture()
def isolated_config_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Return a temporary configuration directory patched into ``year_config``."""

    original_directory = year_config.CONFIG_DIRECTORY
    copy2(original_directory / "2025.yaml", tmp_path / "2025.yaml")

    manifest_path = tmp_path / "manifest.yaml"
    copy2(original_directory / "manifest.yaml", manifest_path)

    monkeypatch.setattr(year_config, "CONFIG_DIRECTORY", tmp_path)
    monkeypatch.setattr(year_config, "MANIFEST_FILE", manifest_path)
    year_config.load_year_configuration.cache_clear()
    year_config.load_manifest.cache_clear()

    yield tmp_path

    year_config.load_year_configuration.cache_clear()
    year_config.load_manifest.cache_clear()


def _append_manifest_entry(directory: Path, entry: dict[str, object]) -> None:
    manifest_path = directory / "manifest.yaml"
    manifest = yaml.safe_load(manifest_path.read_text())
    manifest.setdefault("years", []).append(entry)
    manifest_path.write_text(yaml.safe_dump(manifest, sort_keys=False, allow_unicode=True))
    year_config.load_manifest.cache_clear()


def test_bundled_configuration_loads() -> None:
    config = year_config.load_year_configuration(2025)

    assert config.year == 2025
    assert config.label == "2024-25"
    assert config.income_tax.periods_for("weekly") == 52
    assert config.income_tax.periods_for("fortnightly") is None
    assert len(config.income_tax.brackets) == 5


def test_available_years_discovers_manifest_entry(isolated_config_directory: Path) -> None:
    """A new year only needs a data file and a manifest line."""

    (isolated_config_directory / "2030.yaml").write_text(
        (isolated_config_directory / "2025.yaml").read_text()
    )
    _append_manifest_entry(isolated_config_directory, {"year": 2030})

    assert year_config.available_years() == (2025, 2030)
    assert year_config.default_year() == 2030

    config = year_config.load_year_configuration(2030)
    assert config.year == 2030
    # The copied file still carries its own label, which wins over the fallback.
    assert config.label == "2024-25"


def test_files_missing_from_manifest_are_ignored(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "2031.yaml").write_text(
        (isolated_config_directory / "2025.yaml").read_text()
    )

    assert year_config.available_years() == (2025,)
    with pytest.raises(FileNotFoundError):
        year_config.load_year_configuration(2031)


def test_manifest_entry_without_file_raises(isolated_config_directory: Path) -> None:
    _append_manifest_entry(isolated_config_directory, {"year": 2032, "filename": "absent.yaml"})

    with pytest.raises(FileNotFoundError, match="absent.yaml"):
        year_config.load_year_configuration(2032)


def test_label_falls_back_to_income_year_span(isolated_config_directory: Path) -> None:
    raw = yaml.safe_load((isolated_config_directory / "2025.yaml").read_text())
    raw["meta"].pop("label")
    (isolated_config_directory / "2027.yaml").write_text(yaml.safe_dump(raw))
    _append_manifest_entry(isolated_config_directory, {"year": 2027})

    assert year_config.load_year_configuration(2027).label == "2026-27"


def test_year_mismatch_is_rejected(isolated_config_directory: Path) -> None:
    raw = yaml.safe_load((isolated_config_directory / "2025.yaml").read_text())
    raw["year"] = 2025
    (isolated_config_directory / "2028.yaml").write_text(yaml.safe_dump(raw))
    _append_manifest_entry(isolated_config_directory, {"year": 2028})

    with pytest.raises(year_config.ConfigurationError, match="mismatch"):
        year_config.load_year_configuration(2028)


def test_invalid_brackets_raise_configuration_error(isolated_config_directory: Path) -> None:
    raw = yaml.safe_load((isolated_config_directory / "2025.yaml").read_text())
    raw["income_tax"]["brackets"][2]["lower"] = 50_000
    (isolated_config_directory / "2029.yaml").write_text(yaml.safe_dump(raw))
    _append_manifest_entry(isolated_config_directory, {"year": 2029})

    with pytest.raises(year_config.ConfigurationError, match="Configuration validation failed"):
        year_config.load_year_configuration(2029)


def test_duplicate_manifest_years_are_rejected(isolated_config_directory: Path) -> None:
    _append_manifest_entry(isolated_config_directory, {"year": 2025})

    with pytest.raises(year_config.ConfigurationError, match="Manifest validation failed"):
        year_config.load_manifest()


def test_top_level_must_be_mapping(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "2026.yaml").write_text("- not\n- a mapping\n")
    _append_manifest_entry(isolated_config_directory, {"year": 2026})

    with pytest.raises(year_config.ConfigurationError, match="mapping"):
        year_config.load_year_configuration(2026)


def test_load_income_tax_schedule_defaults_to_latest_year() -> None:
    assert year_config.load_income_tax_schedule() == (
        year_config.load_year_configuration(year_config.default_year()).income_tax
    )


def test_schedule_model_rejects_gaps() -> None:
    with pytest.raises(year_config.ValidationError):
        year_config.IncomeTaxSchedule.model_validate(
            {
                "frequencies": {"annual": 1},
                "brackets": [
                    {"lower": 0, "upper": 10_000, "rate": 0.0},
                    {"lower": 12_000, "rate": 0.2},
                ],
                "low_income_offset": {"maximum_amount": 0, "full_offset_threshold": 0},
                "medicare_levy": {
                    "lower_threshold": 0,
                    "upper_threshold": 0,
                    "rate": 0.02,
                    "phase_in_rate": 0.1,
                },
                "medicare_levy_surcharge": [{"lower": 0, "rate": 0.0}],
            }
        )
