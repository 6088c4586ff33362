"""Test configuration utilities and shared fixtures."""

import sys
from pathlib import Path

# Ensure the ``src`` directory is importable when tests are executed without an
# editable install.
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402

from fincalc.backend.config.year_config import (  # noqa: E402
    IncomeTaxSchedule,
    YearConfiguration,
    load_year_configuration,
)


@pytest.fixture()
def year_config() -> YearConfiguration:
    """Return the 2024-25 income year configuration."""

    return load_year_configuration(2025)


@pytest.fixture()
def schedule(year_config: YearConfiguration) -> IncomeTaxSchedule:
    """Return the income tax schedule used by most tax tests."""

    return year_config.income_tax
