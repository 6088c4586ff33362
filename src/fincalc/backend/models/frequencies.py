"""Payment and income frequency tables shared by the calculators."""

from __future__ import annotations

from types import MappingProxyType
from typing import Literal, Mapping

LoanFrequency = Literal["weekly", "fortnightly", "monthly"]
IncomeFrequency = Literal["annual", "monthly", "weekly"]
PayFrequency = Literal["weekly", "fortnightly", "monthly", "quarterly"]

LOAN_PERIODS_PER_YEAR: Mapping[str, int] = MappingProxyType(
    {"weekly": 52, "fortnightly": 26, "monthly": 12}
)
ANNUALISATION_PERIODS_PER_YEAR: Mapping[str, int] = MappingProxyType(
    {"weekly": 52, "fortnightly": 26, "monthly": 12, "quarterly": 4}
)
# Rough week counts used to approximate the elapsed part of the year.
ANNUALISATION_WEEKS_PER_PERIOD: Mapping[str, float] = MappingProxyType(
    {"weekly": 1.0, "fortnightly": 2.0, "monthly": 4.33, "quarterly": 13.0}
)

__all__ = [
    "ANNUALISATION_PERIODS_PER_YEAR",
    "ANNUALISATION_WEEKS_PER_PERIOD",
    "IncomeFrequency",
    "LOAN_PERIODS_PER_YEAR",
    "LoanFrequency",
    "PayFrequency",
]
