"""Typed records shared by the calculation engines and services.

Engines consume and produce the frozen dataclasses defined here; the Pydantic
request models in :mod:`.api` validate raw caller payloads before they are
converted into these records. Every record is built fresh per calculation and
never mutated after it is returned.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .api import (
    AnnualisationRequest,
    AnnualisationResponse,
    IncomeTaxRequest,
    IncomeTaxResponse,
    LoanRequest,
    LoanResponse,
    MortgageRequest,
    format_validation_error,
)
from .frequencies import (
    ANNUALISATION_PERIODS_PER_YEAR,
    ANNUALISATION_WEEKS_PER_PERIOD,
    LOAN_PERIODS_PER_YEAR,
    IncomeFrequency,
    LoanFrequency,
    PayFrequency,
)

__all__ = [
    "ANNUALISATION_PERIODS_PER_YEAR",
    "ANNUALISATION_WEEKS_PER_PERIOD",
    "AmortizationEntry",
    "AnnualisationBreakdownLine",
    "AnnualisationParameters",
    "AnnualisationRequest",
    "AnnualisationResponse",
    "AnnualisationResult",
    "CalculationResult",
    "IncomeFrequency",
    "IncomeTaxRequest",
    "IncomeTaxResponse",
    "InvalidInput",
    "LOAN_PERIODS_PER_YEAR",
    "LoanFrequency",
    "LoanParameters",
    "LoanRequest",
    "LoanResponse",
    "MortgageRequest",
    "PayFrequency",
    "ScheduleTotals",
    "TaxBreakdownLine",
    "TaxParameters",
    "TaxResult",
    "format_validation_error",
]


@dataclass(frozen=True)
class InvalidInput:
    """Rejected calculation parameters.

    Engines return this value instead of raising so callers can tell an
    invalid entry apart from a missing one. Instances are falsy.
    """

    reasons: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return "; ".join(self.reasons) if self.reasons else "Invalid input"


@dataclass(frozen=True)
class LoanParameters:
    """Inputs for a fixed-rate loan or lease."""

    principal: float
    annual_rate_percent: float
    term_years: float
    frequency: str = "monthly"
    has_residual: bool = False
    residual_amount: float = 0.0

    @property
    def residual(self) -> float:
        return self.residual_amount if self.has_residual else 0.0

    @property
    def principal_to_amortize(self) -> float:
        return self.principal - self.residual


@dataclass(frozen=True)
class CalculationResult:
    """Closed-form repayment figures for a loan."""

    payment: float
    total_payable: float
    total_interest: float
    periods_per_year: int
    total_periods: float


@dataclass(frozen=True)
class AmortizationEntry:
    payment_number: int
    payment_amount: float
    principal_amount: float
    interest_amount: float
    remaining_balance: float


@dataclass(frozen=True)
class ScheduleTotals:
    total_paid: float
    total_principal: float
    total_interest: float
    payments: int


@dataclass(frozen=True)
class TaxParameters:
    income: float
    frequency: str = "annual"


@dataclass(frozen=True)
class TaxBreakdownLine:
    """Tax attributed to one bracket, or the offset applied against it."""

    range_label: str
    rate_label: str
    rate: float
    taxable_amount: float
    tax_amount: float
    is_offset: bool = False


@dataclass(frozen=True)
class TaxResult:
    gross_income: float
    taxable_income: float
    income_tax: float
    medicare_levy: float
    medicare_levy_surcharge: float
    total_tax: float
    net_income: float
    effective_rate: float
    marginal_rate: float
    breakdown: tuple[TaxBreakdownLine, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AnnualisationParameters:
    ytd_income: float
    pays_received: float
    pay_frequency: str = "fortnightly"


@dataclass(frozen=True)
class AnnualisationResult:
    average_pay: float
    annualised_income: float
    periods_per_year: int
    remaining_periods: float
    projected_remaining_income: float
    months_elapsed: float


@dataclass(frozen=True)
class AnnualisationBreakdownLine:
    description: str
    periods: float
    amount: float
    kind: Literal["actual", "projected"]
