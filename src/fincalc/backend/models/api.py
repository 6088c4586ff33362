"""Pydantic models describing the calculator request and response payloads."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator
from typing_extensions import Self

from .frequencies import (
    ANNUALISATION_PERIODS_PER_YEAR,
    IncomeFrequency,
    LoanFrequency,
    PayFrequency,
)

__all__ = [
    "AnnualisationBreakdownRow",
    "AnnualisationRequest",
    "AnnualisationResponse",
    "AnnualisationSummary",
    "IncomeTaxRequest",
    "IncomeTaxResponse",
    "LoanRequest",
    "LoanResponse",
    "LoanSummary",
    "MortgageRequest",
    "PeriodFigures",
    "ScheduleRow",
    "ScheduleTotalsSummary",
    "TaxBreakdownRow",
    "TaxMeta",
    "TaxSummary",
    "format_validation_error",
    "MAX_INCOME",
]


MAX_INCOME = 10_000_000


class _RequestModel(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)


class LoanRequest(_RequestModel):
    """Leasing calculator inputs."""

    principal: float = Field(..., gt=0)
    annual_rate: float = Field(..., ge=0, le=100)
    term_years: float = Field(..., gt=0, le=7)
    frequency: LoanFrequency = "monthly"
    has_residual: bool = False
    residual: float = Field(default=0.0, ge=0)
    include_schedule: bool = True

    @model_validator(mode="after")
    def _validate_residual(self) -> Self:
        if self.has_residual and self.residual >= self.principal:
            raise ValueError("Residual payment must be less than the loan amount")
        return self


class MortgageRequest(LoanRequest):
    """Mortgage calculator inputs; repayments are always monthly."""

    term_years: float = Field(..., gt=0, le=30)
    frequency: Literal["monthly"] = "monthly"  # type: ignore[assignment]


class IncomeTaxRequest(_RequestModel):
    """Income tax calculator inputs."""

    income: float = Field(..., gt=0, le=MAX_INCOME)
    frequency: IncomeFrequency = "annual"
    year: int | None = Field(default=None, ge=0)


class AnnualisationRequest(_RequestModel):
    """Year-to-date pay history used to project a full year."""

    ytd_income: float = Field(..., gt=0)
    pays_received: int = Field(..., gt=0)
    pay_frequency: PayFrequency = "fortnightly"

    @model_validator(mode="after")
    def _validate_pays_received(self) -> Self:
        maximum = ANNUALISATION_PERIODS_PER_YEAR[self.pay_frequency]
        if self.pays_received > maximum:
            raise ValueError(
                f"Cannot exceed {maximum} pays for {self.pay_frequency} frequency"
            )
        return self


class _ResponseModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class LoanSummary(_ResponseModel):
    principal: float
    residual: float
    frequency: str
    payment: float
    total_payable: float
    total_interest: float
    periods_per_year: int
    total_periods: float


class ScheduleRow(_ResponseModel):
    payment_number: int
    payment_amount: float
    principal_amount: float
    interest_amount: float
    remaining_balance: float


class ScheduleTotalsSummary(_ResponseModel):
    total_paid: float
    total_principal: float
    total_interest: float
    payments: int


class LoanResponse(_ResponseModel):
    """Full response produced by the loan and mortgage calculators."""

    summary: LoanSummary
    schedule: list[ScheduleRow] | None = None
    schedule_totals: ScheduleTotalsSummary | None = None


class TaxSummary(_ResponseModel):
    gross_income: float
    taxable_income: float
    income_tax: float
    medicare_levy: float
    medicare_levy_surcharge: float
    total_tax: float
    net_income: float
    effective_rate: float
    marginal_rate: float


class PeriodFigures(_ResponseModel):
    """Annual figures converted back to the frequency the income was entered in."""

    frequency: str
    gross_income: float
    total_tax: float
    net_income: float


class TaxBreakdownRow(_ResponseModel):
    range: str
    rate: str
    taxable_amount: float
    tax_amount: float
    is_offset: bool


class TaxMeta(_ResponseModel):
    year: int
    label: str


class IncomeTaxResponse(_ResponseModel):
    summary: TaxSummary
    per_period: PeriodFigures
    breakdown: list[TaxBreakdownRow]
    meta: TaxMeta


class AnnualisationSummary(_ResponseModel):
    average_pay: float
    annualised_income: float
    periods_per_year: int
    remaining_periods: float
    projected_remaining_income: float
    months_elapsed: float


class AnnualisationBreakdownRow(_ResponseModel):
    description: str
    periods: float
    amount: float
    kind: str


class AnnualisationResponse(_ResponseModel):
    summary: AnnualisationSummary
    breakdown: list[AnnualisationBreakdownRow]


def format_validation_error(error: ValidationError) -> str:
    """Return a concise human-readable description of validation issues."""

    messages: list[str] = []
    for issue in error.errors():
        location = ".".join(str(part) for part in issue.get("loc", ()))
        message = issue.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        if location:
            messages.append(f"{location}: {message}")
        else:
            messages.append(message)

    details = "; ".join(messages) if messages else str(error)
    return f"Invalid calculation payload: {details}"
