"""Repayment and amortization schedule calculations for fixed-rate loans.

The payment follows the closed-form annuity formula::

    payment = P * r / (1 - (1 + r)^-n)

where ``P`` is the principal left after excluding any residual (balloon)
amount, ``r`` the periodic rate and ``n`` the number of periods. With a zero
rate the payment is simply ``P / n``.

Schedules are generated period by period. The final regular period absorbs
any floating point drift by paying off the remaining balance exactly, and an
extra entry settles the residual when one applies.
"""

from __future__ import annotations

import math

from fincalc.backend.models import (
    LOAN_PERIODS_PER_YEAR,
    AmortizationEntry,
    CalculationResult,
    InvalidInput,
    LoanParameters,
    ScheduleTotals,
)

from .utils import is_finite_number


def _validate(params: LoanParameters) -> list[str]:
    reasons: list[str] = []

    numbers = {
        "principal": params.principal,
        "annual rate": params.annual_rate_percent,
        "term": params.term_years,
        "residual": params.residual_amount,
    }
    for label, value in numbers.items():
        if not is_finite_number(value):
            reasons.append(f"{label} must be a finite number")
    if reasons:
        return reasons

    if params.principal <= 0:
        reasons.append("principal must be greater than 0")
    if params.annual_rate_percent < 0:
        reasons.append("annual rate cannot be negative")
    if params.term_years <= 0:
        reasons.append("term must be greater than 0")
    if params.frequency not in LOAN_PERIODS_PER_YEAR:
        reasons.append(f"unsupported repayment frequency '{params.frequency}'")
    if params.has_residual:
        if params.residual_amount < 0:
            reasons.append("residual cannot be negative")
        elif params.residual_amount >= params.principal:
            reasons.append("residual must be less than the principal")

    return reasons


def periodic_rate(params: LoanParameters, periods_per_year: int) -> float:
    """Return the nominal annual rate spread evenly over ``periods_per_year``."""

    return params.annual_rate_percent / 100 / periods_per_year


def compute_payment(params: LoanParameters) -> CalculationResult | InvalidInput:
    """Return the periodic payment and totals for ``params``."""

    reasons = _validate(params)
    if reasons:
        return InvalidInput(tuple(reasons))

    periods_per_year = LOAN_PERIODS_PER_YEAR[params.frequency]
    rate = periodic_rate(params, periods_per_year)
    # Not rounded: fractional terms may leave a fractional period count.
    total_periods = params.term_years * periods_per_year
    if not math.isfinite(total_periods):
        return InvalidInput(("term is too long to compute",))

    residual = params.residual
    principal_to_amortize = params.principal_to_amortize

    # 1 - (1 + r)^-n, which stays in [0, 1] for any term length.
    discount = -math.expm1(-total_periods * math.log1p(rate)) if rate > 0 else 0.0

    if discount == 0:
        payment = principal_to_amortize / total_periods
        return CalculationResult(
            payment=payment,
            total_payable=principal_to_amortize + residual,
            total_interest=0.0,
            periods_per_year=periods_per_year,
            total_periods=total_periods,
        )

    payment = principal_to_amortize * rate / discount
    total_payable = payment * total_periods + residual

    return CalculationResult(
        payment=payment,
        total_payable=total_payable,
        total_interest=total_payable - params.principal,
        periods_per_year=periods_per_year,
        total_periods=total_periods,
    )


def generate_schedule(
    params: LoanParameters,
    result: CalculationResult | InvalidInput | None,
) -> tuple[AmortizationEntry, ...]:
    """Build the period-by-period schedule for a computed ``result``.

    Returns an empty tuple when ``result`` is missing or invalid.
    """

    if not isinstance(result, CalculationResult):
        return ()

    rate = periodic_rate(params, result.periods_per_year)
    payment = result.payment
    total_periods = result.total_periods
    balance = params.principal_to_amortize

    entries: list[AmortizationEntry] = []
    payment_number = 1
    while payment_number <= total_periods:
        interest = balance * rate
        principal = payment - interest

        if payment_number == total_periods:
            entries.append(
                AmortizationEntry(
                    payment_number=payment_number,
                    payment_amount=balance + interest,
                    principal_amount=balance,
                    interest_amount=interest,
                    remaining_balance=0.0,
                )
            )
        else:
            balance -= principal
            entries.append(
                AmortizationEntry(
                    payment_number=payment_number,
                    payment_amount=payment,
                    principal_amount=principal,
                    interest_amount=interest,
                    remaining_balance=max(0.0, balance),
                )
            )
        payment_number += 1

    residual = params.residual
    if residual > 0:
        entries.append(
            AmortizationEntry(
                payment_number=int(total_periods) + 1,
                payment_amount=residual,
                principal_amount=residual,
                interest_amount=0.0,
                remaining_balance=0.0,
            )
        )

    return tuple(entries)


def summarise_schedule(entries: tuple[AmortizationEntry, ...]) -> ScheduleTotals:
    """Aggregate the payments, principal and interest of ``entries``."""

    return ScheduleTotals(
        total_paid=sum(entry.payment_amount for entry in entries),
        total_principal=sum(entry.principal_amount for entry in entries),
        total_interest=sum(entry.interest_amount for entry in entries),
        payments=len(entries),
    )


__all__ = [
    "compute_payment",
    "generate_schedule",
    "periodic_rate",
    "summarise_schedule",
]
