"""Orchestrate request validation, engine calls and response shaping.

Each calculator gets one entry point that accepts a raw mapping (or the
matching request model), applies the caller-side range policies through the
Pydantic request models, runs the pure engine and returns a JSON-ready dict
with figures rounded for display. Profiling hooks and logging live here so the
engines themselves stay free of side effects.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from time import perf_counter
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from fincalc.backend.config.year_config import (
    default_year,
    load_year_configuration,
)
from fincalc.backend.models import (
    AnnualisationParameters,
    AnnualisationRequest,
    AnnualisationResponse,
    IncomeTaxRequest,
    IncomeTaxResponse,
    InvalidInput,
    LoanParameters,
    LoanRequest,
    LoanResponse,
    MortgageRequest,
    TaxParameters,
    format_validation_error,
)

from .calculators import (
    build_annualisation_breakdown,
    compose_tax_result,
    compute_annualisation,
    compute_payment,
    generate_schedule,
    get_frequency_amount,
    round_currency,
    round_rate,
    summarise_schedule,
)

_LOGGER = logging.getLogger(__name__)

_RequestT = TypeVar("_RequestT", bound=BaseModel)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("FINCALC_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = perf_counter() - start


def _log_timings(calculator: str, timings: dict[str, float] | None) -> None:
    if timings is None:
        return
    _LOGGER.debug(
        "%s timings (ms): %s",
        calculator,
        {name: round(duration * 1000, 3) for name, duration in timings.items()},
    )


def _parse_request(
    payload: Mapping[str, Any] | BaseModel, model: type[_RequestT]
) -> _RequestT:
    if isinstance(payload, BaseModel):
        data: Any = payload.model_dump(mode="python")
    elif isinstance(payload, Mapping):
        data = payload
    else:
        raise ValueError("Payload must be a mapping")

    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ValueError(format_validation_error(exc)) from exc


def _reject(calculator: str, invalid: InvalidInput) -> ValueError:
    _LOGGER.debug("%s rejected parameters: %s", calculator, invalid.message)
    return ValueError(f"Invalid {calculator} parameters: {invalid.message}")


def _run_loan(request: LoanRequest, calculator: str) -> dict[str, Any]:
    timings: dict[str, float] | None = {} if _profiling_enabled() else None

    params = LoanParameters(
        principal=request.principal,
        annual_rate_percent=request.annual_rate,
        term_years=request.term_years,
        frequency=request.frequency,
        has_residual=request.has_residual,
        residual_amount=request.residual,
    )

    with _profile_section("payment", timings):
        result = compute_payment(params)
    if isinstance(result, InvalidInput):
        raise _reject(calculator, result)

    response: dict[str, Any] = {
        "summary": {
            "principal": round_currency(params.principal),
            "residual": round_currency(params.residual),
            "frequency": params.frequency,
            "payment": round_currency(result.payment),
            "total_payable": round_currency(result.total_payable),
            "total_interest": round_currency(result.total_interest),
            "periods_per_year": result.periods_per_year,
            "total_periods": result.total_periods,
        }
    }

    if request.include_schedule:
        with _profile_section("schedule", timings):
            schedule = generate_schedule(params, result)
        totals = summarise_schedule(schedule)
        response["schedule"] = [
            {
                "payment_number": entry.payment_number,
                "payment_amount": round_currency(entry.payment_amount),
                "principal_amount": round_currency(entry.principal_amount),
                "interest_amount": round_currency(entry.interest_amount),
                "remaining_balance": round_currency(entry.remaining_balance),
            }
            for entry in schedule
        ]
        response["schedule_totals"] = {
            "total_paid": round_currency(totals.total_paid),
            "total_principal": round_currency(totals.total_principal),
            "total_interest": round_currency(totals.total_interest),
            "payments": totals.payments,
        }

    _log_timings(calculator, timings)
    return LoanResponse.model_validate(response).model_dump(mode="json", exclude_none=True)


def calculate_loan(payload: Mapping[str, Any] | LoanRequest) -> dict[str, Any]:
    """Compute repayments and the schedule for a leasing payload."""

    return _run_loan(_parse_request(payload, LoanRequest), "loan")


def calculate_mortgage(payload: Mapping[str, Any] | MortgageRequest) -> dict[str, Any]:
    """Compute monthly repayments and the schedule for a mortgage payload."""

    return _run_loan(_parse_request(payload, MortgageRequest), "mortgage")


def calculate_income_tax(payload: Mapping[str, Any] | IncomeTaxRequest) -> dict[str, Any]:
    """Compute the income tax position for the submitted income."""

    request = _parse_request(payload, IncomeTaxRequest)
    timings: dict[str, float] | None = {} if _profiling_enabled() else None

    year = request.year if request.year is not None else default_year()
    try:
        config = load_year_configuration(year)
    except FileNotFoundError as exc:
        raise ValueError(f"Unsupported income year: {year}") from exc
    schedule = config.income_tax

    params = TaxParameters(income=request.income, frequency=request.frequency)
    with _profile_section("income_tax", timings):
        result = compose_tax_result(params, schedule)
    if isinstance(result, InvalidInput):
        raise _reject("income tax", result)

    def per_period(amount: float) -> float:
        return round_currency(get_frequency_amount(amount, request.frequency, schedule))

    response = {
        "summary": {
            "gross_income": round_currency(result.gross_income),
            "taxable_income": round_currency(result.taxable_income),
            "income_tax": round_currency(result.income_tax),
            "medicare_levy": round_currency(result.medicare_levy),
            "medicare_levy_surcharge": round_currency(result.medicare_levy_surcharge),
            "total_tax": round_currency(result.total_tax),
            "net_income": round_currency(result.net_income),
            "effective_rate": round_rate(result.effective_rate),
            "marginal_rate": round_rate(result.marginal_rate),
        },
        "per_period": {
            "frequency": request.frequency,
            "gross_income": per_period(result.gross_income),
            "total_tax": per_period(result.total_tax),
            "net_income": per_period(result.net_income),
        },
        "breakdown": [
            {
                "range": line.range_label,
                "rate": line.rate_label,
                "taxable_amount": round_currency(line.taxable_amount),
                "tax_amount": round_currency(line.tax_amount),
                "is_offset": line.is_offset,
            }
            for line in result.breakdown
        ],
        "meta": {"year": config.year, "label": config.label},
    }

    _log_timings("income tax", timings)
    return IncomeTaxResponse.model_validate(response).model_dump(mode="json")


def calculate_annualisation(
    payload: Mapping[str, Any] | AnnualisationRequest,
) -> dict[str, Any]:
    """Project annual income from the submitted year-to-date pay history."""

    request = _parse_request(payload, AnnualisationRequest)

    params = AnnualisationParameters(
        ytd_income=request.ytd_income,
        pays_received=request.pays_received,
        pay_frequency=request.pay_frequency,
    )
    result = compute_annualisation(params)
    if isinstance(result, InvalidInput):
        raise _reject("annualisation", result)

    response = {
        "summary": {
            "average_pay": round_currency(result.average_pay),
            "annualised_income": round_currency(result.annualised_income),
            "periods_per_year": result.periods_per_year,
            "remaining_periods": result.remaining_periods,
            "projected_remaining_income": round_currency(result.projected_remaining_income),
            "months_elapsed": round(result.months_elapsed, 1),
        },
        "breakdown": [
            {
                "description": line.description,
                "periods": line.periods,
                "amount": round_currency(line.amount),
                "kind": line.kind,
            }
            for line in build_annualisation_breakdown(params, result)
        ],
    }

    return AnnualisationResponse.model_validate(response).model_dump(mode="json")


__all__ = [
    "calculate_annualisation",
    "calculate_income_tax",
    "calculate_loan",
    "calculate_mortgage",
]
