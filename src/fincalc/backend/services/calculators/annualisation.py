"""Projection of a full year's income from year-to-date pay history."""

from __future__ import annotations

from fincalc.backend.models import (
    ANNUALISATION_PERIODS_PER_YEAR,
    ANNUALISATION_WEEKS_PER_PERIOD,
    AnnualisationBreakdownLine,
    AnnualisationParameters,
    AnnualisationResult,
    InvalidInput,
)

from .utils import is_finite_number

WEEKS_PER_MONTH = 4.33


def compute_annualisation(
    params: AnnualisationParameters,
) -> AnnualisationResult | InvalidInput:
    """Extrapolate annual income from the pays received so far."""

    if not (is_finite_number(params.ytd_income) and is_finite_number(params.pays_received)):
        return InvalidInput(("year-to-date income and pays received must be finite numbers",))

    reasons: list[str] = []
    periods_per_year = ANNUALISATION_PERIODS_PER_YEAR.get(params.pay_frequency)
    if periods_per_year is None:
        reasons.append(f"unsupported pay frequency '{params.pay_frequency}'")
    if params.ytd_income <= 0:
        reasons.append("year-to-date income must be greater than 0")
    if params.pays_received <= 0:
        reasons.append("pays received must be greater than 0")
    elif periods_per_year is not None and params.pays_received > periods_per_year:
        reasons.append(
            f"cannot exceed {periods_per_year} pays for {params.pay_frequency} frequency"
        )
    if reasons or periods_per_year is None:
        return InvalidInput(tuple(reasons))

    average_pay = params.ytd_income / params.pays_received
    remaining_periods = periods_per_year - params.pays_received
    weeks_elapsed = params.pays_received * ANNUALISATION_WEEKS_PER_PERIOD[params.pay_frequency]

    return AnnualisationResult(
        average_pay=average_pay,
        annualised_income=average_pay * periods_per_year,
        periods_per_year=periods_per_year,
        remaining_periods=remaining_periods,
        projected_remaining_income=average_pay * remaining_periods,
        months_elapsed=weeks_elapsed / WEEKS_PER_MONTH,
    )


def build_annualisation_breakdown(
    params: AnnualisationParameters,
    result: AnnualisationResult | InvalidInput | None,
) -> tuple[AnnualisationBreakdownLine, ...]:
    """Split the annualised figure into income received and income projected."""

    if not isinstance(result, AnnualisationResult):
        return ()

    return (
        AnnualisationBreakdownLine(
            description="YTD Income Received",
            periods=params.pays_received,
            amount=params.ytd_income,
            kind="actual",
        ),
        AnnualisationBreakdownLine(
            description="Projected Remaining Income",
            periods=result.remaining_periods,
            amount=result.projected_remaining_income,
            kind="projected",
        ),
    )


__all__ = ["WEEKS_PER_MONTH", "build_annualisation_breakdown", "compute_annualisation"]
