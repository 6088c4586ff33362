"""Progressive income tax, offset, Medicare levy and surcharge calculations.

Every helper takes the :class:`IncomeTaxSchedule` it applies so the rates stay
in configuration; :func:`compose_tax_result` falls back to the most recent
configured income year when no schedule is supplied.
"""

from __future__ import annotations

from fincalc.backend.config.year_config import (
    IncomeTaxSchedule,
    TaxBracket,
    load_income_tax_schedule,
)
from fincalc.backend.models import (
    InvalidInput,
    TaxBreakdownLine,
    TaxParameters,
    TaxResult,
)

from .utils import format_dollars, format_percentage, is_finite_number

OFFSET_LABEL = "Low Income Tax Offset"


def _taxable_in_bracket(taxable_income: float, bracket: TaxBracket) -> float:
    portion = taxable_income - bracket.lower_bound
    width = bracket.width
    if width is not None:
        portion = min(portion, width)
    return portion


def compute_bracket_tax(taxable_income: float, schedule: IncomeTaxSchedule) -> float:
    """Return the progressive tax on ``taxable_income`` before any offset."""

    total = 0.0
    for bracket in schedule.brackets:
        if taxable_income <= bracket.lower_bound:
            break
        total += _taxable_in_bracket(taxable_income, bracket) * bracket.rate
    return total


def compute_offset(taxable_income: float, schedule: IncomeTaxSchedule) -> float:
    """Return the low income tax offset available at ``taxable_income``."""

    offset = schedule.low_income_offset
    if taxable_income <= offset.full_offset_threshold:
        return offset.maximum_amount

    for segment in offset.phase_outs:
        if taxable_income <= segment.upper_bound:
            reduction = (taxable_income - segment.lower_bound) * segment.rate
            return max(0.0, segment.starting_amount - reduction)

    return 0.0


def compute_levy(taxable_income: float, schedule: IncomeTaxSchedule) -> float:
    """Return the Medicare levy, shading in between the two thresholds."""

    levy = schedule.medicare_levy
    if taxable_income <= levy.lower_threshold:
        return 0.0
    if taxable_income <= levy.upper_threshold:
        shaded = (taxable_income - levy.lower_threshold) * levy.phase_in_rate
        return min(shaded, taxable_income * levy.rate)
    return taxable_income * levy.rate


def compute_surcharge(taxable_income: float, schedule: IncomeTaxSchedule) -> float:
    """Return the Medicare levy surcharge, charged on the whole income."""

    for index, tier in enumerate(schedule.medicare_levy_surcharge):
        if tier.contains(taxable_income, first=index == 0):
            return taxable_income * tier.rate
    return 0.0


def compute_marginal_rate(taxable_income: float, schedule: IncomeTaxSchedule) -> float:
    """Return the rate of the bracket ``taxable_income`` falls into."""

    for index, bracket in enumerate(schedule.brackets):
        if bracket.contains(taxable_income, first=index == 0):
            return bracket.rate
    return 0.0


def get_frequency_amount(
    annual_amount: float, frequency: str, schedule: IncomeTaxSchedule
) -> float:
    """Convert an annual figure into the amount per ``frequency`` period."""

    periods = schedule.periods_for(frequency)
    if periods is None:
        raise ValueError(f"Unsupported income frequency: {frequency}")
    return annual_amount / periods


def _range_label(bracket: TaxBracket, first: bool) -> str:
    lower = bracket.lower_bound if first else bracket.lower_bound + 1
    if bracket.upper_bound is None:
        return f"{format_dollars(lower)}+"
    return f"{format_dollars(lower)} - {format_dollars(bracket.upper_bound)}"


def build_breakdown(
    taxable_income: float, schedule: IncomeTaxSchedule
) -> tuple[TaxBreakdownLine, ...]:
    """Return one line per bracket entered plus the offset actually applied.

    The offset line is capped at the bracket tax so the tax amounts of all
    lines add up to the income tax payable.
    """

    if taxable_income <= 0:
        return ()

    lines: list[TaxBreakdownLine] = []
    bracket_tax = 0.0
    for index, bracket in enumerate(schedule.brackets):
        if taxable_income <= bracket.lower_bound:
            break
        portion = _taxable_in_bracket(taxable_income, bracket)
        tax = portion * bracket.rate
        bracket_tax += tax
        lines.append(
            TaxBreakdownLine(
                range_label=_range_label(bracket, first=index == 0),
                rate_label=format_percentage(bracket.rate),
                rate=bracket.rate,
                taxable_amount=portion,
                tax_amount=tax,
            )
        )

    applied_offset = min(compute_offset(taxable_income, schedule), bracket_tax)
    if applied_offset > 0:
        lines.append(
            TaxBreakdownLine(
                range_label=OFFSET_LABEL,
                rate_label="Offset",
                rate=0.0,
                taxable_amount=taxable_income,
                tax_amount=-applied_offset,
                is_offset=True,
            )
        )

    return tuple(lines)


def compose_tax_result(
    params: TaxParameters, schedule: IncomeTaxSchedule | None = None
) -> TaxResult | InvalidInput:
    """Compute the full tax position for ``params``."""

    if schedule is None:
        schedule = load_income_tax_schedule()

    if not is_finite_number(params.income):
        return InvalidInput(("income must be a finite number",))
    reasons: list[str] = []
    if params.income <= 0:
        reasons.append("income must be greater than 0")
    periods = schedule.periods_for(params.frequency)
    if periods is None:
        reasons.append(f"unsupported income frequency '{params.frequency}'")
    if reasons:
        return InvalidInput(tuple(reasons))

    gross_income = params.income * periods
    taxable_income = gross_income

    income_tax = max(
        0.0,
        compute_bracket_tax(taxable_income, schedule)
        - compute_offset(taxable_income, schedule),
    )
    medicare_levy = compute_levy(taxable_income, schedule)
    surcharge = compute_surcharge(taxable_income, schedule)
    total_tax = income_tax + medicare_levy + surcharge
    effective_rate = total_tax / gross_income if gross_income > 0 else 0.0

    return TaxResult(
        gross_income=gross_income,
        taxable_income=taxable_income,
        income_tax=income_tax,
        medicare_levy=medicare_levy,
        medicare_levy_surcharge=surcharge,
        total_tax=total_tax,
        net_income=gross_income - total_tax,
        effective_rate=effective_rate,
        marginal_rate=compute_marginal_rate(taxable_income, schedule),
        breakdown=build_breakdown(taxable_income, schedule),
    )


__all__ = [
    "OFFSET_LABEL",
    "build_breakdown",
    "compose_tax_result",
    "compute_bracket_tax",
    "compute_levy",
    "compute_marginal_rate",
    "compute_offset",
    "compute_surcharge",
    "get_frequency_amount",
]
