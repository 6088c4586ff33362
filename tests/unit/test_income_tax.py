"""Unit tests for the progressive income tax engine."""

from __future__ import annotations

import math

import pytest

from fincalc.backend.config.year_config import IncomeTaxSchedule
from fincalc.backend.models import InvalidInput, TaxParameters, TaxResult
from fincalc.backend.services.calculators.income_tax import (
    OFFSET_LABEL,
    build_breakdown,
    compose_tax_result,
    compute_bracket_tax,
    compute_levy,
    compute_marginal_rate,
    compute_offset,
    compute_surcharge,
    get_frequency_amount,
)


def compose(schedule: IncomeTaxSchedule, income: float, frequency: str = "annual") -> TaxResult:
    result = compose_tax_result(TaxParameters(income=income, frequency=frequency), schedule)
    assert isinstance(result, TaxResult)
    return result


@pytest.mark.parametrize(
    ("income", "expected"),
    [
        (0.0, 0.0),
        (18_200.0, 0.0),
        (45_000.0, 4_288.0),
        (100_000.0, 20_788.0),
        (135_000.0, 31_288.0),
        (190_000.0, 51_638.0),
        (200_000.0, 56_138.0),
    ],
)
def test_bracket_tax(schedule: IncomeTaxSchedule, income: float, expected: float) -> None:
    assert compute_bracket_tax(income, schedule) == pytest.approx(expected)


def test_base_tax_matches_tax_below_each_floor(schedule: IncomeTaxSchedule) -> None:
    for bracket in schedule.brackets:
        assert compute_bracket_tax(bracket.lower_bound, schedule) == pytest.approx(
            bracket.base_tax
        )


@pytest.mark.parametrize(
    ("income", "expected"),
    [
        (10_000.0, 700.0),
        (37_500.0, 700.0),
        (40_000.0, 575.0),
        (45_000.0, 325.0),
        (60_000.0, 100.0),
        (66_667.0, 0.0),
        (90_000.0, 0.0),
    ],
)
def test_low_income_offset(schedule: IncomeTaxSchedule, income: float, expected: float) -> None:
    assert compute_offset(income, schedule) == pytest.approx(expected)


@pytest.mark.parametrize(
    ("income", "expected"),
    [
        (20_000.0, 0.0),
        (27_222.0, 0.0),
        (30_000.0, 277.8),
        (34_027.0, 680.5),
        (50_000.0, 1_000.0),
    ],
)
def test_medicare_levy(schedule: IncomeTaxSchedule, income: float, expected: float) -> None:
    assert compute_levy(income, schedule) == pytest.approx(expected)


def test_medicare_levy_shade_in_never_exceeds_full_rate(schedule: IncomeTaxSchedule) -> None:
    for income in range(27_300, 34_100, 100):
        assert compute_levy(float(income), schedule) <= income * 0.02 + 1e-9


@pytest.mark.parametrize(
    ("income", "expected"),
    [
        (50_000.0, 0.0),
        (97_000.0, 0.0),
        (100_000.0, 1_000.0),
        (113_000.0, 1_130.0),
        (120_000.0, 1_500.0),
        (200_000.0, 3_000.0),
    ],
)
def test_medicare_levy_surcharge(
    schedule: IncomeTaxSchedule, income: float, expected: float
) -> None:
    assert compute_surcharge(income, schedule) == pytest.approx(expected)


@pytest.mark.parametrize(
    ("income", "expected"),
    [
        (0.0, 0.0),
        (18_200.0, 0.0),
        (18_201.0, 0.16),
        (45_000.0, 0.16),
        (45_001.0, 0.30),
        (135_001.0, 0.37),
        (250_000.0, 0.45),
    ],
)
def test_marginal_rate(schedule: IncomeTaxSchedule, income: float, expected: float) -> None:
    assert compute_marginal_rate(income, schedule) == expected


def test_income_at_tax_free_threshold_pays_no_income_tax(schedule: IncomeTaxSchedule) -> None:
    result = compose(schedule, 18_200.0)

    assert result.income_tax == 0
    assert result.medicare_levy == 0
    assert result.marginal_rate == 0


def test_compose_applies_offset_and_aggregates(schedule: IncomeTaxSchedule) -> None:
    result = compose(schedule, 45_000.0)

    assert result.gross_income == 45_000.0
    assert result.taxable_income == 45_000.0
    assert result.income_tax == pytest.approx(4_288.0 - 325.0)
    assert result.medicare_levy == pytest.approx(900.0)
    assert result.medicare_levy_surcharge == 0
    assert result.total_tax == pytest.approx(4_863.0)
    assert result.net_income == pytest.approx(40_137.0)


def test_compose_high_income(schedule: IncomeTaxSchedule) -> None:
    result = compose(schedule, 100_000.0)

    assert result.income_tax == pytest.approx(20_788.0)
    assert result.medicare_levy == pytest.approx(2_000.0)
    assert result.medicare_levy_surcharge == pytest.approx(1_000.0)
    assert result.total_tax == pytest.approx(23_788.0)
    assert result.net_income == pytest.approx(76_212.0)
    assert result.effective_rate == pytest.approx(0.23788)
    assert result.marginal_rate == 0.30


def test_compose_annualises_weekly_income(schedule: IncomeTaxSchedule) -> None:
    result = compose(schedule, 1_000.0, "weekly")

    assert result.gross_income == 52_000.0
    assert result.income_tax == pytest.approx(6_388.0 - 220.0)
    assert result.medicare_levy == pytest.approx(1_040.0)
    assert result.total_tax == pytest.approx(7_208.0)
    assert get_frequency_amount(result.net_income, "weekly", schedule) == pytest.approx(
        44_792.0 / 52
    )


def test_compose_annualises_monthly_income(schedule: IncomeTaxSchedule) -> None:
    monthly = compose(schedule, 5_000.0, "monthly")
    annual = compose(schedule, 60_000.0)

    assert monthly == annual


@pytest.mark.parametrize("income", [25_000.0, 52_000.0, 80_000.0, 150_000.0, 500_000.0])
def test_result_invariants(schedule: IncomeTaxSchedule, income: float) -> None:
    result = compose(schedule, income)

    assert result.total_tax == pytest.approx(
        result.income_tax + result.medicare_levy + result.medicare_levy_surcharge
    )
    assert result.net_income == pytest.approx(result.gross_income - result.total_tax)
    assert result.effective_rate == pytest.approx(result.total_tax / result.gross_income)


@pytest.mark.parametrize(
    "income", [5_000.0, 18_200.0, 20_000.0, 30_000.0, 45_000.0, 60_000.0, 250_000.0]
)
def test_breakdown_sums_to_income_tax(schedule: IncomeTaxSchedule, income: float) -> None:
    result = compose(schedule, income)

    assert sum(line.tax_amount for line in result.breakdown) == pytest.approx(
        result.income_tax, abs=1e-9
    )


def test_breakdown_offset_line_is_capped_by_bracket_tax(schedule: IncomeTaxSchedule) -> None:
    result = compose(schedule, 20_000.0)
    offset_lines = [line for line in result.breakdown if line.is_offset]

    assert result.income_tax == 0
    assert len(offset_lines) == 1
    assert offset_lines[0].range_label == OFFSET_LABEL
    assert offset_lines[0].tax_amount == pytest.approx(-288.0)
    assert offset_lines[0].taxable_amount == 20_000.0


def test_breakdown_lists_each_bracket_entered(schedule: IncomeTaxSchedule) -> None:
    lines = build_breakdown(250_000.0, schedule)

    assert [line.range_label for line in lines] == [
        "$0 - $18,200",
        "$18,201 - $45,000",
        "$45,001 - $135,000",
        "$135,001 - $190,000",
        "$190,001+",
    ]
    assert [line.rate_label for line in lines] == ["0%", "16%", "30%", "37%", "45%"]
    assert [line.taxable_amount for line in lines] == pytest.approx(
        [18_200.0, 26_800.0, 90_000.0, 55_000.0, 60_000.0]
    )
    assert not any(line.is_offset for line in lines)


def test_breakdown_for_partial_bracket(schedule: IncomeTaxSchedule) -> None:
    lines = build_breakdown(10_000.0, schedule)

    assert len(lines) == 1
    assert lines[0].taxable_amount == 10_000.0
    assert lines[0].tax_amount == 0


@pytest.mark.parametrize(
    ("income", "frequency"),
    [(0.0, "annual"), (-100.0, "annual"), (math.nan, "annual"), (1_000.0, "fortnightly")],
)
def test_invalid_tax_parameters(
    schedule: IncomeTaxSchedule, income: float, frequency: str
) -> None:
    result = compose_tax_result(TaxParameters(income=income, frequency=frequency), schedule)

    assert isinstance(result, InvalidInput)
    assert not result


def test_compose_defaults_to_configured_schedule(schedule: IncomeTaxSchedule) -> None:
    params = TaxParameters(income=75_000.0)

    assert compose_tax_result(params) == compose_tax_result(params, schedule)


def test_engine_is_parametric_over_schedule(schedule: IncomeTaxSchedule) -> None:
    flat = schedule.model_copy(
        update={
            "brackets": (
                schedule.brackets[0].model_copy(update={"upper_bound": None, "rate": 0.1}),
            )
        }
    )

    assert compute_bracket_tax(50_000.0, flat) == pytest.approx(5_000.0)
    assert compute_marginal_rate(50_000.0, flat) == 0.1


def test_get_frequency_amount_rejects_unknown_frequency(schedule: IncomeTaxSchedule) -> None:
    assert get_frequency_amount(52_000.0, "monthly", schedule) == pytest.approx(52_000.0 / 12)
    with pytest.raises(ValueError, match="fortnightly"):
        get_frequency_amount(52_000.0, "fortnightly", schedule)
