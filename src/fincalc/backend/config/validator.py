"""Utilities for validating year configuration data and surfacing issues."""

from __future__ import annotations

import argparse
from typing import Sequence

from .year_config import (
    IncomeTaxSchedule,
    LowIncomeOffsetConfig,
    MedicareLevyConfig,
    SurchargeTier,
    TaxBracket,
    YearConfiguration,
    available_years,
    load_year_configuration,
)

# Published thresholds are rounded to whole dollars, so derived amounts are
# compared with a one dollar tolerance.
_DOLLAR_TOLERANCE = 1.0


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_frequencies(schedule: IncomeTaxSchedule) -> list[str]:
    errors: list[str] = []
    scope = "income_tax.frequencies"

    if schedule.frequencies.get("annual") != 1:
        errors.append(_format_scope(scope, "an 'annual' frequency of 1 period is required"))

    return errors


def _validate_brackets(brackets: Sequence[TaxBracket]) -> list[str]:
    errors: list[str] = []
    expected_base = 0.0
    previous_rate: float | None = None

    for index, bracket in enumerate(brackets):
        scope = f"income_tax.brackets[{index}]"

        if previous_rate is not None and bracket.rate < previous_rate:
            errors.append(
                _format_scope(scope, "marginal rates must not decrease as income rises")
            )

        if abs(bracket.base_tax - expected_base) > _DOLLAR_TOLERANCE:
            errors.append(
                _format_scope(
                    scope,
                    (
                        f"base tax {bracket.base_tax:g} does not match the "
                        f"cumulative tax of lower brackets ({expected_base:g})"
                    ),
                )
            )

        width = bracket.width
        if width is not None:
            expected_base += width * bracket.rate
        previous_rate = bracket.rate

    return errors


def _validate_offset(offset: LowIncomeOffsetConfig) -> list[str]:
    errors: list[str] = []
    expected_start = offset.maximum_amount

    for index, segment in enumerate(offset.phase_outs):
        scope = f"income_tax.low_income_offset.phase_outs[{index}]"
        if abs(segment.starting_amount - expected_start) > _DOLLAR_TOLERANCE:
            errors.append(
                _format_scope(
                    scope,
                    (
                        f"starting amount {segment.starting_amount:g} does not continue "
                        f"from the previous segment ({expected_start:g})"
                    ),
                )
            )
        width = segment.upper_bound - segment.lower_bound
        expected_start = max(0.0, segment.starting_amount - width * segment.rate)

    if offset.phase_outs and expected_start > _DOLLAR_TOLERANCE:
        errors.append(
            _format_scope(
                "income_tax.low_income_offset",
                "the final phase-out segment must reduce the offset to zero",
            )
        )

    return errors


def _validate_levy(levy: MedicareLevyConfig) -> list[str]:
    errors: list[str] = []

    shaded = (levy.upper_threshold - levy.lower_threshold) * levy.phase_in_rate
    full = levy.upper_threshold * levy.rate
    if abs(shaded - full) > _DOLLAR_TOLERANCE:
        errors.append(
            _format_scope(
                "income_tax.medicare_levy",
                "the shade-in band must reach the full levy at the upper threshold",
            )
        )

    return errors


def _validate_surcharge(tiers: Sequence[SurchargeTier]) -> list[str]:
    errors: list[str] = []

    for index, (previous, current) in enumerate(zip(tiers, tiers[1:]), start=1):
        if current.rate < previous.rate:
            errors.append(
                _format_scope(
                    f"income_tax.medicare_levy_surcharge[{index}]",
                    "surcharge rates must not decrease as income rises",
                )
            )

    return errors


def validate_year_configuration(config: YearConfiguration) -> list[str]:
    """Return a list of validation issues for the provided configuration."""

    schedule = config.income_tax
    errors: list[str] = []

    errors.extend(_validate_frequencies(schedule))
    errors.extend(_validate_brackets(schedule.brackets))
    errors.extend(_validate_offset(schedule.low_income_offset))
    errors.extend(_validate_levy(schedule.medicare_levy))
    errors.extend(_validate_surcharge(schedule.medicare_levy_surcharge))

    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate all configured years and return issues keyed by year."""

    targets = years or available_years()
    results: dict[int, list[str]] = {}

    for year in targets:
        config = load_year_configuration(year)
        results[int(year)] = validate_year_configuration(config)

    return results


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=(
            "Validate configured income years and report issues helpful to contributors."
        )
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific years to validate (defaults to all configured years)",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0

    for year in years:
        try:
            config = load_year_configuration(year)
        except FileNotFoundError as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        issues = validate_year_configuration(config)
        if issues:
            exit_code = 1
            print(f"[{year}] {len(issues)} issue(s) detected:")
            for issue in issues:
                print(f"  - {issue}")
        else:
            print(f"[{year}] OK")

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
