"""Pydantic models describing the income tax schedule configuration."""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


class TaxBracket(ImmutableModel):
    """Represents a single progressive tax bracket.

    ``lower_bound`` is exclusive for every bracket but the first, which also
    holds a taxable income of exactly zero.
    """

    lower_bound: float = Field(default=0.0, alias="lower")
    upper_bound: float | None = Field(default=None, alias="upper")
    rate: float
    base_tax: float = 0.0

    @model_validator(mode="after")
    def _validate_values(self) -> TaxBracket:
        if self.rate < 0 or self.rate > 1:
            raise ConfigurationError("Tax rates must be between 0 and 1")
        if self.lower_bound < 0:
            raise ConfigurationError("Lower bounds must be non-negative")
        if self.upper_bound is not None and self.upper_bound <= self.lower_bound:
            raise ConfigurationError("Upper bounds must exceed lower bounds")
        if self.base_tax < 0:
            raise ConfigurationError("Base tax must be non-negative")
        return self

    @property
    def width(self) -> float | None:
        if self.upper_bound is None:
            return None
        return self.upper_bound - self.lower_bound

    def contains(self, amount: float, *, first: bool = False) -> bool:
        if amount < self.lower_bound or (amount == self.lower_bound and not first):
            return False
        return self.upper_bound is None or amount <= self.upper_bound


class OffsetPhaseOut(ImmutableModel):
    """Linear reduction applied to the offset between two thresholds."""

    lower_bound: float = Field(alias="lower")
    upper_bound: float = Field(alias="upper")
    starting_amount: float
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> OffsetPhaseOut:
        if self.upper_bound <= self.lower_bound:
            raise ConfigurationError("Offset phase-out upper bound must exceed its lower bound")
        if self.starting_amount < 0:
            raise ConfigurationError("Offset phase-out starting amounts must be non-negative")
        if self.rate < 0:
            raise ConfigurationError("Offset phase-out rates must be non-negative")
        return self


class LowIncomeOffsetConfig(ImmutableModel):
    """Low income tax offset: a flat maximum followed by linear phase-outs."""

    maximum_amount: float
    full_offset_threshold: float
    phase_outs: Sequence[OffsetPhaseOut] = Field(default_factory=tuple)

    @field_validator("phase_outs", mode="before")
    @classmethod
    def _coerce_phase_outs(cls, value: Any) -> Sequence[Any]:
        if value is None:
            return ()
        if isinstance(value, Iterable) and not isinstance(value, (str, Mapping)):
            return tuple(value)
        raise ConfigurationError("'phase_outs' must be a list of segments")

    @model_validator(mode="after")
    def _validate_segments(self) -> LowIncomeOffsetConfig:
        if self.maximum_amount < 0:
            raise ConfigurationError("Offset maximum must be non-negative")
        boundary = self.full_offset_threshold
        for segment in self.phase_outs:
            if segment.lower_bound != boundary:
                raise ConfigurationError("Offset phase-out segments must be contiguous")
            boundary = segment.upper_bound
        return self

    @property
    def cut_out_threshold(self) -> float:
        if not self.phase_outs:
            return self.full_offset_threshold
        return self.phase_outs[-1].upper_bound


class MedicareLevyConfig(ImmutableModel):
    """Medicare levy thresholds with the shade-in band between them."""

    lower_threshold: float
    upper_threshold: float
    rate: float
    phase_in_rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> MedicareLevyConfig:
        if self.lower_threshold < 0:
            raise ConfigurationError("Medicare levy thresholds must be non-negative")
        if self.upper_threshold < self.lower_threshold:
            raise ConfigurationError(
                "Medicare levy upper threshold cannot be below the lower threshold"
            )
        for value in (self.rate, self.phase_in_rate):
            if value < 0 or value > 1:
                raise ConfigurationError("Medicare levy rates must be between 0 and 1")
        return self


class SurchargeTier(ImmutableModel):
    """Medicare levy surcharge tier charged on the whole income."""

    lower_bound: float = Field(default=0.0, alias="lower")
    upper_bound: float | None = Field(default=None, alias="upper")
    rate: float

    @model_validator(mode="after")
    def _validate_values(self) -> SurchargeTier:
        if self.rate < 0 or self.rate > 1:
            raise ConfigurationError("Surcharge rates must be between 0 and 1")
        if self.upper_bound is not None and self.upper_bound <= self.lower_bound:
            raise ConfigurationError("Surcharge upper bounds must exceed lower bounds")
        return self

    def contains(self, amount: float, *, first: bool = False) -> bool:
        if amount < self.lower_bound or (amount == self.lower_bound and not first):
            return False
        return self.upper_bound is None or amount <= self.upper_bound


def _coerce_sequence(value: Any, name: str) -> Sequence[Any]:
    if isinstance(value, Iterable) and not isinstance(value, (str, Mapping)):
        return tuple(value)
    raise ConfigurationError(f"'{name}' must be provided as a list")


def _validate_ranges(
    ranges: Sequence[TaxBracket] | Sequence[SurchargeTier], name: str
) -> None:
    if not ranges:
        raise ConfigurationError(f"At least one {name} must be defined")
    if ranges[0].lower_bound != 0:
        raise ConfigurationError(f"The first {name} must start at zero")
    for previous, current in zip(ranges, ranges[1:]):
        if previous.upper_bound is None:
            raise ConfigurationError(f"Only the final {name} may have an open upper bound")
        if current.lower_bound != previous.upper_bound:
            raise ConfigurationError(f"Each {name} must start where the previous one ends")
    if ranges[-1].upper_bound is not None:
        raise ConfigurationError(f"Final {name} must have an open upper bound")


class IncomeTaxSchedule(ImmutableModel):
    """Complete rate schedule consumed by the income tax engine."""

    frequencies: Mapping[str, int]
    brackets: Sequence[TaxBracket]
    low_income_offset: LowIncomeOffsetConfig
    medicare_levy: MedicareLevyConfig
    medicare_levy_surcharge: Sequence[SurchargeTier]

    @field_validator("frequencies", mode="before")
    @classmethod
    def _coerce_frequencies(cls, value: Any) -> Mapping[str, int]:
        if isinstance(value, Mapping):
            return {str(key): int(val) for key, val in value.items()}
        raise ConfigurationError("'frequencies' must map frequency names to periods per year")

    @field_validator("brackets", mode="before")
    @classmethod
    def _coerce_brackets(cls, value: Any) -> Sequence[Any]:
        return _coerce_sequence(value, "brackets")

    @field_validator("medicare_levy_surcharge", mode="before")
    @classmethod
    def _coerce_surcharge(cls, value: Any) -> Sequence[Any]:
        return _coerce_sequence(value, "medicare_levy_surcharge")

    @model_validator(mode="after")
    def _validate_schedule(self) -> Self:
        if not self.frequencies:
            raise ConfigurationError("At least one income frequency must be defined")
        for name, periods in self.frequencies.items():
            if periods <= 0:
                raise ConfigurationError(
                    f"Frequency '{name}' must have a positive number of periods"
                )
        _validate_ranges(self.brackets, "tax bracket")
        _validate_ranges(self.medicare_levy_surcharge, "surcharge tier")
        return self

    def periods_for(self, frequency: str) -> int | None:
        return self.frequencies.get(frequency)


class YearConfiguration(ImmutableModel):
    """Structured representation of an income year configuration."""

    year: int
    meta: Mapping[str, Any] = Field(default_factory=dict)
    income_tax: IncomeTaxSchedule

    @model_validator(mode="before")
    @classmethod
    def _prepare(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Configuration file must define a mapping at the top level")

        prepared = dict(data)
        meta = prepared.get("meta")
        if meta is None:
            prepared["meta"] = {}
        elif not isinstance(meta, Mapping):
            raise ConfigurationError("'meta' section must be a mapping if provided")

        if not isinstance(prepared.get("income_tax"), Mapping):
            raise ConfigurationError("Configuration must include an 'income_tax' section")
        return prepared

    @property
    def label(self) -> str:
        label = self.meta.get("label")
        if isinstance(label, str) and label.strip():
            return label
        return f"{self.year - 1}-{str(self.year)[-2:]}"


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported income year in the manifest."""

    year: int
    filename: str | None = None
    label: str | None = None
    status: str = "active"

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available income year configuration files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))

    @property
    def default_year(self) -> int:
        if not self.years:
            raise ConfigurationError("The configuration manifest declares no years")
        return self.supported_years[-1]


__all__ = [
    "ConfigurationError",
    "ImmutableModel",
    "IncomeTaxSchedule",
    "LowIncomeOffsetConfig",
    "MedicareLevyConfig",
    "OffsetPhaseOut",
    "SurchargeTier",
    "TaxBracket",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "ValidationError",
    "YearConfiguration",
]
