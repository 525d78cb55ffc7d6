from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Generic, Iterator, Mapping, Optional, Sequence, Tuple, TypeVar, cast

from dayc.assessments.enums import AgeEquivalentKey, DomainKey, SubtestKey, SumType
from dayc.assessments.dayc2.values import (
    Number,
    ParsedAgeMonths,
    ParsedNumeric,
    ParsedPercentile,
    ParsedScore,
)
from dayc.core.errors import TableDataError

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Source metadata and provenance
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AgeBand:
    """Inclusive age range, in months, covered by one raw-to-standard table."""

    min_months: int
    max_months: int
    label: str

    def __contains__(self, age_months: object) -> bool:
        return isinstance(age_months, int) and self.min_months <= age_months <= self.max_months

    def as_dict(self) -> dict[str, Any]:
        return {"min_months": self.min_months, "max_months": self.max_months, "label": self.label}


@dataclass(frozen=True, slots=True)
class SourceMeta:
    """Identifies the published table and generated file a lookup came from."""

    table_id: str
    table_title: str
    manual_page: int
    csv_filename: str
    csv_sha256: str
    generated_at: str
    generator_version: str
    age_band: Optional[AgeBand] = None

    def as_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "table_id": self.table_id,
            "table_title": self.table_title,
            "manual_page": self.manual_page,
            "csv_filename": self.csv_filename,
            "csv_sha256": self.csv_sha256,
            "generated_at": self.generated_at,
            "generator_version": self.generator_version,
        }
        if self.age_band is not None:
            data["age_band"] = self.age_band.as_dict()
        return data


@dataclass(frozen=True, slots=True)
class ProvenanceStep:
    """One table lookup contributing to a derived value.

    ``csv_row`` is the 1-based row in the source CSV (header is row 1) or
    ``None`` when the step records a lookup that found nothing.
    """

    table_id: str
    csv_row: Optional[int]
    source: SourceMeta
    description: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ValueWithProvenance(Generic[T]):
    """A lookup result, the steps that produced it, and an optional caveat."""

    value: Optional[T]
    steps: Tuple[ProvenanceStep, ...] = ()
    note: Optional[str] = None

    @classmethod
    def empty(cls, note: str | None = None, steps: Sequence[ProvenanceStep] = ()) -> "ValueWithProvenance[T]":
        return cls(value=None, steps=tuple(steps), note=note)

    @property
    def found(self) -> bool:
        return self.value is not None

    def prefixed(self, *step_groups: Sequence[ProvenanceStep]) -> "ValueWithProvenance[T]":
        """Copy with ``step_groups`` placed ahead of this result's own steps."""
        prefix: Tuple[ProvenanceStep, ...] = tuple(step for group in step_groups for step in group)
        return replace(self, steps=prefix + self.steps)


# ---------------------------------------------------------------------------
# Conversion tables
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AgeEquivalentRow:
    csv_row: int
    age_months: ParsedAgeMonths
    cells: Mapping[AgeEquivalentKey, Optional[ParsedScore]]

    def cell(self, key: AgeEquivalentKey) -> Optional[ParsedScore]:
        return self.cells.get(key)


@dataclass(frozen=True, slots=True)
class RawToStandardRow:
    csv_row: int
    raw_score: int
    cells: Mapping[SubtestKey, Optional[ParsedScore]]

    def cell(self, subtest: SubtestKey) -> Optional[ParsedScore]:
        return self.cells.get(subtest)


@dataclass(frozen=True, slots=True)
class PercentilePair:
    standard_score: Optional[ParsedScore]
    percentile_rank: Optional[ParsedPercentile]


@dataclass(frozen=True, slots=True)
class C1Row:
    """One printed row of C1; the page lays three score bands side by side."""

    csv_row: int
    pairs: Tuple[PercentilePair, PercentilePair, PercentilePair]


@dataclass(frozen=True, slots=True)
class CompositePair:
    sum_range: Optional[ParsedNumeric]
    standard_score: Optional[ParsedScore]


@dataclass(frozen=True, slots=True)
class D1Row:
    """One printed row of D1; three independent sum/composite column pairs."""

    csv_row: int
    pairs: Tuple[CompositePair, CompositePair, CompositePair]


@dataclass(frozen=True, slots=True)
class AgeEquivalentsTable:
    table_id: str
    source: SourceMeta
    rows: Tuple[AgeEquivalentRow, ...]


@dataclass(frozen=True, slots=True)
class RawToStandardTable:
    table_id: str
    source: SourceMeta
    rows: Tuple[RawToStandardRow, ...]
    _by_raw: Mapping[int, RawToStandardRow] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.source.age_band is None:
            raise TableDataError(
                f"{self.table_id} source is missing its age band", detail={"table_id": self.table_id}
            )
        index = {row.raw_score: row for row in self.rows}
        object.__setattr__(self, "_by_raw", MappingProxyType(index))

    @property
    def age_band(self) -> AgeBand:
        return cast(AgeBand, self.source.age_band)

    @property
    def max_raw_score(self) -> Optional[int]:
        return max(self._by_raw) if self._by_raw else None

    def row_for(self, raw_score: int) -> Optional[RawToStandardRow]:
        return self._by_raw.get(raw_score)


@dataclass(frozen=True, slots=True)
class StandardToPercentileTable:
    table_id: str
    source: SourceMeta
    rows: Tuple[C1Row, ...]

    def iter_pairs(self) -> Iterator[tuple[C1Row, PercentilePair]]:
        """Row order first, then column pair 1, 2, 3 within the row."""
        for row in self.rows:
            for pair in row.pairs:
                yield row, pair


@dataclass(frozen=True, slots=True)
class SumToDomainTable:
    table_id: str
    source: SourceMeta
    rows: Tuple[D1Row, ...]

    def iter_pairs(self) -> Iterator[tuple[D1Row, CompositePair]]:
        for row in self.rows:
            for pair in row.pairs:
                yield row, pair


# ---------------------------------------------------------------------------
# Calculation results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SumValue:
    """Bound-aware sum of two subtest standard scores."""

    type: SumType
    value: Number

    def as_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, "value": self.value}


@dataclass(frozen=True, slots=True)
class SubtestResult:
    raw_score: Optional[int]
    standard_score: ValueWithProvenance[ParsedScore]
    percentile: ValueWithProvenance[ParsedPercentile]
    age_equivalent: ValueWithProvenance[ParsedAgeMonths]


@dataclass(frozen=True, slots=True)
class DomainResult:
    sum: Optional[SumValue]
    standard_score: ValueWithProvenance[ParsedScore]
    percentile: ValueWithProvenance[ParsedPercentile]


@dataclass(frozen=True, slots=True)
class CalculationResult:
    age_months: int
    subtests: Mapping[SubtestKey, SubtestResult]
    domains: Mapping[DomainKey, DomainResult]

    @property
    def communication(self) -> DomainResult:
        return self.domains[DomainKey.COMMUNICATION]

    @property
    def physical(self) -> DomainResult:
        return self.domains[DomainKey.PHYSICAL]


@dataclass(frozen=True, slots=True)
class GoalPlan:
    """Raw scores needed per subtest to reach a target percentile."""

    target_percentile: Number
    age_months: int
    standard_score: ValueWithProvenance[ParsedScore]
    subtests: Mapping[SubtestKey, ValueWithProvenance[int]]
    note: Optional[str] = None
