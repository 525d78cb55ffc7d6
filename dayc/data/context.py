"""Lookup context: every conversion table a scoring call needs, behind one object.

Scoring functions take the context as an argument instead of importing table
data, so the same code runs against the production tables and the reduced
fixture set in :mod:`dayc.data.fixtures`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple

from dayc.assessments.constants import MAX_AGE_MONTHS, MIN_AGE_MONTHS
from dayc.assessments.dayc2.types import (
    AgeEquivalentsTable,
    RawToStandardTable,
    StandardToPercentileTable,
    SumToDomainTable,
)
from dayc.core.config import settings
from dayc.core.errors import TableDataError, TableNotFoundError
from dayc.core.logging import get_logger, structured
from dayc.data.tables import load_tables_dir

__all__ = [
    "LookupContext",
    "create_lookup_context",
    "create_test_lookup_context",
    "check_band_coverage",
]

logger = get_logger("dayc.data.context", component="tables")


@dataclass(frozen=True, slots=True)
class LookupContext:
    """Read-only bundle of A1, the B-series, C1 and D1."""

    age_equivalents: AgeEquivalentsTable
    raw_to_standard: Mapping[str, RawToStandardTable]
    standard_to_percentile: StandardToPercentileTable
    sum_to_domain: SumToDomainTable
    _bands: Tuple[RawToStandardTable, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        ordered = tuple(sorted(self.raw_to_standard.values(), key=lambda t: t.age_band.min_months))
        for previous, current in zip(ordered, ordered[1:]):
            if current.age_band.min_months <= previous.age_band.max_months:
                raise TableDataError(
                    f"Age bands of {previous.table_id} and {current.table_id} overlap",
                    detail={"tables": [previous.table_id, current.table_id]},
                )
        object.__setattr__(self, "raw_to_standard", MappingProxyType(dict(self.raw_to_standard)))
        object.__setattr__(self, "_bands", ordered)

    def get_b_table_for_age(self, age_months: int) -> Optional[RawToStandardTable]:
        for table in self._bands:
            if age_months in table.age_band:
                return table
        return None

    def b_table(self, table_id: str) -> RawToStandardTable:
        try:
            return self.raw_to_standard[table_id]
        except KeyError as exc:
            raise TableNotFoundError(f"Table {table_id} is not loaded") from exc

    @property
    def b_tables(self) -> Tuple[RawToStandardTable, ...]:
        """Raw-to-standard tables ordered by the start of their age band."""
        return self._bands

    @property
    def table_ids(self) -> Tuple[str, ...]:
        return (
            self.age_equivalents.table_id,
            *(table.table_id for table in self._bands),
            self.standard_to_percentile.table_id,
            self.sum_to_domain.table_id,
        )


def check_band_coverage(
    ctx: LookupContext,
    min_months: int = MIN_AGE_MONTHS,
    max_months: int = MAX_AGE_MONTHS,
) -> None:
    """Require the loaded bands to tile ``[min_months, max_months]`` without gaps."""
    bands = [table.age_band for table in ctx.b_tables]
    if not bands:
        raise TableDataError("No raw-to-standard tables loaded")
    if bands[0].min_months != min_months or bands[-1].max_months != max_months:
        raise TableDataError(
            f"Age bands cover {bands[0].min_months}-{bands[-1].max_months} months, "
            f"expected {min_months}-{max_months}"
        )
    for previous, current in zip(bands, bands[1:]):
        if current.min_months != previous.max_months + 1:
            raise TableDataError(
                f"Gap between age bands {previous.label} and {current.label}",
                detail={"after": previous.max_months, "next": current.min_months},
            )


def create_lookup_context(tables_dir: Path | str | None = None) -> LookupContext:
    """Load the production tables from ``tables_dir`` (default ``settings.tables_dir``)."""
    directory = Path(tables_dir) if tables_dir is not None else settings.tables_dir
    bundle = load_tables_dir(directory)
    ctx = LookupContext(
        age_equivalents=bundle.age_equivalents,
        raw_to_standard=bundle.raw_to_standard,
        standard_to_percentile=bundle.standard_to_percentile,
        sum_to_domain=bundle.sum_to_domain,
    )
    check_band_coverage(ctx)
    logger.info(
        "lookup_context_ready",
        extra=structured(tables_dir=str(directory), tables=list(ctx.table_ids)),
    )
    return ctx


def create_test_lookup_context(base: LookupContext, **overrides: Any) -> LookupContext:
    """Copy of ``base`` with some tables swapped out, e.g. ``raw_to_standard={...}``."""
    return replace(base, **overrides)
