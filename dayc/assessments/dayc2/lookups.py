"""Forward table lookups: raw score to standard score, percentile and age equivalent.

Each lookup returns a :class:`ValueWithProvenance`. A miss is not an error:
the value is ``None`` and ``note`` says why, so partially scored protocols
stay usable.
"""

from __future__ import annotations

from typing import Optional, cast

from dayc.assessments.constants import (
    A1_TABLE_ID,
    AGE_EQUIV_LABELS,
    C1_TABLE_ID,
    D1_TABLE_ID,
    SUBTEST_LABELS,
)
from dayc.assessments.dayc2.provenance import lookup_step
from dayc.assessments.dayc2.types import RawToStandardRow, ValueWithProvenance
from dayc.assessments.dayc2.values import (
    Bounded,
    Exact,
    Number,
    ParsedAgeMonths,
    ParsedPercentile,
    ParsedScore,
    Range,
    contains,
    format_number,
    format_value,
)
from dayc.assessments.enums import AgeEquivalentKey, SubtestKey
from dayc.data.context import LookupContext

__all__ = [
    "lookup_standard_score",
    "lookup_percentile",
    "lookup_age_equivalent",
    "lookup_domain_composite",
]


def lookup_standard_score(
    raw_score: int,
    subtest: SubtestKey,
    age_months: int,
    ctx: LookupContext,
) -> ValueWithProvenance[ParsedScore]:
    """Standard score for ``raw_score`` from the B table of the child's age band.

    Raw scores above the table maximum are clamped to it with an advisory note.
    A blank cell falls back to the nearest lower raw score that has one, since
    the manual leaves repeated values out.
    """
    table = ctx.get_b_table_for_age(age_months)
    if table is None:
        return ValueWithProvenance.empty(note=f"No table for age {age_months} months")

    note: Optional[str] = None
    used_raw = raw_score
    row = table.row_for(raw_score)
    if row is None:
        max_raw = table.max_raw_score
        if max_raw is None or raw_score <= max_raw:
            return ValueWithProvenance.empty(note=f"Raw score {raw_score} not found in {table.table_id}")
        used_raw = max_raw
        row = cast(RawToStandardRow, table.row_for(max_raw))
        note = f"Raw score {raw_score} exceeds table max ({max_raw}). Using {max_raw} instead."

    label = SUBTEST_LABELS[subtest]
    raw_text = f"{used_raw} (entered {raw_score})" if used_raw != raw_score else str(used_raw)

    source_row: Optional[RawToStandardRow] = row
    score = row.cell(subtest)
    if score is None:
        source_row = None
        for candidate in range(used_raw - 1, -1, -1):
            earlier = table.row_for(candidate)
            if earlier is not None and earlier.cell(subtest) is not None:
                source_row = earlier
                score = earlier.cell(subtest)
                break

    if source_row is None or score is None:
        step = lookup_step(
            table.table_id,
            row.csv_row,
            table.source,
            f"{label}: raw {raw_text} → no standard score listed",
        )
        return ValueWithProvenance(
            value=None,
            steps=(step,),
            note=f"Standard score not available for {subtest.value} at raw {raw_score}",
        )

    if source_row is not row:
        raw_text = f"{raw_text}, listed at raw {source_row.raw_score}"
    step = lookup_step(
        table.table_id,
        source_row.csv_row,
        table.source,
        f"{label}: raw {raw_text} → Standard Score {format_value(score)}",
    )
    return ValueWithProvenance(value=score, steps=(step,), note=note)


def lookup_percentile(standard_score: ParsedScore, ctx: LookupContext) -> ValueWithProvenance[ParsedPercentile]:
    """Percentile rank for an exact or bounded standard score via C1.

    A bounded input carries its bound onto an exact percentile: ``<50`` maps to
    ``<p`` for the percentile ``p`` printed beside 50.
    """
    if isinstance(standard_score, Range):
        return ValueWithProvenance.empty(note="Percentile lookup requires an exact or bounded standard score")

    target: Number = standard_score.value
    bound = standard_score.bound if isinstance(standard_score, Bounded) else None
    c1 = ctx.standard_to_percentile

    for row, pair in c1.iter_pairs():
        cell = pair.standard_score
        if not isinstance(cell, Exact) or cell.value != target or pair.percentile_rank is None:
            continue
        percentile: ParsedPercentile = pair.percentile_rank
        if bound is not None and isinstance(percentile, Exact):
            percentile = Bounded(bound, percentile.value)
        prefix = bound.symbol if bound is not None else ""
        step = lookup_step(
            c1.table_id,
            row.csv_row,
            c1.source,
            f"Standard Score {prefix}{format_number(target)} → Percentile {format_value(percentile)}",
        )
        return ValueWithProvenance(value=percentile, steps=(step,))

    return ValueWithProvenance.empty(note=f"Standard score {format_number(target)} not found in {C1_TABLE_ID}")


def lookup_age_equivalent(
    raw_score: int,
    domain: AgeEquivalentKey | SubtestKey,
    ctx: LookupContext,
) -> ValueWithProvenance[ParsedAgeMonths]:
    """First A1 row whose ``domain`` cell contains ``raw_score``; a miss carries no steps."""
    key = AgeEquivalentKey.for_subtest(domain) if isinstance(domain, SubtestKey) else domain
    a1 = ctx.age_equivalents
    for row in a1.rows:
        if contains(row.cell(key), raw_score):
            step = lookup_step(
                a1.table_id,
                row.csv_row,
                a1.source,
                f"{AGE_EQUIV_LABELS[key]}: raw {raw_score} → Age Equivalent {format_value(row.age_months)} months",
            )
            return ValueWithProvenance(value=row.age_months, steps=(step,))
    return ValueWithProvenance.empty(note=f"Raw score {raw_score} not found in {A1_TABLE_ID} for {key.value}")


def lookup_domain_composite(total: Number, ctx: LookupContext) -> ValueWithProvenance[ParsedScore]:
    """Domain standard score whose D1 sum cell contains ``total``."""
    d1 = ctx.sum_to_domain
    for row, pair in d1.iter_pairs():
        if pair.standard_score is None or not contains(pair.sum_range, total):
            continue
        step = lookup_step(
            d1.table_id,
            row.csv_row,
            d1.source,
            f"Sum {format_number(total)} → Domain Standard Score {format_value(pair.standard_score)}",
        )
        return ValueWithProvenance(value=pair.standard_score, steps=(step,))
    return ValueWithProvenance.empty(note=f"Sum {format_number(total)} not found in {D1_TABLE_ID}")
