"""Reverse lookups for goal planning.

Goal planning answers "which raw score does this child need for the Nth
percentile": C1 gives the standard score for the percentile, then the child's
B table gives the raw score for that standard score. Two raw-score policies
are available, see :class:`ReverseLookupStrategy`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Dict, Iterable, Optional

from dayc.assessments.constants import C1_TABLE_ID, DEFAULT_VISIBLE_SUBTESTS
from dayc.assessments.dayc2.provenance import create_failure_step, failure_result, lookup_step
from dayc.assessments.dayc2.types import (
    GoalPlan,
    RawToStandardRow,
    RawToStandardTable,
    ValueWithProvenance,
)
from dayc.assessments.dayc2.values import Exact, Number, ParsedScore, format_number, format_value
from dayc.assessments.enums import ReverseLookupStrategy, SubtestKey
from dayc.core.config import settings
from dayc.data.context import LookupContext

__all__ = [
    "lookup_standard_score_from_percentile",
    "lookup_raw_score_from_standard_score",
    "plan_goals",
]


def lookup_standard_score_from_percentile(
    target_percentile: Number,
    ctx: LookupContext,
) -> ValueWithProvenance[ParsedScore]:
    """Standard score printed beside an exact ``target_percentile`` cell in C1."""
    c1 = ctx.standard_to_percentile
    shown = format_number(target_percentile)
    for row, pair in c1.iter_pairs():
        rank = pair.percentile_rank
        if isinstance(rank, Exact) and rank.value == target_percentile and pair.standard_score is not None:
            step = lookup_step(
                c1.table_id,
                row.csv_row,
                c1.source,
                f"{shown}th percentile → Standard Score {format_value(pair.standard_score)}",
            )
            return ValueWithProvenance(value=pair.standard_score, steps=(step,))
    return failure_result(
        c1.table_id,
        c1.source,
        f"{shown}th percentile not found in table",
        note=f"Percentile {shown} not found in {C1_TABLE_ID}",
    )


def _exact_min_raw(
    table: RawToStandardTable,
    subtest: SubtestKey,
    target: Number,
) -> ValueWithProvenance[int]:
    best: Optional[RawToStandardRow] = None
    for row in table.rows:
        cell = row.cell(subtest)
        if isinstance(cell, Exact) and cell.value == target:
            if best is None or row.raw_score < best.raw_score:
                best = row
    shown = format_number(target)
    if best is None:
        return ValueWithProvenance.empty(
            note=f"Standard score {shown} not found for {subtest.value} in {table.table_id}"
        )
    step = lookup_step(
        table.table_id,
        best.csv_row,
        table.source,
        f"Standard Score {shown} → Raw Score {best.raw_score}",
    )
    return ValueWithProvenance(value=best.raw_score, steps=(step,))


def _closest_at_or_below(
    table: RawToStandardTable,
    subtest: SubtestKey,
    target: Number,
) -> ValueWithProvenance[int]:
    best: Optional[RawToStandardRow] = None
    best_score: Optional[Number] = None
    for row in table.rows:
        cell = row.cell(subtest)
        if not isinstance(cell, Exact) or cell.value > target:
            continue
        if (
            best is None
            or best_score is None
            or cell.value > best_score
            or (cell.value == best_score and row.raw_score < best.raw_score)
        ):
            best, best_score = row, cell.value

    shown = format_number(target)
    if best is None or best_score is None:
        band = table.age_band
        step = create_failure_step(
            table.table_id,
            table.source,
            f"No raw score produces Standard Score ≤{shown} for this subtest "
            f"at ages {band.min_months}–{band.max_months} months",
        )
        return ValueWithProvenance(
            value=None,
            steps=(step,),
            note=f"Standard score {shown} not achievable for this subtest at this age",
        )

    closest = f" (closest available: {format_number(best_score)})" if best_score != target else ""
    step = lookup_step(
        table.table_id,
        best.csv_row,
        table.source,
        f"Standard Score ≤{shown}{closest} → Raw Score {best.raw_score}",
    )
    return ValueWithProvenance(value=best.raw_score, steps=(step,))


def lookup_raw_score_from_standard_score(
    target_standard_score: Number,
    subtest: SubtestKey,
    age_months: int,
    ctx: LookupContext,
    *,
    strategy: ReverseLookupStrategy | str | None = None,
) -> ValueWithProvenance[int]:
    """Raw score needed for ``target_standard_score`` under ``strategy``.

    ``strategy`` defaults to ``settings.reverse_lookup_strategy``.
    """
    policy = ReverseLookupStrategy(strategy or settings.reverse_lookup_strategy)
    table = ctx.get_b_table_for_age(age_months)
    if policy is ReverseLookupStrategy.EXACT_MIN_RAW:
        if table is None:
            return ValueWithProvenance.empty(note=f"No table for age {age_months} months")
        return _exact_min_raw(table, subtest, target_standard_score)
    if table is None:
        return ValueWithProvenance.empty(
            note=f"No B table available for age {age_months} months (valid range: 12-71 months)"
        )
    return _closest_at_or_below(table, subtest, target_standard_score)


def plan_goals(
    target_percentile: Number,
    age_months: int,
    ctx: LookupContext,
    *,
    subtests: Iterable[SubtestKey] = DEFAULT_VISIBLE_SUBTESTS,
    strategy: ReverseLookupStrategy | str | None = None,
) -> GoalPlan:
    """Raw score per subtest needed to reach ``target_percentile`` at ``age_months``.

    Each subtest's steps start with the shared percentile step. A subtest whose
    lookup fails reports ``None`` with its own note; the others still resolve.
    """
    standard_score = lookup_standard_score_from_percentile(target_percentile, ctx)
    if not isinstance(standard_score.value, Exact):
        return GoalPlan(
            target_percentile=target_percentile,
            age_months=age_months,
            standard_score=standard_score,
            subtests=MappingProxyType({}),
            note="Could not find standard score for this percentile",
        )

    target = standard_score.value.value
    results: Dict[SubtestKey, ValueWithProvenance[int]] = {}
    for subtest in subtests:
        raw = lookup_raw_score_from_standard_score(target, subtest, age_months, ctx, strategy=strategy)
        results[subtest] = raw.prefixed(standard_score.steps)
    return GoalPlan(
        target_percentile=target_percentile,
        age_months=age_months,
        standard_score=standard_score,
        subtests=MappingProxyType(results),
    )
