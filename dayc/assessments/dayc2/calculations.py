"""Score orchestration for one child: every subtest, then both domain composites.

Provenance is chained. A percentile carries the steps of the standard score
it came from. A domain composite carries the steps of both subtest standard
scores, then its own D1 step, then the C1 step of its percentile.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from dayc.assessments.constants import DOMAIN_COMPONENTS, SUBTESTS
from dayc.assessments.dayc2.lookups import (
    lookup_age_equivalent,
    lookup_domain_composite,
    lookup_percentile,
    lookup_standard_score,
)
from dayc.assessments.dayc2.provenance import chain_provenance
from dayc.assessments.dayc2.types import (
    CalculationResult,
    DomainResult,
    SubtestResult,
    SumValue,
    ValueWithProvenance,
)
from dayc.assessments.dayc2.values import Bounded, Exact, ParsedPercentile, ParsedScore
from dayc.assessments.enums import Bound, DomainKey, SubtestKey, SumType
from dayc.data.context import LookupContext

__all__ = [
    "CalculationInput",
    "compute_sum",
    "calculate_subtest_result",
    "calculate_domain_composite",
    "calculate_all_scores",
]

_SUM_TYPE_FOR_BOUND = {Bound.LT: SumType.LT, Bound.GT: SumType.GT}


@dataclass(frozen=True, slots=True)
class CalculationInput:
    """Age in months plus a raw score (or ``None`` when not administered) per subtest."""

    age_months: int
    raw_scores: Mapping[SubtestKey, Optional[int]] = field(default_factory=dict)

    def raw_score(self, subtest: SubtestKey) -> Optional[int]:
        return self.raw_scores.get(subtest)


def compute_sum(first: Optional[ParsedScore], second: Optional[ParsedScore]) -> Optional[SumValue]:
    """Bound-aware sum of two subtest standard scores.

    ``<a + <b`` is ``<a+b`` and ``>a + >b`` is ``>a+b``. Mixed directions keep
    only the ``>`` operand, since the ``<`` side has no lower limit. An exact
    operand shifts the bounded side and keeps its direction. Missing or ranged
    operands give no sum.
    """
    match first, second:
        case Exact(value=a), Exact(value=b):
            return SumValue(SumType.EXACT, a + b)
        case Bounded(bound=bound_a, value=a), Bounded(bound=bound_b, value=b):
            if bound_a is bound_b:
                return SumValue(_SUM_TYPE_FOR_BOUND[bound_a], a + b)
            return SumValue(SumType.GT, a if bound_a is Bound.GT else b)
        case (Exact(value=a), Bounded(bound=bound, value=b)) | (Bounded(bound=bound, value=b), Exact(value=a)):
            return SumValue(_SUM_TYPE_FOR_BOUND[bound], a + b)
    return None


def _chain_percentile(score: ValueWithProvenance[ParsedScore], ctx: LookupContext) -> ValueWithProvenance[ParsedPercentile]:
    if score.value is None:
        return ValueWithProvenance.empty(note=score.note or "No standard score available", steps=score.steps)
    return lookup_percentile(score.value, ctx).prefixed(score.steps)


def calculate_subtest_result(
    raw_score: Optional[int],
    subtest: SubtestKey,
    age_months: int,
    ctx: LookupContext,
) -> SubtestResult:
    if raw_score is None:
        return SubtestResult(
            raw_score=None,
            standard_score=ValueWithProvenance.empty(),
            percentile=ValueWithProvenance.empty(),
            age_equivalent=ValueWithProvenance.empty(),
        )
    standard_score = lookup_standard_score(raw_score, subtest, age_months, ctx)
    return SubtestResult(
        raw_score=raw_score,
        standard_score=standard_score,
        percentile=_chain_percentile(standard_score, ctx),
        age_equivalent=lookup_age_equivalent(raw_score, subtest, ctx),
    )


def _bounded_composite(total: SumValue, ctx: LookupContext) -> ValueWithProvenance[ParsedScore]:
    """Composite for ``<v``/``>v`` sums: look up the nearest sum inside the bound and re-bound it."""
    if total.type is SumType.LT:
        result = lookup_domain_composite(total.value - 1, ctx)
        if isinstance(result.value, Exact):
            return ValueWithProvenance(Bounded(Bound.LT, result.value.value + 1), result.steps, result.note)
        return result
    result = lookup_domain_composite(total.value + 1, ctx)
    if isinstance(result.value, Exact):
        return ValueWithProvenance(Bounded(Bound.GT, result.value.value - 1), result.steps, result.note)
    return result


def calculate_domain_composite(first: SubtestResult, second: SubtestResult, ctx: LookupContext) -> DomainResult:
    subtest_steps = chain_provenance(first.standard_score.steps, second.standard_score.steps)
    total = compute_sum(first.standard_score.value, second.standard_score.value)
    if total is None:
        return DomainResult(
            sum=None,
            standard_score=ValueWithProvenance(
                value=None,
                steps=subtest_steps,
                note="Domain composite needs standard scores from both subtests",
            ),
            percentile=ValueWithProvenance(
                value=None,
                steps=subtest_steps,
                note="No domain standard score available",
            ),
        )

    if total.type is SumType.EXACT:
        composite = lookup_domain_composite(total.value, ctx)
    else:
        composite = _bounded_composite(total, ctx)
    standard_score = composite.prefixed(subtest_steps)
    return DomainResult(
        sum=total,
        standard_score=standard_score,
        percentile=_chain_percentile(standard_score, ctx),
    )


def calculate_all_scores(
    scoring_input: CalculationInput,
    ctx: LookupContext,
) -> CalculationResult:
    """Score every subtest and both domain composites for one child."""
    age_months = scoring_input.age_months
    subtests: Dict[SubtestKey, SubtestResult] = {
        subtest: calculate_subtest_result(scoring_input.raw_score(subtest), subtest, age_months, ctx)
        for subtest in SUBTESTS
    }
    domains: Dict[DomainKey, DomainResult] = {}
    for domain, (first, second) in DOMAIN_COMPONENTS.items():
        domains[domain] = calculate_domain_composite(subtests[first], subtests[second], ctx)
    return CalculationResult(
        age_months=age_months,
        subtests=MappingProxyType(subtests),
        domains=MappingProxyType(domains),
    )
