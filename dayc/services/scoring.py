from __future__ import annotations

from datetime import date
from functools import lru_cache

from dayc.assessments.constants import DOMAIN_LABELS, SUBTEST_LABELS, is_age_in_range
from dayc.assessments.dayc2.age import calc_age_months, find_age_band
from dayc.assessments.dayc2.calculations import CalculationInput, calculate_all_scores
from dayc.assessments.dayc2.types import DomainResult, SubtestResult
from dayc.core.errors import ValidationError
from dayc.core.formatting import format_age_equivalent, format_percentile, format_score, format_sum_value
from dayc.core.logging import get_logger, structured
from dayc.core.metrics import count_calls, measure_time
from dayc.data.context import LookupContext, create_lookup_context
from dayc.schemas.score import (
    AgeResponse,
    DomainScoreOut,
    ScoreCalculateRequest,
    ScoreCalculateResponse,
    SubtestScoreOut,
    SumValueOut,
)
from dayc.services.provenance import age_band_out, field_out

__all__ = [
    "get_lookup_context",
    "resolve_age_months",
    "calculate_scores",
    "describe_age",
]

logger = get_logger("dayc.services.scoring", component="scoring")


@lru_cache
def get_lookup_context() -> LookupContext:
    """Production tables, loaded once per process from ``settings.tables_dir``."""
    return create_lookup_context()


def resolve_age_months(date_of_birth: date, test_date: date) -> int:
    if test_date < date_of_birth:
        raise ValidationError(
            "Test date precedes date of birth",
            detail={"date_of_birth": date_of_birth.isoformat(), "test_date": test_date.isoformat()},
        )
    return calc_age_months(date_of_birth, test_date)


def _subtest_out(label: str, result: SubtestResult) -> SubtestScoreOut:
    return SubtestScoreOut(
        label=label,
        raw_score=result.raw_score,
        standard_score=field_out(result.standard_score, format_score),
        percentile=field_out(result.percentile, format_percentile),
        age_equivalent=field_out(result.age_equivalent, format_age_equivalent),
    )


def _domain_out(label: str, result: DomainResult) -> DomainScoreOut:
    return DomainScoreOut(
        label=label,
        sum=SumValueOut(type=result.sum.type, value=result.sum.value) if result.sum is not None else None,
        sum_display=format_sum_value(result.sum),
        standard_score=field_out(result.standard_score, format_score),
        percentile=field_out(result.percentile, format_percentile),
    )


@count_calls("scoring.calculate.calls")
@measure_time("scoring.calculate")
def calculate_scores(payload: ScoreCalculateRequest, ctx: LookupContext) -> ScoreCalculateResponse:
    if payload.age_months is not None:
        age_months = payload.age_months
    else:
        age_months = resolve_age_months(payload.date_of_birth, payload.test_date)  # type: ignore[arg-type]

    result = calculate_all_scores(CalculationInput(age_months=age_months, raw_scores=payload.raw_scores), ctx)
    table = find_age_band(age_months, ctx)
    scored = [key.value for key, sub in result.subtests.items() if sub.standard_score.found]
    logger.info(
        "scores_calculated",
        extra=structured(
            age_months=age_months,
            table_id=table.table_id if table else None,
            scored_subtests=scored,
            domains_scored=[key.value for key, dom in result.domains.items() if dom.standard_score.found],
        ),
    )
    return ScoreCalculateResponse(
        age_months=age_months,
        age_band=age_band_out(table.age_band if table else None),
        subtests={key: _subtest_out(SUBTEST_LABELS[key], sub) for key, sub in result.subtests.items()},
        domains={key: _domain_out(DOMAIN_LABELS[key], dom) for key, dom in result.domains.items()},
    )


@count_calls("scoring.age.calls")
def describe_age(date_of_birth: date, test_date: date, ctx: LookupContext) -> AgeResponse:
    age_months = resolve_age_months(date_of_birth, test_date)
    table = find_age_band(age_months, ctx)
    return AgeResponse(
        age_months=age_months,
        in_range=is_age_in_range(age_months),
        table_id=table.table_id if table else None,
        age_band=age_band_out(table.age_band if table else None),
    )
