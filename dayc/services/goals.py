from __future__ import annotations

from dayc.assessments.constants import DEFAULT_VISIBLE_SUBTESTS, SUBTEST_LABELS
from dayc.assessments.dayc2.goals import plan_goals
from dayc.assessments.enums import ReverseLookupStrategy
from dayc.core.config import settings
from dayc.core.formatting import format_score
from dayc.core.logging import get_logger, structured
from dayc.core.metrics import count_calls, measure_time
from dayc.data.context import LookupContext
from dayc.schemas.goals import GoalPlanRequest, GoalPlanResponse, GoalSubtestOut
from dayc.services.provenance import field_out, steps_out

__all__ = ["build_goal_plan"]

logger = get_logger("dayc.services.goals", component="goals")


@count_calls("goals.plan.calls")
@measure_time("goals.plan")
def build_goal_plan(payload: GoalPlanRequest, ctx: LookupContext) -> GoalPlanResponse:
    strategy = payload.strategy or ReverseLookupStrategy(settings.reverse_lookup_strategy)
    subtests = tuple(payload.subtests) if payload.subtests is not None else DEFAULT_VISIBLE_SUBTESTS
    plan = plan_goals(
        payload.target_percentile,
        payload.age_months,
        ctx,
        subtests=subtests,
        strategy=strategy,
    )
    logger.info(
        "goal_plan_built",
        extra=structured(
            target_percentile=payload.target_percentile,
            age_months=payload.age_months,
            strategy=strategy.value,
            resolved=[key.value for key, result in plan.subtests.items() if result.found],
        ),
    )
    return GoalPlanResponse(
        target_percentile=payload.target_percentile,
        age_months=payload.age_months,
        strategy=strategy,
        standard_score=field_out(plan.standard_score, format_score),
        subtests={
            key: GoalSubtestOut(
                label=SUBTEST_LABELS[key],
                raw_score=result.value,
                note=result.note,
                steps=steps_out(result.steps),
            )
            for key, result in plan.subtests.items()
        },
        note=plan.note,
    )
