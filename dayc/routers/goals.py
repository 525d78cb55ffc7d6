from fastapi import APIRouter, Depends

from dayc.data.context import LookupContext
from dayc.schemas.goals import GoalPlanRequest, GoalPlanResponse
from dayc.services.goals import build_goal_plan
from dayc.services.scoring import get_lookup_context

router = APIRouter(prefix="/goals", tags=["goals"])


@router.post("/plan", response_model=GoalPlanResponse)
def plan(
    payload: GoalPlanRequest,
    ctx: LookupContext = Depends(get_lookup_context),
) -> GoalPlanResponse:
    return build_goal_plan(payload, ctx)
