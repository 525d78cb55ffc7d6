from datetime import date

from fastapi import APIRouter, Depends, Query

from dayc.data.context import LookupContext
from dayc.schemas.score import AgeResponse, ScoreCalculateRequest, ScoreCalculateResponse
from dayc.services.scoring import calculate_scores, describe_age, get_lookup_context

router = APIRouter(tags=["scores"])


@router.post("/scores/calculate", response_model=ScoreCalculateResponse)
def calculate(
    payload: ScoreCalculateRequest,
    ctx: LookupContext = Depends(get_lookup_context),
) -> ScoreCalculateResponse:
    return calculate_scores(payload, ctx)


@router.get("/age", response_model=AgeResponse)
def age(
    date_of_birth: date = Query(...),
    test_date: date = Query(...),
    ctx: LookupContext = Depends(get_lookup_context),
) -> AgeResponse:
    return describe_age(date_of_birth, test_date, ctx)
