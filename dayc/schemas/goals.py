from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from dayc.assessments.enums import ReverseLookupStrategy, SubtestKey
from dayc.schemas.score import ProvenanceStepOut, ScoreFieldOut

__all__ = ["GoalPlanRequest", "GoalSubtestOut", "GoalPlanResponse"]


class GoalPlanRequest(BaseModel):
    age_months: int = Field(ge=0)
    target_percentile: float = Field(ge=1, le=99)
    subtests: Optional[List[SubtestKey]] = Field(default=None, min_length=1)
    strategy: Optional[ReverseLookupStrategy] = None


class GoalSubtestOut(BaseModel):
    label: str
    raw_score: Optional[int]
    note: Optional[str] = None
    steps: List[ProvenanceStepOut] = Field(default_factory=list)


class GoalPlanResponse(BaseModel):
    target_percentile: float
    age_months: int
    strategy: ReverseLookupStrategy
    standard_score: ScoreFieldOut
    subtests: Dict[SubtestKey, GoalSubtestOut]
    note: Optional[str] = None
