from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, NonNegativeInt, model_validator

from dayc.assessments.enums import DomainKey, SubtestKey, SumType

__all__ = [
    "AgeBandOut",
    "SourceMetaOut",
    "ProvenanceStepOut",
    "ScoreFieldOut",
    "SubtestScoreOut",
    "SumValueOut",
    "DomainScoreOut",
    "ScoreCalculateRequest",
    "ScoreCalculateResponse",
    "AgeResponse",
]


class AgeBandOut(BaseModel):
    min_months: int
    max_months: int
    label: str


class SourceMetaOut(BaseModel):
    table_id: str
    table_title: str
    manual_page: int
    csv_filename: str
    csv_sha256: str
    generated_at: str
    generator_version: str
    age_band: Optional[AgeBandOut] = None


class ProvenanceStepOut(BaseModel):
    table_id: str
    csv_row: Optional[int]
    source: SourceMetaOut
    description: Optional[str] = None


class ScoreFieldOut(BaseModel):
    """A looked-up value in wire shape plus its display string and audit trail."""

    value: Optional[Dict[str, Any]] = None
    display: str
    note: Optional[str] = None
    steps: List[ProvenanceStepOut] = Field(default_factory=list)


class SubtestScoreOut(BaseModel):
    label: str
    raw_score: Optional[int]
    standard_score: ScoreFieldOut
    percentile: ScoreFieldOut
    age_equivalent: ScoreFieldOut


class SumValueOut(BaseModel):
    type: SumType
    value: float | int


class DomainScoreOut(BaseModel):
    label: str
    sum: Optional[SumValueOut]
    sum_display: str
    standard_score: ScoreFieldOut
    percentile: ScoreFieldOut


class ScoreCalculateRequest(BaseModel):
    age_months: Optional[int] = Field(default=None, ge=0)
    date_of_birth: Optional[date] = None
    test_date: Optional[date] = None
    raw_scores: Dict[SubtestKey, Optional[NonNegativeInt]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _age_source(self) -> "ScoreCalculateRequest":
        has_dates = self.date_of_birth is not None and self.test_date is not None
        if self.age_months is None and not has_dates:
            raise ValueError("Provide age_months or both date_of_birth and test_date")
        if self.age_months is not None and (self.date_of_birth is not None or self.test_date is not None):
            raise ValueError("Provide either age_months or dates, not both")
        return self


class ScoreCalculateResponse(BaseModel):
    age_months: int
    age_band: Optional[AgeBandOut]
    subtests: Dict[SubtestKey, SubtestScoreOut]
    domains: Dict[DomainKey, DomainScoreOut]


class AgeResponse(BaseModel):
    age_months: int
    in_range: bool
    table_id: Optional[str] = None
    age_band: Optional[AgeBandOut] = None
