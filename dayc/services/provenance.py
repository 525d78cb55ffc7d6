from __future__ import annotations

from typing import Callable, Iterable, List, Optional

from dayc.assessments.dayc2.types import AgeBand, ProvenanceStep, SourceMeta, ValueWithProvenance
from dayc.schemas.score import AgeBandOut, ProvenanceStepOut, ScoreFieldOut, SourceMetaOut

Formatter = Callable[[ValueWithProvenance], str]


def age_band_out(band: Optional[AgeBand]) -> Optional[AgeBandOut]:
    if band is None:
        return None
    return AgeBandOut(min_months=band.min_months, max_months=band.max_months, label=band.label)


def source_out(source: SourceMeta) -> SourceMetaOut:
    return SourceMetaOut(
        table_id=source.table_id,
        table_title=source.table_title,
        manual_page=source.manual_page,
        csv_filename=source.csv_filename,
        csv_sha256=source.csv_sha256,
        generated_at=source.generated_at,
        generator_version=source.generator_version,
        age_band=age_band_out(source.age_band),
    )


def steps_out(steps: Iterable[ProvenanceStep]) -> List[ProvenanceStepOut]:
    return [
        ProvenanceStepOut(
            table_id=step.table_id,
            csv_row=step.csv_row,
            source=source_out(step.source),
            description=step.description,
        )
        for step in steps
    ]


def field_out(result: ValueWithProvenance, formatter: Formatter) -> ScoreFieldOut:
    """Wire shape of a looked-up value: tagged value dict, display string, note, steps."""
    return ScoreFieldOut(
        value=result.value.as_dict() if result.value is not None else None,
        display=formatter(result),
        note=result.note,
        steps=steps_out(result.steps),
    )
