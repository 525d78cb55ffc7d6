from __future__ import annotations

from typing import Optional, Sequence, Tuple, TypeVar

from dayc.assessments.dayc2.types import ProvenanceStep, SourceMeta, ValueWithProvenance

T = TypeVar("T")

__all__ = ["lookup_step", "create_failure_step", "chain_provenance", "failure_result"]


def lookup_step(table_id: str, csv_row: int, source: SourceMeta, description: str) -> ProvenanceStep:
    return ProvenanceStep(table_id=table_id, csv_row=csv_row, source=source, description=description)


def create_failure_step(table_id: str, source: SourceMeta, description: str) -> ProvenanceStep:
    """Step recording a lookup that was attempted against ``table_id`` but matched nothing."""
    return ProvenanceStep(table_id=table_id, csv_row=None, source=source, description=description)


def chain_provenance(*step_groups: Optional[Sequence[ProvenanceStep]]) -> Tuple[ProvenanceStep, ...]:
    """Concatenate step sequences in order, skipping ``None`` entries."""
    return tuple(step for group in step_groups if group is not None for step in group)


def failure_result(
    table_id: str,
    source: SourceMeta,
    description: str,
    note: str | None = None,
) -> ValueWithProvenance[T]:
    return ValueWithProvenance(
        value=None,
        steps=(create_failure_step(table_id, source, description),),
        note=note,
    )
