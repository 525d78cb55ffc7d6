"""Display strings for scoring results.

Every formatter renders a missing value as the shared placeholder so score
tables, reports and API responses show the same dash for "not determined".
"""

from __future__ import annotations

from typing import Optional

from dayc.assessments.constants import PLACEHOLDER
from dayc.assessments.dayc2.types import SumValue, ValueWithProvenance
from dayc.assessments.dayc2.values import ParsedNumeric, format_number, format_value
from dayc.assessments.enums import SumType

__all__ = ["format_score", "format_percentile", "format_age_equivalent", "format_sum_value"]


def _value(result: ValueWithProvenance | ParsedNumeric | None) -> Optional[ParsedNumeric]:
    if isinstance(result, ValueWithProvenance):
        return result.value
    return result


def format_score(result: ValueWithProvenance | ParsedNumeric | None) -> str:
    value = _value(result)
    return PLACEHOLDER if value is None else format_value(value)


def format_percentile(result: ValueWithProvenance | ParsedNumeric | None) -> str:
    value = _value(result)
    return PLACEHOLDER if value is None else f"{format_value(value)}%"


def format_age_equivalent(result: ValueWithProvenance | ParsedNumeric | None) -> str:
    value = _value(result)
    return PLACEHOLDER if value is None else f"{format_value(value)} mo"


def format_sum_value(total: SumValue | None) -> str:
    if total is None:
        return PLACEHOLDER
    prefix = {SumType.EXACT: "", SumType.LT: "<", SumType.GT: ">"}[total.type]
    return f"{prefix}{format_number(total.value)}"
