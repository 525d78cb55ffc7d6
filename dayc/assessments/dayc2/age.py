"""Chronological age helpers.

Age is counted in completed months: a month only counts once the test date's
day-of-month has reached the birth date's day-of-month, so a child born on
2020-02-29 is 11 months old on 2021-02-28 and 12 months old on 2021-03-01.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional, Union

from dayc.core.errors import ValidationError

if TYPE_CHECKING:
    from dayc.assessments.dayc2.types import RawToStandardTable
    from dayc.data.context import LookupContext

DateLike = Union[date, datetime, str]

__all__ = ["calc_age_months", "find_age_band", "to_date"]


def to_date(value: DateLike) -> date:
    """Coerce an ISO ``YYYY-MM-DD`` string, ``date`` or ``datetime`` to a ``date``."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value.strip()[:10])
        except ValueError as exc:
            raise ValidationError(f"Invalid ISO date: {value!r}") from exc
    raise TypeError(f"Unsupported date value: {value!r}")


def _completed_months(earlier: date, later: date) -> int:
    months = (later.year - earlier.year) * 12 + (later.month - earlier.month)
    if later.day < earlier.day:
        months -= 1
    return months


def calc_age_months(dob: DateLike, test_date: DateLike) -> int:
    """Whole months between ``dob`` and ``test_date``; negative when the test precedes birth."""
    born = to_date(dob)
    tested = to_date(test_date)
    if tested < born:
        return -_completed_months(tested, born)
    return _completed_months(born, tested)


def find_age_band(age_months: int, ctx: "LookupContext") -> Optional["RawToStandardTable"]:
    """Raw-to-standard table whose band contains ``age_months``, if any is loaded."""
    return ctx.get_b_table_for_age(age_months)
