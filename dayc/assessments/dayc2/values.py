"""Tagged numeric values stored in conversion-table cells.

A cell holds exactly one of three shapes, or ``None`` when the printed table
leaves it blank:

- ``Exact(100)``: the published value.
- ``Bounded(Bound.LT, 50)``: a floor/ceiling entry printed as ``<50`` or ``>150``;
  the true value is only known to lie strictly below/above ``value``.
- ``Range(10, 20)``: several raw scores or sums sharing one row, inclusive.

The module also carries the cell-string parsers used when tables are built
from CSV, so ``format_value(parse_value(s)) == s`` holds for canonical strings.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Mapping, Union

from dayc.assessments.enums import Bound
from dayc.core.errors import TableDataError, ValueParseError

__all__ = [
    "Number",
    "Exact",
    "Bounded",
    "Range",
    "ParsedNumeric",
    "ParsedScore",
    "ParsedPercentile",
    "ParsedAgeMonths",
    "is_exact",
    "is_bounded",
    "is_range",
    "get_numeric_value",
    "format_number",
    "format_value",
    "contains",
    "numeric_from_dict",
    "parse_value",
    "parse_age_months",
    "parse_percentile",
]

Number = Union[int, float]


def _normalize(number: Number) -> Number:
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


@dataclass(frozen=True, slots=True)
class Exact:
    value: Number

    def as_dict(self) -> dict[str, Any]:
        return {"value": self.value}


@dataclass(frozen=True, slots=True)
class Bounded:
    bound: Bound
    value: Number

    def as_dict(self) -> dict[str, Any]:
        return {"bound": self.bound.value, "value": self.value}


@dataclass(frozen=True, slots=True)
class Range:
    min: Number
    max: Number

    def as_dict(self) -> dict[str, Any]:
        return {"min": self.min, "max": self.max}


ParsedNumeric = Union[Exact, Bounded, Range]
ParsedScore = ParsedNumeric
ParsedPercentile = Union[Exact, Bounded]
ParsedAgeMonths = Union[Exact, Bounded]


def is_exact(value: ParsedNumeric | None) -> bool:
    return isinstance(value, Exact)


def is_bounded(value: ParsedNumeric | None) -> bool:
    return isinstance(value, Bounded)


def is_range(value: ParsedNumeric | None) -> bool:
    return isinstance(value, Range)


def get_numeric_value(value: ParsedNumeric | None) -> Number | None:
    """Representative number for a cell; ranges report their lower end."""
    match value:
        case None:
            return None
        case Range(min=low):
            return low
        case Exact(value=number) | Bounded(value=number):
            return number
    raise TypeError(f"Unsupported numeric value: {value!r}")


def format_number(number: Number) -> str:
    return str(_normalize(number))


def format_value(value: ParsedNumeric | None) -> str:
    """Render a cell the way the manual prints it: ``100``, ``<50``, ``>150``, ``10-20``."""
    match value:
        case None:
            return ""
        case Range(min=low, max=high):
            return f"{format_number(low)}-{format_number(high)}"
        case Bounded(bound=bound, value=number):
            return f"{bound.symbol}{format_number(number)}"
        case Exact(value=number):
            return format_number(number)
    raise TypeError(f"Unsupported numeric value: {value!r}")


def contains(cell: ParsedNumeric | None, number: Number) -> bool:
    """Whether ``number`` is one of the values a cell stands for.

    Ranges are inclusive, bounds are strict, exact cells need equality.
    """
    match cell:
        case None:
            return False
        case Range(min=low, max=high):
            return low <= number <= high
        case Bounded(bound=Bound.GT, value=edge):
            return number > edge
        case Bounded(bound=Bound.LT, value=edge):
            return number < edge
        case Exact(value=exact):
            return number == exact
    raise TypeError(f"Unsupported numeric value: {cell!r}")


def _as_number(raw: Any, field: str) -> Number:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise TableDataError(f"Cell field '{field}' must be numeric, got {raw!r}")
    return _normalize(raw)


def numeric_from_dict(payload: Mapping[str, Any] | None) -> ParsedNumeric | None:
    """Build a tagged value from its JSON shape; mixed or unknown shapes are rejected."""
    if payload is None:
        return None
    keys = set(payload)
    if keys == {"value"}:
        return Exact(_as_number(payload["value"], "value"))
    if keys == {"bound", "value"}:
        try:
            bound = Bound(payload["bound"])
        except ValueError as exc:
            raise TableDataError(f"Unknown bound {payload['bound']!r}") from exc
        return Bounded(bound, _as_number(payload["value"], "value"))
    if keys == {"min", "max"}:
        low = _as_number(payload["min"], "min")
        high = _as_number(payload["max"], "max")
        if low > high:
            raise TableDataError(f"Range minimum {low} exceeds maximum {high}")
        return Range(low, high)
    raise TableDataError(f"Unrecognized cell shape with keys {sorted(keys)}")


_RANGE_PATTERN = re.compile(r"^(\d+)-(\d+)$")
_BOUNDED_PATTERN = re.compile(r"^([<>])(\d+(?:\.\d+)?)$")
_NUMBER_PATTERN = re.compile(r"^(\d+(?:\.\d+)?)$")


def parse_value(raw: str) -> ParsedNumeric | None:
    """Parse a printed cell; blank and ``-`` mean the table has no entry."""
    trimmed = raw.strip()
    if trimmed in ("", "-"):
        return None

    bounded = _BOUNDED_PATTERN.match(trimmed)
    if bounded:
        bound = Bound.LT if bounded.group(1) == "<" else Bound.GT
        return Bounded(bound, _normalize(float(bounded.group(2))))

    ranged = _RANGE_PATTERN.match(trimmed)
    if ranged:
        return Range(int(ranged.group(1)), int(ranged.group(2)))

    number = _NUMBER_PATTERN.match(trimmed)
    if number:
        return Exact(_normalize(float(number.group(1))))

    raise ValueParseError(f'Cannot parse value: "{raw}"')


def parse_age_months(raw: str) -> ParsedAgeMonths:
    result = parse_value(raw)
    if result is None:
        raise ValueParseError(f'age_months cannot be empty: "{raw}"')
    if isinstance(result, Range):
        raise ValueParseError(f'age_months cannot be a range: "{raw}"')
    return result


def parse_percentile(raw: str) -> ParsedPercentile | None:
    result = parse_value(raw)
    if isinstance(result, Range):
        raise ValueParseError(f'percentile cannot be a range: "{raw}"')
    return result
