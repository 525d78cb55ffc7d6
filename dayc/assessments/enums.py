"""Enums for the DAYC-2 scoring vocabulary.

Subtest, domain and age-equivalent keys double as the snake_case field names
used by the HTTP schemas; ``Bound`` and ``SumType`` values match the wire
shape of bounded table cells (``{"bound": "lt", "value": 50}``).
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "SubtestKey",
    "DomainKey",
    "AgeEquivalentKey",
    "Bound",
    "SumType",
    "ReverseLookupStrategy",
    "TableKind",
]


class SubtestKey(str, Enum):
    """The seven scored subtests that have raw-to-standard conversions."""

    COGNITIVE = "cognitive"
    RECEPTIVE_LANGUAGE = "receptive_language"
    EXPRESSIVE_LANGUAGE = "expressive_language"
    SOCIAL_EMOTIONAL = "social_emotional"
    GROSS_MOTOR = "gross_motor"
    FINE_MOTOR = "fine_motor"
    ADAPTIVE_BEHAVIOR = "adaptive_behavior"


class DomainKey(str, Enum):
    """Composite domains built from the sum of two subtest standard scores."""

    COMMUNICATION = "communication"
    PHYSICAL = "physical"


class AgeEquivalentKey(str, Enum):
    """Columns of the age-equivalents table (subtests plus two domains)."""

    COGNITIVE = "cognitive"
    COMMUNICATION = "communication"
    RECEPTIVE_LANGUAGE = "receptive_language"
    EXPRESSIVE_LANGUAGE = "expressive_language"
    SOCIAL_EMOTIONAL = "social_emotional"
    PHYSICAL_DEVELOPMENT = "physical_development"
    GROSS_MOTOR = "gross_motor"
    FINE_MOTOR = "fine_motor"
    ADAPTIVE_BEHAVIOR = "adaptive_behavior"

    @classmethod
    def for_subtest(cls, subtest: SubtestKey) -> "AgeEquivalentKey":
        return cls(subtest.value)


class Bound(str, Enum):
    """Direction of a floor/ceiling cell: ``lt`` renders ``<``, ``gt`` renders ``>``."""

    LT = "lt"
    GT = "gt"

    @property
    def symbol(self) -> str:
        return "<" if self is Bound.LT else ">"


class SumType(str, Enum):
    EXACT = "exact"
    LT = "lt"
    GT = "gt"


class ReverseLookupStrategy(str, Enum):
    """Raw-score selection policies for goal planning.

    ``EXACT_MIN_RAW`` requires a cell equal to the target and returns the
    smallest raw score producing it. ``CLOSEST_AT_OR_BELOW`` accepts the highest
    exact cell not above the target, then the smallest raw score for it.
    """

    EXACT_MIN_RAW = "exact_min_raw"
    CLOSEST_AT_OR_BELOW = "closest_at_or_below"


class TableKind(str, Enum):
    AGE_EQUIVALENTS = "age_equivalents"
    RAW_TO_STANDARD = "raw_to_standard"
    STANDARD_TO_PERCENTILE = "standard_to_percentile"
    SUM_TO_DOMAIN = "sum_to_domain"
