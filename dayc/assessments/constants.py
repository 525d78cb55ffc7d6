"""Centralized constants for DAYC-2 score conversion.

Subtest ordering, display labels, the valid age range, and the pairing of
subtests into composite domains. Age-band and table catalog data lives in
``dayc2/config.yaml`` next to the scoring core.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Final, Mapping, Tuple

from dayc.assessments.enums import AgeEquivalentKey, DomainKey, SubtestKey

__all__ = [
    "MIN_AGE_MONTHS",
    "MAX_AGE_MONTHS",
    "SUBTESTS",
    "SUBTEST_LABELS",
    "DOMAIN_LABELS",
    "DOMAIN_COMPONENTS",
    "AGE_EQUIV_LABELS",
    "DEFAULT_VISIBLE_SUBTESTS",
    "A1_TABLE_ID",
    "C1_TABLE_ID",
    "D1_TABLE_ID",
    "PLACEHOLDER",
    "is_age_in_range",
]

# =============================================================================
# Age range
# =============================================================================

MIN_AGE_MONTHS: Final[int] = 12
MAX_AGE_MONTHS: Final[int] = 71
"""Inclusive bounds of the normed age range covered by tables B13-B29."""

# =============================================================================
# Subtests and domains
# =============================================================================

SUBTESTS: Final[Tuple[SubtestKey, ...]] = tuple(SubtestKey)

SUBTEST_LABELS: Final[Mapping[SubtestKey, str]] = MappingProxyType({
    SubtestKey.COGNITIVE: "Cognitive",
    SubtestKey.RECEPTIVE_LANGUAGE: "Receptive Language",
    SubtestKey.EXPRESSIVE_LANGUAGE: "Expressive Language",
    SubtestKey.SOCIAL_EMOTIONAL: "Social-Emotional",
    SubtestKey.GROSS_MOTOR: "Gross Motor",
    SubtestKey.FINE_MOTOR: "Fine Motor",
    SubtestKey.ADAPTIVE_BEHAVIOR: "Adaptive Behavior",
})

DOMAIN_LABELS: Final[Mapping[DomainKey, str]] = MappingProxyType({
    DomainKey.COMMUNICATION: "Communication (RL+EL)",
    DomainKey.PHYSICAL: "Physical (GM+FM)",
})

DOMAIN_COMPONENTS: Final[Mapping[DomainKey, Tuple[SubtestKey, SubtestKey]]] = MappingProxyType({
    DomainKey.COMMUNICATION: (SubtestKey.RECEPTIVE_LANGUAGE, SubtestKey.EXPRESSIVE_LANGUAGE),
    DomainKey.PHYSICAL: (SubtestKey.GROSS_MOTOR, SubtestKey.FINE_MOTOR),
})
"""Subtests whose standard scores are summed into each domain composite."""

AGE_EQUIV_LABELS: Final[Mapping[AgeEquivalentKey, str]] = MappingProxyType({
    AgeEquivalentKey.COGNITIVE: "Cognitive",
    AgeEquivalentKey.RECEPTIVE_LANGUAGE: "Receptive Language",
    AgeEquivalentKey.EXPRESSIVE_LANGUAGE: "Expressive Language",
    AgeEquivalentKey.COMMUNICATION: "Communication",
    AgeEquivalentKey.SOCIAL_EMOTIONAL: "Social-Emotional",
    AgeEquivalentKey.PHYSICAL_DEVELOPMENT: "Physical Development",
    AgeEquivalentKey.GROSS_MOTOR: "Gross Motor",
    AgeEquivalentKey.FINE_MOTOR: "Fine Motor",
    AgeEquivalentKey.ADAPTIVE_BEHAVIOR: "Adaptive Behavior",
})

DEFAULT_VISIBLE_SUBTESTS: Final[Tuple[SubtestKey, ...]] = (
    SubtestKey.RECEPTIVE_LANGUAGE,
    SubtestKey.EXPRESSIVE_LANGUAGE,
    SubtestKey.SOCIAL_EMOTIONAL,
)

# =============================================================================
# Table identifiers
# =============================================================================

A1_TABLE_ID: Final[str] = "A1"
C1_TABLE_ID: Final[str] = "C1"
D1_TABLE_ID: Final[str] = "D1"

PLACEHOLDER: Final[str] = "—"
"""Display string for a value that could not be determined."""


def is_age_in_range(age_months: int | None) -> bool:
    """Return True when ``age_months`` falls inside the normed 12-71 month range."""
    if age_months is None:
        return False
    return MIN_AGE_MONTHS <= age_months <= MAX_AGE_MONTHS
