import pytest

from dayc.assessments.dayc2.calculations import (
    CalculationInput,
    calculate_all_scores,
    calculate_domain_composite,
    calculate_subtest_result,
    compute_sum,
)
from dayc.assessments.dayc2.types import SubtestResult, SumValue, ValueWithProvenance
from dayc.assessments.dayc2.values import Bounded, Exact, Range
from dayc.assessments.enums import Bound, DomainKey, SubtestKey, SumType


def _given(score):
    """Subtest result carrying ``score`` with no provenance of its own."""
    return SubtestResult(
        raw_score=None,
        standard_score=ValueWithProvenance(value=score),
        percentile=ValueWithProvenance.empty(),
        age_equivalent=ValueWithProvenance.empty(),
    )


@pytest.mark.parametrize(
    ("first", "second", "expected"),
    [
        (Exact(100), Exact(85), SumValue(SumType.EXACT, 185)),
        (Bounded(Bound.LT, 50), Bounded(Bound.LT, 50), SumValue(SumType.LT, 100)),
        (Bounded(Bound.GT, 150), Bounded(Bound.GT, 150), SumValue(SumType.GT, 300)),
        (Bounded(Bound.LT, 50), Bounded(Bound.GT, 150), SumValue(SumType.GT, 150)),
        (Bounded(Bound.GT, 140), Bounded(Bound.LT, 50), SumValue(SumType.GT, 140)),
        (Exact(95), Bounded(Bound.GT, 150), SumValue(SumType.GT, 245)),
        (Bounded(Bound.LT, 50), Exact(91), SumValue(SumType.LT, 141)),
    ],
)
def test_compute_sum_bound_algebra(first, second, expected):
    assert compute_sum(first, second) == expected


def test_compute_sum_is_undefined_for_missing_or_ranged_operands():
    assert compute_sum(None, Exact(100)) is None
    assert compute_sum(Exact(100), None) is None
    assert compute_sum(Range(10, 20), Exact(100)) is None


def test_subtest_percentile_chains_standard_score_steps(ctx):
    result = calculate_subtest_result(20, SubtestKey.COGNITIVE, 12, ctx)
    assert result.raw_score == 20
    assert result.standard_score.value == Exact(100)
    assert result.percentile.value == Exact(50)
    assert [(s.table_id, s.csv_row) for s in result.percentile.steps] == [("B13", 22), ("C1", 62)]


def test_subtest_percentile_miss_still_shows_standard_score_step(ctx):
    result = calculate_subtest_result(10, SubtestKey.COGNITIVE, 12, ctx)
    assert result.standard_score.value == Exact(60)
    assert result.percentile.value is None
    assert result.percentile.note == "Standard score 60 not found in C1"
    assert [s.table_id for s in result.percentile.steps] == ["B13"]


def test_subtest_percentile_without_standard_score_repeats_note(ctx):
    result = calculate_subtest_result(15, SubtestKey.COGNITIVE, 12, ctx)
    assert result.standard_score.value is None
    assert result.percentile.value is None
    assert result.percentile.note == "Raw score 15 not found in B13"


def test_subtest_age_equivalent_is_independent_of_age_band(ctx):
    result = calculate_subtest_result(24, SubtestKey.COGNITIVE, 36, ctx)
    assert result.standard_score.value is None
    assert result.age_equivalent.value == Exact(12)


def test_unadministered_subtest_is_empty(ctx):
    result = calculate_subtest_result(None, SubtestKey.COGNITIVE, 12, ctx)
    assert result.raw_score is None
    for field in (result.standard_score, result.percentile, result.age_equivalent):
        assert field.value is None
        assert field.steps == ()
        assert field.note is None


def test_domain_composite_provenance_order(ctx):
    gross = calculate_subtest_result(30, SubtestKey.GROSS_MOTOR, 12, ctx)
    fine = calculate_subtest_result(10, SubtestKey.FINE_MOTOR, 12, ctx)
    domain = calculate_domain_composite(gross, fine, ctx)
    assert domain.sum == SumValue(SumType.EXACT, 200)
    assert domain.standard_score.value == Exact(100)
    assert domain.percentile.value == Exact(50)
    assert [(s.table_id, s.csv_row) for s in domain.percentile.steps] == [
        ("B13", 32),
        ("B13", 12),
        ("D1", 22),
        ("C1", 62),
    ]


def test_domain_composite_from_exact_sum_cell(ctx):
    gross = calculate_subtest_result(10, SubtestKey.GROSS_MOTOR, 12, ctx)
    fine = calculate_subtest_result(10, SubtestKey.FINE_MOTOR, 12, ctx)
    domain = calculate_domain_composite(gross, fine, ctx)
    assert domain.sum == SumValue(SumType.EXACT, 140)
    assert domain.standard_score.value == Exact(70)
    assert [(s.table_id, s.csv_row) for s in domain.standard_score.steps] == [
        ("B13", 12),
        ("B13", 12),
        ("D1", 22),
    ]
    assert domain.percentile.value is None
    assert domain.percentile.note == "Standard score 70 not found in C1"
    assert len(domain.percentile.steps) == 3


def test_domain_composite_from_sum_range(ctx):
    receptive = calculate_subtest_result(20, SubtestKey.RECEPTIVE_LANGUAGE, 12, ctx)
    expressive = calculate_subtest_result(5, SubtestKey.EXPRESSIVE_LANGUAGE, 12, ctx)
    domain = calculate_domain_composite(receptive, expressive, ctx)
    assert domain.sum == SumValue(SumType.EXACT, 187)
    assert domain.standard_score.value == Exact(93)


def test_below_floor_composite_steps_inside_bound_then_rebounds(ctx):
    domain = calculate_domain_composite(_given(Bounded(Bound.LT, 50)), _given(Exact(91)), ctx)
    assert domain.sum == SumValue(SumType.LT, 141)
    assert domain.standard_score.value == Bounded(Bound.LT, 71)
    assert "Sum 140" in domain.standard_score.steps[-1].description


def test_above_ceiling_composite_steps_inside_bound_then_rebounds(ctx):
    domain = calculate_domain_composite(_given(Bounded(Bound.GT, 150)), _given(Exact(10)), ctx)
    assert domain.sum == SumValue(SumType.GT, 160)
    assert domain.standard_score.value == Bounded(Bound.GT, 79)
    assert domain.percentile.value == Bounded(Bound.GT, 8)


@pytest.mark.parametrize(
    ("receptive_raw", "expressive_raw", "sum_type", "looked_up"),
    [
        (30, 10, SumType.GT, 246),
        (0, 0, SumType.LT, 99),
        (0, 30, SumType.GT, 151),
    ],
)
def test_bounded_composite_outside_table_is_missing(ctx, receptive_raw, expressive_raw, sum_type, looked_up):
    receptive = calculate_subtest_result(receptive_raw, SubtestKey.RECEPTIVE_LANGUAGE, 12, ctx)
    expressive = calculate_subtest_result(expressive_raw, SubtestKey.EXPRESSIVE_LANGUAGE, 12, ctx)
    domain = calculate_domain_composite(receptive, expressive, ctx)
    assert domain.sum is not None
    assert domain.sum.type is sum_type
    assert domain.standard_score.value is None
    assert domain.standard_score.note == f"Sum {looked_up} not found in D1"
    assert len(domain.standard_score.steps) == 2


def test_domain_composite_needs_both_subtests(ctx):
    receptive = calculate_subtest_result(20, SubtestKey.RECEPTIVE_LANGUAGE, 12, ctx)
    expressive = calculate_subtest_result(None, SubtestKey.EXPRESSIVE_LANGUAGE, 12, ctx)
    domain = calculate_domain_composite(receptive, expressive, ctx)
    assert domain.sum is None
    assert domain.standard_score.value is None
    assert domain.standard_score.note == "Domain composite needs standard scores from both subtests"
    assert domain.percentile.note == "No domain standard score available"
    assert [s.table_id for s in domain.percentile.steps] == ["B13"]


def test_calculate_all_scores_covers_every_subtest_and_domain(ctx):
    scoring_input = CalculationInput(
        age_months=12,
        raw_scores={
            SubtestKey.COGNITIVE: 20,
            SubtestKey.RECEPTIVE_LANGUAGE: 20,
            SubtestKey.EXPRESSIVE_LANGUAGE: 5,
            SubtestKey.GROSS_MOTOR: 30,
            SubtestKey.FINE_MOTOR: 10,
        },
    )
    result = calculate_all_scores(scoring_input, ctx)
    assert result.age_months == 12
    assert set(result.subtests) == set(SubtestKey)
    assert set(result.domains) == set(DomainKey)
    assert result.subtests[SubtestKey.COGNITIVE].percentile.value == Exact(50)
    assert result.subtests[SubtestKey.ADAPTIVE_BEHAVIOR].raw_score is None
    assert result.communication.standard_score.value == Exact(93)
    assert result.physical.percentile.value == Exact(50)


def test_calculate_all_scores_result_is_read_only(ctx):
    result = calculate_all_scores(CalculationInput(age_months=12), ctx)
    with pytest.raises(TypeError):
        result.subtests[SubtestKey.COGNITIVE] = None
