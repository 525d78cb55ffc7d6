import pytest

from dayc.assessments.dayc2 import goals
from dayc.assessments.dayc2.goals import (
    lookup_raw_score_from_standard_score,
    lookup_standard_score_from_percentile,
    plan_goals,
)
from dayc.assessments.dayc2.values import Exact
from dayc.assessments.enums import ReverseLookupStrategy, SubtestKey
from dayc.data.context import create_test_lookup_context

EXACT = ReverseLookupStrategy.EXACT_MIN_RAW
CLOSEST = ReverseLookupStrategy.CLOSEST_AT_OR_BELOW


@pytest.mark.parametrize(("percentile", "expected"), [(50, 100), (98, 130), (9, 80)])
def test_percentile_to_standard_score(ctx, percentile, expected):
    result = lookup_standard_score_from_percentile(percentile, ctx)
    assert result.value == Exact(expected)
    assert result.steps[0].table_id == "C1"


def test_percentile_to_standard_score_step_text(ctx):
    result = lookup_standard_score_from_percentile(50, ctx)
    assert result.steps[0].csv_row == 62
    assert result.steps[0].description == "50th percentile → Standard Score 100"


def test_missing_percentile_records_failed_attempt(ctx):
    result = lookup_standard_score_from_percentile(99, ctx)
    assert result.value is None
    assert result.note == "Percentile 99 not found in C1"
    assert len(result.steps) == 1
    assert result.steps[0].csv_row is None
    assert result.steps[0].description == "99th percentile not found in table"


def test_exact_strategy_returns_matching_row(ctx):
    result = lookup_raw_score_from_standard_score(60, SubtestKey.COGNITIVE, 12, ctx, strategy=EXACT)
    assert result.value == 10
    assert result.steps[0].csv_row == 12
    assert result.steps[0].description == "Standard Score 60 → Raw Score 10"
    assert lookup_raw_score_from_standard_score(50, SubtestKey.COGNITIVE, 12, ctx, strategy=EXACT).value == 5
    assert lookup_raw_score_from_standard_score(69, SubtestKey.FINE_MOTOR, 13, ctx, strategy=EXACT).value == 5


def test_exact_strategy_uses_age_band_table(ctx):
    result = lookup_raw_score_from_standard_score(85, SubtestKey.COGNITIVE, 24, ctx, strategy=EXACT)
    assert result.value == 20
    assert result.steps[0].table_id == "B17"
    assert result.steps[0].csv_row == 22


def test_exact_strategy_miss_has_no_steps(ctx):
    result = lookup_raw_score_from_standard_score(75, SubtestKey.COGNITIVE, 12, ctx, strategy=EXACT)
    assert result.value is None
    assert result.steps == ()
    assert result.note == "Standard score 75 not found for cognitive in B13"


def test_exact_strategy_without_table(ctx):
    result = lookup_raw_score_from_standard_score(100, SubtestKey.COGNITIVE, 36, ctx, strategy=EXACT)
    assert result.value is None
    assert result.note == "No table for age 36 months"


def test_exact_strategy_prefers_smallest_raw_score(ctx, make_b13):
    table = make_b13(
        (12, "10", "60", "90", "95", "70", "55", "85", "65"),
        (13, "11", "60", "90", "95", "70", "55", "85", "65"),
        (11, "9", "60", "90", "95", "70", "55", "85", "65"),
    )
    plateau = create_test_lookup_context(ctx, raw_to_standard={"B13": table})
    result = lookup_raw_score_from_standard_score(60, SubtestKey.COGNITIVE, 12, plateau, strategy=EXACT)
    assert result.value == 9
    assert result.steps[0].csv_row == 11


def test_closest_strategy_falls_back_below_target(ctx):
    result = lookup_raw_score_from_standard_score(75, SubtestKey.COGNITIVE, 12, ctx, strategy=CLOSEST)
    assert result.value == 10
    assert result.steps[0].description == "Standard Score ≤75 (closest available: 60) → Raw Score 10"


def test_closest_strategy_exact_hit_has_no_closest_hint(ctx):
    result = lookup_raw_score_from_standard_score(100, SubtestKey.COGNITIVE, 12, ctx, strategy=CLOSEST)
    assert result.value == 20
    assert result.steps[0].description == "Standard Score ≤100 → Raw Score 20"
    receptive = lookup_raw_score_from_standard_score(
        100, SubtestKey.RECEPTIVE_LANGUAGE, 12, ctx, strategy=CLOSEST
    )
    assert receptive.value == 10


def test_closest_strategy_unreachable_target(ctx):
    result = lookup_raw_score_from_standard_score(40, SubtestKey.COGNITIVE, 12, ctx, strategy=CLOSEST)
    assert result.value is None
    assert result.note == "Standard score 40 not achievable for this subtest at this age"
    assert result.steps[0].csv_row is None
    assert result.steps[0].description == (
        "No raw score produces Standard Score ≤40 for this subtest at ages 12–13 months"
    )


def test_closest_strategy_without_table(ctx):
    result = lookup_raw_score_from_standard_score(100, SubtestKey.COGNITIVE, 36, ctx, strategy=CLOSEST)
    assert result.value is None
    assert result.note == "No B table available for age 36 months (valid range: 12-71 months)"


def test_strategy_accepts_plain_string(ctx):
    result = lookup_raw_score_from_standard_score(
        75, SubtestKey.COGNITIVE, 12, ctx, strategy="closest_at_or_below"
    )
    assert result.value == 10


def test_strategy_defaults_to_settings(ctx, monkeypatch):
    monkeypatch.setattr(goals.settings, "reverse_lookup_strategy", "closest_at_or_below")
    assert lookup_raw_score_from_standard_score(75, SubtestKey.COGNITIVE, 12, ctx).value == 10
    monkeypatch.setattr(goals.settings, "reverse_lookup_strategy", "exact_min_raw")
    assert lookup_raw_score_from_standard_score(75, SubtestKey.COGNITIVE, 12, ctx).value is None


def test_plan_goals_prefixes_percentile_step(ctx):
    plan = plan_goals(50, 12, ctx, subtests=[SubtestKey.COGNITIVE], strategy=EXACT)
    assert plan.note is None
    assert plan.standard_score.value == Exact(100)
    cognitive = plan.subtests[SubtestKey.COGNITIVE]
    assert cognitive.value == 20
    assert [(s.table_id, s.csv_row) for s in cognitive.steps] == [("C1", 62), ("B13", 22)]


def test_plan_goals_default_subtests_fail_independently(ctx):
    plan = plan_goals(50, 12, ctx, strategy=EXACT)
    assert list(plan.subtests) == [
        SubtestKey.RECEPTIVE_LANGUAGE,
        SubtestKey.EXPRESSIVE_LANGUAGE,
        SubtestKey.SOCIAL_EMOTIONAL,
    ]
    for result in plan.subtests.values():
        assert result.value is None
        assert result.note is not None
        assert [s.table_id for s in result.steps] == ["C1"]


def test_plan_goals_closest_strategy_resolves_where_exact_cannot(ctx):
    plan = plan_goals(50, 12, ctx, strategy=CLOSEST)
    assert plan.subtests[SubtestKey.RECEPTIVE_LANGUAGE].value == 10
    assert plan.subtests[SubtestKey.EXPRESSIVE_LANGUAGE].value == 10
    assert plan.subtests[SubtestKey.SOCIAL_EMOTIONAL].value == 10


def test_plan_goals_unknown_percentile(ctx):
    plan = plan_goals(99, 12, ctx)
    assert plan.standard_score.value is None
    assert plan.subtests == {}
    assert plan.note == "Could not find standard score for this percentile"
