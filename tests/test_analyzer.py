"""Tests for mjudge.judgment.analyzer — majority grade and truncation chain."""

import math

import pytest

from mjudge.judgment.analyzer import (
    analyze,
    majority_grade,
    opponents_percentage,
    proportions,
    supporters_percentage,
    truncation_chain,
)
from mjudge.judgment.formatting import (
    comparison_signature,
    display_summary,
    explain_score,
    format_score,
)
from mjudge.judgment.scoring import (
    NEUTRAL_CENTRAL,
    central_score,
    nearly_equal,
    typical_score,
    usual_score,
)
from mjudge.schemas.analysis import Proportions
from mjudge.schemas.grades import Aggregate, GradeScale

_STANDARD = GradeScale(
    name="standard",
    grades=("Excellent", "VeryGood", "Good", "Fair", "Passable", "Inadequate", "Bad"),
)


def _agg(*counts: int) -> Aggregate:
    return Aggregate.from_counts(_STANDARD, counts)


_SAMPLES = [
    _agg(0, 3, 2, 0, 0, 0, 0),
    _agg(1, 0, 0, 0, 0, 0, 1),
    _agg(4, 1, 7, 3, 0, 2, 9),
    _agg(0, 0, 0, 0, 0, 0, 3),
    _agg(2, 2, 2, 2, 2, 2, 2),
    _agg(1, 0, 1, 2, 0, 0, 0),
]


# ── Analysis ──────────────────────────────────────────────────────


class TestAnalyze:
    def test_majority_with_exact_percentage(self):
        result = analyze(Aggregate.from_mapping(_STANDARD, {"Good": 2, "VeryGood": 3}))
        assert result.majority_grade == "VeryGood"
        assert result.majority_percentage == 60.0
        assert result.majority_strength == 10.0
        assert result.total == 5

    def test_second_and_final_iterations(self):
        result = analyze(_agg(0, 3, 2, 0, 0, 0, 0))
        assert result.second_grade == "Good"
        assert result.second_percentage == 100.0
        assert result.final_grade == "Good"
        assert result.final_percentage == 100.0

    def test_no_votes(self):
        result = analyze(Aggregate.empty(_STANDARD))
        assert result.majority_grade == "Bad"
        assert result.majority_percentage == 0.0
        assert result.iterations == ()
        assert result.display_summary == "No votes"
        assert result.comparison_signature == "EMPTY"
        assert result.scores.typical == 0.0
        assert result.scores.usual == 0.0
        assert result.scores.central == 0.0
        assert result.is_empty

    def test_exactly_half_is_a_majority(self):
        result = analyze(_agg(1, 0, 0, 0, 0, 0, 1))
        assert result.majority_grade == "Excellent"
        assert result.majority_percentage == 50.0
        assert result.majority_strength == 0.0

    def test_all_worst(self):
        result = analyze(_agg(0, 0, 0, 0, 0, 0, 3))
        assert result.majority_grade == "Bad"
        assert result.majority_strength == 50.0
        assert len(result.iterations) == 1

    def test_display_and_signature(self):
        result = analyze(_agg(0, 3, 2, 0, 0, 0, 0))
        assert result.display_summary == "VeryGood (60.0%)"
        assert result.comparison_signature == "VeryGood:60.0|Good:100.0"

    def test_partial_analysis(self):
        result = analyze(_agg(4, 1, 7, 3, 0, 2, 9), full=False)
        assert len(result.iterations) == 1
        assert result.final_grade == result.majority_grade

    def test_scores_are_filled(self):
        result = analyze(_agg(0, 3, 2, 0, 0, 0, 0))
        # p = 0, q = 0.4, r = 0.6
        assert result.scores.typical == pytest.approx(-0.4)
        assert result.scores.usual == pytest.approx(-0.4 / 0.6)
        assert result.scores.central == 0.0

    def test_analysis_defaults_before_ranking(self):
        result = analyze(_agg(0, 3, 2, 0, 0, 0, 0))
        assert result.rank == 1
        assert not result.is_winner
        assert not result.is_ex_aequo
        assert result.tied_with == ()

    @pytest.mark.parametrize("aggregate", _SAMPLES)
    def test_deterministic(self, aggregate):
        assert analyze(aggregate) == analyze(aggregate)


class TestTruncationChain:
    @pytest.mark.parametrize("aggregate", _SAMPLES)
    def test_every_iteration_is_a_majority(self, aggregate):
        for it in truncation_chain(aggregate):
            assert it.percentage >= 50.0
            assert it.strength == pytest.approx(it.percentage - 50.0)

    @pytest.mark.parametrize("aggregate", _SAMPLES)
    def test_votes_remaining_strictly_decreasing(self, aggregate):
        remaining = [it.votes_remaining for it in truncation_chain(aggregate)]
        assert remaining[0] == aggregate.total
        assert all(a > b for a, b in zip(remaining, remaining[1:]))

    @pytest.mark.parametrize("aggregate", _SAMPLES)
    def test_grades_get_worse(self, aggregate):
        grades = [it.grade for it in truncation_chain(aggregate)]
        indexes = [_STANDARD.index(g) for g in grades]
        assert indexes == sorted(set(indexes))

    def test_limit(self):
        assert len(truncation_chain(_agg(2, 2, 2, 2, 2, 2, 2), limit=2)) == 2

    def test_empty(self):
        assert truncation_chain(Aggregate.empty(_STANDARD)) == []

    def test_majority_grade_shortcut(self):
        assert majority_grade(_agg(1, 0, 1, 2, 0, 0, 0)) == "Good"
        assert majority_grade(Aggregate.empty(_STANDARD)) == "Bad"


class TestProportions:
    def test_around_majority(self):
        prop = proportions(_agg(1, 0, 1, 2, 0, 0, 0))
        assert prop.supporters == pytest.approx(0.25)
        assert prop.at_grade == pytest.approx(0.25)
        assert prop.opponents == pytest.approx(0.5)

    @pytest.mark.parametrize("aggregate", _SAMPLES)
    def test_sum_to_one(self, aggregate):
        prop = proportions(aggregate)
        assert prop.supporters + prop.opponents + prop.at_grade == pytest.approx(1.0)

    def test_explicit_grade(self):
        prop = proportions(_agg(1, 0, 1, 2, 0, 0, 0), "Fair")
        assert prop.supporters == pytest.approx(0.5)
        assert prop.opponents == 0.0

    def test_empty(self):
        assert proportions(Aggregate.empty(_STANDARD)) == Proportions()

    def test_percentages(self):
        agg = _agg(1, 0, 1, 2, 0, 0, 0)
        assert supporters_percentage(agg, "Good") == 25.0
        assert opponents_percentage(agg, "Good") == 50.0
        assert supporters_percentage(Aggregate.empty(_STANDARD), "Good") == 0.0


# ── Scores ────────────────────────────────────────────────────────


class TestScores:
    def test_typical(self):
        assert typical_score(Proportions(supporters=0.5, opponents=0.2, at_grade=0.3)) == (
            pytest.approx(0.3)
        )

    def test_usual(self):
        prop = Proportions(supporters=0.5, opponents=0.2, at_grade=0.3)
        assert usual_score(prop) == pytest.approx(1.0)

    def test_usual_falls_back_when_nothing_at_grade(self):
        prop = Proportions(supporters=0.6, opponents=0.4, at_grade=0.0)
        assert usual_score(prop) == pytest.approx(0.2)

    def test_central_no_opponents_is_infinite(self):
        prop = Proportions(supporters=0.25, opponents=0.0, at_grade=0.75)
        assert central_score(prop) == math.inf

    def test_central_neutral(self):
        assert central_score(Proportions(at_grade=1.0)) == NEUTRAL_CENTRAL

    def test_central_no_supporters(self):
        assert central_score(Proportions(opponents=0.4, at_grade=0.6)) == 0.0

    def test_central_ratio(self):
        prop = Proportions(supporters=0.3, opponents=0.2, at_grade=0.5)
        assert central_score(prop) == pytest.approx(1.5)


class TestNearlyEqual:
    def test_float_noise(self):
        assert nearly_equal(0.1 + 0.2, 0.3)

    def test_real_difference(self):
        assert not nearly_equal(1.0, 1.000001)

    def test_infinities(self):
        assert nearly_equal(math.inf, math.inf)
        assert not nearly_equal(math.inf, 1e308)
        assert not nearly_equal(math.inf, -math.inf)


# ── Formatting ────────────────────────────────────────────────────


class TestFormatting:
    def test_format_score(self):
        assert format_score(math.inf) == "∞"
        assert format_score(-math.inf) == "-∞"
        assert format_score(1 / 3) == "0.33"

    def test_explain_score(self):
        assert explain_score(0.4) == "Supporters outweigh opponents"
        assert explain_score(-0.1) == "Opponents outweigh supporters"
        assert explain_score(0.0) == "Balanced support"

    def test_display_summary_without_percentage(self):
        assert display_summary("Good", 0.0) == "Good"

    def test_signature_empty(self):
        assert comparison_signature([]) == "EMPTY"
