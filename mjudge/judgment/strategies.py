"""Pluggable tie-break strategies.

Every strategy compares two aggregates on the same grade scale. Majority
grades are compared first, in scale order; only when both options share a
majority grade does a strategy apply its own distinguishing method. Each
result carries a step trace, even on a tie, so the decision can be audited.

Strategies are stateless. The ranker and callers receive them as arguments;
resolving a string key to an instance happens in the registry.
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod

from mjudge.errors import ScaleMismatchError
from mjudge.judgment.analyzer import (
    majority_grade,
    opponents_percentage,
    proportions,
    supporters_percentage,
    truncation_chain,
)
from mjudge.judgment.formatting import format_score
from mjudge.judgment.scoring import (
    central_score,
    nearly_equal,
    typical_score,
    usual_score,
)
from mjudge.schemas.analysis import Proportions
from mjudge.schemas.comparison import Comparison, ComparisonStep, StepResult, Winner
from mjudge.schemas.engine import DEFAULT_TOLERANCE, TieBreakKey
from mjudge.schemas.grades import Aggregate

logger = logging.getLogger(__name__)


def _higher_wins(a: float, b: float, tolerance: float) -> StepResult:
    if nearly_equal(a, b, tolerance):
        return StepResult.TIE
    return StepResult.A_WINS if a > b else StepResult.B_WINS


def _lower_wins(a: float, b: float, tolerance: float) -> StepResult:
    if nearly_equal(a, b, tolerance):
        return StepResult.TIE
    return StepResult.A_WINS if a < b else StepResult.B_WINS


def _grade_result(scale_cmp: int) -> StepResult:
    if scale_cmp == 0:
        return StepResult.TIE
    return StepResult.A_WINS if scale_cmp > 0 else StepResult.B_WINS


class TieBreakStrategy(ABC):
    """Contract shared by all tie-break strategies."""

    key: TieBreakKey
    label: str
    description: str

    def compare(
        self,
        a: Aggregate,
        b: Aggregate,
        *,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> Comparison:
        """Compare two aggregates.

        Args:
            a: Counts for side A.
            b: Counts for side B.
            tolerance: Equality tolerance for strengths and scores.

        Returns:
            Comparison with winner, trace and explanation.

        Raises:
            ScaleMismatchError: If the aggregates use different scales.
        """
        if a.scale != b.scale:
            raise ScaleMismatchError(
                f"Cannot compare scale '{a.scale.name}' with scale '{b.scale.name}'"
            )

        grade_a = majority_grade(a)
        grade_b = majority_grade(b)
        outcome = _grade_result(a.scale.compare(grade_a, grade_b))
        if outcome != StepResult.TIE:
            winner = outcome.winner
            better, worse = (grade_a, grade_b) if winner == Winner.A else (grade_b, grade_a)
            chain_a = truncation_chain(a, limit=1)
            chain_b = truncation_chain(b, limit=1)
            step = ComparisonStep(
                criterion="majority grade",
                grade_a=grade_a,
                grade_b=grade_b,
                percentage_a=chain_a[0].percentage if chain_a else 0.0,
                percentage_b=chain_b[0].percentage if chain_b else 0.0,
                strength_a=chain_a[0].strength if chain_a else 0.0,
                strength_b=chain_b[0].strength if chain_b else 0.0,
                result=outcome,
            )
            return Comparison(
                winner=winner,
                strategy=self.key.value,
                steps=[step],
                final_result=f"{winner} wins on majority grade: {better} vs {worse}",
            )

        result = self._break_tie(a, b, grade_a, tolerance)
        logger.debug(
            "%s tie-break on %s: %s (%s)",
            self.key.value, grade_a, result.winner.value, result.final_result,
        )
        return result

    @abstractmethod
    def _break_tie(
        self, a: Aggregate, b: Aggregate, grade: str, tolerance: float,
    ) -> Comparison:
        """Decide between two aggregates sharing majority grade ``grade``."""


# ── Lexicographic iteration ──────────────────────────────────────


class LexicographicStrategy(TieBreakStrategy):
    """Walk both truncation chains in lockstep.

    The first iteration where grades differ decides; on equal grades the
    higher strength decides. Chains exhausted identically are a tie.
    """

    key = TieBreakKey.LEXICOGRAPHIC
    label = "MJ: Iterative truncation"
    description = (
        "Lexicographic comparison of majority iterations; at each step remove "
        "all ballots at or above the current majority grade."
    )

    def _break_tie(self, a, b, grade, tolerance):
        scale = a.scale
        steps: list[ComparisonStep] = []

        for n, (it_a, it_b) in enumerate(zip(truncation_chain(a), truncation_chain(b)), start=1):
            outcome = _grade_result(scale.compare(it_a.grade, it_b.grade))
            criterion = "grade"
            if outcome == StepResult.TIE:
                outcome = _higher_wins(it_a.strength, it_b.strength, tolerance)
                criterion = "strength"
            steps.append(
                ComparisonStep(
                    criterion=f"{criterion} at iteration {n}",
                    grade_a=it_a.grade,
                    grade_b=it_b.grade,
                    percentage_a=it_a.percentage,
                    percentage_b=it_b.percentage,
                    strength_a=it_a.strength,
                    strength_b=it_b.strength,
                    result=outcome,
                )
            )
            if outcome == StepResult.TIE:
                continue

            winner = outcome.winner
            if criterion == "grade":
                detail = f"{it_a.grade} vs {it_b.grade}"
            else:
                detail = f"strength {it_a.strength:.1f}% vs {it_b.strength:.1f}%"
            return Comparison(
                winner=winner,
                strategy=self.key.value,
                steps=steps,
                final_result=f"{winner} wins at iteration {n} on {detail}",
            )

        return Comparison(
            winner=Winner.TIE,
            strategy=self.key.value,
            steps=steps,
            final_result="Perfect tie - ex aequo",
        )


# ── Majority gauge ───────────────────────────────────────────────


class MajorityGaugeStrategy(TieBreakStrategy):
    """Supporters first, then opponents, on the untruncated distribution."""

    key = TieBreakKey.MAJORITY_GAUGE
    label = "MJ: Majority gauge (supporters/opponents)"
    description = (
        "Compare supporters strictly above the majority grade (higher is "
        "better), then opponents strictly below (lower is better)."
    )

    def _break_tie(self, a, b, grade, tolerance):
        sup_a = supporters_percentage(a, grade)
        sup_b = supporters_percentage(b, grade)
        outcome = _higher_wins(sup_a, sup_b, tolerance)
        steps = [
            ComparisonStep(
                criterion="supporters",
                grade_a=grade,
                grade_b=grade,
                percentage_a=sup_a,
                percentage_b=sup_b,
                strength_a=sup_a,
                strength_b=sup_b,
                result=outcome,
            )
        ]
        if outcome != StepResult.TIE:
            return Comparison(
                winner=outcome.winner,
                strategy=self.key.value,
                steps=steps,
                final_result=(
                    f"{outcome.winner} wins on supporters above {grade} "
                    f"({sup_a:.1f}% vs {sup_b:.1f}%)"
                ),
            )

        opp_a = opponents_percentage(a, grade)
        opp_b = opponents_percentage(b, grade)
        outcome = _lower_wins(opp_a, opp_b, tolerance)
        steps.append(
            ComparisonStep(
                criterion="opponents",
                grade_a=grade,
                grade_b=grade,
                percentage_a=opp_a,
                percentage_b=opp_b,
                strength_a=-opp_a,
                strength_b=-opp_b,
                result=outcome,
            )
        )
        if outcome != StepResult.TIE:
            return Comparison(
                winner=outcome.winner,
                strategy=self.key.value,
                steps=steps,
                final_result=(
                    f"{outcome.winner} wins on fewer opponents below {grade} "
                    f"({opp_a:.1f}% vs {opp_b:.1f}%)"
                ),
            )

        return Comparison(
            winner=Winner.TIE,
            strategy=self.key.value,
            steps=steps,
            final_result=f"Perfect tie on {grade} - majority gauge",
        )


# ── Proportion-ratio scores ──────────────────────────────────────


class ProportionScoreStrategy(TieBreakStrategy):
    """Score each side from its p/q/r proportions; higher score wins."""

    formula: str

    @abstractmethod
    def score(self, prop: Proportions) -> float:
        """Score of one side around the shared majority grade."""

    def _break_tie(self, a, b, grade, tolerance):
        score_a = self.score(proportions(a, grade))
        score_b = self.score(proportions(b, grade))
        outcome = _higher_wins(score_a, score_b, tolerance)
        chain_a = truncation_chain(a, limit=1)
        chain_b = truncation_chain(b, limit=1)
        step = ComparisonStep(
            criterion=f"{self.key.value} score ({self.formula})",
            grade_a=grade,
            grade_b=grade,
            percentage_a=chain_a[0].percentage if chain_a else 0.0,
            percentage_b=chain_b[0].percentage if chain_b else 0.0,
            strength_a=score_a,
            strength_b=score_b,
            result=outcome,
        )

        if outcome == StepResult.TIE:
            final = (
                f"Perfect tie on {grade} with identical {self.key.value} scores: "
                f"{_fmt(score_a)}"
            )
        else:
            final = (
                f"{outcome.winner} wins on {self.key.value} score: "
                f"{_fmt(score_a)} vs {_fmt(score_b)} (majority: {grade})"
            )
        return Comparison(
            winner=outcome.winner,
            strategy=self.key.value,
            steps=[step],
            final_result=final,
            score_a=score_a,
            score_b=score_b,
        )


def _fmt(score: float) -> str:
    return format_score(score) if math.isinf(score) else f"{score:.4f}"


class TypicalStrategy(ProportionScoreStrategy):
    key = TieBreakKey.TYPICAL
    label = "Typical judgment"
    formula = "p - q"
    description = "Supporters minus opponents around the majority grade."

    def score(self, prop):
        return typical_score(prop)


class UsualStrategy(ProportionScoreStrategy):
    key = TieBreakKey.USUAL
    label = "Usual judgment"
    formula = "(p - q) / r"
    description = (
        "Supporters minus opponents, normalised by the share at the majority "
        "grade; falls back to p - q when that share is zero."
    )

    def score(self, prop):
        return usual_score(prop)


class CentralStrategy(ProportionScoreStrategy):
    key = TieBreakKey.CENTRAL
    label = "Central judgment"
    formula = "p / q"
    description = (
        "Ratio of supporters to opponents; no opponents with some supporters "
        "scores infinity."
    )

    def score(self, prop):
        return central_score(prop)


# ── Ballot removal ───────────────────────────────────────────────


class BallotRemovalStrategy(TieBreakStrategy):
    """Remove one ballot at the majority grade from each side until the tie breaks.

    Works on aggregate counts only: each round compares majority grade, then
    supporters, then opponents; while all three are equal both sides lose one
    ballot at their majority grade. The side left with ballots when the other
    runs out wins; running out together is a tie.
    """

    key = TieBreakKey.BALLOT_REMOVAL
    label = "MJ: Ballot-at-majority removal"
    description = (
        "While tied, remove one ballot at the majority grade from each option "
        "and recompute, until the tie breaks or ballots run out."
    )

    def _break_tie(self, a, b, grade, tolerance):
        scale = a.scale
        steps: list[ComparisonStep] = []
        cur_a, cur_b = a, b

        # Each round removes at least one ballot from each non-empty side
        for round_no in range(1, a.total + b.total + 2):
            if cur_a.total == 0 or cur_b.total == 0:
                if cur_a.total == cur_b.total:
                    return Comparison(
                        winner=Winner.TIE,
                        strategy=self.key.value,
                        steps=steps,
                        final_result=(
                            f"Tie after {round_no - 1} removal rounds - "
                            "both options exhausted"
                        ),
                    )
                winner = Winner.A if cur_a.total > 0 else Winner.B
                loser = Winner.B if winner == Winner.A else Winner.A
                steps.append(
                    ComparisonStep(
                        criterion=f"exhaustion at round {round_no}",
                        grade_a=majority_grade(cur_a),
                        grade_b=majority_grade(cur_b),
                        percentage_a=100.0 if cur_a.total else 0.0,
                        percentage_b=100.0 if cur_b.total else 0.0,
                        strength_a=float(cur_a.total),
                        strength_b=float(cur_b.total),
                        result=StepResult.A_WINS if winner == Winner.A else StepResult.B_WINS,
                    )
                )
                return Comparison(
                    winner=winner,
                    strategy=self.key.value,
                    steps=steps,
                    final_result=(
                        f"{winner} wins after {round_no - 1} removal rounds - "
                        f"{loser} exhausted all ballots"
                    ),
                )

            grade_a = majority_grade(cur_a)
            grade_b = majority_grade(cur_b)
            outcome = _grade_result(scale.compare(grade_a, grade_b))
            if outcome != StepResult.TIE:
                steps.append(
                    ComparisonStep(
                        criterion=f"majority grade at round {round_no}",
                        grade_a=grade_a,
                        grade_b=grade_b,
                        result=outcome,
                    )
                )
                return Comparison(
                    winner=outcome.winner,
                    strategy=self.key.value,
                    steps=steps,
                    final_result=(
                        f"{outcome.winner} wins at round {round_no} on majority "
                        f"grade: {grade_a} vs {grade_b}"
                    ),
                )

            sup_a = supporters_percentage(cur_a, grade_a)
            sup_b = supporters_percentage(cur_b, grade_b)
            outcome = _higher_wins(sup_a, sup_b, tolerance)
            if outcome != StepResult.TIE:
                steps.append(
                    ComparisonStep(
                        criterion=f"supporters at round {round_no}",
                        grade_a=grade_a,
                        grade_b=grade_b,
                        percentage_a=sup_a,
                        percentage_b=sup_b,
                        strength_a=sup_a,
                        strength_b=sup_b,
                        result=outcome,
                    )
                )
                return Comparison(
                    winner=outcome.winner,
                    strategy=self.key.value,
                    steps=steps,
                    final_result=(
                        f"{outcome.winner} wins at round {round_no} on supporters "
                        f"above majority ({sup_a:.1f}% vs {sup_b:.1f}%)"
                    ),
                )

            opp_a = opponents_percentage(cur_a, grade_a)
            opp_b = opponents_percentage(cur_b, grade_b)
            outcome = _lower_wins(opp_a, opp_b, tolerance)
            steps.append(
                ComparisonStep(
                    criterion=(
                        f"opponents at round {round_no}"
                        if outcome != StepResult.TIE
                        else f"removal round {round_no}"
                    ),
                    grade_a=grade_a,
                    grade_b=grade_b,
                    percentage_a=opp_a,
                    percentage_b=opp_b,
                    strength_a=-opp_a,
                    strength_b=-opp_b,
                    result=outcome,
                )
            )
            if outcome != StepResult.TIE:
                return Comparison(
                    winner=outcome.winner,
                    strategy=self.key.value,
                    steps=steps,
                    final_result=(
                        f"{outcome.winner} wins at round {round_no} on fewer "
                        f"opponents below majority ({opp_a:.1f}% vs {opp_b:.1f}%)"
                    ),
                )

            cur_a = cur_a.decremented(grade_a)
            cur_b = cur_b.decremented(grade_b)

        logger.warning(
            "Ballot removal did not settle within %d rounds", a.total + b.total + 1,
        )
        return Comparison(
            winner=Winner.TIE,
            strategy=self.key.value,
            steps=steps,
            final_result="Tie declared after the maximum number of removal rounds",
        )


# ── Median removal ───────────────────────────────────────────────


def _majority_point(aggregate: Aggregate) -> tuple[float, float]:
    chain = truncation_chain(aggregate, limit=1)
    return (chain[0].percentage, chain[0].strength) if chain else (0.0, 0.0)


class MedianRemovalStrategy(TieBreakStrategy):
    """Majority-grade-only variant of ballot removal.

    Each round compares the current majority grades alone. While they match,
    both sides lose one ballot at their majority grade. A side that runs out
    of ballots first loses; running out together is a tie.
    """

    key = TieBreakKey.MEDIAN_REMOVAL
    label = "MJ: Median removal (variant)"
    description = (
        "While majority grades match, remove one ballot at each option's "
        "majority grade and compare majority grades again."
    )

    def _break_tie(self, a, b, grade, tolerance):
        scale = a.scale
        steps: list[ComparisonStep] = []
        cur_a, cur_b = a, b
        max_rounds = a.total + b.total + 1

        for round_no in range(1, max_rounds + 1):
            grade_a = majority_grade(cur_a)
            grade_b = majority_grade(cur_b)
            outcome = _grade_result(scale.compare(grade_a, grade_b))
            pct_a, strength_a = _majority_point(cur_a)
            pct_b, strength_b = _majority_point(cur_b)
            steps.append(
                ComparisonStep(
                    criterion=f"majority grade at round {round_no}",
                    grade_a=grade_a,
                    grade_b=grade_b,
                    percentage_a=pct_a,
                    percentage_b=pct_b,
                    strength_a=strength_a,
                    strength_b=strength_b,
                    result=outcome,
                )
            )
            if outcome != StepResult.TIE:
                return Comparison(
                    winner=outcome.winner,
                    strategy=self.key.value,
                    steps=steps,
                    final_result=(
                        f"{outcome.winner} wins at round {round_no} on majority "
                        f"grade: {grade_a} vs {grade_b}"
                    ),
                )
            if cur_a.total == 0 and cur_b.total == 0:
                return Comparison(
                    winner=Winner.TIE,
                    strategy=self.key.value,
                    steps=steps,
                    final_result=f"Perfect tie after {round_no} rounds - all ballots exhausted",
                )

            cur_a = cur_a.decremented(grade_a)
            cur_b = cur_b.decremented(grade_b)

            if cur_a.total == 0 and cur_b.total > 0:
                return Comparison(
                    winner=Winner.B,
                    strategy=self.key.value,
                    steps=steps,
                    final_result=f"B wins after {round_no} rounds - A exhausted all ballots",
                )
            if cur_b.total == 0 and cur_a.total > 0:
                return Comparison(
                    winner=Winner.A,
                    strategy=self.key.value,
                    steps=steps,
                    final_result=f"A wins after {round_no} rounds - B exhausted all ballots",
                )

        logger.warning("Median removal did not settle within %d rounds", max_rounds)
        return Comparison(
            winner=Winner.TIE,
            strategy=self.key.value,
            steps=steps,
            final_result="Tie declared after the maximum number of removal rounds",
        )
