"""Majority grade and iterative truncation analysis.

Given one aggregate, finds the best grade that at least half of the ballots
reach, then repeatedly removes the ballots at or above that grade and looks
for the next majority among what is left. The resulting chain is what the
lexicographic tie-break walks, and what the presentation layer shows to
explain a result.

Percentages are computed as ``count * 100 / remaining`` so that integer
ratios like 3/5 land exactly on 60.0. The 50% threshold is compared without
tolerance; score and strength comparisons elsewhere use one.
"""

from __future__ import annotations

from mjudge.judgment.formatting import (
    EMPTY_SIGNATURE,
    NO_VOTES,
    comparison_signature,
    display_summary,
)
from mjudge.judgment.scoring import all_scores
from mjudge.schemas.analysis import MJAnalysis, MJIteration, Proportions
from mjudge.schemas.grades import Aggregate

MAJORITY_THRESHOLD = 50.0


def truncation_chain(aggregate: Aggregate, limit: int | None = None) -> list[MJIteration]:
    """Compute the truncation iterations of an aggregate.

    Args:
        aggregate: Counts to analyze.
        limit: Stop after this many iterations (None = run to exhaustion).

    Returns:
        Iterations in order; empty when the aggregate has no ballots.
    """
    grades = aggregate.scale.grades
    counts = list(aggregate.counts)
    remaining = aggregate.total
    iterations: list[MJIteration] = []

    while remaining > 0:
        if limit is not None and len(iterations) >= limit:
            break

        chosen: int | None = None
        percentage = 0.0
        cumulative = 0
        for idx, count in enumerate(counts):
            cumulative += count
            percentage = cumulative * 100 / remaining
            if percentage >= MAJORITY_THRESHOLD:
                chosen = idx
                break

        if chosen is None:
            break

        iterations.append(
            MJIteration(
                grade=grades[chosen],
                percentage=percentage,
                strength=max(0.0, percentage - MAJORITY_THRESHOLD),
                votes_remaining=remaining,
            )
        )

        # Drop the majority grade and everything better than it
        removed = sum(counts[: chosen + 1])
        for idx in range(chosen + 1):
            counts[idx] = 0
        remaining -= removed

    return iterations


def majority_grade(aggregate: Aggregate) -> str:
    """Majority grade of an aggregate; the worst grade when it has no ballots."""
    chain = truncation_chain(aggregate, limit=1)
    return chain[0].grade if chain else aggregate.scale.worst


def proportions(aggregate: Aggregate, grade: str | None = None) -> Proportions:
    """Supporter/opponent/at-grade shares of the untruncated counts.

    Args:
        aggregate: Counts to measure.
        grade: Reference grade (defaults to the aggregate's majority grade).
    """
    total = aggregate.total
    if total == 0:
        return Proportions()

    ref = grade if grade is not None else majority_grade(aggregate)
    idx = aggregate.scale.index(ref)
    counts = aggregate.counts
    return Proportions(
        supporters=sum(counts[:idx]) / total,
        opponents=sum(counts[idx + 1:]) / total,
        at_grade=counts[idx] / total,
    )


def supporters_percentage(aggregate: Aggregate, grade: str) -> float:
    """Percentage of ballots strictly better than ``grade``."""
    total = aggregate.total
    if total == 0:
        return 0.0
    idx = aggregate.scale.index(grade)
    return sum(aggregate.counts[:idx]) * 100 / total


def opponents_percentage(aggregate: Aggregate, grade: str) -> float:
    """Percentage of ballots strictly worse than ``grade``."""
    total = aggregate.total
    if total == 0:
        return 0.0
    idx = aggregate.scale.index(grade)
    return sum(aggregate.counts[idx + 1:]) * 100 / total


def analyze(aggregate: Aggregate, *, full: bool = True) -> MJAnalysis:
    """Compute the Majority Judgment analysis of one option.

    Args:
        aggregate: Validated counts for the option.
        full: Keep the whole truncation chain. With False only the first
            iteration is computed, which is enough when no tie needs breaking.

    Returns:
        A fresh MJAnalysis. Zero ballots yield the worst grade at 0% with no
        iterations.
    """
    scale = aggregate.scale
    if aggregate.total == 0:
        return MJAnalysis(
            majority_grade=scale.worst,
            final_grade=scale.worst,
            display_summary=NO_VOTES,
            comparison_signature=EMPTY_SIGNATURE,
        )

    iterations = truncation_chain(aggregate, limit=None if full else 1)
    first = iterations[0]
    second = iterations[1] if len(iterations) > 1 else None
    last = iterations[-1]
    prop = proportions(aggregate, first.grade)

    return MJAnalysis(
        majority_grade=first.grade,
        majority_percentage=first.percentage,
        majority_strength=first.strength,
        iterations=tuple(iterations),
        second_grade=second.grade if second else None,
        second_percentage=second.percentage if second else 0.0,
        final_grade=last.grade,
        final_percentage=last.percentage,
        total=aggregate.total,
        proportions=prop,
        scores=all_scores(prop),
        display_summary=display_summary(first.grade, first.percentage),
        comparison_signature=comparison_signature(iterations),
    )
