"""Proportion-ratio tie-break scores and float tolerance.

All three scores read the same quantities around a shared majority grade:
p (supporters, strictly better), q (opponents, strictly worse) and
r (ballots exactly at the grade). Higher is better for every score.
"""

from __future__ import annotations

import math

from mjudge.schemas.analysis import JudgmentScores, Proportions
from mjudge.schemas.engine import DEFAULT_TOLERANCE

# Central score when there are neither supporters nor opponents
NEUTRAL_CENTRAL = 1.0


def nearly_equal(a: float, b: float, tolerance: float = DEFAULT_TOLERANCE) -> bool:
    """Equality within a relative and absolute tolerance; infinities compare exactly."""
    if a == b:
        return True
    if math.isinf(a) or math.isinf(b):
        return False
    return math.isclose(a, b, rel_tol=tolerance, abs_tol=tolerance)


def typical_score(prop: Proportions) -> float:
    """sT = p - q."""
    return prop.supporters - prop.opponents


def usual_score(prop: Proportions) -> float:
    """sU = (p - q) / r, falling back to p - q when r is 0."""
    if prop.at_grade == 0:
        return typical_score(prop)
    return (prop.supporters - prop.opponents) / prop.at_grade


def central_score(prop: Proportions) -> float:
    """sC = p / q.

    No opponents gives +inf when there are supporters and the neutral
    value otherwise; no supporters (with opponents) gives 0.
    """
    p, q = prop.supporters, prop.opponents
    if q == 0:
        return math.inf if p > 0 else NEUTRAL_CENTRAL
    if p == 0:
        return 0.0
    return p / q


def all_scores(prop: Proportions) -> JudgmentScores:
    return JudgmentScores(
        typical=typical_score(prop),
        usual=usual_score(prop),
        central=central_score(prop),
    )
