"""Display helpers for analyses and scores."""

from __future__ import annotations

import math
from collections.abc import Iterable

from mjudge.schemas.analysis import MJIteration

NO_VOTES = "No votes"
EMPTY_SIGNATURE = "EMPTY"


def format_score(score: float) -> str:
    """Two-decimal score, with infinities shown as symbols."""
    if math.isinf(score):
        return "∞" if score > 0 else "-∞"
    return f"{score:.2f}"


def explain_score(score: float) -> str:
    """One-line reading of a proportion-ratio score."""
    if score > 0:
        return "Supporters outweigh opponents"
    if score < 0:
        return "Opponents outweigh supporters"
    return "Balanced support"


def display_summary(grade: str, percentage: float) -> str:
    """``VeryGood (60.0%)``, or just the grade when the percentage is 0."""
    if percentage > 0:
        return f"{grade} ({percentage:.1f}%)"
    return grade


def comparison_signature(iterations: Iterable[MJIteration]) -> str:
    """``VeryGood:60.0|Good:100.0``; EMPTY when there are no iterations."""
    parts = [f"{it.grade}:{it.percentage:.1f}" for it in iterations]
    return "|".join(parts) if parts else EMPTY_SIGNATURE
