"""Pairwise comparison schemas.

A Comparison is the outcome of one tie-break strategy applied to two
aggregates: who wins, the step-by-step trace that explains it, and a
human-readable summary. Comparisons are produced per call and never stored.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field


class Winner(StrEnum):
    """Outcome of a pairwise comparison."""

    A = "A"
    B = "B"
    TIE = "TIE"


class StepResult(StrEnum):
    """Outcome of a single trace step."""

    A_WINS = "A_WINS"
    B_WINS = "B_WINS"
    TIE = "TIE"

    @property
    def winner(self) -> Winner:
        return {
            StepResult.A_WINS: Winner.A,
            StepResult.B_WINS: Winner.B,
            StepResult.TIE: Winner.TIE,
        }[self]


class ComparisonStep(BaseModel):
    """One annotated step of a comparison trace.

    ``percentage_*`` and ``strength_*`` hold whatever per-side quantity the
    criterion compared: at-least percentages and strengths for truncation
    steps, supporter/opponent percentages for the majority gauge, majority
    percentage and score for the proportion-ratio strategies.
    """

    criterion: str = Field(description="What was compared at this step")
    grade_a: str = Field(description="Reference grade on side A")
    grade_b: str = Field(description="Reference grade on side B")
    percentage_a: float = Field(default=0.0, description="Percentage compared for A")
    percentage_b: float = Field(default=0.0, description="Percentage compared for B")
    strength_a: float = Field(default=0.0, description="Strength or score for A")
    strength_b: float = Field(default=0.0, description="Strength or score for B")
    result: StepResult = Field(description="Which side this step favoured")


class Comparison(BaseModel):
    """Result of comparing two aggregates with one tie-break strategy."""

    winner: Winner = Field(description="A, B, or TIE")
    strategy: str = Field(description="Key of the strategy that produced this result")
    steps: list[ComparisonStep] = Field(
        default_factory=list, description="Trace explaining the decision"
    )
    final_result: str = Field(description="Human-readable explanation")
    score_a: float | None = Field(
        default=None, description="Final score of A for score-based strategies"
    )
    score_b: float | None = Field(
        default=None, description="Final score of B for score-based strategies"
    )

    @property
    def is_tie(self) -> bool:
        return self.winner == Winner.TIE
