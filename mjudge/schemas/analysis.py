"""Majority Judgment analysis schemas.

Defines the per-iteration truncation record (MJIteration), the
supporter/opponent proportions around a majority grade (Proportions), the
proportion-based tie-break scores (JudgmentScores), and the full per-option
analysis (MJAnalysis) produced by the analyzer and enriched by the ranker.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class MJIteration(BaseModel):
    """One step of the iterative truncation chain."""

    model_config = ConfigDict(frozen=True)

    grade: str = Field(description="Majority grade found at this iteration")
    percentage: float = Field(
        ge=0.0, le=100.0, description="Share of remaining ballots at least this grade"
    )
    strength: float = Field(
        ge=0.0, le=50.0, description="How far the percentage sits above 50%"
    )
    votes_remaining: int = Field(
        ge=0, description="Ballots still counted when this iteration started"
    )


class Proportions(BaseModel):
    """Ballot shares relative to a reference (majority) grade.

    All three values are fractions of the ORIGINAL, untruncated total and
    sum to 1.0 when the option has at least one ballot.
    """

    model_config = ConfigDict(frozen=True)

    supporters: float = Field(
        default=0.0, ge=0.0, le=1.0, description="p: share strictly better than the grade"
    )
    opponents: float = Field(
        default=0.0, ge=0.0, le=1.0, description="q: share strictly worse than the grade"
    )
    at_grade: float = Field(
        default=0.0, ge=0.0, le=1.0, description="r: share exactly at the grade"
    )


class JudgmentScores(BaseModel):
    """Proportion-ratio tie-break scores for one option."""

    model_config = ConfigDict(frozen=True)

    typical: float = Field(default=0.0, description="p - q")
    usual: float = Field(default=0.0, description="(p - q) / r, or p - q when r is 0")
    central: float = Field(default=0.0, description="p / q with infinite/neutral fallbacks")


class MJAnalysis(BaseModel):
    """Complete Majority Judgment analysis of one option.

    Produced fresh on every call. The ranker fills in rank, winner and
    ex-aequo information on a copy; nothing mutates an analysis in place.
    """

    model_config = ConfigDict(frozen=True)

    majority_grade: str = Field(description="Best grade supported by at least 50% of ballots")
    majority_percentage: float = Field(
        default=0.0, ge=0.0, le=100.0, description="At-least percentage of the majority grade"
    )
    majority_strength: float = Field(
        default=0.0, ge=0.0, le=50.0, description="majority_percentage - 50, floored at 0"
    )
    iterations: tuple[MJIteration, ...] = Field(
        default=(), description="Truncation chain, first entry is the majority"
    )
    second_grade: str | None = Field(
        default=None, description="Grade of the second iteration, if any"
    )
    second_percentage: float = Field(
        default=0.0, ge=0.0, le=100.0, description="Percentage of the second iteration"
    )
    final_grade: str = Field(description="Grade of the last computed iteration")
    final_percentage: float = Field(
        default=0.0, ge=0.0, le=100.0, description="Percentage of the last computed iteration"
    )
    total: int = Field(default=0, ge=0, description="Ballots counted for this option")
    proportions: Proportions = Field(
        default_factory=Proportions, description="p/q/r around the majority grade"
    )
    scores: JudgmentScores = Field(
        default_factory=JudgmentScores, description="Proportion-ratio scores"
    )
    rank: int = Field(default=1, ge=1, description="Assigned rank (set by the ranker)")
    is_winner: bool = Field(default=False, description="Whether the option ranks first")
    is_ex_aequo: bool = Field(
        default=False, description="Whether another option shares this rank"
    )
    tied_with: tuple[str, ...] = Field(
        default=(), description="Ids of the options sharing this rank"
    )
    display_summary: str = Field(default="", description="Short human-readable summary")
    comparison_signature: str = Field(
        default="", description="Stable signature of the truncation chain"
    )

    @property
    def is_empty(self) -> bool:
        return self.total == 0
