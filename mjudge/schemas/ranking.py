"""Ranking output schemas.

RankedOption is the shape handed to the presentation layer: one entry per
option, ordered by rank, with the full analysis attached for explanation.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from mjudge.schemas.analysis import MJAnalysis


class RankedOption(BaseModel):
    """One option's place in a ranking."""

    option_id: str = Field(description="Caller-supplied option identifier")
    rank: int = Field(ge=1, description="Competition rank, shared by tied options")
    is_winner: bool = Field(description="Whether the option ranks first")
    is_ex_aequo: bool = Field(description="Whether another option shares this rank")
    majority_grade: str = Field(description="Majority grade of the option")
    majority_percentage: float = Field(
        ge=0.0, le=100.0, description="At-least percentage of the majority grade"
    )
    display_summary: str = Field(description="Short human-readable summary")
    tied_with_option_ids: list[str] = Field(
        default_factory=list, description="Other options sharing this rank"
    )
    analysis: MJAnalysis = Field(description="Full analysis behind this entry")
