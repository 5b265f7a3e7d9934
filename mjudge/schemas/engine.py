"""Engine configuration schemas.

Defines the tie-break strategy keys, the grouped-resolution modes used by
the ranker, and the EngineConfig model loaded from defaults.toml.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, Field

DEFAULT_TOLERANCE = 1e-10


class TieBreakKey(StrEnum):
    """Registered tie-break strategies.

    Every strategy first compares majority grades; the key selects what
    happens when two options share the same majority grade.
    """

    LEXICOGRAPHIC = "lexicographic"
    MAJORITY_GAUGE = "majority-gauge"
    TYPICAL = "typical"
    USUAL = "usual"
    CENTRAL = "central"
    BALLOT_REMOVAL = "ballot-removal"
    MEDIAN_REMOVAL = "median-removal"


class GroupResolution(StrEnum):
    """How the ranker splits a group of options sharing a majority grade.

    UNSATISFIED_GROUPS uses the strategy for pairs and the supporter/opponent
    maximum rule for three or more options. PAIRWISE uses the strategy for
    every group size and keeps the members no other member beats.
    """

    UNSATISFIED_GROUPS = "unsatisfied_groups"
    PAIRWISE = "pairwise"


class EngineConfig(BaseModel):
    """Top-level configuration for a ranking run.

    Loaded from defaults.toml. The surrounding application decides which
    strategy is active and passes it explicitly; nothing here is global.
    """

    default_strategy: TieBreakKey = Field(
        default=TieBreakKey.USUAL, description="Strategy used when none is requested"
    )
    scale: str = Field(default="standard", description="Grade scale preset name")
    tolerance: float = Field(
        default=DEFAULT_TOLERANCE,
        ge=0.0,
        le=1e-6,
        description="Relative/absolute tolerance for score and strength equality",
    )
    group_resolution: GroupResolution = Field(
        default=GroupResolution.UNSATISFIED_GROUPS,
        description="How groups sharing a majority grade are resolved",
    )
    max_pass_factor: int = Field(
        default=2, ge=1, le=10,
        description="Ranking passes allowed per option before the fallback kicks in",
    )
