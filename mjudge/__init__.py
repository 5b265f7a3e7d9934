"""mjudge — Majority Judgment ranking and tie-break engine."""

__version__ = "0.1.0"

from mjudge.judgment import (
    RankingEngine,
    analyze,
    available_strategies,
    build_engine,
    get_strategy,
    rank,
)
from mjudge.schemas import Aggregate, Comparison, GradeScale, MJAnalysis, RankedOption

__all__ = [
    "Aggregate",
    "Comparison",
    "GradeScale",
    "MJAnalysis",
    "RankedOption",
    "RankingEngine",
    "analyze",
    "available_strategies",
    "build_engine",
    "get_strategy",
    "rank",
]
