"""Competition ranking of options by Majority Judgment.

Options are ranked best majority grade first. When several options share
the best remaining majority grade, the group is split: pairs go through the
tie-break strategy, larger groups through the unsatisfied-groups rule (or
through the strategy as well, in pairwise mode). Resolved winners take the
current rank; the next rank skips by the number of options just placed.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from mjudge.errors import MalformedAggregateError, ScaleMismatchError
from mjudge.judgment.analyzer import analyze, opponents_percentage, supporters_percentage
from mjudge.judgment.scoring import nearly_equal
from mjudge.judgment.strategies import TieBreakStrategy
from mjudge.schemas.analysis import MJAnalysis
from mjudge.schemas.comparison import Comparison, Winner
from mjudge.schemas.engine import DEFAULT_TOLERANCE, GroupResolution
from mjudge.schemas.grades import Aggregate
from mjudge.schemas.ranking import RankedOption

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class _Candidate:
    """Working record for one option while ranks are being assigned."""

    position: int
    option_id: str
    aggregate: Aggregate
    analysis: MJAnalysis
    rank: int | None = None


class RankingEngine:
    """Ranks options with one tie-break strategy.

    Stateless between calls: every ``rank`` analyses its input afresh and
    returns new objects, so one engine can be shared across threads.
    """

    def __init__(
        self,
        strategy: TieBreakStrategy,
        *,
        tolerance: float = DEFAULT_TOLERANCE,
        group_resolution: GroupResolution = GroupResolution.UNSATISFIED_GROUPS,
        max_pass_factor: int = 2,
    ) -> None:
        if max_pass_factor < 1:
            raise ValueError(f"max_pass_factor must be at least 1, got {max_pass_factor}")
        self._strategy = strategy
        self._tolerance = tolerance
        self._group_resolution = group_resolution
        self._max_pass_factor = max_pass_factor

    @property
    def strategy(self) -> TieBreakStrategy:
        return self._strategy

    @property
    def group_resolution(self) -> GroupResolution:
        return self._group_resolution

    def compare(self, a: Aggregate, b: Aggregate) -> Comparison:
        """Pairwise comparison with this engine's strategy and tolerance."""
        return self._strategy.compare(a, b, tolerance=self._tolerance)

    def rank(self, entries: Sequence[tuple[str, Aggregate]]) -> list[RankedOption]:
        """Rank options by majority grade, breaking ties with the strategy.

        Args:
            entries: ``(option_id, aggregate)`` pairs, all on the same scale.

        Returns:
            One RankedOption per entry, ordered by rank; options sharing a
            rank keep their input order.

        Raises:
            MalformedAggregateError: If an option id appears twice.
            ScaleMismatchError: If the aggregates use different scales.
        """
        candidates = self._prepare(entries)
        if not candidates:
            return []

        scale = candidates[0].aggregate.scale
        remaining = list(candidates)
        current_rank = 1
        max_passes = self._max_pass_factor * len(candidates)
        passes = 0

        while remaining:
            if passes >= max_passes:
                logger.warning(
                    "Ranking stopped after %d passes; %d options share rank %d",
                    passes, len(remaining), current_rank,
                )
                for cand in remaining:
                    cand.rank = current_rank
                break
            passes += 1

            best = min(
                (c.analysis.majority_grade for c in remaining),
                key=scale.index,
            )
            group = [c for c in remaining if c.analysis.majority_grade == best]
            winners = self._resolve_group(group)

            for cand in winners:
                cand.rank = current_rank
            logger.debug(
                "Rank %d on %s: %s (group of %d)",
                current_rank, best, [c.option_id for c in winners], len(group),
            )
            remaining = [c for c in remaining if c.rank is None]
            current_rank += len(winners)

        ranked = self._finalize(candidates)
        logger.info(
            "Ranked %d options with %s; winners: %s",
            len(ranked),
            self._strategy.key.value,
            [r.option_id for r in ranked if r.is_winner],
        )
        return ranked

    # ── Internals ───────────────────────────────────────────────

    def _prepare(self, entries: Sequence[tuple[str, Aggregate]]) -> list[_Candidate]:
        seen: set[str] = set()
        candidates: list[_Candidate] = []
        scale = None
        for position, (option_id, aggregate) in enumerate(entries):
            if option_id in seen:
                raise MalformedAggregateError(f"Duplicate option id: '{option_id}'")
            seen.add(option_id)
            if scale is None:
                scale = aggregate.scale
            elif aggregate.scale != scale:
                raise ScaleMismatchError(
                    f"Option '{option_id}' uses scale '{aggregate.scale.name}', "
                    f"expected '{scale.name}'"
                )
            candidates.append(
                _Candidate(
                    position=position,
                    option_id=option_id,
                    aggregate=aggregate,
                    analysis=analyze(aggregate),
                )
            )
        return candidates

    def _resolve_group(self, group: list[_Candidate]) -> list[_Candidate]:
        if len(group) == 1:
            return group
        if len(group) == 2 or self._group_resolution == GroupResolution.PAIRWISE:
            return self._undefeated(group)
        return self._unsatisfied_groups(group)

    def _undefeated(self, group: list[_Candidate]) -> list[_Candidate]:
        """Members that no other member beats under the strategy."""
        winners = []
        for cand in group:
            beaten = any(
                self.compare(cand.aggregate, other.aggregate).winner == Winner.B
                for other in group
                if other is not cand
            )
            if not beaten:
                winners.append(cand)
        return winners or group

    def _unsatisfied_groups(self, group: list[_Candidate]) -> list[_Candidate]:
        """Split a group on the largest supporter or opponent share.

        Every member contributes its supporter % and opponent % relative to
        the shared majority grade. If the overall maximum is an opponent
        share, the members holding it drop out of this rank. If it is a
        single member's supporter share, that member takes the rank alone.
        Anything else leaves the whole group tied.
        """
        grade = group[0].analysis.majority_grade
        shares = [
            (
                cand,
                supporters_percentage(cand.aggregate, grade),
                opponents_percentage(cand.aggregate, grade),
            )
            for cand in group
        ]
        maximum = max(max(sup, opp) for _, sup, opp in shares)

        opposed = [c for c, _, opp in shares if nearly_equal(opp, maximum, self._tolerance)]
        supported = [c for c, sup, _ in shares if nearly_equal(sup, maximum, self._tolerance)]

        if opposed:
            kept = [c for c in group if c not in opposed]
            if kept:
                logger.debug(
                    "Unsatisfied groups on %s: eliminated %s (opponents %.1f%%)",
                    grade, [c.option_id for c in opposed], maximum,
                )
                return kept
            return group

        if len(supported) == 1:
            return supported
        return group

    def _finalize(self, candidates: list[_Candidate]) -> list[RankedOption]:
        by_rank: dict[int, list[str]] = {}
        for cand in candidates:
            by_rank.setdefault(cand.rank, []).append(cand.option_id)

        ranked: list[RankedOption] = []
        for cand in sorted(candidates, key=lambda c: (c.rank, c.position)):
            peers = [oid for oid in by_rank[cand.rank] if oid != cand.option_id]
            analysis = cand.analysis.model_copy(
                update={
                    "rank": cand.rank,
                    "is_winner": cand.rank == 1,
                    "is_ex_aequo": bool(peers),
                    "tied_with": tuple(peers),
                }
            )
            ranked.append(
                RankedOption(
                    option_id=cand.option_id,
                    rank=cand.rank,
                    is_winner=analysis.is_winner,
                    is_ex_aequo=analysis.is_ex_aequo,
                    majority_grade=analysis.majority_grade,
                    majority_percentage=analysis.majority_percentage,
                    display_summary=analysis.display_summary,
                    tied_with_option_ids=peers,
                    analysis=analysis,
                )
            )
        return ranked


def rank(
    entries: Sequence[tuple[str, Aggregate]],
    strategy: TieBreakStrategy,
    *,
    tolerance: float = DEFAULT_TOLERANCE,
    group_resolution: GroupResolution = GroupResolution.UNSATISFIED_GROUPS,
) -> list[RankedOption]:
    """Rank ``entries`` with ``strategy``. See RankingEngine.rank."""
    engine = RankingEngine(
        strategy, tolerance=tolerance, group_resolution=group_resolution,
    )
    return engine.rank(entries)
