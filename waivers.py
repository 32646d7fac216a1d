# waivers.py
#
# Free agent -> roster upgrades: for each offensive position, compare the
# best available players against the weakest player we roster there.

from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Protocol, Tuple

from config import WAIVER_MIN_IMPACT, WAIVER_POOL_SIZE  # type: ignore[import]
from lineup_slots import current_slot_tag  # type: ignore[import]
from models import (  # type: ignore[import]
    AvailablePlayer,
    RosterPlayer,
    ScoringFormat,
    SlotTag,
    WaiverRecommendation,
)

logger = logging.getLogger(__name__)

WAIVER_POSITIONS = ("QB", "RB", "WR", "TE")


class AvailablePlayerProvider(Protocol):
    def top_available(
        self,
        position: str,
        week: int,
        year: int,
        limit: int,
        scoring_format: ScoringFormat,
    ) -> List[AvailablePlayer]:
        """Unrostered players at `position`, best projection first."""
        ...


def weakest_player(
    roster: List[RosterPlayer],
    position: str,
    projections: Mapping[str, float],
) -> Optional[Tuple[RosterPlayer, float]]:
    """
    Lowest-projected player at `position` who could actually start: IR stashes
    and players without a projection are ignored.
    """
    candidates = [
        (p, projections[p.player_id])
        for p in roster
        if p.position == position
        and p.player_id in projections
        and current_slot_tag(p) != SlotTag.IR
    ]
    if not candidates:
        return None
    return min(candidates, key=lambda pair: (pair[1], pair[0].player_id))


def recommend_waivers(
    roster: List[RosterPlayer],
    projections: Mapping[str, float],
    available_players: AvailablePlayerProvider,
    week: int,
    year: int,
    limit: int,
    scoring_format: ScoringFormat,
    min_impact: float = WAIVER_MIN_IMPACT,
    pool_size: int = WAIVER_POOL_SIZE,
) -> List[WaiverRecommendation]:
    """
    ADD/DROP candidates across QB/RB/WR/TE, biggest projected impact first,
    truncated to `limit`. Only free agents beating the weak player by more
    than `min_impact` points are suggested.
    """
    recommendations: List[WaiverRecommendation] = []

    for position in WAIVER_POSITIONS:
        weak = weakest_player(roster, position, projections)
        if weak is None:
            continue
        drop, drop_proj = weak

        pool = available_players.top_available(position, week, year, pool_size, scoring_format)
        for fa in pool:
            impact = fa.projected_points - drop_proj
            if impact <= min_impact:
                continue
            logger.debug(
                "[Waivers] ADD %s (%s, %.1f) / DROP %s (%.1f)",
                fa.name,
                position,
                fa.projected_points,
                drop.name,
                drop_proj,
            )
            recommendations.append(
                WaiverRecommendation(
                    player_to_add=fa,
                    player_to_drop=drop,
                    projected_impact=impact,
                    projected_points_drop=drop_proj,
                    reason=f"Projected +{impact:.1f} pts over {drop.name}",
                )
            )

    recommendations.sort(key=lambda r: r.projected_impact, reverse=True)
    top = recommendations[: max(limit, 0)]
    logger.info("[Waivers] Found %d waiver recommendation(s)", len(top))
    return top
