# lineup_diff.py
#
# Turns "current lineup vs. optimal lineup" into a short list of start/bench
# recommendations, each with the move chain needed to apply it.

from __future__ import annotations

import logging
from typing import FrozenSet, List, Mapping, Optional, Tuple

from lineup_slots import normalize_slot_label  # type: ignore[import]
from models import (  # type: ignore[import]
    LineupAssignment,
    LineupChange,
    MoveChain,
    MoveStep,
    RosterPlayer,
    SlotTag,
)
from projections import projection_of, ranking_key  # type: ignore[import]

logger = logging.getLogger(__name__)

REASON_LOWER = "Lower projection"
REASON_BYE = "Player on BYE"
REASON_NO_PROJECTION = "No projection"
REASON_HIGHER = "Higher projection"


def _matches_target(outgoing: RosterPlayer, incoming: RosterPlayer, target: SlotTag) -> bool:
    """
    Can benching `outgoing` open the slot `incoming` is headed for?
    Either the starter's own slot ("RB2" -> RB) is the target slot, or the two
    play the same position.
    """
    if normalize_slot_label(outgoing.current_slot) == target:
        return True
    return outgoing.position == incoming.position


def _weakest_first_key(
    player: RosterPlayer, projections: Mapping[str, float]
) -> Tuple[bool, float, str]:
    points = projections.get(player.player_id)
    if points is None:
        return (False, 0.0, player.player_id)
    return (True, points, player.player_id)


def _build_chain(
    incoming: RosterPlayer,
    incoming_proj: float,
    target: SlotTag,
    outgoing: Optional[RosterPlayer],
    outgoing_proj: float,
    outgoing_projected: bool = True,
) -> MoveChain:
    steps: List[MoveStep] = []
    if outgoing is not None:
        if not outgoing_projected:
            reason = REASON_NO_PROJECTION
        elif outgoing_proj == 0:
            reason = REASON_BYE
        else:
            reason = REASON_LOWER
        steps.append(
            MoveStep(
                player=outgoing,
                from_slot=outgoing.current_slot or outgoing.position,
                to_slot=SlotTag.BENCH.value,
                reason=reason,
                projection=outgoing_proj,
            )
        )
    steps.append(
        MoveStep(
            player=incoming,
            from_slot=SlotTag.BENCH.value,
            to_slot=target.value,
            reason=REASON_HIGHER,
            projection=incoming_proj,
        )
    )
    return MoveChain(
        steps=steps,
        net_improvement=incoming_proj - outgoing_proj,
        started_player=incoming,
        benched_player=outgoing,
    )


def diff_lineups(
    roster: List[RosterPlayer],
    optimal: LineupAssignment,
    projections: Mapping[str, float],
    locked_ids: FrozenSet[str],
    threshold_pct: float,
) -> List[LineupChange]:
    """
    Compare the current lineup (is_starter / current_slot on each player)
    against `optimal` and return the recommended changes.

    Pairing is greedy: the strongest incoming player takes the weakest
    compatible outgoing starter. A change survives only if it improves on the
    outgoing player by at least `threshold_pct` percent; an incoming player
    with no outgoing partner (or one projected at 0) counts as 0%.
    Locked players are never moved.
    """
    optimal_starter_ids = {p.player_id for p in optimal.starters()}

    to_bench = [
        p
        for p in roster
        if p.is_starter
        and p.player_id not in optimal_starter_ids
        and p.player_id not in locked_ids
    ]
    to_start = [
        p
        for p in roster
        if not p.is_starter
        and p.player_id in optimal_starter_ids
        and p.player_id not in locked_ids
    ]

    # weakest first for benching (no projection counts as weakest), best
    # first for starting
    to_bench.sort(key=lambda p: _weakest_first_key(p, projections))
    to_start.sort(key=lambda p: ranking_key(p, projections))

    changes: List[LineupChange] = []
    for incoming in to_start:
        target = optimal.slot_of(incoming.player_id)
        if target is None:  # pragma: no cover - optimal covers the roster
            continue

        outgoing: Optional[RosterPlayer] = None
        for candidate in to_bench:
            if _matches_target(candidate, incoming, target):
                outgoing = candidate
                break
        if outgoing is not None:
            to_bench.remove(outgoing)

        proj_in = projection_of(incoming, projections)
        proj_out = projection_of(outgoing, projections) if outgoing is not None else 0.0

        chain = _build_chain(
            incoming,
            proj_in,
            target,
            outgoing,
            proj_out,
            outgoing_projected=outgoing is not None and outgoing.player_id in projections,
        )
        change = LineupChange(
            player_in=incoming,
            player_out=outgoing,
            position=target,
            projected_points_in=proj_in,
            projected_points_out=proj_out,
            move_chain=chain,
        )

        if change.improvement_percentage < threshold_pct:
            logger.debug(
                "[Optimizer] Dropping %s -> %s: %.1f%% < %.1f%% threshold",
                outgoing.name if outgoing else "(empty)",
                incoming.name,
                change.improvement_percentage,
                threshold_pct,
            )
            continue

        changes.append(change)

    changes.sort(key=lambda c: c.improvement, reverse=True)
    return changes
