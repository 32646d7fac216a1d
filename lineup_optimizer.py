# lineup_optimizer.py
#
# Greedy slot assignment for LineupIQ.
# - locked players (game final) and IR stashes keep their current slot
# - standard slots are filled first, then flex slots in a fixed priority order
# - whoever is left goes to the bench

from __future__ import annotations

import logging
from typing import FrozenSet, Iterable, List, Mapping

from errors import InvalidLineupRequirements  # type: ignore[import]
from lineup_slots import current_slot_tag  # type: ignore[import]
from models import (  # type: ignore[import]
    FLEX_PRIORITY,
    LineupAssignment,
    RosterPlayer,
    SLOT_ELIGIBILITY,
    STANDARD_SLOTS,
    SlotRequirement,
    SlotTag,
)
from projections import projection_of, ranking_key  # type: ignore[import]

logger = logging.getLogger(__name__)

SLOT_ORDER = STANDARD_SLOTS + FLEX_PRIORITY + (SlotTag.BENCH, SlotTag.IR)


def _empty_assignment() -> LineupAssignment:
    return LineupAssignment(slots={tag: [] for tag in SLOT_ORDER})


def current_assignment(roster: Iterable[RosterPlayer]) -> LineupAssignment:
    """The lineup as the user has it set right now."""
    assignment = _empty_assignment()
    for p in roster:
        assignment.add(current_slot_tag(p), p)
    return assignment


def validate_requirements(requirements: SlotRequirement) -> None:
    for tag, count in requirements.items():
        if not isinstance(tag, SlotTag):
            raise InvalidLineupRequirements(f"unknown slot {tag!r}")
        if count < 0:
            raise InvalidLineupRequirements(f"{tag.value} has negative count {count}")
    if not any(tag.is_starting and count > 0 for tag, count in requirements.items()):
        raise InvalidLineupRequirements("no starting slots")


def _is_held(player: RosterPlayer, locked_ids: FrozenSet[str]) -> bool:
    if player.player_id in locked_ids:
        return True
    # IR stashes are not candidates to start.
    return not player.is_starter and current_slot_tag(player) == SlotTag.IR


def assign_slots(
    roster: List[RosterPlayer],
    projections: Mapping[str, float],
    requirements: SlotRequirement,
    locked_ids: FrozenSet[str] = frozenset(),
) -> LineupAssignment:
    """
    Greedy optimizer:
      1. sort the unlocked pool by projection (missing last, player id breaks ties)
      2. fill QB, RB, WR, TE, K, DEF with exact-position players
      3. fill SUPER_FLEX -> FLEX -> WRRB_FLEX -> REC_FLEX -> WR/TE from what's left
      4. bench everybody else

    Vacancies per slot are the required count minus players already locked
    into that slot. This is a heuristic, not an exact matching: an early
    standard-slot pick can starve a later flex slot.
    """
    validate_requirements(requirements)

    optimal = _empty_assignment()
    pool: List[RosterPlayer] = []

    for p in roster:
        if _is_held(p, locked_ids):
            optimal.add(current_slot_tag(p), p)
        else:
            pool.append(p)

    pool.sort(key=lambda p: ranking_key(p, projections))

    for tag in STANDARD_SLOTS + FLEX_PRIORITY:
        vacancies = requirements.get(tag, 0) - len(optimal.slots[tag])
        if vacancies <= 0:
            continue

        eligible = SLOT_ELIGIBILITY[tag]
        picked = [p for p in pool if p.position in eligible][:vacancies]
        if len(picked) < vacancies:
            logger.debug(
                "[Optimizer] %s: only %d of %d vacancies could be filled",
                tag.value,
                len(picked),
                vacancies,
            )

        picked_ids = {p.player_id for p in picked}
        for p in picked:
            optimal.add(tag, p)
        pool = [p for p in pool if p.player_id not in picked_ids]

    for p in pool:
        optimal.add(SlotTag.BENCH, p)

    return optimal


def lineup_points(assignment: LineupAssignment, projections: Mapping[str, float]) -> float:
    """Projected total of every starting slot (bench / IR excluded)."""
    return sum(projection_of(p, projections) for p in assignment.starters())
