# game_status.py
#
# Game-state lookups used by the optimizer:
# - which teams are on bye this week (projection override)
# - which players are locked because their game is already final

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, Optional, Protocol, Set

from models import RosterPlayer  # type: ignore[import]

logger = logging.getLogger(__name__)


class GameStatusProvider(Protocol):
    def is_game_final(self, team: Optional[str], week: int) -> bool:
        ...

    def is_on_bye(self, team: Optional[str], week: int) -> bool:
        ...


def _team_key(team: Optional[str]) -> str:
    return str(team or "").strip().upper()


@dataclass
class GameStatusTable:
    """
    Snapshot of one week's game states, keyed by NFL team abbreviation.

    Teams we know nothing about are treated as "not final, not on bye", so a
    missing scoreboard never locks anybody or zeroes their projection.
    """

    week: int
    final_teams: Set[str] = field(default_factory=set)
    bye_teams: Set[str] = field(default_factory=set)

    def __post_init__(self) -> None:
        self.final_teams = {_team_key(t) for t in self.final_teams}
        self.bye_teams = {_team_key(t) for t in self.bye_teams}

    def is_game_final(self, team: Optional[str], week: int) -> bool:
        if week != self.week or not team:
            return False
        return _team_key(team) in self.final_teams

    def is_on_bye(self, team: Optional[str], week: int) -> bool:
        if week != self.week or not team:
            return False
        return _team_key(team) in self.bye_teams


def is_player_locked(player: RosterPlayer, week: int, game_status: GameStatusProvider) -> bool:
    """
    A player is locked once his real-world game for `week` has concluded.
    The points are already banked, so the optimizer must leave him where he is.
    """
    return bool(game_status.is_game_final(player.team, week))


def classify_locks(
    roster: Iterable[RosterPlayer],
    week: int,
    game_status: GameStatusProvider,
) -> FrozenSet[str]:
    """Return the ids of every locked player on the roster."""
    locked = frozenset(
        p.player_id for p in roster if is_player_locked(p, week, game_status)
    )
    if locked:
        logger.info("[Optimizer] %d player(s) locked for week %d", len(locked), week)
    return locked
