# projections.py
#
# Projection resolution for one roster / week / scoring format.
# Bye weeks are decided here, before any projection lookup, so a stale stored
# projection can never leak through for a team that isn't playing.

from __future__ import annotations

import logging
from typing import Dict, List, Mapping, Optional, Protocol, Tuple

from errors import NoProjections  # type: ignore[import]
from game_status import GameStatusProvider  # type: ignore[import]
from models import ProjectionRecord, RosterPlayer, ScoringFormat  # type: ignore[import]

logger = logging.getLogger(__name__)


class ProjectionProvider(Protocol):
    def fetch_projections(
        self, week: int, year: int, scoring_format: ScoringFormat
    ) -> Mapping[str, ProjectionRecord]:
        """Return {projection_key: ProjectionRecord} for the week."""
        ...


def resolve_projections(
    roster: List[RosterPlayer],
    week: int,
    year: int,
    scoring_format: ScoringFormat,
    projection_provider: ProjectionProvider,
    game_status: GameStatusProvider,
) -> Dict[str, float]:
    """
    Build {player_id: projected points} for the roster.

    - Players on bye get 0.0 and are never looked up.
    - Players without a lookup key, a projection record, or a value for the
      requested format are left out of the map entirely (not zero).

    Raises NoProjections if the provider has nothing for this week, or if not
    a single roster player could be resolved.
    """
    scoring_format = ScoringFormat.parse(scoring_format)
    table = projection_provider.fetch_projections(week, year, scoring_format)
    if not table:
        raise NoProjections(f"provider returned no projections for week {week} {year}")

    resolved: Dict[str, float] = {}
    missing: List[str] = []

    for p in roster:
        if not p.projection_key:
            missing.append(p.name)
            continue

        if game_status.is_on_bye(p.team, week):
            resolved[p.player_id] = 0.0
            continue

        record = table.get(p.projection_key)
        points = record.points_for(scoring_format) if record is not None else None
        if points is None:
            missing.append(p.name)
            continue

        resolved[p.player_id] = float(points)

    if missing:
        logger.debug("[Optimizer] No projection for: %s", ", ".join(missing))

    logger.info(
        "[Optimizer] Got projections for %d of %d roster players (week %d, %s)",
        len(resolved),
        len(roster),
        week,
        scoring_format.value,
    )

    if not resolved:
        raise NoProjections(f"none of the {len(roster)} roster players have projections")

    return resolved


def projection_of(player: RosterPlayer, projections: Mapping[str, float]) -> float:
    """Projection used for arithmetic; a missing projection counts as 0.0."""
    return projections.get(player.player_id, 0.0)


def ranking_key(
    player: RosterPlayer, projections: Mapping[str, float]
) -> Tuple[bool, float, str]:
    """
    Sort key for "best first": highest projection, players with no projection
    after everyone else, then player id so ties come out the same every call.
    """
    points: Optional[float] = projections.get(player.player_id)
    if points is None:
        return (True, 0.0, player.player_id)
    return (False, -points, player.player_id)
