# espn_adapter.py
#
# Adapters to pull live data from ESPN (via espn_api) and map it into
# LineupIQ models: roster, league slot settings, game states and free agents.

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple

from espn_api.football import League  # type: ignore[import]

from config import (  # type: ignore[import]
    ESPN_LEAGUE_ID,
    ESPN_YEAR,
    ESPN_S2,
    ESPN_SWID,
    FREE_AGENT_POOL_SIZE,
    TEAM_NAME_KEYWORD,
)
from game_status import GameStatusTable  # type: ignore[import]
from models import AvailablePlayer, RosterPlayer, ScoringFormat  # type: ignore[import]
from projections import ProjectionProvider  # type: ignore[import]
from projections_fantasypros import projection_key_for  # type: ignore[import]

logger = logging.getLogger(__name__)

# espn_api can use "BE", "BN", numeric bench codes, or "Bench"
BENCH_LIKE_SLOTS = {"BE", "BN", "IR", "RES", "BENCH"}

# ESPN position label -> canonical position
_POSITION_MAP = {"D/ST": "DEF", "DST": "DEF", "DEF": "DEF"}


# ---------- tiny helper so dicts & objects both work ----------

def _cfg_get(cfg: Optional[Any], key: str, default=None):
    """
    Read a config field whether cfg is a dict or a simple object.
    """
    if cfg is None:
        return default
    if isinstance(cfg, dict):
        return cfg.get(key, default)
    return getattr(cfg, key, default)


def _canonical_position(raw: Any) -> str:
    pos = str(raw or "").upper()
    return _POSITION_MAP.get(pos, pos)


# ---------- league helper ----------

def _get_league(team_cfg: Optional[Any] = None) -> League:
    """
    Build an ESPN League for a particular team config.
    If team_cfg is None, fall back to the single-team constants.
    """
    return League(
        league_id=_cfg_get(team_cfg, "league_id", ESPN_LEAGUE_ID),
        year=_cfg_get(team_cfg, "season_year", ESPN_YEAR),
        espn_s2=_cfg_get(team_cfg, "espn_s2", ESPN_S2) or None,
        swid=_cfg_get(team_cfg, "espn_swid", ESPN_SWID) or None,
    )


def _find_my_team(league: League, team_cfg: Optional[Any]) -> Any:
    """
    Find the user's team in the league using team_name_keyword.
    """
    name_keyword = _cfg_get(team_cfg, "team_name_keyword") or TEAM_NAME_KEYWORD
    keyword_lower = name_keyword.lower()

    for t in league.teams:
        if keyword_lower in t.team_name.lower():
            return t

    raise RuntimeError(
        f"Could not find team whose name contains '{name_keyword}' in this league."
    )


def _has_game_scheduled(player: Any, week: int) -> Optional[bool]:
    """
    In espn_api the schedule is a dict keyed by scoring period; a missing
    entry for the week means a bye. Returns None when there's no schedule to
    look at.
    """
    sched = getattr(player, "schedule", None)
    if not isinstance(sched, dict) or not sched:
        return None
    return week in sched or str(week) in sched


class EspnTeamSource:
    """
    One ESPN team in one league. Each fetch_* call talks to ESPN; nothing is
    cached beyond the League object itself.
    """

    def __init__(self, team_cfg: Optional[Any] = None, league: Optional[League] = None):
        self.team_cfg = team_cfg
        self._league = league

    @property
    def league(self) -> League:
        if self._league is None:
            self._league = _get_league(self.team_cfg)
        return self._league

    # ---------- box scores ----------

    def _box_players(self, week: int) -> List[Any]:
        players: List[Any] = []
        for box in self.league.box_scores(week):
            players.extend(getattr(box, "home_lineup", None) or [])
            players.extend(getattr(box, "away_lineup", None) or [])
        return players

    def fetch_game_status(self, week: int) -> GameStatusTable:
        """
        Build the week's game-state table from the league's box scores plus
        our own roster's schedules (for bye detection).
        """
        final_teams = set()
        bye_teams = set()

        for bp in self._box_players(week):
            team = getattr(bp, "proTeam", None)
            if not team:
                continue
            if getattr(bp, "on_bye_week", False):
                bye_teams.add(team)
            elif (getattr(bp, "game_played", 0) or 0) >= 100:
                final_teams.add(team)

        my_team = _find_my_team(self.league, self.team_cfg)
        for p in my_team.roster:
            team = getattr(p, "proTeam", None)
            if team and _has_game_scheduled(p, week) is False:
                bye_teams.add(team)

        logger.info(
            "[ESPN] Week %d: %d final team(s), %d team(s) on bye",
            week,
            len(final_teams),
            len(bye_teams),
        )
        return GameStatusTable(week=week, final_teams=final_teams, bye_teams=bye_teams)

    # ---------- roster ----------

    def _live_points(self, week: int) -> Dict[Any, float]:
        """playerId -> points for players whose game has started this week."""
        out: Dict[Any, float] = {}
        for bp in self._box_players(week):
            if (getattr(bp, "game_played", 0) or 0) > 0:
                out[getattr(bp, "playerId", None)] = float(getattr(bp, "points", 0.0) or 0.0)
        return out

    def fetch_roster(self, week: int) -> List[RosterPlayer]:
        """
        Return your current ESPN roster as LineupIQ RosterPlayer objects.
        Projections are attached later through projection_key.
        """
        my_team = _find_my_team(self.league, self.team_cfg)
        live_points = self._live_points(week)

        roster: List[RosterPlayer] = []
        for p in my_team.roster:
            slot = (
                getattr(p, "lineupSlot", None)
                or getattr(p, "slot_position", None)
                or getattr(p, "slotPosition", None)
            )
            slot_str = str(slot).upper() if slot is not None else ""
            pos = _canonical_position(p.position)
            player_id = getattr(p, "playerId", None)

            roster.append(
                RosterPlayer(
                    player_id=str(player_id if player_id is not None else p.name),
                    name=p.name,
                    position=pos,
                    team=getattr(p, "proTeam", None),
                    is_starter=bool(slot_str) and slot_str not in BENCH_LIKE_SLOTS,
                    current_slot=slot_str or None,
                    current_points=live_points.get(player_id),
                    projection_key=projection_key_for(p.name, pos),
                )
            )

        logger.info("[ESPN] Loaded %d roster players for %s", len(roster), my_team.team_name)
        return roster

    # ---------- league settings ----------

    def fetch_slot_labels(self) -> Optional[List[str]]:
        """
        League lineup slots as a flat label list, e.g.
        ["QB", "RB", "RB", "WR", "WR", "TE", "RB/WR/TE", "D/ST", "K", "BE", ...].
        Returns None when the league settings don't expose slot counts.
        """
        settings = getattr(self.league, "settings", None)
        counts = getattr(settings, "position_slot_counts", None)
        if not isinstance(counts, dict) or not counts:
            logger.info("[ESPN] League settings have no slot counts; will infer.")
            return None

        labels: List[str] = []
        for label, count in counts.items():
            labels.extend([str(label)] * int(count or 0))
        return labels

    # ---------- free agents ----------

    def available_players(self, projections: ProjectionProvider) -> "EspnAvailablePlayers":
        return EspnAvailablePlayers(self.league, projections)


class EspnAvailablePlayers:
    """
    ESPN free agents ranked by projection. Free agents without a projection
    are skipped rather than ranked at zero.
    """

    def __init__(
        self,
        league: League,
        projections: ProjectionProvider,
        pool_size: int = FREE_AGENT_POOL_SIZE,
    ):
        self.league = league
        self.projections = projections
        self.pool_size = pool_size

    def top_available(
        self,
        position: str,
        week: int,
        year: int,
        limit: int,
        scoring_format: ScoringFormat,
    ) -> List[AvailablePlayer]:
        espn_position = "D/ST" if position == "DEF" else position
        fa_players = self.league.free_agents(
            week=week, size=self.pool_size, position=espn_position
        )
        table = self.projections.fetch_projections(week, year, scoring_format)

        ranked: List[Tuple[float, AvailablePlayer]] = []
        for p in fa_players:
            pos = _canonical_position(p.position)
            record = table.get(projection_key_for(p.name, pos))
            points = record.points_for(scoring_format) if record is not None else None
            if points is None:
                continue
            player_id = getattr(p, "playerId", None)
            ranked.append(
                (
                    float(points),
                    AvailablePlayer(
                        player_id=str(player_id if player_id is not None else p.name),
                        name=p.name,
                        position=pos,
                        team=getattr(p, "proTeam", None),
                        projected_points=float(points),
                    ),
                )
            )

        ranked.sort(key=lambda pair: pair[0], reverse=True)
        return [fa for _, fa in ranked[:limit]]
