# lineup_report.py
#
# Core lineup logic for LineupIQ.
# - optimize_lineup: optimal lineup + start/bench recommendations
# - get_waiver_recommendations: free agent add/drop candidates
# - run_lineup_for_team: wires both to ESPN / FantasyPros for a configured team
#
# Used both by the CLI entrypoint AND the FastAPI app.

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from config import (  # type: ignore[import]
    CURRENT_WEEK,
    DEFAULT_MIN_IMPROVEMENT_PCT,
    DEFAULT_TEAM_KEY,
    LOG_LEVEL,
    SEASON_YEAR,
    TEAMS,
)
from errors import NoTeamData  # type: ignore[import]
from game_status import GameStatusProvider, classify_locks  # type: ignore[import]
from lineup_diff import diff_lineups  # type: ignore[import]
from lineup_optimizer import (  # type: ignore[import]
    assign_slots,
    current_assignment,
    lineup_points,
)
from lineup_slots import derive_requirements  # type: ignore[import]
from models import (  # type: ignore[import]
    LineupAssignment,
    OptimizationResult,
    RosterPlayer,
    ScoringFormat,
    SlotTag,
    WaiverRecommendation,
)
from projections import ProjectionProvider, resolve_projections  # type: ignore[import]
from waivers import AvailablePlayerProvider, recommend_waivers  # type: ignore[import]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public operations
# ---------------------------------------------------------------------------


def optimize_lineup(
    roster: List[RosterPlayer],
    week: int,
    year: int,
    scoring_format: Any = ScoringFormat.PPR,
    *,
    projection_provider: ProjectionProvider,
    game_status: GameStatusProvider,
    slot_labels: Optional[List[str]] = None,
    threshold_pct: float = DEFAULT_MIN_IMPROVEMENT_PCT,
) -> OptimizationResult:
    """
    Compute the best projected lineup for `roster` and the changes needed to
    get there from the current lineup.

    `threshold_pct` (0-100) is the minimum improvement, relative to the
    benched player's projection, for a swap to be recommended. It only
    filters recommendations; the optimal lineup itself is unaffected.

    Raises NoTeamData, NoProjections or InvalidLineupRequirements.
    """
    if not roster:
        raise NoTeamData("roster is empty")

    fmt = ScoringFormat.parse(scoring_format)
    logger.info(
        "[Optimizer] Optimizing %d players for week %d %d (%s)",
        len(roster),
        week,
        year,
        fmt.value,
    )

    projections = resolve_projections(
        roster, week, year, fmt, projection_provider, game_status
    )
    requirements = derive_requirements(slot_labels, roster)
    locked_ids = classify_locks(roster, week, game_status)

    optimal = assign_slots(roster, projections, requirements, locked_ids)
    current = current_assignment(roster)

    changes = diff_lineups(roster, optimal, projections, locked_ids, threshold_pct)

    starter_ids = {p.player_id for p in optimal.starters()}
    benched = [p for p in roster if p.player_id not in starter_ids]

    result = OptimizationResult(
        optimal_lineup=optimal,
        benched_players=benched,
        projected_points=lineup_points(optimal, projections),
        current_points=lineup_points(current, projections),
        changes=changes,
        player_projections=projections,
        locked_player_ids=locked_ids,
        requirements=requirements,
        threshold_pct=float(threshold_pct),
    )

    logger.info(
        "[Optimizer] Optimization complete. %d change(s) recommended "
        "(+%.1f actionable, +%.1f theoretical)",
        len(changes),
        result.actionable_improvement,
        result.improvement,
    )
    return result


def get_waiver_recommendations(
    roster: List[RosterPlayer],
    week: int,
    year: int,
    limit: int = 5,
    scoring_format: Any = ScoringFormat.PPR,
    *,
    projection_provider: ProjectionProvider,
    game_status: GameStatusProvider,
    available_players: AvailablePlayerProvider,
) -> List[WaiverRecommendation]:
    """Best free agent add/drop moves for the roster, at most `limit`."""
    if not roster:
        raise NoTeamData("roster is empty")

    fmt = ScoringFormat.parse(scoring_format)
    projections = resolve_projections(
        roster, week, year, fmt, projection_provider, game_status
    )
    return recommend_waivers(
        roster, projections, available_players, week, year, limit, fmt
    )


# ---------------------------------------------------------------------------
# Team wiring
# ---------------------------------------------------------------------------


@dataclass
class TeamSources:
    """Everything fetched from the outside world for one team / week."""

    roster: List[RosterPlayer]
    slot_labels: Optional[List[str]]
    game_status: GameStatusProvider
    projection_provider: ProjectionProvider
    available_players: AvailablePlayerProvider


def load_team_sources(team_cfg: Dict[str, Any], week: int) -> TeamSources:
    """Fetch roster, league slots and game states from ESPN for one team."""
    from espn_adapter import EspnTeamSource  # type: ignore[import]
    from projections_fantasypros import FantasyProsProjections  # type: ignore[import]

    source = EspnTeamSource(team_cfg)
    projections = FantasyProsProjections(download_week=CURRENT_WEEK)
    return TeamSources(
        roster=source.fetch_roster(week),
        slot_labels=source.fetch_slot_labels(),
        game_status=source.fetch_game_status(week),
        projection_provider=projections,
        available_players=source.available_players(projections),
    )


def _player_to_dict(
    p: RosterPlayer,
    projections: Mapping[str, float],
    locked_ids: frozenset = frozenset(),
) -> Dict[str, Any]:
    """
    Player dict for the API / CLI. `projection` is None when we have no
    projection at all (as opposed to a real 0.0, e.g. a bye week).
    """
    out = p.to_dict()
    proj = projections.get(p.player_id)
    out["projection"] = float(proj) if proj is not None else None
    out["locked"] = p.player_id in locked_ids
    return out


def _lineup_to_dict(
    lineup: LineupAssignment,
    projections: Mapping[str, float],
    locked_ids: frozenset,
) -> Dict[str, List[Dict[str, Any]]]:
    return {
        tag.value: [_player_to_dict(p, projections, locked_ids) for p in group]
        for tag, group in lineup.slots.items()
        if group
    }


def result_to_state(result: OptimizationResult, roster: List[RosterPlayer]) -> Dict[str, Any]:
    """JSON-serializable view of an OptimizationResult."""
    projections = result.player_projections
    locked = result.locked_player_ids
    return {
        "requirements": {
            tag.value: count
            for tag, count in result.requirements.items()
            if tag.is_starting
        },
        "current_lineup": _lineup_to_dict(current_assignment(roster), projections, locked),
        "optimal_lineup": _lineup_to_dict(result.optimal_lineup, projections, locked),
        "benched": [_player_to_dict(p, projections, locked) for p in result.benched_players],
        "locked": sorted(locked),
        "projected_points": float(result.projected_points),
        "current_points": float(result.current_points),
        "improvement": float(result.improvement),
        "actionable_improvement": float(result.actionable_improvement),
        "threshold_pct": float(result.threshold_pct),
        "changes": [c.to_dict() for c in result.changes],
        "move_chains": [m.to_dict() for m in result.move_chains],
    }


def run_lineup_for_team(
    team_key: str,
    team_cfg_override: Optional[dict] = None,
    week: Optional[int] = None,
    scoring: Optional[str] = None,
    threshold_pct: Optional[float] = None,
    waiver_limit: int = 5,
    sources: Optional[TeamSources] = None,
) -> Dict[str, Any]:
    """
    Core function used by the FastAPI app and the CLI.

    Returns a JSON-serializable dictionary with the current and optimal
    lineups, both improvement totals, the recommended changes / move chains
    and the waiver candidates.
    """
    if team_cfg_override is None and team_key not in TEAMS:
        raise KeyError(f"Unknown team key: {team_key}")

    team_cfg = team_cfg_override or TEAMS[team_key]
    week = week if week is not None else CURRENT_WEEK
    year = int(team_cfg.get("season_year", SEASON_YEAR))
    fmt = ScoringFormat.parse(scoring or team_cfg.get("scoring"))
    if threshold_pct is None:
        threshold_pct = DEFAULT_MIN_IMPROVEMENT_PCT

    if sources is None:
        sources = load_team_sources(team_cfg, week)

    result = optimize_lineup(
        sources.roster,
        week,
        year,
        fmt,
        projection_provider=sources.projection_provider,
        game_status=sources.game_status,
        slot_labels=sources.slot_labels,
        threshold_pct=threshold_pct,
    )
    waivers = recommend_waivers(
        sources.roster,
        result.player_projections,
        sources.available_players,
        week,
        year,
        waiver_limit,
        fmt,
    )

    state: Dict[str, Any] = {
        "team_key": team_key,
        "team_name": team_cfg.get("team_name_keyword"),
        "week": week,
        "year": year,
        "scoring": fmt.value,
    }
    state.update(result_to_state(result, sources.roster))
    state["waivers"] = [w.to_dict() for w in waivers]
    return state


# ---------------------------------------------------------------------------
# CLI entrypoint
# ---------------------------------------------------------------------------


def _fmt_proj(value: Optional[float]) -> str:
    return "  n/a" if value is None else f"{value:5.1f}"


def print_lineup_report(state: Dict[str, Any]) -> None:
    """Pretty-print the state returned by run_lineup_for_team."""
    print(
        f"\n========= LINEUPIQ — OPTIMAL LINEUP (WEEK {state['week']}) "
        f"[{state['team_name']}] ========="
    )
    for slot, players in state["optimal_lineup"].items():
        if slot in (SlotTag.BENCH.value, SlotTag.IR.value):
            continue
        for p in players:
            if p.get("locked"):
                flag = "LOCKED"
            elif p.get("was_starter"):
                flag = "START"
            else:
                flag = "BENCH→START"
            print(
                f"{slot:10} -> {p.get('name','UNKNOWN'):<22} "
                f"{p.get('position','UNK'):3}  "
                f"PROJ {_fmt_proj(p.get('projection'))}  ({flag})"
            )

    print(f"\nTOTAL EXPECTED POINTS (optimized): {state['projected_points']:.1f}")
    print(f"TOTAL CURRENT LINEUP POINTS:       {state['current_points']:.1f}")
    print(
        f"THEORETICAL GAIN: +{state['improvement']:.1f}   "
        f"ACTIONABLE GAIN (>= {state['threshold_pct']:.0f}%): "
        f"+{state['actionable_improvement']:.1f}\n"
    )

    print("============ MOVE CHAINS ============")
    if not state["move_chains"]:
        print("Your lineup is already optimal for the current threshold.")
    for idx, chain in enumerate(state["move_chains"], start=1):
        print(f"Move Chain {idx}  (+{chain['net_improvement']:.1f} pts)")
        for n, step in enumerate(chain["steps"], start=1):
            name = step["player"].get("name", "UNKNOWN")
            if step["to_slot"] == SlotTag.BENCH.value:
                action = f"Bench from {step['from_slot']}"
            else:
                action = f"Start in {step['to_slot']}"
            print(
                f"  {n}. {name:<22} {action:<22} "
                f"PROJ {step['projection']:5.1f}  [{step['reason']}]"
            )

    print("\n========== WAIVER WIRE ==========")
    if not state["waivers"]:
        print("No free agents clearly out-project your weakest players.")
    for w in state["waivers"]:
        print(
            f"ADD {w['add'].get('name','UNKNOWN'):<18} ({w['add'].get('position','UNK')}) "
            f"PROJ {w['add'].get('projection',0.0):5.1f}  "
            f"> DROP {w['drop'].get('name','UNKNOWN'):<18} "
            f"PROJ {w['projected_points_drop']:5.1f}  "
            f"(+{w['projected_impact']:.1f} pts)"
        )

    print("\n============================================================\n")


if __name__ == "__main__":
    import argparse
    import json

    parser = argparse.ArgumentParser(
        description="LineupIQ: optimize lineups for one of your fantasy teams."
    )
    parser.add_argument(
        "--team",
        "-t",
        default=DEFAULT_TEAM_KEY,
        help=f"Team key from config.TEAMS (default: {DEFAULT_TEAM_KEY})",
    )
    parser.add_argument("--week", "-w", type=int, default=None, help="NFL week")
    parser.add_argument(
        "--scoring",
        choices=[f.value for f in ScoringFormat],
        default=None,
        help="Scoring format (default: the team's configured scoring)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_MIN_IMPROVEMENT_PCT,
        help="Minimum improvement percentage for a recommended swap (0-100)",
    )
    parser.add_argument(
        "--json-out",
        help="If set, write the lineup state as JSON to this file instead of pretty-printing.",
    )

    args = parser.parse_args()
    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    state = run_lineup_for_team(
        args.team,
        week=args.week,
        scoring=args.scoring,
        threshold_pct=args.threshold,
    )

    if args.json_out:
        with open(args.json_out, "w") as f:
            json.dump(state, f, indent=2)
        print(f"Wrote lineup state to {args.json_out}")
    else:
        print_lineup_report(state)
