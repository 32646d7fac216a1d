# app.py
#
# FastAPI wrapper around the LineupIQ engine.
# Exposes:
#   GET /health
#   GET /teams
#   GET /teams/{team_key}/optimize
#   GET /teams/{team_key}/waivers
#   GET /preferences/{profile}
#   PUT /preferences/{profile}
#
# Start with:
#   uvicorn app:app --reload

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request  # type: ignore[import]
from fastapi.middleware.cors import CORSMiddleware  # type: ignore[import]
from fastapi.responses import JSONResponse  # type: ignore[import]
from pydantic import BaseModel, Field  # type: ignore[import]

from config import (  # type: ignore[import]
    CURRENT_WEEK,
    DB_PATH,
    DEFAULT_PROFILE,
    SEASON_YEAR,
    TEAMS,
)
from errors import (  # type: ignore[import]
    InvalidLineupRequirements,
    NoProjections,
    NoTeamData,
    OptimizerError,
)
from lineup_report import (  # type: ignore[import]
    TeamSources,
    get_waiver_recommendations,
    load_team_sources,
    run_lineup_for_team,
)
from models import ScoringFormat  # type: ignore[import]
from preferences_db import (  # type: ignore[import]
    get_min_improvement_pct,
    init_db,
    set_min_improvement_pct,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Pydantic view models
# ---------------------------------------------------------------------------

class PlayerView(BaseModel):
    id: str
    name: str
    position: str                       # QB / RB / WR / TE / K / DEF
    nfl_team: Optional[str] = None
    was_starter: bool = False
    current_slot: Optional[str] = None  # raw platform label, e.g. "RB/WR/TE"
    current_points: Optional[float] = None
    projection: Optional[float] = None  # None = no projection at all
    locked: bool = False


class MoveStepView(BaseModel):
    player: PlayerView
    from_slot: str
    to_slot: str
    reason: str
    projection: float


class MoveChainView(BaseModel):
    steps: List[MoveStepView]
    net_improvement: float
    started: str
    benched: Optional[str] = None


class LineupChangeView(BaseModel):
    player_in: PlayerView
    player_out: Optional[PlayerView] = None
    position: str
    projected_points_in: float
    projected_points_out: float
    improvement: float
    improvement_percentage: float
    reason: str
    move_chain: MoveChainView


class WaiverView(BaseModel):
    add: Dict[str, Any]
    drop: PlayerView
    projected_impact: float
    projected_points_drop: float
    reason: str


class OptimizationView(BaseModel):
    team_key: str
    team_name: Optional[str] = None
    week: int
    year: int
    scoring: str
    requirements: Dict[str, int]
    current_lineup: Dict[str, List[PlayerView]]
    optimal_lineup: Dict[str, List[PlayerView]]
    benched: List[PlayerView]
    locked: List[str]
    projected_points: float
    current_points: float
    improvement: float              # optimal total - current total
    actionable_improvement: float   # sum of the changes that pass the threshold
    threshold_pct: float
    changes: List[LineupChangeView]
    move_chains: List[MoveChainView]
    waivers: List[WaiverView]


class WaiverPlan(BaseModel):
    team_key: str
    week: int
    options: List[WaiverView]


class PreferenceView(BaseModel):
    profile: str
    min_improvement_pct: float


class PreferenceUpdate(BaseModel):
    min_improvement_pct: float = Field(..., ge=0.0, le=100.0)


class TeamView(BaseModel):
    key: str
    platform: str
    league_id: int
    season_year: int
    team_name_keyword: str
    scoring: str


# ---------------------------------------------------------------------------
# Dependencies (overridden in tests)
# ---------------------------------------------------------------------------

SourcesLoader = Callable[[Dict[str, Any], int], TeamSources]


def get_sources_loader() -> SourcesLoader:
    """How roster / projections / game states are fetched for a team."""
    return load_team_sources


def get_db_path() -> Path:
    return DB_PATH


def _team_cfg(team_key: str) -> Dict[str, Any]:
    if team_key not in TEAMS:
        raise HTTPException(status_code=404, detail="Unknown team_key")
    return dict(TEAMS[team_key])


def _load_sources(loader: SourcesLoader, team_cfg: Dict[str, Any], week: int) -> TeamSources:
    try:
        return loader(team_cfg, week)
    except RuntimeError as exc:
        # espn_api / team lookup failures
        logger.warning("[API] Could not load team data: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc))


# ---------------------------------------------------------------------------
# FastAPI app + routes
# ---------------------------------------------------------------------------

app = FastAPI(title="LineupIQ API")

# Optional: allow local dev frontends (Next.js, iOS simulator via local proxy, etc.)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ERROR_STATUS = {
    NoTeamData: 404,
    NoProjections: 503,
    InvalidLineupRequirements: 422,
}


@app.exception_handler(OptimizerError)
def _optimizer_error_handler(request: Request, exc: OptimizerError):
    status = _ERROR_STATUS.get(type(exc), 500)
    logger.warning("[API] %s %s -> %d: %s", request.method, request.url.path, status, exc)
    return JSONResponse(
        status_code=status,
        content={"detail": exc.message, "error": type(exc).__name__, "info": exc.detail},
    )


@app.on_event("startup")
def _on_startup():
    # Ensure the preferences table exists wherever requests will read it.
    db_path = app.dependency_overrides.get(get_db_path, get_db_path)()
    init_db(db_path)


@app.get("/health")
def health():
    return {"status": "ok", "week": CURRENT_WEEK, "season": SEASON_YEAR}


@app.get("/teams", response_model=List[TeamView])
def list_teams():
    """
    List of all configured teams. Drives the 'all my teams' view.
    """
    return [
        TeamView(
            key=key,
            platform=cfg["platform"],
            league_id=cfg["league_id"],
            season_year=cfg["season_year"],
            team_name_keyword=cfg["team_name_keyword"],
            scoring=cfg["scoring"],
        )
        for key, cfg in TEAMS.items()
    ]


@app.get("/teams/{team_key}/optimize", response_model=OptimizationView)
def optimize_team(
    team_key: str,
    week: Optional[int] = None,
    scoring: Optional[str] = None,
    profile: str = DEFAULT_PROFILE,
    loader: SourcesLoader = Depends(get_sources_loader),
    db_path: Path = Depends(get_db_path),
):
    """
    Optimal lineup, start/bench changes and move chains for one team.

    The minimum-improvement threshold is read from `profile`'s saved
    preference on every request, so a PUT takes effect on the next call.
    """
    team_cfg = _team_cfg(team_key)
    week = week if week is not None else CURRENT_WEEK
    threshold = get_min_improvement_pct(profile, db_path=db_path)

    sources = _load_sources(loader, team_cfg, week)
    return run_lineup_for_team(
        team_key,
        team_cfg_override=team_cfg,
        week=week,
        scoring=scoring,
        threshold_pct=threshold,
        sources=sources,
    )


@app.get("/teams/{team_key}/waivers", response_model=WaiverPlan)
def waiver_plan(
    team_key: str,
    limit: int = 5,
    week: Optional[int] = None,
    scoring: Optional[str] = None,
    loader: SourcesLoader = Depends(get_sources_loader),
):
    """
    Free agent add/drop suggestions for a team, biggest projected gain first.

    This is read-only; you still place the actual claims in ESPN.
    """
    if limit < 0:
        raise HTTPException(status_code=422, detail="limit must be >= 0")

    team_cfg = _team_cfg(team_key)
    week = week if week is not None else CURRENT_WEEK
    year = int(team_cfg.get("season_year", SEASON_YEAR))
    fmt = ScoringFormat.parse(scoring or team_cfg.get("scoring"))

    sources = _load_sources(loader, team_cfg, week)
    recs = get_waiver_recommendations(
        sources.roster,
        week,
        year,
        limit,
        fmt,
        projection_provider=sources.projection_provider,
        game_status=sources.game_status,
        available_players=sources.available_players,
    )
    return WaiverPlan(
        team_key=team_key,
        week=week,
        options=[WaiverView(**r.to_dict()) for r in recs],
    )


@app.get("/preferences/{profile}", response_model=PreferenceView)
def read_preferences(profile: str, db_path: Path = Depends(get_db_path)):
    return PreferenceView(
        profile=profile,
        min_improvement_pct=get_min_improvement_pct(profile, db_path=db_path),
    )


@app.put("/preferences/{profile}", response_model=PreferenceView)
def update_preferences(
    profile: str,
    req: PreferenceUpdate,
    db_path: Path = Depends(get_db_path),
):
    """Save the minimum improvement percentage (0-100) for a profile."""
    stored = set_min_improvement_pct(profile, req.min_improvement_pct, db_path=db_path)
    logger.info("[API] Profile %s threshold set to %.1f%%", profile, stored)
    return PreferenceView(profile=profile, min_improvement_pct=stored)
