# config.py
from pathlib import Path
from typing import Dict, Any
import os

# ====== Season / projections config ======
SEASON_YEAR: int = int(os.environ.get("LINEUPIQ_SEASON", "2025"))
SCORING: str = os.environ.get("LINEUPIQ_SCORING", "half_ppr")   # ppr, half_ppr, standard
CURRENT_WEEK: int = int(os.environ.get("LINEUPIQ_WEEK", "14"))

DATA_ROOT = Path(os.environ.get("LINEUPIQ_DATA_ROOT", "data"))

LOG_LEVEL: str = os.environ.get("LINEUPIQ_LOG_LEVEL", "INFO")

# ====== Optimizer tuning ======
# Only recommend a start/bench swap when it improves on the benched player by
# at least this many percent (0-100). Users can override it per profile.
DEFAULT_MIN_IMPROVEMENT_PCT: float = 10.0

# A free agent must out-project the weakest rostered player at his position by
# more than this many points before we suggest an add/drop.
WAIVER_MIN_IMPACT: float = 3.0
WAIVER_POOL_SIZE: int = 10        # available players considered per position
FREE_AGENT_POOL_SIZE: int = 50    # how many ESPN free agents we pull at once

# Preference store (min improvement threshold per profile).
DB_PATH = Path(os.environ.get("LINEUPIQ_DB_PATH", "data/lineupiq_prefs.db"))
DEFAULT_PROFILE: str = "default"

# ====== ESPN single-team defaults ======
ESPN_LEAGUE_ID: int = int(os.environ.get("ESPN_LEAGUE_ID", "43572092"))
ESPN_YEAR: int = SEASON_YEAR

# Cookies are only needed for private leagues; never hard-code them here.
ESPN_S2: str = os.environ.get("ESPN_S2", "")
ESPN_SWID: str = os.environ.get("ESPN_SWID", "")
TEAM_NAME_KEYWORD: str = os.environ.get("ESPN_TEAM_NAME", "Can't Teach Matchups")


# ====== Multi-team config ======
TEAMS: Dict[str, Dict[str, Any]] = {
    "cant_teach_matchups": {
        "platform": "espn",
        "league_id": ESPN_LEAGUE_ID,
        "season_year": ESPN_YEAR,
        "team_name_keyword": TEAM_NAME_KEYWORD,
        "espn_s2": ESPN_S2,
        "espn_swid": ESPN_SWID,
        "scoring": SCORING,
    },
    "stinky_steinerts": {
        "platform": "espn",
        "league_id": 232132462,
        "season_year": ESPN_YEAR,
        "team_name_keyword": "Stinky Steinerts",
        "espn_s2": ESPN_S2,
        "espn_swid": ESPN_SWID,
        "scoring": "ppr",
    },
}

DEFAULT_TEAM_KEY: str = "cant_teach_matchups"
