from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import pandas as pd # type: ignore[import]
import requests  # type: ignore[import]

from config import DATA_ROOT  # type: ignore[import]
from models import ProjectionRecord, ScoringFormat  # type: ignore[import]

logger = logging.getLogger(__name__)

BASE_URL = "https://www.fantasypros.com/nfl/projections/{pos}.php"

USER_AGENT_HEADER = {
    "User-Agent": "Mozilla/5.0"
}

# canonical position -> FantasyPros page / file stem
POSITION_FILES = {
    "QB": "qb",
    "RB": "rb",
    "WR": "wr",
    "TE": "te",
    "K": "k",
    "DEF": "dst",
}

# FantasyPros "scoring" query parameter per format
_FP_SCORING = {
    ScoringFormat.PPR: "PPR",
    ScoringFormat.HALF_PPR: "HALF",
    ScoringFormat.STANDARD: "STD",
}

_DEFENSE_TOKENS = {"d/st", "dst", "defense", "def", "d"}


def week_folder(week: int, year: int, scoring_format: ScoringFormat) -> str:
    """
    Return the *folder name* where FantasyPros .xls files live for
    a given week / season / scoring, e.g.:

        "fp_week13_2025_half_ppr"
    """
    return f"fp_week{week}_{year}_{scoring_format.value}"


def _norm_name(raw: str) -> str:
    """
    Normalise a FantasyPros / ESPN 'Player' cell into a comparable bare name.

    Examples:
      "Jordan Love GB"        -> "jordan love"
      "Jordan Love (GB)"      -> "jordan love"
      "Kenneth Walker III"    -> "kenneth walker"
      "Kenneth Walker III SEA"-> "kenneth walker"

    We:
      - drop anything in parentheses
      - drop a trailing TEAM code (two/three caps like GB, SEA)
      - drop common generational / suffix parts at the end (Jr, Sr, II, III, IV)
    so ESPN and FantasyPros variants line up.
    """
    if not isinstance(raw, str):
        return ""

    if "(" in raw:
        raw = raw.split("(", 1)[0]

    parts = raw.split()

    if parts and parts[-1].isupper() and 2 <= len(parts[-1]) <= 3:
        parts = parts[:-1]

    SUFFIXES = {"jr", "sr", "ii", "iii", "iv", "v", "jr.", "sr."}
    while parts and parts[-1].rstrip(".").lower() in SUFFIXES:
        parts = parts[:-1]

    return " ".join(parts).strip().lower()


def _defense_nickname(raw: str) -> str:
    """
    ESPN calls defenses "Seahawks D/ST", FantasyPros "Seattle Seahawks";
    the team nickname is the part both agree on.
    """
    if not isinstance(raw, str):
        return ""
    if "(" in raw:
        raw = raw.split("(", 1)[0]
    words = [
        "".join(ch for ch in w.lower() if ch.isalnum() or ch == "/")
        for w in raw.split()
    ]
    words = [w for w in words if w and w not in _DEFENSE_TOKENS]
    return words[-1].replace("/", "") if words else ""


def projection_key_for(name: str, position: str) -> Optional[str]:
    """
    Lookup key shared by roster players and FantasyPros rows:
    "RB:kenneth walker", "DEF:seahawks".
    """
    pos = str(position or "").upper()
    if pos in ("D/ST", "DST"):
        pos = "DEF"
    norm = _defense_nickname(name) if pos == "DEF" else _norm_name(name)
    if not norm or pos not in POSITION_FILES:
        return None
    return f"{pos}:{norm}"


def _find_column(df: pd.DataFrame, wanted: str):
    """Locate a column by its (last-level) header, case-insensitively."""
    for col in df.columns:
        label = col[-1] if isinstance(col, tuple) else col
        if str(label).strip().upper() == wanted.upper():
            return col
    return None


def _load_position_file(path: Path, pos: str) -> Dict[str, float]:
    """
    Read one FantasyPros .xls file and return {projection_key: fpts}.

    We handle both simple columns ('Player', 'FPTS') and MultiIndex columns
    like ('Unnamed: 0_level_0', 'Player').
    """
    if not path.exists():
        logger.warning("[FantasyPros] file not found for %s: %s", pos, path)
        return {}

    # These .xls downloads are actually HTML tables; read_html copes better.
    tables = pd.read_html(path)
    if not tables:
        logger.warning("[FantasyPros] no tables found in %s", path)
        return {}

    df = tables[0]
    player_col = _find_column(df, "Player")
    fpts_col = _find_column(df, "FPTS")

    if player_col is None or fpts_col is None:
        logger.warning("[FantasyPros] could not find Player/FPTS columns in %s", path)
        return {}

    logger.info("[FantasyPros] %s: loaded %d rows from %s", pos, len(df), path.name)

    out: Dict[str, float] = {}
    for _, row in df.iterrows():
        try:
            fpts_raw = float(row[fpts_col])
        except (TypeError, ValueError):
            continue

        key = projection_key_for(row[player_col], pos)
        if key is None:
            continue

        # Keep the max projection if duplicates exist.
        prev = out.get(key)
        if prev is None or fpts_raw > prev:
            out[key] = fpts_raw

    return out


def download_projection_file(pos: str, scoring_format: ScoringFormat, outfile: Path) -> None:
    """Download one position's projection table. HTTP errors propagate."""
    url = BASE_URL.format(pos=POSITION_FILES[pos])
    params = {"scoring": _FP_SCORING[scoring_format]}

    logger.info("[FantasyPros] Downloading %s projections (%s)...", pos, params["scoring"])

    resp = requests.get(
        url,
        headers=USER_AGENT_HEADER,
        params=params,
        timeout=15,
    )
    resp.raise_for_status()

    outfile.parent.mkdir(parents=True, exist_ok=True)
    with open(outfile, "wb") as f:
        f.write(resp.content)

    logger.info("[FantasyPros] Saved -> %s", outfile)


class FantasyProsProjections:
    """
    ProjectionProvider backed by FantasyPros weekly projection tables.

    Tables are read from DATA_ROOT/fp_week{W}_{YEAR}_{format}/{pos}.xls and
    downloaded first when the folder is empty. Parsed tables are kept in
    memory per folder. Only the requested format's field is filled on each
    ProjectionRecord, since FantasyPros publishes one table per format.

    FantasyPros only publishes the *upcoming* week, so a download for any
    other week would store the wrong numbers; we only download when `week`
    equals `download_week` (when given).
    """

    def __init__(
        self,
        data_root: Optional[Path] = None,
        download: bool = True,
        download_week: Optional[int] = None,
    ):
        self.data_root = Path(data_root) if data_root is not None else Path(DATA_ROOT)
        self.download = download
        self.download_week = download_week
        self._cache: Dict[str, Dict[str, ProjectionRecord]] = {}

    def _ensure_downloaded(self, folder_path: Path, week: int, scoring_format: ScoringFormat) -> None:
        if folder_path.exists() and any(folder_path.iterdir()):
            return
        if not self.download:
            return
        if self.download_week is not None and week != self.download_week:
            logger.warning(
                "[FantasyPros] No saved projections for week %d and FantasyPros "
                "only serves the current week; skipping download.",
                week,
            )
            return

        logger.info("[FantasyPros] No projection files in %s; downloading...", folder_path)
        for pos in POSITION_FILES:
            download_projection_file(
                pos, scoring_format, folder_path / f"{POSITION_FILES[pos]}.xls"
            )

    def fetch_projections(
        self, week: int, year: int, scoring_format: ScoringFormat
    ) -> Dict[str, ProjectionRecord]:
        scoring_format = ScoringFormat.parse(scoring_format)
        folder_path = self.data_root / week_folder(week, year, scoring_format)
        cache_key = str(folder_path.resolve())

        if cache_key in self._cache:
            return self._cache[cache_key]

        self._ensure_downloaded(folder_path, week, scoring_format)

        table: Dict[str, ProjectionRecord] = {}
        for pos, stem in POSITION_FILES.items():
            for key, fpts in _load_position_file(folder_path / f"{stem}.xls", pos).items():
                record = ProjectionRecord()
                setattr(record, scoring_format.value, fpts)
                table[key] = record

        logger.info(
            "[FantasyPros] Loaded %d projection entries for week %d (%s).",
            len(table),
            week,
            scoring_format.value,
        )

        # Don't cache an empty read; the files may show up later.
        if table:
            self._cache[cache_key] = table
        return table
