from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from config import DB_PATH, DEFAULT_MIN_IMPROVEMENT_PCT  # type: ignore[import]


def clamp_pct(value: float) -> float:
    """Thresholds are percentages; keep them inside 0-100."""
    return max(0.0, min(100.0, float(value)))


def _get_conn(db_path: Optional[Path] = None) -> sqlite3.Connection:
    path = Path(db_path) if db_path is not None else DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(path)
    conn.row_factory = sqlite3.Row
    _create_tables(conn)
    return conn


def _create_tables(conn: sqlite3.Connection) -> None:
    cur = conn.cursor()

    # One row per preference profile (a user, a device, or "default").
    cur.execute(
        """
        CREATE TABLE IF NOT EXISTS preferences (
            profile TEXT PRIMARY KEY,
            min_improvement_pct REAL NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def init_db(db_path: Optional[Path] = None) -> None:
    """Create the preferences table if it does not exist yet."""
    _get_conn(db_path).close()


def get_min_improvement_pct(profile: str, db_path: Optional[Path] = None) -> float:
    """
    Current minimum-improvement threshold for `profile`, or the configured
    default when the profile has never saved one.
    """
    conn = _get_conn(db_path)
    cur = conn.cursor()
    cur.execute(
        "SELECT min_improvement_pct FROM preferences WHERE profile = ?",
        (profile,),
    )
    row = cur.fetchone()
    conn.close()
    if not row:
        return DEFAULT_MIN_IMPROVEMENT_PCT
    return clamp_pct(row["min_improvement_pct"])


def set_min_improvement_pct(profile: str, value: float, db_path: Optional[Path] = None) -> float:
    """Store a new threshold (clamped to 0-100) and return what was stored."""
    stored = clamp_pct(value)
    conn = _get_conn(db_path)
    cur = conn.cursor()
    now = datetime.now(tz=timezone.utc).isoformat()
    cur.execute(
        """
        INSERT INTO preferences (profile, min_improvement_pct, updated_at)
        VALUES (?, ?, ?)
        ON CONFLICT(profile) DO UPDATE SET
            min_improvement_pct=excluded.min_improvement_pct,
            updated_at=excluded.updated_at
        """,
        (profile, stored, now),
    )
    conn.commit()
    conn.close()
    return stored


def reset_min_improvement_pct(profile: str, db_path: Optional[Path] = None) -> float:
    """Forget a profile's threshold so it falls back to the default."""
    conn = _get_conn(db_path)
    cur = conn.cursor()
    cur.execute("DELETE FROM preferences WHERE profile = ?", (profile,))
    conn.commit()
    conn.close()
    return DEFAULT_MIN_IMPROVEMENT_PCT
