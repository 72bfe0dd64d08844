from __future__ import annotations

from pathlib import Path
import sqlite3

SCHEMA_SQL = """
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS report_configs (
  id TEXT PRIMARY KEY,
  name TEXT NOT NULL UNIQUE,
  deadline TEXT NOT NULL DEFAULT 'ATÉ 09:00',
  points_on_time INTEGER NOT NULL DEFAULT 20,
  points_late INTEGER NOT NULL DEFAULT -10,
  points_missed INTEGER NOT NULL DEFAULT -40,
  responsibles TEXT NOT NULL DEFAULT '[]',
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS submission_events (
  id TEXT PRIMARY KEY,
  day TEXT NOT NULL,
  report_type TEXT NOT NULL,
  responsible TEXT NOT NULL,
  status TEXT NOT NULL CHECK (status IN ('ON_TIME', 'LATE', 'MISSED_OR_WRONG')),
  points REAL NOT NULL,
  created_at TEXT NOT NULL,
  UNIQUE(day, report_type, responsible)
);
"""


def connect(db_path: Path | str) -> sqlite3.Connection:
    if str(db_path) != ":memory:":
        db_path = Path(db_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)
        db_path = db_path.as_posix()
    con = sqlite3.connect(db_path)
    con.row_factory = sqlite3.Row
    con.execute("PRAGMA foreign_keys=ON;")
    return con


def _get_user_version(con: sqlite3.Connection) -> int:
    row = con.execute("PRAGMA user_version;").fetchone()
    return int(row[0]) if row else 0


def _set_user_version(con: sqlite3.Connection, version: int) -> None:
    con.execute(f"PRAGMA user_version = {version};")


def _column_exists(con: sqlite3.Connection, table: str, column: str) -> bool:
    cur = con.execute(f"PRAGMA table_info({table});")
    return any(row["name"] == column for row in cur.fetchall())


def _migrate_to_v2(con: sqlite3.Connection) -> None:
    if not _column_exists(con, "submission_events", "note"):
        con.execute("ALTER TABLE submission_events ADD COLUMN note TEXT;")
    con.execute(
        """
        CREATE INDEX IF NOT EXISTS idx_submission_events_day
        ON submission_events (day);
        """
    )
    _set_user_version(con, 2)


def init_db(con: sqlite3.Connection) -> None:
    con.executescript(SCHEMA_SQL)
    current_version = _get_user_version(con)
    if current_version < 2:
        _migrate_to_v2(con)
    con.commit()


def table_count(con: sqlite3.Connection, table: str) -> int:
    cur = con.execute(f"SELECT COUNT(1) AS n FROM {table}")
    return int(cur.fetchone()["n"])
