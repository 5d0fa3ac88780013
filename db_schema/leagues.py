# db_schema/leagues.py
"""SQLite schema: league documents.

One row per league. `doc_json` holds the full League payload (League.to_payload);
phase / version / timestamps are mirrored into first-class columns so listing
and optimistic-concurrency checks never parse JSON.
"""

from __future__ import annotations

import sqlite3
from typing import Callable, Mapping


EnsureColumnsFn = Callable[[sqlite3.Cursor, str, Mapping[str, str]], None]


def ddl(*, now: str, schema_version: str) -> str:
    _ = (now, schema_version)
    return """
                CREATE TABLE IF NOT EXISTS leagues (
                    league_id TEXT PRIMARY KEY,
                    season_name TEXT NOT NULL DEFAULT '',
                    phase TEXT NOT NULL,
                    version INTEGER NOT NULL DEFAULT 0,
                    is_paused INTEGER NOT NULL DEFAULT 0,
                    doc_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL
                );
"""


def migrate(cur: sqlite3.Cursor, *, ensure_columns: EnsureColumnsFn) -> None:
    """Apply post-DDL schema migrations."""
    # No-op on fresh tables; patches stores created before is_paused was mirrored.
    ensure_columns(cur, "leagues", {"is_paused": "INTEGER NOT NULL DEFAULT 0"})
    cur.execute("CREATE INDEX IF NOT EXISTS idx_leagues_phase ON leagues(phase);")
