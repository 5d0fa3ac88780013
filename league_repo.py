# league_repo.py
# Developer note:
# - SQLite DB is the single source of truth (SSOT) for persisted leagues.
# - One JSON document per league (League.to_payload); roster CSV/Excel files are import only.
# - franchise_id is a canonical uppercase code; always go through schema.py normalization.
"""
LeagueRepository: persisted-data SSOT (SQLite)

Goal:
- Engine operations work on in-memory League snapshots.
- Loading and saving a snapshot goes through LeagueRepo, with an optimistic
  version check so two writers can never silently overwrite each other.
- A document that cannot be decoded raises CorruptStateError. It is never repaired.

Usage (CLI):
  python league_repo.py init --db <db_path>
  python league_repo.py list --db <db_path>
  python league_repo.py show --db <db_path> --league <league_id>
  python league_repo.py import_roster --db <db_path> --league <league_id> --file roster.xlsx
  python league_repo.py validate --db <db_path>

Python:
  from league_repo import LeagueRepo
  with LeagueRepo("<db_path>") as repo:
      repo.init_db()
      league = repo.load("guild-123")
"""

from __future__ import annotations

import argparse
import contextlib
import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, List, Mapping, Optional, Sequence

import game_time
from league.errors import (
    CORRUPT_STATE,
    LEAGUE_EXISTS,
    LEAGUE_NOT_FOUND,
    STALE_SNAPSHOT,
    CorruptStateError,
    LeagueError,
)
from league.types import League
from schema import SCHEMA_VERSION

logger = logging.getLogger(__name__)


def _json_dumps(obj: Any) -> str:
    return json.dumps(
        obj,
        ensure_ascii=False,
        separators=(",", ":"),
        sort_keys=True,
    )


# ----------------------------
# Repository
# ----------------------------

class LeagueRepo:
    def __init__(self, db_path: str | Path):
        self.db_path = str(db_path)
        # check_same_thread=False: the API layer serializes access per league (league_locks).
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute("PRAGMA foreign_keys = ON;")
        self._conn.execute("PRAGMA journal_mode = WAL;")
        # Nested transaction support (SAVEPOINT) for callers that compose repo methods.
        self._savepoint_seq = 0

    def close(self) -> None:
        try:
            self._conn.close()
        except sqlite3.Error:
            logger.warning("LeagueRepo.close failed (db=%s)", self.db_path, exc_info=True)

    @contextlib.contextmanager
    def transaction(self):
        """
        Atomic transaction helper.

        Supports nesting via SAVEPOINT:
        - outermost: BEGIN ... COMMIT/ROLLBACK
        - nested: SAVEPOINT ... RELEASE (or ROLLBACK TO + RELEASE on error)
        """
        cur = self._conn.cursor()
        nested = bool(getattr(self._conn, "in_transaction", False))
        sp_name = None
        try:
            if nested:
                self._savepoint_seq += 1
                sp_name = f"sp_{self._savepoint_seq}"
                cur.execute(f"SAVEPOINT {sp_name};")
            else:
                self._conn.execute("BEGIN;")

            yield cur

            if nested and sp_name:
                cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                self._conn.commit()
        except Exception:
            if nested and sp_name:
                # Roll back to the savepoint only; do NOT rollback the outer transaction here.
                try:
                    cur.execute(f"ROLLBACK TO SAVEPOINT {sp_name};")
                finally:
                    cur.execute(f"RELEASE SAVEPOINT {sp_name};")
            else:
                self._conn.rollback()
            raise
        finally:
            cur.close()

    # ------------------------
    # Schema
    # ------------------------

    def _ensure_table_columns(self, cur: sqlite3.Cursor, table: str, columns: Mapping[str, str]) -> None:
        """SQLite has no ADD COLUMN IF NOT EXISTS; check PRAGMA table_info first."""
        rows = cur.execute(f"PRAGMA table_info({table});").fetchall()
        existing = {r["name"] for r in rows}
        for col, ddl in columns.items():
            if col in existing:
                continue
            cur.execute(f"ALTER TABLE {table} ADD COLUMN {col} {ddl};")

    def init_db(self) -> None:
        """Apply SQLite schema (DDL + migrations) via db_schema."""
        from db_schema import apply_schema

        now = game_time.to_iso(game_time.utc_now())
        with self.transaction() as cur:
            apply_schema(
                cur,
                now=now,
                schema_version=SCHEMA_VERSION,
                ensure_columns=self._ensure_table_columns,
            )

    # ------------------------
    # League documents
    # ------------------------

    def exists(self, league_id: str) -> bool:
        row = self._conn.execute("SELECT 1 FROM leagues WHERE league_id=? LIMIT 1;", (str(league_id),)).fetchone()
        return row is not None

    def list_league_ids(self) -> List[str]:
        rows = self._conn.execute("SELECT league_id FROM leagues ORDER BY league_id;").fetchall()
        return [str(r["league_id"]) for r in rows]

    def create(self, league: League, now: Optional[datetime] = None) -> League:
        """Insert a brand-new league. Returns the stored snapshot (version 1)."""
        if self.exists(league.league_id):
            raise LeagueError(LEAGUE_EXISTS, "League already exists", {"league_id": league.league_id})
        stored = league.copy()
        stored.version = 1
        stored.updated_at = game_time.resolve_now(now)
        with self.transaction() as cur:
            cur.execute(
                """
                INSERT INTO leagues(league_id, season_name, phase, version, doc_json, created_at, updated_at, is_paused)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?);
                """,
                self._row_values(stored),
            )
        logger.info("league stored (league=%s)", stored.league_id)
        return stored

    def load(self, league_id: str) -> League:
        row = self._conn.execute(
            "SELECT league_id, version, doc_json FROM leagues WHERE league_id=?;",
            (str(league_id),),
        ).fetchone()
        if row is None:
            raise LeagueError(LEAGUE_NOT_FOUND, "League not found", {"league_id": league_id})
        return self._decode(row)

    def save(self, league: League, now: Optional[datetime] = None) -> League:
        """Persist `league` if nobody else saved since it was loaded.

        The stored version must equal league.version; the saved snapshot gets
        version + 1 and a fresh updated_at. Returns the saved snapshot.
        """
        stored = league.copy()
        stored.version = league.version + 1
        stored.updated_at = game_time.resolve_now(now)
        values = self._row_values(stored)
        with self.transaction() as cur:
            cur.execute(
                """
                UPDATE leagues
                SET season_name=?, phase=?, version=?, doc_json=?, updated_at=?, is_paused=?
                WHERE league_id=? AND version=?;
                """,
                (values[1], values[2], values[3], values[4], values[6], values[7], stored.league_id, league.version),
            )
            if cur.rowcount != 1:
                row = cur.execute("SELECT version FROM leagues WHERE league_id=?;", (stored.league_id,)).fetchone()
                if row is None:
                    raise LeagueError(LEAGUE_NOT_FOUND, "League not found", {"league_id": stored.league_id})
                raise LeagueError(
                    STALE_SNAPSHOT,
                    "League was modified by another operation",
                    {"league_id": stored.league_id, "expected_version": league.version, "stored_version": int(row["version"])},
                )
        return stored

    def delete(self, league_id: str) -> None:
        with self.transaction() as cur:
            cur.execute("DELETE FROM leagues WHERE league_id=?;", (str(league_id),))
            if cur.rowcount != 1:
                raise LeagueError(LEAGUE_NOT_FOUND, "League not found", {"league_id": league_id})
        logger.warning("league deleted (league=%s)", league_id)

    # ------------------------
    # Encoding
    # ------------------------

    @staticmethod
    def _row_values(league: League) -> tuple:
        return (
            league.league_id,
            league.season_name,
            league.phase.value,
            league.version,
            _json_dumps(league.to_payload()),
            game_time.to_iso(league.created_at),
            game_time.to_iso(league.updated_at),
            1 if league.is_paused else 0,
        )

    @staticmethod
    def _decode(row: sqlite3.Row) -> League:
        league_id = str(row["league_id"])
        try:
            payload = json.loads(row["doc_json"])
            if not isinstance(payload, dict):
                raise TypeError(f"document must be an object, got {type(payload).__name__}")
            league = League.from_payload(payload)
        except (json.JSONDecodeError, KeyError, TypeError, ValueError) as exc:
            logger.error("corrupt league document (league=%s): %s", league_id, exc)
            raise CorruptStateError(
                CORRUPT_STATE,
                "Stored league document is corrupt",
                {"league_id": league_id, "exc_type": type(exc).__name__, "error": str(exc)},
            ) from exc

        if league.league_id != league_id or league.version != int(row["version"]):
            raise CorruptStateError(
                CORRUPT_STATE,
                "Stored league document does not match its row",
                {
                    "league_id": league_id,
                    "doc_league_id": league.league_id,
                    "row_version": int(row["version"]),
                    "doc_version": league.version,
                },
            )
        return league

    def validate_integrity(self) -> List[str]:
        """Decode every stored league. Returns ids that fail (never repairs them)."""
        bad: List[str] = []
        for lid in self.list_league_ids():
            try:
                self.load(lid)
            except CorruptStateError:
                bad.append(lid)
        return bad

    # ------------------------
    # Convenience
    # ------------------------

    def __enter__(self) -> "LeagueRepo":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ----------------------------
# CLI
# ----------------------------

def _cmd_init(args) -> None:
    with LeagueRepo(args.db) as repo:
        repo.init_db()
    print(f"OK: initialized {args.db}")

def _cmd_list(args) -> None:
    with LeagueRepo(args.db) as repo:
        for lid in repo.list_league_ids():
            print(lid)

def _cmd_show(args) -> None:
    with LeagueRepo(args.db) as repo:
        league = repo.load(args.league)
    print(json.dumps(league.to_payload(), ensure_ascii=False, indent=2))

def _cmd_import_roster(args) -> None:
    from league.roster import import_roster_table

    with LeagueRepo(args.db) as repo:
        league = repo.load(args.league)
        league = import_roster_table(league, args.file, sheet_name=args.sheet, mode=args.mode)
        repo.save(league)
    print(f"OK: imported roster from {args.file} into {args.league}")

def _cmd_validate(args) -> None:
    with LeagueRepo(args.db) as repo:
        bad = repo.validate_integrity()
    if bad:
        print(f"FAIL: corrupt leagues: {', '.join(bad)}")
        raise SystemExit(1)
    print(f"OK: validation passed for {args.db}")

def main(argv: Optional[Sequence[str]] = None) -> None:
    p = argparse.ArgumentParser(description="LeagueRepo (SQLite single source of truth)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_init = sub.add_parser("init", help="initialize DB schema")
    p_init.add_argument("--db", required=True, help="path to sqlite db file")
    p_init.set_defaults(func=_cmd_init)

    p_list = sub.add_parser("list", help="list stored league ids")
    p_list.add_argument("--db", required=True, help="path to sqlite db file")
    p_list.set_defaults(func=_cmd_list)

    p_show = sub.add_parser("show", help="print a league document")
    p_show.add_argument("--db", required=True, help="path to sqlite db file")
    p_show.add_argument("--league", required=True, help="league id")
    p_show.set_defaults(func=_cmd_show)

    p_imp = sub.add_parser("import_roster", help="import a roster CSV/Excel file into a league")
    p_imp.add_argument("--db", required=True, help="path to sqlite db file")
    p_imp.add_argument("--league", required=True, help="league id")
    p_imp.add_argument("--file", required=True, help="path to roster .csv/.xlsx")
    p_imp.add_argument("--sheet", default=None, help="sheet name (optional, Excel only)")
    p_imp.add_argument("--mode", choices=["replace", "upsert"], default="replace")
    p_imp.set_defaults(func=_cmd_import_roster)

    p_val = sub.add_parser("validate", help="decode every stored league")
    p_val.add_argument("--db", required=True, help="path to sqlite db file")
    p_val.set_defaults(func=_cmd_validate)

    args = p.parse_args(argv)
    args.func(args)

if __name__ == "__main__":
    main()
