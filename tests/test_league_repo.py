"""
SQLite store: round trip, optimistic versioning and corrupt documents.
"""

import sqlite3

import pytest

from league.errors import CorruptStateError, LeagueError
from league_repo import LeagueRepo
from trades.builder import add_player, new_proposal, submit


class TestRoundTrip:
    def test_create_then_load(self, repo, league, t0):
        stored = repo.create(league, now=t0)
        assert stored.version == 1
        loaded = repo.load(league.league_id)
        assert loaded.to_payload() == stored.to_payload()
        assert repo.list_league_ids() == ["test-league"]

    def test_full_state_survives(self, repo, league, t0):
        p = add_player(league, new_proposal(league, "F1", "F3", now=t0), "A", "a3")
        lg, _ = submit(league, p, now=t0)
        repo.create(lg, now=t0)
        loaded = repo.load(lg.league_id)
        assert loaded.find_proposal(p.proposal_id).package_a.player_ids == ("a3",)
        assert loaded.get_franchise("F1").cap_snapshot == lg.get_franchise("F1").cap_snapshot
        assert loaded.config == lg.config

    def test_duplicate_create(self, repo, league, t0):
        repo.create(league, now=t0)
        with pytest.raises(LeagueError) as exc:
            repo.create(league, now=t0)
        assert exc.value.code == "LEAGUE_EXISTS"

    def test_missing_league(self, repo):
        with pytest.raises(LeagueError) as exc:
            repo.load("nope")
        assert exc.value.code == "LEAGUE_NOT_FOUND"
        with pytest.raises(LeagueError):
            repo.delete("nope")

    def test_delete(self, repo, league, t0):
        repo.create(league, now=t0)
        repo.delete(league.league_id)
        assert not repo.exists(league.league_id)


class TestVersioning:
    def test_save_bumps_version(self, repo, league, t0, later):
        stored = repo.create(league, now=t0)
        saved = repo.save(stored, now=later(minutes=1))
        assert saved.version == 2
        assert saved.updated_at == later(minutes=1)
        assert repo.load(league.league_id).version == 2

    def test_stale_snapshot_rejected(self, repo, league, t0):
        stored = repo.create(league, now=t0)
        repo.save(stored, now=t0)
        with pytest.raises(LeagueError) as exc:
            repo.save(stored, now=t0)
        assert exc.value.code == "STALE_SNAPSHOT"
        assert exc.value.details["stored_version"] == 2
        assert repo.load(league.league_id).version == 2


class TestCorruption:
    def _corrupt(self, db_path, doc):
        conn = sqlite3.connect(db_path)
        try:
            conn.execute("UPDATE leagues SET doc_json=? WHERE league_id='test-league';", (doc,))
            conn.commit()
        finally:
            conn.close()

    def test_bad_json(self, repo, db_path, league, t0):
        repo.create(league, now=t0)
        self._corrupt(db_path, "{not json")
        with pytest.raises(CorruptStateError) as exc:
            repo.load("test-league")
        assert exc.value.code == "CORRUPT_STATE"

    def test_missing_field(self, repo, db_path, league, t0):
        repo.create(league, now=t0)
        self._corrupt(db_path, '{"league_id": "test-league"}')
        with pytest.raises(CorruptStateError):
            repo.load("test-league")
        assert repo.validate_integrity() == ["test-league"]

    def test_corrupt_league_is_not_repaired(self, repo, db_path, league, t0):
        repo.create(league, now=t0)
        self._corrupt(db_path, "[]")
        repo.validate_integrity()
        conn = sqlite3.connect(db_path)
        try:
            (doc,) = conn.execute("SELECT doc_json FROM leagues WHERE league_id='test-league';").fetchone()
        finally:
            conn.close()
        assert doc == "[]"


class TestSchema:
    def _columns(self, db_path):
        conn = sqlite3.connect(db_path)
        try:
            return {row[1] for row in conn.execute("PRAGMA table_info(leagues);")}
        finally:
            conn.close()

    def test_fresh_table_declares_is_paused(self, repo, db_path):
        conn = sqlite3.connect(db_path)
        try:
            (sql,) = conn.execute("SELECT sql FROM sqlite_master WHERE type='table' AND name='leagues';").fetchone()
            (index,) = conn.execute("SELECT name FROM sqlite_master WHERE type='index' AND name='idx_leagues_phase';").fetchone()
        finally:
            conn.close()
        assert "is_paused" in sql
        assert index == "idx_leagues_phase"

    def test_older_store_gains_is_paused(self, tmp_path):
        path = str(tmp_path / "old.sqlite3")
        conn = sqlite3.connect(path)
        conn.execute(
            "CREATE TABLE leagues (league_id TEXT PRIMARY KEY, season_name TEXT NOT NULL DEFAULT '', "
            "phase TEXT NOT NULL, version INTEGER NOT NULL DEFAULT 0, doc_json TEXT NOT NULL, "
            "created_at TEXT NOT NULL, updated_at TEXT NOT NULL);"
        )
        conn.commit()
        conn.close()
        assert "is_paused" not in self._columns(path)

        with LeagueRepo(path) as r:
            r.init_db()
        assert "is_paused" in self._columns(path)
