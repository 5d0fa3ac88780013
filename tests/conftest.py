"""
Pytest configuration and shared fixtures.

Provides:
- a fixed clock (`t0`) so every engine call is deterministic
- a small three-franchise league with a known cap position per franchise
- a temporary SQLite store
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from league.roster import seed_contracts, seed_draft_picks
from league.service import create_league
from league.types import Contract, LeagueConfig
from league_repo import LeagueRepo

M = 1_000_000


def make_contract(player_id, salary, *, no_trade=False, years=2, position="G"):
    return Contract(
        player_id=player_id,
        name=player_id.upper(),
        position=position,
        salary=salary,
        years_remaining=years,
        no_trade=no_trade,
    )


@pytest.fixture
def t0():
    return datetime(2026, 7, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def later(t0):
    """Clock helper: later(seconds=...) -> t0 + delta."""

    def _later(**kwargs):
        return t0 + timedelta(**kwargs)

    return _later


@pytest.fixture
def small_config():
    # cap 100M < tax 120M < first apron 130M < second apron 140M
    return LeagueConfig(
        salary_cap=100 * M,
        luxury_tax=120 * M,
        first_apron=130 * M,
        second_apron=140 * M,
        slot_count=3,
    )


@pytest.fixture
def league(small_config, t0):
    """
    F1: 110.0M payroll (OVER_CAP)  a1 60M, a2 40M, a3 10M
    F2: 112.6M payroll (OVER_CAP)  b1 60M, b2 40M, b3 12.6M
    F3:  20.0M payroll (UNDER_CAP) c1 20M (no-trade), c2 0M
    Picks 2027-2028, two rounds, each franchise its own.
    """
    lg = create_league("test-league", small_config, "2026-27", now=t0)
    lg = seed_contracts(
        lg,
        "F1",
        [make_contract("a1", 60 * M), make_contract("a2", 40 * M), make_contract("a3", 10 * M)],
    )
    lg = seed_contracts(
        lg,
        "F2",
        [make_contract("b1", 60 * M), make_contract("b2", 40 * M), make_contract("b3", 12_600_000)],
    )
    lg = seed_contracts(
        lg,
        "F3",
        [make_contract("c1", 20 * M, no_trade=True), make_contract("c2", 0)],
    )
    return seed_draft_picks(lg, 2027, years_ahead=2, rounds=2)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "league.sqlite3")


@pytest.fixture
def repo(db_path):
    with LeagueRepo(db_path) as r:
        r.init_db()
        yield r
