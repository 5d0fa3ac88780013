"""Roster & pick store.

Contracts and draft picks live on Franchise lists (league/types.py). This module
holds the seeding / import entry points and the cap-snapshot refresh that every
roster mutation must go through.

Import feed (CSV or Excel, read with pandas):
  franchise_id | player_id | name | position | salary | years_remaining [| no_trade | extension_eligible]
`team_id` / `pos` are accepted as column aliases.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import config
from cap_model import CapThresholds, build_cap_snapshot
from schema import normalize_franchise_id, normalize_player_id

from .errors import INVALID_STATE, LeagueError
from .types import Contract, DraftPickAsset, Franchise, League

logger = logging.getLogger(__name__)

_REQUIRED_COLUMNS = ("franchise_id", "player_id", "name", "position", "salary", "years_remaining")
_COLUMN_ALIASES = {"team_id": "franchise_id", "pos": "position", "salary_amount": "salary", "years": "years_remaining"}
_TRUTHY = {"1", "true", "yes", "y", "x"}


# ----------------------------
# Cap snapshots
# ----------------------------

def refresh_cap_snapshot(league: League, franchise: Franchise) -> None:
    """Recompute `franchise.cap_snapshot` in place. Callers pass a working copy."""
    franchise.cap_snapshot = build_cap_snapshot(CapThresholds.from_config(league.config), franchise)


def refresh_all_cap_snapshots(league: League) -> None:
    thresholds = CapThresholds.from_config(league.config)
    for franchise in league.franchises.values():
        franchise.cap_snapshot = build_cap_snapshot(thresholds, franchise)


def player_owner_index(league: League) -> Dict[str, str]:
    """player_id -> franchise_id for every contract in the league."""
    out: Dict[str, str] = {}
    for fid, franchise in league.franchises.items():
        for c in franchise.contracts:
            out[c.player_id] = fid
    return out


def pick_owner_index(league: League) -> Dict[DraftPickAsset, str]:
    out: Dict[DraftPickAsset, str] = {}
    for fid, franchise in league.franchises.items():
        for p in franchise.draft_picks:
            out[p] = fid
    return out


# ----------------------------
# Seeding
# ----------------------------

def seed_contracts(
    league: League,
    franchise_id: str,
    contracts: Iterable[Contract],
    *,
    replace: bool = True,
) -> League:
    """Load contracts onto one franchise. Returns a new league.

    replace=True drops the franchise's current contracts first. A player already
    under contract with a different franchise is rejected (INVALID_STATE).
    """
    lg = league.copy()
    franchise = lg.get_franchise(franchise_id)
    incoming = list(contracts)

    seen: set[str] = set()
    dupes = []
    for c in incoming:
        if c.player_id in seen:
            dupes.append(c.player_id)
        seen.add(c.player_id)
    if dupes:
        raise LeagueError(INVALID_STATE, "Duplicate player_id in contract feed", {"player_ids": sorted(set(dupes))})

    owners = player_owner_index(lg)
    conflicts = sorted(pid for pid in seen if owners.get(pid) not in (None, franchise.franchise_id))
    if conflicts:
        raise LeagueError(
            INVALID_STATE,
            "Player already under contract with another franchise",
            {"player_ids": conflicts, "franchise_id": franchise.franchise_id},
        )

    if replace:
        franchise.contracts = incoming
    else:
        by_id = {c.player_id: c for c in franchise.contracts}
        for c in incoming:
            by_id[c.player_id] = c
        franchise.contracts = list(by_id.values())

    refresh_cap_snapshot(lg, franchise)
    return lg


def seed_draft_picks(
    league: League,
    start_year: int,
    *,
    years_ahead: int = config.DRAFT_PICK_YEARS_AHEAD,
    rounds: int = config.DRAFT_ROUNDS,
) -> League:
    """Give each franchise its own picks for [start_year, start_year + years_ahead).

    Idempotent: a (year, round, original) triple that already exists anywhere in
    the league (including a traded pick) is not created again.
    """
    if years_ahead <= 0 or rounds <= 0:
        raise LeagueError(INVALID_STATE, "years_ahead and rounds must be positive", {"years_ahead": years_ahead, "rounds": rounds})

    lg = league.copy()
    existing = set(pick_owner_index(lg))
    created = 0
    for fid, franchise in lg.franchises.items():
        for year in range(int(start_year), int(start_year) + int(years_ahead)):
            for rnd in range(1, int(rounds) + 1):
                pick = DraftPickAsset(year=year, round=rnd, original_franchise_id=fid)
                if pick in existing:
                    continue
                franchise.draft_picks.append(pick)
                existing.add(pick)
                created += 1
    logger.info("seeded %d draft picks (league=%s start_year=%s)", created, lg.league_id, start_year)
    return lg


# ----------------------------
# Table import (pandas)
# ----------------------------

def parse_salary_int(value: Any) -> Optional[int]:
    """Accepts 15161800, "15,161,800", "$15,161,800". None for empty."""
    if value is None:
        return None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if value != value:
            return None
        return int(value)
    s = str(value).strip()
    if not s or s.lower() in {"nan", "none"}:
        return None
    s = s.replace("$", "").replace(",", "")
    if not re.fullmatch(r"-?\d+", s):
        return None
    return int(s)


def _parse_flag(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, float) and value != value:
        return False
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def read_roster_table(source: Any, *, sheet_name: Optional[str] = None) -> List[Tuple[str, Contract]]:
    """Read a roster feed into (franchise_id, Contract) rows.

    `source` may be a path (.csv / .xlsx / .xls) or a pandas DataFrame.
    Fails on missing columns or unparseable rows (ValueError).
    """
    import pandas as pd  # local import so the engine can be used without pandas

    if isinstance(source, pd.DataFrame):
        df = source.copy()
    else:
        path = Path(source)
        if path.suffix.lower() in (".xlsx", ".xls"):
            df = pd.read_excel(path, sheet_name=(sheet_name if sheet_name is not None else 0))
        else:
            df = pd.read_csv(path)

    df = df.rename(columns=lambda c: str(c).strip().lower())
    df = df.rename(columns={k: v for k, v in _COLUMN_ALIASES.items() if k in df.columns and v not in df.columns})
    missing = [c for c in _REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"roster table missing required columns: {missing}. Found: {list(df.columns)}")

    df["franchise_id"] = df["franchise_id"].astype(str).str.strip().str.upper()
    df["player_id"] = df["player_id"].astype(str).str.strip()

    rows: List[Tuple[str, Contract]] = []
    for idx, row in df.iterrows():
        salary = parse_salary_int(row.get("salary"))
        years = parse_salary_int(row.get("years_remaining"))
        if salary is None or years is None:
            raise ValueError(f"row {idx}: salary/years_remaining must be integers (player_id={row.get('player_id')!r})")
        contract = Contract(
            player_id=normalize_player_id(row.get("player_id")),
            name=str(row.get("name") or "").strip(),
            position=str(row.get("position") or "").strip().upper(),
            salary=salary,
            years_remaining=years,
            no_trade=_parse_flag(row.get("no_trade")),
            extension_eligible=_parse_flag(row.get("extension_eligible")),
        )
        rows.append((normalize_franchise_id(row.get("franchise_id")), contract))
    return rows


def import_roster_table(
    league: League,
    source: Any,
    *,
    sheet_name: Optional[str] = None,
    mode: str = "replace",
) -> League:
    """Import a roster feed for every franchise it mentions.

    mode:
      - replace: franchises named in the feed get exactly the feed's contracts
      - upsert: contracts are added/updated, nothing is dropped
    """
    if mode not in ("replace", "upsert"):
        raise LeagueError(INVALID_STATE, "Unknown import mode", {"mode": mode})

    try:
        rows = read_roster_table(source, sheet_name=sheet_name)
    except ValueError as exc:
        raise LeagueError(INVALID_STATE, "Roster feed rejected", {"error": str(exc)}) from exc
    by_franchise: Dict[str, List[Contract]] = {}
    for fid, contract in rows:
        league.get_franchise(fid)
        by_franchise.setdefault(fid, []).append(contract)

    lg = league
    if mode == "replace":
        # Clear first so players moving between franchises in the feed do not conflict.
        lg = lg.copy()
        for fid in by_franchise:
            lg.franchises[fid].contracts = []
    for fid, contracts in by_franchise.items():
        lg = seed_contracts(lg, fid, contracts, replace=(mode == "replace"))

    logger.info("imported %d contracts for %d franchises (league=%s)", len(rows), len(by_franchise), league.league_id)
    return lg


__all__: Sequence[str] = [
    "refresh_cap_snapshot",
    "refresh_all_cap_snapshots",
    "player_owner_index",
    "pick_owner_index",
    "seed_contracts",
    "seed_draft_picks",
    "read_roster_table",
    "import_roster_table",
    "parse_salary_int",
]
