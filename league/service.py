from __future__ import annotations

"""League administration: creation, GM assignment, reset, config edits.

All functions take a League snapshot and return a new one; the input is never
mutated. `record_transaction` is the exception: it appends to a working copy the
caller already owns.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, Mapping, Optional, Union
from uuid import uuid4

import config
import game_time
from schema import normalize_franchise_id, normalize_participant_id

from .errors import (
    ALREADY_GM,
    FRANCHISE_TAKEN,
    INVALID_STATE,
    LeagueError,
)
from .roster import refresh_all_cap_snapshots
from .types import Franchise, League, LeagueConfig, LeagueTransaction, LotteryState, Phase

logger = logging.getLogger(__name__)

# Transaction types
TXN_GM_ASSIGNED = "GM_ASSIGNED"
TXN_GM_REMOVED = "GM_REMOVED"
TXN_FRANCHISE_CLAIMED = "FRANCHISE_CLAIMED"
TXN_TRADE = "TRADE"
TXN_LEAGUE_RESET = "LEAGUE_RESET"
TXN_CONFIG_UPDATED = "CONFIG_UPDATED"


def _coerce_config(cfg: Union[LeagueConfig, Mapping[str, Any], None]) -> LeagueConfig:
    if isinstance(cfg, LeagueConfig):
        return cfg
    try:
        return LeagueConfig.from_mapping(cfg)
    except (TypeError, ValueError) as exc:
        raise LeagueError(INVALID_STATE, "Invalid league config", {"error": str(exc)}) from exc


def require_participant_id(value: Any) -> str:
    try:
        return normalize_participant_id(value)
    except ValueError as exc:
        raise LeagueError(INVALID_STATE, "Invalid participant id", {"participant_id": value}) from exc


def default_franchise_names(slot_count: int) -> Dict[str, str]:
    if slot_count == len(config.NBA_TEAMS):
        return dict(config.NBA_TEAMS)
    return {f"F{i}": f"Franchise {i}" for i in range(1, slot_count + 1)}


def create_league(
    league_id: str,
    league_config: Union[LeagueConfig, Mapping[str, Any], None] = None,
    season_name: str = "",
    now: Optional[datetime] = None,
    *,
    franchise_names: Optional[Mapping[str, str]] = None,
) -> League:
    """New league in SETUP with one empty franchise per slot.

    Slots default to the 30 NBA teams when slot_count is 30, else F1..Fn.
    """
    lid = str(league_id or "").strip()
    if not lid:
        raise LeagueError(INVALID_STATE, "league_id is required")
    cfg = _coerce_config(league_config)
    now = game_time.resolve_now(now)

    names = dict(franchise_names) if franchise_names else default_franchise_names(cfg.slot_count)
    if len(names) != cfg.slot_count:
        raise LeagueError(
            INVALID_STATE,
            "Franchise list does not match slot_count",
            {"slot_count": cfg.slot_count, "franchises": len(names)},
        )

    franchises: Dict[str, Franchise] = {}
    for raw_id, name in names.items():
        try:
            fid = normalize_franchise_id(raw_id)
        except ValueError as exc:
            raise LeagueError(INVALID_STATE, "Invalid franchise id", {"franchise_id": raw_id}) from exc
        if fid in franchises:
            raise LeagueError(INVALID_STATE, "Duplicate franchise id", {"franchise_id": fid})
        franchises[fid] = Franchise(franchise_id=fid, name=str(name))

    league = League(
        league_id=lid,
        season_name=str(season_name or ""),
        config=cfg,
        franchises=franchises,
        created_at=now,
        updated_at=now,
        phase=Phase.SETUP,
        phase_started_at=now,
    )
    refresh_all_cap_snapshots(league)
    logger.info("league created (league=%s slots=%d)", lid, cfg.slot_count)
    return league


def record_transaction(
    league: League,
    txn_type: str,
    franchise_ids: Iterable[str],
    details: Mapping[str, Any],
    now: datetime,
) -> LeagueTransaction:
    """Append a log entry to `league` (a working copy) and to each franchise's id list."""
    fids = tuple(franchise_ids)
    txn = LeagueTransaction(
        txn_id=f"txn_{uuid4().hex}",
        txn_type=txn_type,
        at=now,
        franchise_ids=fids,
        details=dict(details),
    )
    league.transactions.append(txn)
    for fid in fids:
        franchise = league.franchises.get(fid)
        if franchise is not None:
            franchise.transaction_ids.append(txn.txn_id)
    return txn


def bind_gm(
    league: League,
    participant_id: str,
    franchise_id: str,
    *,
    via: str,
    now: datetime,
) -> Franchise:
    """Set a franchise's GM on a working copy. Shared by admin assignment and lottery claims."""
    franchise = league.get_franchise(franchise_id)
    current = league.franchise_of_gm(participant_id)
    if current is not None:
        raise LeagueError(
            ALREADY_GM,
            "Participant already controls a franchise",
            {"participant_id": participant_id, "franchise_id": current.franchise_id},
        )
    if franchise.gm_id is not None:
        raise LeagueError(
            FRANCHISE_TAKEN,
            "Franchise already has a GM",
            {"franchise_id": franchise.franchise_id},
        )
    franchise.gm_id = participant_id
    franchise.assigned_at = now
    franchise.assigned_via = via
    return franchise


def assign_gm(league: League, participant_id: str, franchise_id: str, now: Optional[datetime] = None) -> League:
    """Commissioner assignment, bypassing the lottery."""
    uid = require_participant_id(participant_id)
    now = game_time.resolve_now(now)
    lg = league.copy()
    franchise = bind_gm(lg, uid, franchise_id, via="admin", now=now)
    record_transaction(lg, TXN_GM_ASSIGNED, [franchise.franchise_id], {"participant_id": uid, "via": "admin"}, now)
    logger.info("gm assigned (league=%s franchise=%s)", lg.league_id, franchise.franchise_id)
    return lg


def remove_gm(league: League, participant_id: str, now: Optional[datetime] = None) -> League:
    uid = require_participant_id(participant_id)
    now = game_time.resolve_now(now)
    lg = league.copy()
    franchise = lg.franchise_of_gm(uid)
    if franchise is None:
        raise LeagueError(INVALID_STATE, "Participant is not a GM", {"participant_id": uid})
    franchise.gm_id = None
    franchise.assigned_at = None
    franchise.assigned_via = None
    record_transaction(lg, TXN_GM_REMOVED, [franchise.franchise_id], {"participant_id": uid}, now)
    logger.info("gm removed (league=%s franchise=%s)", lg.league_id, franchise.franchise_id)
    return lg


def reset_league(league: League, now: Optional[datetime] = None) -> League:
    """Back to SETUP: clears GMs, lottery, proposals and history. Rosters and picks stay."""
    now = game_time.resolve_now(now)
    lg = league.copy()
    lg.phase = Phase.SETUP
    lg.phase_started_at = now
    lg.is_paused = False
    lg.paused_at = None
    lg.lottery = LotteryState()
    lg.trades = []
    lg.trade_history = []
    lg.transactions = []
    for franchise in lg.franchises.values():
        franchise.gm_id = None
        franchise.assigned_at = None
        franchise.assigned_via = None
        franchise.transaction_ids = []
    record_transaction(lg, TXN_LEAGUE_RESET, [], {}, now)
    logger.warning("league reset (league=%s)", lg.league_id)
    return lg


def update_config(league: League, patch: Mapping[str, Any], now: Optional[datetime] = None) -> League:
    """Apply a partial config change. slot_count is fixed for the league's lifetime."""
    if "slot_count" in patch:
        try:
            slot_count = int(patch["slot_count"])
        except (TypeError, ValueError) as exc:
            raise LeagueError(INVALID_STATE, "Invalid league config", {"slot_count": patch["slot_count"]}) from exc
        if slot_count != league.config.slot_count:
            raise LeagueError(INVALID_STATE, "slot_count cannot change after creation", {"slot_count": league.config.slot_count})
    merged = league.config.to_payload()
    merged.update(dict(patch))
    cfg = _coerce_config(merged)

    now = game_time.resolve_now(now)
    lg = league.copy()
    lg.config = cfg
    refresh_all_cap_snapshots(lg)
    record_transaction(lg, TXN_CONFIG_UPDATED, [], {"keys": sorted(patch)}, now)
    logger.info("config updated (league=%s keys=%s)", lg.league_id, sorted(patch))
    return lg
