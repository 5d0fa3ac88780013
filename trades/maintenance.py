from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple

import game_time
from league.types import League

from .lifecycle import expire_pending

logger = logging.getLogger(__name__)


def gc_terminal_proposals(league: League, now: Optional[datetime] = None) -> Tuple[League, List[str]]:
    """Drop terminal proposals resolved longer ago than config.trade_retention_s.

    Completed trades stay in league.trade_history regardless; only the proposal
    list is pruned.
    """
    now = game_time.resolve_now(now)
    cutoff = now - timedelta(seconds=int(league.config.trade_retention_s))
    drop = [
        p.proposal_id
        for p in league.trades
        if p.is_terminal and p.resolved_at is not None and p.resolved_at < cutoff
    ]
    if not drop:
        return league, []
    lg = league.copy()
    dropped = set(drop)
    lg.trades = [p for p in lg.trades if p.proposal_id not in dropped]
    logger.info("gc removed %d terminal proposals (league=%s)", len(drop), lg.league_id)
    return lg, drop


def sweep_trade_state(league: League, now: Optional[datetime] = None) -> Tuple[League, Dict[str, List[str]]]:
    """
    Trade housekeeping run by the sweep endpoint:
      - expires pending proposals past their expiry
      - garbage-collects terminal proposals past the retention window

    Raises LEAGUE_PAUSED while paused (timers are frozen).
    """
    now = game_time.resolve_now(now)
    lg, expired = expire_pending(league, now)
    lg, removed = gc_terminal_proposals(lg, now)
    return lg, {"expired": expired, "removed": removed}
