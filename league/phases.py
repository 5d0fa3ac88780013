from __future__ import annotations

"""Phase state machine.

SETUP -> GM_LOTTERY -> PRE_DRAFT -> DRAFT_LOTTERY -> DRAFT -> FA_MORATORIUM ->
FREE_AGENCY -> TRAINING_CAMP -> REGULAR_SEASON -> TRADE_DEADLINE -> PLAYOFFS ->
OFFSEASON

Transitions are strictly sequential. OFFSEASON is terminal for a season;
start_new_season() loops back to SETUP. While a league is paused no transition
(manual or timed) is allowed.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Optional, Tuple

import config
import game_time

from .errors import INVALID_STATE, LEAGUE_PAUSED, LeagueError
from .types import PHASE_ORDER, League, LotteryState, Phase

logger = logging.getLogger(__name__)


def next_phase(phase: Phase) -> Phase:
    idx = PHASE_ORDER.index(phase)
    if idx + 1 >= len(PHASE_ORDER):
        return phase
    return PHASE_ORDER[idx + 1]


def trading_allowed(phase: Phase, blocked: Optional[Iterable[str]] = None) -> bool:
    """Single predicate deciding whether trades are permitted in `phase`.

    `blocked` defaults to config.TRADE_BLOCKED_PHASES; leagues pass
    `league.config.trade_blocked_phases`.
    """
    if blocked is None:
        blocked = config.TRADE_BLOCKED_PHASES
    return Phase(phase).value not in {str(p).upper() for p in blocked}


def ensure_not_paused(league: League, action: str) -> None:
    if league.is_paused:
        raise LeagueError(LEAGUE_PAUSED, "League is paused", {"action": action, "paused_at": game_time.to_iso(league.paused_at)})


def advance_phase(league: League, now: Optional[datetime] = None) -> Tuple[League, Phase]:
    """Move to the next phase. At OFFSEASON this is a no-op."""
    ensure_not_paused(league, "advance_phase")
    if league.phase is Phase.OFFSEASON:
        return league, Phase.OFFSEASON

    now = game_time.resolve_now(now)
    lg = league.copy()
    previous = lg.phase
    lg.phase = next_phase(previous)
    lg.phase_started_at = now

    if lg.phase is Phase.GM_LOTTERY and not lg.lottery.is_drawn:
        lg.lottery.registration_open = True

    logger.info("phase advanced %s -> %s (league=%s)", previous.value, lg.phase.value, lg.league_id)
    return lg, lg.phase


def pause(league: League, now: Optional[datetime] = None) -> League:
    if league.is_paused:
        raise LeagueError(INVALID_STATE, "League is already paused", {"paused_at": game_time.to_iso(league.paused_at)})
    lg = league.copy()
    lg.is_paused = True
    lg.paused_at = game_time.resolve_now(now)
    logger.info("league paused (league=%s phase=%s)", lg.league_id, lg.phase.value)
    return lg


def resume(league: League, now: Optional[datetime] = None) -> League:
    """Unpause. Pending proposal expiries and the phase timer shift by the paused time."""
    if not league.is_paused:
        raise LeagueError(INVALID_STATE, "League is not paused")
    now = game_time.resolve_now(now)
    lg = league.copy()

    paused_for = timedelta(0)
    if lg.paused_at is not None and now > lg.paused_at:
        paused_for = now - lg.paused_at

    if paused_for:
        lg.trades = [
            replace(p, expires_at=p.expires_at + paused_for) if p.is_pending and p.expires_at is not None else p
            for p in lg.trades
        ]
        if lg.phase_started_at is not None:
            lg.phase_started_at = lg.phase_started_at + paused_for

    lg.is_paused = False
    lg.paused_at = None
    logger.info("league resumed (league=%s paused_for=%s)", lg.league_id, paused_for)
    return lg


def phase_deadline(league: League) -> Optional[datetime]:
    """When the current phase ends on its own, or None for command-only phases."""
    seconds = league.config.phase_durations_s.get(league.phase.value)
    if not seconds or league.phase_started_at is None:
        return None
    return league.phase_started_at + timedelta(seconds=int(seconds))


def auto_advance_if_due(league: League, now: Optional[datetime] = None) -> Tuple[League, bool]:
    """Timed transition. Returns (league, advanced)."""
    ensure_not_paused(league, "auto_advance")
    now = game_time.resolve_now(now)
    deadline = phase_deadline(league)
    if deadline is None or now < deadline:
        return league, False
    lg, _ = advance_phase(league, now)
    return lg, True


def start_new_season(league: League, season_name: str, now: Optional[datetime] = None) -> League:
    """OFFSEASON -> SETUP with a fresh lottery. Franchises, rosters and GMs carry over."""
    ensure_not_paused(league, "start_new_season")
    if league.phase is not Phase.OFFSEASON:
        raise LeagueError(INVALID_STATE, "New season can only start from OFFSEASON", {"phase": league.phase.value})
    name = str(season_name or "").strip()
    if not name:
        raise LeagueError(INVALID_STATE, "season_name is required")

    lg = league.copy()
    lg.season_name = name
    lg.phase = Phase.SETUP
    lg.phase_started_at = game_time.resolve_now(now)
    lg.lottery = LotteryState()
    logger.info("new season %s started (league=%s)", name, lg.league_id)
    return lg
