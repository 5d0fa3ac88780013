from __future__ import annotations

"""GM lottery (pure).

Participants register while registration is open; a single draw shuffles the
registered list (Fisher-Yates) into `lottery_order`; then each participant, in
order, claims one unowned franchise.

The current picker is derived: the first participant in `lottery_order` who does
not yet control a franchise. There is no stored pointer to drift out of sync
with franchise ownership.
"""

import logging
import random
from datetime import datetime
from typing import List, Optional, Tuple

import game_time
from league.errors import (
    ALREADY_GM,
    ALREADY_REGISTERED,
    INVALID_STATE,
    LOTTERY_FULL,
    NO_REGISTRANTS,
    NOT_REGISTERED,
    NOT_YOUR_TURN,
    REGISTRATION_CLOSED,
    LeagueError,
)
from league.service import TXN_FRANCHISE_CLAIMED, bind_gm, record_transaction, require_participant_id
from league.types import League

logger = logging.getLogger(__name__)


def unclaimed_franchise_ids(league: League) -> List[str]:
    return [fid for fid, franchise in league.franchises.items() if franchise.gm_id is None]


def open_registration(league: League) -> League:
    """Re-open sign-ups (commissioner action). Not possible once drawn."""
    if league.lottery.is_drawn:
        raise LeagueError(REGISTRATION_CLOSED, "Lottery has already been drawn")
    if league.lottery.registration_open:
        return league
    lg = league.copy()
    lg.lottery.registration_open = True
    return lg


def register(league: League, participant_id: str) -> Tuple[League, int]:
    uid = require_participant_id(participant_id)
    lottery = league.lottery
    if not lottery.registration_open or lottery.is_drawn:
        raise LeagueError(REGISTRATION_CLOSED, "Lottery registration is not open")
    if uid in lottery.registered:
        raise LeagueError(ALREADY_REGISTERED, "Already registered", {"participant_id": uid})
    open_slots = len(unclaimed_franchise_ids(league))
    if len(lottery.registered) >= open_slots:
        raise LeagueError(LOTTERY_FULL, "Lottery is full", {"slots": open_slots})
    owned = league.franchise_of_gm(uid)
    if owned is not None:
        raise LeagueError(ALREADY_GM, "Participant already controls a franchise", {"franchise_id": owned.franchise_id})

    lg = league.copy()
    lg.lottery.registered.append(uid)
    return lg, len(lg.lottery.registered)


def unregister(league: League, participant_id: str) -> Tuple[League, int]:
    uid = require_participant_id(participant_id)
    lottery = league.lottery
    if not lottery.registration_open or lottery.is_drawn:
        raise LeagueError(REGISTRATION_CLOSED, "Lottery registration is not open")
    if uid not in lottery.registered:
        raise LeagueError(NOT_REGISTERED, "Not registered", {"participant_id": uid})

    lg = league.copy()
    lg.lottery.registered.remove(uid)
    return lg, len(lg.lottery.registered)


def shuffle_order(participants: List[str], rng: random.Random) -> List[str]:
    """Uniform permutation: for i from the last index down to 1, swap i with a uniform j in [0, i]."""
    order = list(participants)
    for i in range(len(order) - 1, 0, -1):
        j = rng.randint(0, i)
        order[i], order[j] = order[j], order[i]
    return order


def draw(
    league: League,
    rng: Optional[random.Random] = None,
    now: Optional[datetime] = None,
) -> Tuple[League, List[str]]:
    """Shuffle the registered list into lottery_order and close registration."""
    if league.lottery.is_drawn:
        raise LeagueError(INVALID_STATE, "Lottery has already been drawn")
    if not league.lottery.registered:
        raise LeagueError(NO_REGISTRANTS, "No participants registered")

    rng = rng if rng is not None else random.Random()
    lg = league.copy()
    lg.lottery.lottery_order = shuffle_order(lg.lottery.registered, rng)
    lg.lottery.registration_open = False
    lg.lottery.drawn_at = game_time.resolve_now(now)
    logger.info("gm lottery drawn (league=%s entrants=%d)", lg.league_id, len(lg.lottery.lottery_order))
    return lg, list(lg.lottery.lottery_order)


def current_picker(league: League) -> Optional[str]:
    """None once the order is exhausted or every franchise has a GM."""
    if not unclaimed_franchise_ids(league):
        return None
    for uid in league.lottery.lottery_order:
        if league.franchise_of_gm(uid) is None:
            return uid
    return None


def claim_franchise(
    league: League,
    participant_id: str,
    franchise_id: str,
    now: Optional[datetime] = None,
) -> League:
    uid = require_participant_id(participant_id)
    picker = current_picker(league)
    if picker is None or uid != picker:
        raise LeagueError(NOT_YOUR_TURN, "It is not your turn to pick", {"participant_id": uid, "current_picker": picker})

    now = game_time.resolve_now(now)
    lg = league.copy()
    franchise = bind_gm(lg, uid, franchise_id, via="lottery", now=now)
    record_transaction(lg, TXN_FRANCHISE_CLAIMED, [franchise.franchise_id], {"participant_id": uid, "via": "lottery"}, now)
    logger.info("franchise claimed (league=%s franchise=%s)", lg.league_id, franchise.franchise_id)
    return lg
