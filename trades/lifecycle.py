from __future__ import annotations

"""Proposal status transitions that do not move assets.

draft -> proposed -> {accepted | rejected | countered | expired | cancelled}

accepted is set only by trades.apply.execute. A proposal in a terminal status
never changes again.
"""

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional, Tuple

import game_time
from league.errors import INVALID_STATE
from league.phases import ensure_not_paused
from league.types import League
from schema import normalize_franchise_id

from .errors import NOT_PROPOSAL_PARTY, PROPOSAL_NOT_FOUND, TradeError
from .models import ProposalStatus, Side, TradeProposal

logger = logging.getLogger(__name__)


def get_proposal(league: League, proposal_id: str) -> TradeProposal:
    proposal = league.find_proposal(str(proposal_id))
    if proposal is None:
        raise TradeError(PROPOSAL_NOT_FOUND, "Trade proposal not found", {"proposal_id": proposal_id})
    return proposal


def replace_proposal(league: League, proposal: TradeProposal) -> None:
    """Swap a stored proposal in a working copy (matched by proposal_id)."""
    for i, p in enumerate(league.trades):
        if p.proposal_id == proposal.proposal_id:
            league.trades[i] = proposal
            return
    raise TradeError(PROPOSAL_NOT_FOUND, "Trade proposal not found", {"proposal_id": proposal.proposal_id})


def require_party(proposal: TradeProposal, acting_franchise_id: Optional[str], side: Side, action: str) -> None:
    """When an acting franchise is supplied it must sit on `side` of the proposal."""
    if acting_franchise_id is None:
        return
    try:
        fid = normalize_franchise_id(acting_franchise_id)
    except ValueError:
        fid = str(acting_franchise_id)
    if fid != proposal.franchise_for(side):
        raise TradeError(
            NOT_PROPOSAL_PARTY,
            f"Only the {'initiating' if side is Side.A else 'receiving'} franchise can {action} this trade",
            {"proposal_id": proposal.proposal_id, "acting_franchise_id": fid, "action": action},
        )


def require_status(proposal: TradeProposal, allowed: Tuple[ProposalStatus, ...], action: str) -> None:
    if proposal.status not in allowed:
        raise TradeError(
            INVALID_STATE,
            f"Cannot {action} a {proposal.status.value} proposal",
            {"proposal_id": proposal.proposal_id, "status": proposal.status.value, "action": action},
        )


def is_past_expiry(proposal: TradeProposal, now: datetime) -> bool:
    return proposal.is_pending and proposal.expires_at is not None and now >= proposal.expires_at


def expire_if_past(proposal: TradeProposal, now: Optional[datetime] = None) -> TradeProposal:
    """Pure: returns the proposal marked expired if its timer has run out, else unchanged."""
    now = game_time.resolve_now(now)
    if not is_past_expiry(proposal, now):
        return proposal
    return replace(proposal, status=ProposalStatus.EXPIRED, resolved_at=now)


def expire_pending(league: League, now: Optional[datetime] = None) -> Tuple[League, List[str]]:
    """League-wide expiry sweep. Returns (league, expired proposal ids)."""
    ensure_not_paused(league, "expire_pending")
    now = game_time.resolve_now(now)
    expired_ids = [p.proposal_id for p in league.trades if is_past_expiry(p, now)]
    if not expired_ids:
        return league, []
    lg = league.copy()
    lg.trades = [expire_if_past(p, now) for p in lg.trades]
    logger.info("expired %d trade proposals (league=%s)", len(expired_ids), lg.league_id)
    return lg, expired_ids


def _transition(
    league: League,
    proposal_id: str,
    status: ProposalStatus,
    now: Optional[datetime],
) -> Tuple[League, TradeProposal]:
    now = game_time.resolve_now(now)
    lg = league.copy()
    updated = replace(get_proposal(lg, proposal_id), status=status, resolved_at=now)
    replace_proposal(lg, updated)
    return lg, updated


def reject(
    league: League,
    proposal_id: str,
    acting_franchise_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[League, TradeProposal]:
    proposal = get_proposal(league, proposal_id)
    require_party(proposal, acting_franchise_id, Side.B, "reject")
    require_status(proposal, (ProposalStatus.PROPOSED,), "reject")
    lg, updated = _transition(league, proposal.proposal_id, ProposalStatus.REJECTED, now)
    logger.info("trade rejected (league=%s proposal=%s)", lg.league_id, updated.proposal_id)
    return lg, updated


def cancel(
    league: League,
    proposal_id: str,
    acting_franchise_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[League, TradeProposal]:
    proposal = get_proposal(league, proposal_id)
    require_party(proposal, acting_franchise_id, Side.A, "cancel")
    require_status(proposal, (ProposalStatus.PROPOSED, ProposalStatus.COUNTERED), "cancel")
    lg, updated = _transition(league, proposal.proposal_id, ProposalStatus.CANCELLED, now)
    logger.info("trade cancelled (league=%s proposal=%s)", lg.league_id, updated.proposal_id)
    return lg, updated
