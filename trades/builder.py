from __future__ import annotations

"""Trade builder.

Draft proposals live with the caller (session, UI state) and never touch the
league until submit(). Every edit returns a new frozen TradeProposal.
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Optional, Tuple, Union
from uuid import uuid4

import game_time
from league.errors import INVALID_STATE
from league.types import DraftPickAsset, League
from schema import normalize_franchise_id, normalize_player_id, parse_pick_id

from .errors import ASSET_ALREADY_INCLUDED, ASSET_NOT_OWNED, TradeError
from .lifecycle import get_proposal, is_past_expiry, replace_proposal, require_party, require_status
from .models import ProposalStatus, Side, TradePackage, TradeProposal, parse_side
from .validator import require_valid

logger = logging.getLogger(__name__)


def _require_draft(proposal: TradeProposal) -> None:
    if proposal.status is not ProposalStatus.DRAFT:
        raise TradeError(
            INVALID_STATE,
            "Only draft proposals can be edited",
            {"proposal_id": proposal.proposal_id, "status": proposal.status.value},
        )


def _coerce_pick(pick: Union[DraftPickAsset, str]) -> DraftPickAsset:
    if isinstance(pick, DraftPickAsset):
        return pick
    try:
        year, rnd, orig = parse_pick_id(str(pick))
    except ValueError as exc:
        raise TradeError(INVALID_STATE, "Invalid pick id", {"pick_id": pick}) from exc
    return DraftPickAsset(year=year, round=rnd, original_franchise_id=orig)


def _coerce_player_id(player_id: Any) -> str:
    try:
        return normalize_player_id(player_id)
    except ValueError as exc:
        raise TradeError(INVALID_STATE, "Invalid player id", {"player_id": player_id}) from exc


def _already_included(proposal: TradeProposal, *, player_id: Optional[str] = None, pick: Optional[DraftPickAsset] = None) -> bool:
    for side in (Side.A, Side.B):
        package = proposal.package_for(side)
        if player_id is not None and player_id in package.player_ids:
            return True
        if pick is not None and pick in package.picks:
            return True
    return False


def new_proposal(
    league: League,
    franchise_a: str,
    franchise_b: str,
    now: Optional[datetime] = None,
) -> TradeProposal:
    """Empty draft proposal. franchise_a initiates, franchise_b receives."""
    a = league.get_franchise(franchise_a).franchise_id
    b = league.get_franchise(franchise_b).franchise_id
    if a == b:
        raise TradeError(INVALID_STATE, "A franchise cannot trade with itself", {"franchise_id": a})
    return TradeProposal(
        proposal_id=f"trade_{uuid4().hex}",
        franchise_a=a,
        franchise_b=b,
        created_at=game_time.resolve_now(now),
    )


def add_player(league: League, proposal: TradeProposal, side: Any, player_id: str) -> TradeProposal:
    _require_draft(proposal)
    s = parse_side(side)
    pid = _coerce_player_id(player_id)
    sender = proposal.franchise_for(s)
    contract = league.get_franchise(sender).find_contract(pid)
    if contract is None:
        raise TradeError(ASSET_NOT_OWNED, "Player is not on this franchise", {"franchise_id": sender, "player_id": pid})
    if _already_included(proposal, player_id=pid):
        raise TradeError(ASSET_ALREADY_INCLUDED, "Player is already in this trade", {"player_id": pid})
    package = proposal.package_for(s)
    return proposal.with_package(s, replace(package, players=package.players + (contract,)))


def add_pick(league: League, proposal: TradeProposal, side: Any, pick: Union[DraftPickAsset, str]) -> TradeProposal:
    _require_draft(proposal)
    s = parse_side(side)
    asset = _coerce_pick(pick)
    sender = proposal.franchise_for(s)
    if not league.get_franchise(sender).holds_pick(asset):
        raise TradeError(ASSET_NOT_OWNED, "Pick is not held by this franchise", {"franchise_id": sender, "pick_id": asset.pick_id})
    if _already_included(proposal, pick=asset):
        raise TradeError(ASSET_ALREADY_INCLUDED, "Pick is already in this trade", {"pick_id": asset.pick_id})
    package = proposal.package_for(s)
    return proposal.with_package(s, replace(package, picks=package.picks + (asset,)))


def add_cash(league: League, proposal: TradeProposal, side: Any, amount: int) -> TradeProposal:
    """Set the cash a side sends. The per-trade ceiling is a validation rule, not a builder error."""
    _require_draft(proposal)
    s = parse_side(side)
    league.get_franchise(proposal.franchise_for(s))
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise TradeError(INVALID_STATE, "Cash must be an integer dollar amount", {"cash": amount})
    if amount < 0:
        raise TradeError(INVALID_STATE, "Cash cannot be negative", {"cash": amount})
    return proposal.with_package(s, replace(proposal.package_for(s), cash=amount))


def remove_asset(proposal: TradeProposal, side: Any, asset_key: str) -> TradeProposal:
    """Remove a player id or pick id from one side's package."""
    _require_draft(proposal)
    s = parse_side(side)
    package = proposal.package_for(s)
    key = str(asset_key or "").strip()

    if key in package.player_ids:
        players = tuple(c for c in package.players if c.player_id != key)
        return proposal.with_package(s, replace(package, players=players))
    if key.upper() in package.pick_ids:
        picks = tuple(p for p in package.picks if p.pick_id != key.upper())
        return proposal.with_package(s, replace(package, picks=picks))

    raise TradeError(INVALID_STATE, "Asset is not in this package", {"side": s.value, "asset": key})


def clear_proposal(proposal: TradeProposal) -> TradeProposal:
    _require_draft(proposal)
    return replace(proposal, package_a=TradePackage(), package_b=TradePackage(), reasons=())


def submit(league: League, proposal: TradeProposal, now: Optional[datetime] = None) -> Tuple[League, TradeProposal]:
    """Validate and send a draft. Raises TRADE_INVALID with every violated rule."""
    _require_draft(proposal)
    if league.find_proposal(proposal.proposal_id) is not None:
        raise TradeError(INVALID_STATE, "Proposal was already submitted", {"proposal_id": proposal.proposal_id})
    require_valid(league, proposal)

    now = game_time.resolve_now(now)
    submitted = replace(
        proposal,
        status=ProposalStatus.PROPOSED,
        submitted_at=now,
        expires_at=now + timedelta(seconds=int(league.config.proposal_expiry_s)),
        reasons=(),
    )
    lg = league.copy()
    lg.trades.append(submitted)
    logger.info(
        "trade proposed (league=%s proposal=%s %s->%s)",
        lg.league_id,
        submitted.proposal_id,
        submitted.franchise_a,
        submitted.franchise_b,
    )
    return lg, submitted


def counter(
    league: League,
    proposal_id: str,
    acting_franchise_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[League, TradeProposal]:
    """Receiving side answers with its own draft (packages swapped, counter_of set).

    The original is marked countered and stays countered until it expires or the
    initiator cancels it.
    """
    original = get_proposal(league, proposal_id)
    require_party(original, acting_franchise_id, Side.B, "counter")
    require_status(original, (ProposalStatus.PROPOSED,), "counter")
    now = game_time.resolve_now(now)
    if is_past_expiry(original, now):
        raise TradeError(INVALID_STATE, "Proposal has expired", {"proposal_id": original.proposal_id})

    lg = league.copy()
    replace_proposal(lg, replace(original, status=ProposalStatus.COUNTERED))
    draft = TradeProposal(
        proposal_id=f"trade_{uuid4().hex}",
        franchise_a=normalize_franchise_id(original.franchise_b),
        franchise_b=normalize_franchise_id(original.franchise_a),
        created_at=now,
        package_a=original.package_b,
        package_b=original.package_a,
        counter_of=original.proposal_id,
    )
    logger.info("trade countered (league=%s proposal=%s)", lg.league_id, original.proposal_id)
    return lg, draft
