from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import game_time
from league.errors import INVALID_STATE
from league.roster import refresh_cap_snapshot
from league.service import TXN_TRADE, record_transaction
from league.types import Contract, DraftPickAsset, League

from .errors import TRADE_INVALID, TradeError
from .lifecycle import get_proposal, is_past_expiry, replace_proposal, require_party, require_status
from .models import ProposalStatus, Side, TradeProposal, TradeRecord
from .validator import validate_proposal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _PlayerMove:
    player_id: str
    from_franchise: str
    to_franchise: str


@dataclass(frozen=True)
class _PickMove:
    pick: DraftPickAsset
    from_franchise: str
    to_franchise: str


def _collect_moves(proposal: TradeProposal) -> Tuple[List[_PlayerMove], List[_PickMove]]:
    players: List[_PlayerMove] = []
    picks: List[_PickMove] = []
    for side in (Side.A, Side.B):
        sender = proposal.franchise_for(side)
        receiver = proposal.franchise_for(side.other)
        package = proposal.package_for(side)
        players.extend(_PlayerMove(pid, sender, receiver) for pid in package.player_ids)
        picks.extend(_PickMove(p, sender, receiver) for p in package.picks)
    return players, picks


def _apply_moves(league: League, players: List[_PlayerMove], picks: List[_PickMove]) -> None:
    # Detach everything first so a two-way swap never sees a half-moved roster.
    moved_contracts: List[Tuple[Contract, str]] = []
    for move in players:
        sender = league.franchises[move.from_franchise]
        contract = sender.find_contract(move.player_id)
        if contract is None:
            # Validation re-checks ownership; reaching here means the snapshot changed underneath.
            raise ValueError(f"player {move.player_id} not on {move.from_franchise}")
        sender.contracts = [c for c in sender.contracts if c.player_id != move.player_id]
        moved_contracts.append((contract, move.to_franchise))

    moved_picks: List[Tuple[DraftPickAsset, str]] = []
    for move in picks:
        sender = league.franchises[move.from_franchise]
        if not sender.holds_pick(move.pick):
            raise ValueError(f"pick {move.pick.pick_id} not held by {move.from_franchise}")
        sender.draft_picks = [p for p in sender.draft_picks if p != move.pick]
        moved_picks.append((move.pick, move.to_franchise))

    for contract, to_fid in moved_contracts:
        league.franchises[to_fid].contracts.append(contract)
    # Provenance (original_franchise_id) travels with the asset unchanged.
    for pick, to_fid in moved_picks:
        league.franchises[to_fid].draft_picks.append(pick)


def _trade_details(proposal: TradeProposal) -> Dict[str, Any]:
    return {
        "proposal_id": proposal.proposal_id,
        "a_sends": {
            "player_ids": list(proposal.package_a.player_ids),
            "pick_ids": list(proposal.package_a.pick_ids),
            "cash": proposal.package_a.cash,
        },
        "b_sends": {
            "player_ids": list(proposal.package_b.player_ids),
            "pick_ids": list(proposal.package_b.pick_ids),
            "cash": proposal.package_b.cash,
        },
    }


def execute(
    league: League,
    proposal_id: str,
    acting_franchise_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Tuple[League, TradeRecord]:
    """Accept and settle a proposed trade.

    Re-validates against the current snapshot; ownership may have changed since
    submit. On any failure the input league is left untouched.
    """
    proposal = get_proposal(league, proposal_id)
    require_party(proposal, acting_franchise_id, Side.B, "accept")
    require_status(proposal, (ProposalStatus.PROPOSED,), "execute")
    now = game_time.resolve_now(now)
    if is_past_expiry(proposal, now):
        raise TradeError(
            INVALID_STATE,
            "Proposal has expired",
            {"proposal_id": proposal.proposal_id, "expires_at": game_time.to_iso(proposal.expires_at)},
        )

    result = validate_proposal(league, proposal)
    if not result.ok:
        logger.warning(
            "trade rejected on execute (league=%s proposal=%s reasons=%s)",
            league.league_id,
            proposal.proposal_id,
            [r.code for r in result.reasons],
        )
        raise TradeError(
            TRADE_INVALID,
            "Trade is no longer valid",
            {"proposal_id": proposal.proposal_id, "reasons": [r.to_payload() for r in result.reasons]},
        )

    lg = league.copy()
    player_moves, pick_moves = _collect_moves(proposal)
    _apply_moves(lg, player_moves, pick_moves)
    for fid in (proposal.franchise_a, proposal.franchise_b):
        refresh_cap_snapshot(lg, lg.franchises[fid])

    accepted = replace(proposal, status=ProposalStatus.ACCEPTED, resolved_at=now)
    replace_proposal(lg, accepted)

    txn = record_transaction(lg, TXN_TRADE, [proposal.franchise_a, proposal.franchise_b], _trade_details(proposal), now)
    record = TradeRecord(
        proposal_id=proposal.proposal_id,
        completed_at=now,
        franchise_a=proposal.franchise_a,
        franchise_b=proposal.franchise_b,
        package_a=proposal.package_a,
        package_b=proposal.package_b,
        transaction_id=txn.txn_id,
    )
    lg.trade_history.append(record)

    logger.info(
        "trade executed (league=%s proposal=%s %s<->%s players=%d picks=%d)",
        lg.league_id,
        proposal.proposal_id,
        proposal.franchise_a,
        proposal.franchise_b,
        len(player_moves),
        len(pick_moves),
    )
    return lg, record
