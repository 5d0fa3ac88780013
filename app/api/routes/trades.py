from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter

from league.errors import LeagueError
from trades.apply import execute
from trades.builder import add_cash, add_pick, add_player, clear_proposal, counter, new_proposal, remove_asset, submit
from trades.lifecycle import cancel, reject
from trades.maintenance import sweep_trade_state
from trades.validator import validate_proposal
from app.schemas.trades import (
    TradeActionRequest,
    TradeAddCashRequest,
    TradeAddPickRequest,
    TradeAddPlayerRequest,
    TradeNewRequest,
    TradeProposalRequest,
    TradeRemoveAssetRequest,
)
from app.services.league_facade import (
    _league_error_response,
    _lock_timeout_response,
    _parse_proposal,
    open_service,
)

router = APIRouter()

# Draft proposals are held by the client: builder endpoints take the current
# draft payload and return the edited one. Nothing is stored until submit.


@router.get("/api/leagues/{league_id}/trades")
async def api_trade_list(league_id: str):
    try:
        with open_service() as svc:
            league = svc.get(league_id)
        return {
            "ok": True,
            "proposals": [p.to_payload() for p in league.trades],
            "history": [r.to_payload() for r in league.trade_history],
        }
    except LeagueError as exc:
        return _league_error_response(exc)


@router.post("/api/leagues/{league_id}/trades/new")
async def api_trade_new(league_id: str, req: TradeNewRequest):
    try:
        with open_service() as svc:
            league = svc.get(league_id)
        proposal = new_proposal(league, req.franchise_a, req.franchise_b)
        return {"ok": True, "proposal": proposal.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)


@router.post("/api/leagues/{league_id}/trades/draft/add-player")
async def api_trade_add_player(league_id: str, req: TradeAddPlayerRequest):
    try:
        proposal = _parse_proposal(req.proposal)
        with open_service() as svc:
            league = svc.get(league_id)
        proposal = add_player(league, proposal, req.side, req.player_id)
        return {"ok": True, "proposal": proposal.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)


@router.post("/api/leagues/{league_id}/trades/draft/add-pick")
async def api_trade_add_pick(league_id: str, req: TradeAddPickRequest):
    try:
        proposal = _parse_proposal(req.proposal)
        with open_service() as svc:
            league = svc.get(league_id)
        proposal = add_pick(league, proposal, req.side, req.pick_id)
        return {"ok": True, "proposal": proposal.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)


@router.post("/api/leagues/{league_id}/trades/draft/add-cash")
async def api_trade_add_cash(league_id: str, req: TradeAddCashRequest):
    try:
        proposal = _parse_proposal(req.proposal)
        with open_service() as svc:
            league = svc.get(league_id)
        proposal = add_cash(league, proposal, req.side, req.amount)
        return {"ok": True, "proposal": proposal.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)


@router.post("/api/leagues/{league_id}/trades/draft/remove")
async def api_trade_remove_asset(league_id: str, req: TradeRemoveAssetRequest):
    try:
        proposal = remove_asset(_parse_proposal(req.proposal), req.side, req.asset_key)
        return {"ok": True, "proposal": proposal.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)


@router.post("/api/leagues/{league_id}/trades/draft/clear")
async def api_trade_clear(league_id: str, req: TradeProposalRequest):
    try:
        proposal = clear_proposal(_parse_proposal(req.proposal))
        return {"ok": True, "proposal": proposal.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)


@router.post("/api/leagues/{league_id}/trades/validate")
async def api_trade_validate(league_id: str, req: TradeProposalRequest):
    """Dry-run legality check. Always 200; `ok` is the verdict."""
    try:
        proposal = _parse_proposal(req.proposal)
        with open_service() as svc:
            league = svc.get(league_id)
        return validate_proposal(league, proposal).to_payload()
    except LeagueError as exc:
        return _league_error_response(exc)


@router.post("/api/leagues/{league_id}/trades/submit")
async def api_trade_submit(league_id: str, req: TradeProposalRequest):
    try:
        proposal = _parse_proposal(req.proposal)
        with open_service() as svc:
            _, submitted = svc.mutate(league_id, lambda lg: submit(lg, proposal), reason="TRADE_SUBMIT")
        return {"ok": True, "proposal": submitted.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/trades/execute")
async def api_trade_execute(league_id: str, req: TradeActionRequest):
    try:
        with open_service() as svc:
            _, record = svc.mutate(
                league_id,
                lambda lg: execute(lg, req.proposal_id, req.acting_franchise_id),
                reason="TRADE_EXECUTE",
            )
        return {"ok": True, "trade": record.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/trades/reject")
async def api_trade_reject(league_id: str, req: TradeActionRequest):
    try:
        with open_service() as svc:
            _, proposal = svc.mutate(
                league_id,
                lambda lg: reject(lg, req.proposal_id, req.acting_franchise_id),
                reason="TRADE_REJECT",
            )
        return {"ok": True, "proposal": proposal.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/trades/cancel")
async def api_trade_cancel(league_id: str, req: TradeActionRequest):
    try:
        with open_service() as svc:
            _, proposal = svc.mutate(
                league_id,
                lambda lg: cancel(lg, req.proposal_id, req.acting_franchise_id),
                reason="TRADE_CANCEL",
            )
        return {"ok": True, "proposal": proposal.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/trades/counter")
async def api_trade_counter(league_id: str, req: TradeActionRequest):
    """Marks the original countered and returns the counter draft (not yet submitted)."""
    try:
        with open_service() as svc:
            _, draft = svc.mutate(
                league_id,
                lambda lg: counter(lg, req.proposal_id, req.acting_franchise_id),
                reason="TRADE_COUNTER",
            )
        return {"ok": True, "proposal": draft.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/trades/sweep")
async def api_trade_sweep(league_id: str):
    """Expire overdue proposals, then drop old terminal ones."""
    try:
        with open_service() as svc:
            _, result = svc.mutate(league_id, sweep_trade_state, reason="TRADE_SWEEP")
        out: Dict[str, Any] = {"ok": True}
        out.update(result)
        return out
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)
