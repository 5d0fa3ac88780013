from __future__ import annotations

from typing import Any, Dict, Tuple

from fastapi import APIRouter

import game_time
from league.errors import INVALID_STATE, LeagueError
from league.phases import advance_phase, auto_advance_if_due, pause, phase_deadline, resume, start_new_season
from league.roster import seed_contracts, seed_draft_picks
from league.service import assign_gm, create_league, remove_gm, reset_league, update_config
from league.types import Contract, League
from app.schemas.leagues import (
    ContractIn,
    GmAssignRequest,
    GmRemoveRequest,
    LeagueConfigPatchRequest,
    LeagueCreateRequest,
    NewSeasonRequest,
    RosterSeedRequest,
    SeedPicksRequest,
)
from app.services.league_facade import (
    _league_error_response,
    _league_summary,
    _lock_timeout_response,
    open_service,
)

router = APIRouter()


def _same(lg):
    return lg, None


def _contract_from_request(c: ContractIn) -> Contract:
    try:
        return Contract(
            player_id=c.player_id,
            name=c.name,
            position=c.position,
            salary=c.salary,
            years_remaining=c.years_remaining,
            no_trade=c.no_trade,
            extension_eligible=c.extension_eligible,
        )
    except (TypeError, ValueError) as exc:
        raise LeagueError(INVALID_STATE, "Invalid contract", {"player_id": c.player_id, "error": str(exc)}) from exc


@router.get("/api/leagues")
async def api_league_list():
    with open_service() as svc:
        return {"ok": True, "league_ids": svc.repo.list_league_ids()}


@router.post("/api/leagues")
async def api_league_create(req: LeagueCreateRequest):
    try:
        league = create_league(
            req.league_id,
            req.config,
            req.season_name,
            franchise_names=req.franchise_names,
        )
        with open_service() as svc:
            saved = svc.create(league)
        return {"ok": True, "league": saved.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.get("/api/leagues/{league_id}")
async def api_league_get(league_id: str):
    try:
        with open_service() as svc:
            league = svc.get(league_id)
        deadline = phase_deadline(league)
        return {
            "ok": True,
            "league": league.to_payload(),
            "phase_deadline": game_time.to_iso(deadline) if deadline else None,
        }
    except LeagueError as exc:
        return _league_error_response(exc)


@router.delete("/api/leagues/{league_id}")
async def api_league_delete(league_id: str):
    try:
        with open_service() as svc:
            svc.delete(league_id)
        return {"ok": True, "league_id": league_id}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


def _run(league_id: str, op, *, reason: str) -> Tuple[League, Any]:
    with open_service() as svc:
        return svc.mutate(league_id, op, reason=reason)


@router.post("/api/leagues/{league_id}/phase/advance")
async def api_league_phase_advance(league_id: str):
    try:
        league, phase = _run(league_id, lambda lg: advance_phase(lg), reason="ADVANCE_PHASE")
        return {"ok": True, "phase": phase.value, "league": _league_summary(league)}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/phase/tick")
async def api_league_phase_tick(league_id: str):
    """Advance the phase if its configured duration has elapsed."""
    try:
        league, advanced = _run(league_id, lambda lg: auto_advance_if_due(lg), reason="AUTO_ADVANCE")
        return {"ok": True, "advanced": advanced, "league": _league_summary(league)}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/pause")
async def api_league_pause(league_id: str):
    try:
        league, _ = _run(league_id, lambda lg: _same(pause(lg)), reason="PAUSE")
        return {"ok": True, "league": _league_summary(league)}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/resume")
async def api_league_resume(league_id: str):
    try:
        league, _ = _run(league_id, lambda lg: _same(resume(lg)), reason="RESUME")
        return {"ok": True, "league": _league_summary(league)}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/season")
async def api_league_new_season(league_id: str, req: NewSeasonRequest):
    try:
        league, _ = _run(
            league_id,
            lambda lg: _same(start_new_season(lg, req.season_name)),
            reason="NEW_SEASON",
        )
        return {"ok": True, "league": _league_summary(league)}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/reset")
async def api_league_reset(league_id: str):
    try:
        league, _ = _run(league_id, lambda lg: _same(reset_league(lg)), reason="RESET")
        return {"ok": True, "league": _league_summary(league)}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/config")
async def api_league_config(league_id: str, req: LeagueConfigPatchRequest):
    try:
        league, _ = _run(league_id, lambda lg: _same(update_config(lg, req.patch)), reason="CONFIG")
        return {"ok": True, "config": league.config.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/gm/assign")
async def api_league_gm_assign(league_id: str, req: GmAssignRequest):
    try:
        league, _ = _run(
            league_id,
            lambda lg: _same(assign_gm(lg, req.participant_id, req.franchise_id)),
            reason="ASSIGN_GM",
        )
        return {"ok": True, "franchise": league.get_franchise(req.franchise_id).to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/gm/remove")
async def api_league_gm_remove(league_id: str, req: GmRemoveRequest):
    try:
        league, _ = _run(league_id, lambda lg: _same(remove_gm(lg, req.participant_id)), reason="REMOVE_GM")
        return {"ok": True, "league": _league_summary(league)}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/picks/seed")
async def api_league_seed_picks(league_id: str, req: SeedPicksRequest):
    kwargs: Dict[str, Any] = {}
    if req.years_ahead is not None:
        kwargs["years_ahead"] = req.years_ahead
    if req.rounds is not None:
        kwargs["rounds"] = req.rounds
    try:
        league, _ = _run(
            league_id,
            lambda lg: _same(seed_draft_picks(lg, req.start_year, **kwargs)),
            reason="SEED_PICKS",
        )
        return {"ok": True, "league": _league_summary(league)}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/roster")
async def api_league_seed_roster(league_id: str, req: RosterSeedRequest):
    try:
        contracts = [_contract_from_request(c) for c in req.contracts]
        league, _ = _run(
            league_id,
            lambda lg: _same(seed_contracts(lg, req.franchise_id, contracts, replace=req.replace)),
            reason="SEED_ROSTER",
        )
        return {"ok": True, "franchise": league.get_franchise(req.franchise_id).to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)
