from __future__ import annotations

import random

from fastapi import APIRouter

from gm_lottery.service import claim_franchise, current_picker, draw, open_registration, register, unregister
from league.errors import LeagueError
from app.schemas.lottery import LotteryClaimRequest, LotteryDrawRequest, LotteryEntryRequest
from app.services.league_facade import _league_error_response, _lock_timeout_response, open_service

router = APIRouter()


@router.get("/api/leagues/{league_id}/lottery")
async def api_lottery_state(league_id: str):
    try:
        with open_service() as svc:
            league = svc.get(league_id)
        return {
            "ok": True,
            "lottery": league.lottery.to_payload(),
            "current_picker": current_picker(league),
        }
    except LeagueError as exc:
        return _league_error_response(exc)


@router.post("/api/leagues/{league_id}/lottery/open")
async def api_lottery_open(league_id: str):
    try:
        with open_service() as svc:
            league, _ = svc.mutate(league_id, lambda lg: (open_registration(lg), None), reason="LOTTERY_OPEN")
        return {"ok": True, "lottery": league.lottery.to_payload()}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/lottery/register")
async def api_lottery_register(league_id: str, req: LotteryEntryRequest):
    try:
        with open_service() as svc:
            _, count = svc.mutate(league_id, lambda lg: register(lg, req.participant_id), reason="LOTTERY_REGISTER")
        return {"ok": True, "registered_count": count}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/lottery/unregister")
async def api_lottery_unregister(league_id: str, req: LotteryEntryRequest):
    try:
        with open_service() as svc:
            _, count = svc.mutate(league_id, lambda lg: unregister(lg, req.participant_id), reason="LOTTERY_UNREGISTER")
        return {"ok": True, "registered_count": count}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/lottery/draw")
async def api_lottery_draw(league_id: str, req: LotteryDrawRequest):
    rng = random.Random(req.seed) if req.seed is not None else None
    try:
        with open_service() as svc:
            _, order = svc.mutate(league_id, lambda lg: draw(lg, rng), reason="LOTTERY_DRAW")
        return {"ok": True, "lottery_order": order}
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)


@router.post("/api/leagues/{league_id}/lottery/claim")
async def api_lottery_claim(league_id: str, req: LotteryClaimRequest):
    try:
        with open_service() as svc:
            league, _ = svc.mutate(
                league_id,
                lambda lg: (claim_franchise(lg, req.participant_id, req.franchise_id), None),
                reason="LOTTERY_CLAIM",
            )
        return {
            "ok": True,
            "franchise": league.get_franchise(req.franchise_id).to_payload(),
            "current_picker": current_picker(league),
        }
    except LeagueError as exc:
        return _league_error_response(exc)
    except TimeoutError as exc:
        return _lock_timeout_response(exc)
