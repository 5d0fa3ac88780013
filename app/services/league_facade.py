from __future__ import annotations

import contextlib
import logging
from typing import Any, Dict, Iterator, Mapping, Optional

from fastapi.responses import JSONResponse

from league.errors import CORRUPT_STATE, INVALID_STATE, LEAGUE_NOT_FOUND, STALE_SNAPSHOT, LeagueError
from league.types import League
from league_service import LeagueService
from trades.errors import TradeError
from trades.models import TradeProposal

logger = logging.getLogger(__name__)

_DB_PATH: Optional[str] = None

_STATUS_BY_CODE = {
    LEAGUE_NOT_FOUND: 404,
    STALE_SNAPSHOT: 409,
    CORRUPT_STATE: 500,
}


def set_db_path(db_path: str) -> None:
    global _DB_PATH
    path = str(db_path or "").strip()
    if not path:
        raise ValueError("db_path is required")
    _DB_PATH = path


def get_db_path() -> str:
    if not _DB_PATH:
        raise RuntimeError("db_path is not configured (server startup did not run?)")
    return _DB_PATH


@contextlib.contextmanager
def open_service() -> Iterator[LeagueService]:
    with LeagueService.open(get_db_path()) as svc:
        yield svc


def _league_error_response(error: LeagueError) -> JSONResponse:
    status = _STATUS_BY_CODE.get(error.code, 400)
    if status >= 500:
        logger.error("league error (code=%s): %s", error.code, error.message)
    payload = {
        "ok": False,
        "error": {
            "code": error.code,
            "message": error.message,
            "details": error.details,
        },
    }
    return JSONResponse(status_code=status, content=payload)


def _lock_timeout_response(error: TimeoutError) -> JSONResponse:
    logger.warning("league lock timeout: %s", error)
    payload = {
        "ok": False,
        "error": {"code": "LEAGUE_BUSY", "message": str(error), "details": {}},
    }
    return JSONResponse(status_code=503, content=payload)


def _unexpected_error_response(error: Exception) -> JSONResponse:
    logger.exception("unexpected error in league API: %s", error, exc_info=error)
    payload = {
        "ok": False,
        "error": {"code": "INTERNAL_ERROR", "message": "Unexpected server error", "details": {"exc_type": type(error).__name__}},
    }
    return JSONResponse(status_code=500, content=payload)


def _parse_proposal(payload: Mapping[str, Any]) -> TradeProposal:
    """Client-held draft proposals come back as payload dicts."""
    try:
        return TradeProposal.from_payload(payload)
    except (KeyError, TypeError, ValueError) as exc:
        raise TradeError(INVALID_STATE, f"Malformed proposal payload: {exc}", {}) from exc


def _league_summary(league: League) -> Dict[str, Any]:
    return {
        "league_id": league.league_id,
        "season_name": league.season_name,
        "phase": league.phase.value,
        "is_paused": league.is_paused,
        "version": league.version,
    }
