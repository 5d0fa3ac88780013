from __future__ import annotations

import logging
import os

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import LEAGUE_DB_PATH_ENV
from league_repo import LeagueRepo
from app.api.router import api_router
from app.services.league_facade import _unexpected_error_response, set_db_path

logger = logging.getLogger(__name__)

app = FastAPI(title="Mock League Trade Server")


@app.on_event("startup")
def _startup_init_store() -> None:
    # 1) db path from env (no default)
    # 2) schema create/migrate once per boot
    # 3) integrity scan: undecodable leagues are reported, never repaired
    db_path = os.environ.get(LEAGUE_DB_PATH_ENV)
    if not db_path:
        raise RuntimeError(f"{LEAGUE_DB_PATH_ENV} is required (no default db_path).")
    set_db_path(db_path)

    with LeagueRepo(db_path) as repo:
        repo.init_db()
        corrupt = repo.validate_integrity()
    for league_id in corrupt:
        logger.error("corrupt league document in store (league=%s)", league_id)


app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def _auth_guard_middleware(request: Request, call_next):
    """Optional commissioner guard.

    If MOCK_LEAGUE_ADMIN_TOKEN is configured, require it on state-changing API calls.
    """
    required_token = (os.environ.get("MOCK_LEAGUE_ADMIN_TOKEN") or "").strip()
    if not required_token:
        return await call_next(request)

    path = request.url.path or ""
    method = (request.method or "GET").upper()
    if method not in ("POST", "DELETE") or not path.startswith("/api/"):
        return await call_next(request)

    provided = (request.headers.get("X-Admin-Token") or "").strip()
    if provided != required_token:
        return JSONResponse(status_code=401, content={"detail": "Unauthorized: invalid X-Admin-Token"})

    return await call_next(request)


@app.exception_handler(Exception)
async def _unexpected_error_handler(request: Request, exc: Exception):
    return _unexpected_error_response(exc)


@app.get("/")
async def root():
    return {"message": "Mock league trade server. See /docs for the API."}


app.include_router(api_router)
