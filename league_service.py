from __future__ import annotations

"""LeagueService: the calling-layer discipline around the pure engine.

    with LeagueService.open(db_path) as svc:
        league, record = svc.mutate(league_id, lambda lg: execute(lg, proposal_id, fid, now))

mutate() holds the per-league lock for the whole load -> operation -> save span.
The engine function receives a snapshot and returns a new one; if it raises,
nothing is saved.
"""

import contextlib
import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple, TypeVar

from league.types import League
from league_locks import league_lock
from league_repo import LeagueRepo

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_LOCK_TIMEOUT_S = 10.0


class LeagueService:
    def __init__(self, repo: LeagueRepo, *, lock_timeout_s: Optional[float] = DEFAULT_LOCK_TIMEOUT_S):
        self.repo = repo
        self.lock_timeout_s = lock_timeout_s

    @classmethod
    @contextlib.contextmanager
    def open(cls, db_path: str | Path, **kwargs) -> Iterator["LeagueService"]:
        repo = LeagueRepo(db_path)
        try:
            yield cls(repo, **kwargs)
        finally:
            repo.close()

    def get(self, league_id: str) -> League:
        return self.repo.load(league_id)

    def create(self, league: League, now: Optional[datetime] = None) -> League:
        with league_lock(league.league_id, reason="CREATE", timeout_s=self.lock_timeout_s):
            return self.repo.create(league, now)

    def delete(self, league_id: str) -> None:
        with league_lock(league_id, reason="DELETE", timeout_s=self.lock_timeout_s):
            self.repo.delete(league_id)

    def mutate(
        self,
        league_id: str,
        op: Callable[[League], Tuple[League, T]],
        *,
        reason: str = "",
        now: Optional[datetime] = None,
    ) -> Tuple[League, T]:
        """Run one engine operation against the stored snapshot and persist the result.

        `op` returns (new_league, result). When it hands back the very same object
        (a no-op such as advance at OFFSEASON) nothing is written.
        """
        with league_lock(league_id, reason=reason, timeout_s=self.lock_timeout_s):
            league = self.repo.load(league_id)
            new_league, result = op(league)
            if new_league is league:
                return league, result
            saved = self.repo.save(new_league, now)
            logger.debug("league saved (league=%s version=%d reason=%s)", league_id, saved.version, reason)
            return saved, result
