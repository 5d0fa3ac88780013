from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class LeagueError(Exception):
    """Structured error for league engine operations.

    The API layer maps these to HTTP 4xx/5xx while keeping a stable
    machine-readable code for the presentation layer. Raising one never
    leaves a partially-mutated league behind: operations work on a copy.
    """

    code: str
    message: str
    details: Optional[Any] = None

    def __str__(self) -> str:  # pragma: no cover
        return f"{self.code}: {self.message}"


@dataclass
class CorruptStateError(LeagueError):
    """Persisted league document could not be decoded. Never auto-repaired."""


# Error codes (stable API surface)
REGISTRATION_CLOSED = "REGISTRATION_CLOSED"
ALREADY_REGISTERED = "ALREADY_REGISTERED"
LOTTERY_FULL = "LOTTERY_FULL"
NOT_REGISTERED = "NOT_REGISTERED"
NO_REGISTRANTS = "NO_REGISTRANTS"
NOT_YOUR_TURN = "NOT_YOUR_TURN"
FRANCHISE_TAKEN = "FRANCHISE_TAKEN"
UNKNOWN_FRANCHISE = "UNKNOWN_FRANCHISE"
ALREADY_GM = "ALREADY_GM"
LEAGUE_PAUSED = "LEAGUE_PAUSED"
INVALID_STATE = "INVALID_STATE"
LEAGUE_NOT_FOUND = "LEAGUE_NOT_FOUND"
LEAGUE_EXISTS = "LEAGUE_EXISTS"
STALE_SNAPSHOT = "STALE_SNAPSHOT"
CORRUPT_STATE = "CORRUPT_STATE"
