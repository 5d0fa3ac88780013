from __future__ import annotations

from dataclasses import dataclass

from league.errors import LeagueError


@dataclass
class TradeError(LeagueError):
    """Trade-flow error.

    For TRADE_INVALID, `details["reasons"]` carries every violated rule so the
    caller can show a complete diagnosis in one round trip.
    """


# Builder / lifecycle
ASSET_NOT_OWNED = "ASSET_NOT_OWNED"
ASSET_ALREADY_INCLUDED = "ASSET_ALREADY_INCLUDED"
PROPOSAL_NOT_FOUND = "PROPOSAL_NOT_FOUND"
NOT_PROPOSAL_PARTY = "NOT_PROPOSAL_PARTY"

# Validation (aggregate)
TRADE_INVALID = "TRADE_INVALID"

# Validation reason codes (Reason.code)
TRADING_CLOSED = "TRADING_CLOSED"
DEAL_INVALIDATED = "DEAL_INVALIDATED"
DUPLICATE_ASSET = "DUPLICATE_ASSET"
OWNERSHIP = "OWNERSHIP"
CASH_LIMIT = "CASH_LIMIT"
NO_TRADE_CLAUSE = "NO_TRADE_CLAUSE"
ROSTER_LIMIT = "ROSTER_LIMIT"
SALARY_MATCHING = "SALARY_MATCHING"
