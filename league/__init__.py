"""League aggregate: types, phases, roster store and admin operations."""

from .errors import CorruptStateError, LeagueError
from .types import (
    PHASE_ORDER,
    Contract,
    DraftPickAsset,
    Franchise,
    League,
    LeagueConfig,
    LeagueTransaction,
    LotteryState,
    Phase,
)

__all__ = [
    "CorruptStateError",
    "LeagueError",
    "PHASE_ORDER",
    "Contract",
    "DraftPickAsset",
    "Franchise",
    "League",
    "LeagueConfig",
    "LeagueTransaction",
    "LotteryState",
    "Phase",
]
