from __future__ import annotations

"""League aggregate types.

Conventions aligned with this codebase:
- franchise_id is an uppercase slot code (e.g. 'LAL', 'F1')
- money is integer dollars everywhere (no floats in the ledger)
- timestamps are timezone-aware UTC datetimes in memory, ISO 'Z' strings on disk
- pick_id uses the seeded format: "{year}_R{round}_{ORIGINAL}" (e.g. "2027_R2_BOS")

from_payload() is strict: a missing key or a wrong type raises (KeyError /
TypeError / ValueError). The store turns those into CorruptStateError; nothing
here tries to patch up a bad document.
"""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Tuple

import config
import game_time
from cap_model import CapSnapshot
from schema import make_pick_id, normalize_franchise_id, normalize_player_id

from .errors import UNKNOWN_FRANCHISE, LeagueError

if TYPE_CHECKING:
    from trades.models import TradeProposal, TradeRecord


class Phase(str, Enum):
    SETUP = "SETUP"
    GM_LOTTERY = "GM_LOTTERY"
    PRE_DRAFT = "PRE_DRAFT"
    DRAFT_LOTTERY = "DRAFT_LOTTERY"
    DRAFT = "DRAFT"
    FA_MORATORIUM = "FA_MORATORIUM"
    FREE_AGENCY = "FREE_AGENCY"
    TRAINING_CAMP = "TRAINING_CAMP"
    REGULAR_SEASON = "REGULAR_SEASON"
    TRADE_DEADLINE = "TRADE_DEADLINE"
    PLAYOFFS = "PLAYOFFS"
    OFFSEASON = "OFFSEASON"


PHASE_ORDER: Tuple[Phase, ...] = tuple(Phase)


def _strict_int(value: Any, field_name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{field_name} must be an int, got {type(value).__name__}")
    return value


def _strict_bool(value: Any, field_name: str) -> bool:
    if not isinstance(value, bool):
        raise TypeError(f"{field_name} must be a bool, got {type(value).__name__}")
    return value


def _opt_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True, slots=True)
class LeagueConfig:
    """Per-league rule configuration (cap thresholds, roster bounds, timing)."""

    salary_cap: int = config.SALARY_CAP
    luxury_tax: int = config.LUXURY_TAX
    first_apron: int = config.FIRST_APRON
    second_apron: int = config.SECOND_APRON

    roster_min: int = config.ROSTER_MIN
    roster_max: int = config.ROSTER_MAX
    slot_count: int = len(config.NBA_TEAMS)

    match_multiplier_pct: int = config.MATCH_MULTIPLIER_PCT
    match_buffer: int = config.MATCH_BUFFER
    max_cash_in_trade: int = config.MAX_CASH_IN_TRADE

    proposal_expiry_s: int = config.TRADE_PROPOSAL_EXPIRY_S
    trade_retention_s: int = config.TRADE_RETENTION_S
    trade_blocked_phases: Tuple[str, ...] = config.TRADE_BLOCKED_PHASES
    phase_durations_s: Mapping[str, int] = field(default_factory=lambda: dict(config.PHASE_DURATIONS_S))

    def __post_init__(self) -> None:
        for name in (
            "salary_cap",
            "luxury_tax",
            "first_apron",
            "second_apron",
            "roster_min",
            "roster_max",
            "slot_count",
            "match_multiplier_pct",
            "match_buffer",
            "max_cash_in_trade",
            "proposal_expiry_s",
            "trade_retention_s",
        ):
            _strict_int(getattr(self, name), name)

        if not (0 < self.salary_cap < self.luxury_tax < self.first_apron < self.second_apron):
            raise ValueError(
                "cap thresholds must be ascending: salary_cap < luxury_tax < first_apron < second_apron"
            )
        if self.slot_count <= 0:
            raise ValueError("slot_count must be >= 1")
        if self.roster_min < 0 or self.roster_min > self.roster_max:
            raise ValueError("roster bounds must satisfy 0 <= roster_min <= roster_max")
        if self.match_multiplier_pct < 100 or self.match_buffer < 0:
            raise ValueError("match_multiplier_pct must be >= 100 and match_buffer >= 0")
        if self.max_cash_in_trade < 0 or self.proposal_expiry_s <= 0 or self.trade_retention_s < 0:
            raise ValueError("cash limit / expiry / retention must be non-negative (expiry > 0)")

        valid_phases = {p.value for p in Phase}
        blocked = tuple(str(p).upper() for p in self.trade_blocked_phases)
        unknown = sorted(set(blocked) - valid_phases)
        if unknown:
            raise ValueError(f"unknown phases in trade_blocked_phases: {unknown}")
        object.__setattr__(self, "trade_blocked_phases", blocked)

        durations = {str(k).upper(): _strict_int(v, f"phase_durations_s[{k}]") for k, v in dict(self.phase_durations_s).items()}
        unknown = sorted(set(durations) - valid_phases)
        if unknown:
            raise ValueError(f"unknown phases in phase_durations_s: {unknown}")
        object.__setattr__(self, "phase_durations_s", durations)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "LeagueConfig":
        """Build from a (partial) mapping; unknown keys are rejected."""
        data = dict(data or {})
        known = set(cls.__dataclass_fields__)
        extra = sorted(set(data) - known)
        if extra:
            raise ValueError(f"unknown league config keys: {extra}")
        if "trade_blocked_phases" in data:
            data["trade_blocked_phases"] = tuple(data["trade_blocked_phases"])
        return cls(**data)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "salary_cap": self.salary_cap,
            "luxury_tax": self.luxury_tax,
            "first_apron": self.first_apron,
            "second_apron": self.second_apron,
            "roster_min": self.roster_min,
            "roster_max": self.roster_max,
            "slot_count": self.slot_count,
            "match_multiplier_pct": self.match_multiplier_pct,
            "match_buffer": self.match_buffer,
            "max_cash_in_trade": self.max_cash_in_trade,
            "proposal_expiry_s": self.proposal_expiry_s,
            "trade_retention_s": self.trade_retention_s,
            "trade_blocked_phases": list(self.trade_blocked_phases),
            "phase_durations_s": dict(self.phase_durations_s),
        }


@dataclass(frozen=True, slots=True)
class Contract:
    """A player contract. Owned by exactly one franchise at a time."""

    player_id: str
    name: str
    position: str
    salary: int
    years_remaining: int
    no_trade: bool = False
    extension_eligible: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "player_id", normalize_player_id(self.player_id))
        _strict_int(self.salary, "salary")
        _strict_int(self.years_remaining, "years_remaining")
        if self.salary < 0:
            raise ValueError(f"salary must be >= 0 (player_id={self.player_id})")
        if self.years_remaining < 0:
            raise ValueError(f"years_remaining must be >= 0 (player_id={self.player_id})")

    def to_payload(self) -> Dict[str, Any]:
        return {
            "player_id": self.player_id,
            "name": self.name,
            "position": self.position,
            "salary": self.salary,
            "years_remaining": self.years_remaining,
            "no_trade": self.no_trade,
            "extension_eligible": self.extension_eligible,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Contract":
        return cls(
            player_id=str(payload["player_id"]),
            name=str(payload["name"]),
            position=str(payload["position"]),
            salary=_strict_int(payload["salary"], "salary"),
            years_remaining=_strict_int(payload["years_remaining"], "years_remaining"),
            no_trade=_strict_bool(payload["no_trade"], "no_trade"),
            extension_eligible=_strict_bool(payload["extension_eligible"], "extension_eligible"),
        )


@dataclass(frozen=True, slots=True)
class DraftPickAsset:
    """A future draft selection.

    Value object: equality is the (year, round, original_franchise_id) triple.
    The current holder is implicit (whichever franchise lists it).
    """

    year: int
    round: int
    original_franchise_id: str

    def __post_init__(self) -> None:
        _strict_int(self.year, "year")
        _strict_int(self.round, "round")
        if self.round < 1:
            raise ValueError("round must be >= 1")
        object.__setattr__(self, "original_franchise_id", normalize_franchise_id(self.original_franchise_id))

    @property
    def pick_id(self) -> str:
        return make_pick_id(self.year, self.round, self.original_franchise_id)

    def to_payload(self) -> Dict[str, Any]:
        return {"year": self.year, "round": self.round, "original_franchise_id": self.original_franchise_id}

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "DraftPickAsset":
        return cls(
            year=_strict_int(payload["year"], "year"),
            round=_strict_int(payload["round"], "round"),
            original_franchise_id=str(payload["original_franchise_id"]),
        )


@dataclass
class Franchise:
    franchise_id: str
    name: str
    gm_id: Optional[str] = None
    assigned_at: Optional[datetime] = None
    assigned_via: Optional[str] = None
    contracts: List[Contract] = field(default_factory=list)
    draft_picks: List[DraftPickAsset] = field(default_factory=list)
    # Derived; rebuilt by league.roster.refresh_cap_snapshot on every roster mutation.
    cap_snapshot: Optional[CapSnapshot] = None
    transaction_ids: List[str] = field(default_factory=list)

    def find_contract(self, player_id: str) -> Optional[Contract]:
        for c in self.contracts:
            if c.player_id == player_id:
                return c
        return None

    def holds_pick(self, pick: DraftPickAsset) -> bool:
        return pick in self.draft_picks

    def to_payload(self) -> Dict[str, Any]:
        return {
            "franchise_id": self.franchise_id,
            "name": self.name,
            "gm_id": self.gm_id,
            "assigned_at": game_time.to_iso(self.assigned_at),
            "assigned_via": self.assigned_via,
            "contracts": [c.to_payload() for c in self.contracts],
            "draft_picks": [p.to_payload() for p in self.draft_picks],
            "cap_snapshot": self.cap_snapshot.to_payload() if self.cap_snapshot is not None else None,
            "transaction_ids": list(self.transaction_ids),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Franchise":
        snap = payload["cap_snapshot"]
        return cls(
            franchise_id=normalize_franchise_id(payload["franchise_id"]),
            name=str(payload["name"]),
            gm_id=_opt_str(payload["gm_id"]),
            assigned_at=game_time.parse_iso(payload["assigned_at"], field="assigned_at"),
            assigned_via=_opt_str(payload["assigned_via"]),
            contracts=[Contract.from_payload(c) for c in payload["contracts"]],
            draft_picks=[DraftPickAsset.from_payload(p) for p in payload["draft_picks"]],
            cap_snapshot=CapSnapshot.from_payload(snap) if snap is not None else None,
            transaction_ids=[str(t) for t in payload["transaction_ids"]],
        )


@dataclass
class LotteryState:
    registration_open: bool = False
    registered: List[str] = field(default_factory=list)
    lottery_order: List[str] = field(default_factory=list)
    drawn_at: Optional[datetime] = None

    @property
    def is_drawn(self) -> bool:
        return bool(self.lottery_order)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "registration_open": self.registration_open,
            "registered": list(self.registered),
            "lottery_order": list(self.lottery_order),
            "drawn_at": game_time.to_iso(self.drawn_at),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "LotteryState":
        return cls(
            registration_open=_strict_bool(payload["registration_open"], "registration_open"),
            registered=[str(u) for u in payload["registered"]],
            lottery_order=[str(u) for u in payload["lottery_order"]],
            drawn_at=game_time.parse_iso(payload["drawn_at"], field="drawn_at"),
        )


@dataclass(frozen=True, slots=True)
class LeagueTransaction:
    """Append-only league log entry (GM assignment, lottery claim, trade, reset)."""

    txn_id: str
    txn_type: str
    at: datetime
    franchise_ids: Tuple[str, ...] = ()
    details: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "txn_id": self.txn_id,
            "txn_type": self.txn_type,
            "at": game_time.to_iso(self.at),
            "franchise_ids": list(self.franchise_ids),
            "details": copy.deepcopy(self.details),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "LeagueTransaction":
        at = game_time.parse_iso(payload["at"], field="at")
        if at is None:
            raise ValueError("transaction.at is required")
        details = payload["details"]
        if not isinstance(details, Mapping):
            raise TypeError("transaction.details must be a mapping")
        return cls(
            txn_id=str(payload["txn_id"]),
            txn_type=str(payload["txn_type"]),
            at=at,
            franchise_ids=tuple(str(f) for f in payload["franchise_ids"]),
            details=dict(details),
        )


@dataclass
class League:
    """Aggregate root. One document per league_id in the store."""

    league_id: str
    season_name: str
    config: LeagueConfig
    franchises: Dict[str, Franchise]
    created_at: datetime
    updated_at: datetime
    phase: Phase = Phase.SETUP
    phase_started_at: Optional[datetime] = None
    is_paused: bool = False
    paused_at: Optional[datetime] = None
    lottery: LotteryState = field(default_factory=LotteryState)
    trades: List["TradeProposal"] = field(default_factory=list)
    trade_history: List["TradeRecord"] = field(default_factory=list)
    transactions: List[LeagueTransaction] = field(default_factory=list)
    version: int = 0

    # -----------------------------
    # Accessors
    # -----------------------------
    def copy(self) -> "League":
        """Working copy for an operation; the caller's snapshot is never touched."""
        return copy.deepcopy(self)

    def get_franchise(self, franchise_id: Any) -> Franchise:
        try:
            fid = normalize_franchise_id(franchise_id)
        except ValueError:
            fid = str(franchise_id)
        franchise = self.franchises.get(fid)
        if franchise is None:
            raise LeagueError(UNKNOWN_FRANCHISE, "Unknown franchise", {"franchise_id": fid})
        return franchise

    def franchise_of_gm(self, participant_id: str) -> Optional[Franchise]:
        for franchise in self.franchises.values():
            if franchise.gm_id == participant_id:
                return franchise
        return None

    def find_proposal(self, proposal_id: str) -> Optional["TradeProposal"]:
        for proposal in self.trades:
            if proposal.proposal_id == proposal_id:
                return proposal
        return None

    def pending_proposals(self) -> List["TradeProposal"]:
        from trades.models import ProposalStatus

        return [p for p in self.trades if p.status in (ProposalStatus.PROPOSED, ProposalStatus.COUNTERED)]

    # -----------------------------
    # Serialization
    # -----------------------------
    def to_payload(self) -> Dict[str, Any]:
        return {
            "league_id": self.league_id,
            "season_name": self.season_name,
            "config": self.config.to_payload(),
            "phase": self.phase.value,
            "phase_started_at": game_time.to_iso(self.phase_started_at),
            "is_paused": self.is_paused,
            "paused_at": game_time.to_iso(self.paused_at),
            "franchises": {fid: f.to_payload() for fid, f in self.franchises.items()},
            "lottery": self.lottery.to_payload(),
            "trades": [p.to_payload() for p in self.trades],
            "trade_history": [r.to_payload() for r in self.trade_history],
            "transactions": [t.to_payload() for t in self.transactions],
            "version": self.version,
            "created_at": game_time.to_iso(self.created_at),
            "updated_at": game_time.to_iso(self.updated_at),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "League":
        # Local import: trades.models depends on this module.
        from trades.models import TradeProposal, TradeRecord

        franchises_raw = payload["franchises"]
        if not isinstance(franchises_raw, Mapping):
            raise TypeError("franchises must be a mapping")
        franchises = {str(fid): Franchise.from_payload(f) for fid, f in franchises_raw.items()}
        for fid, franchise in franchises.items():
            if fid != franchise.franchise_id:
                raise ValueError(f"franchise key mismatch: {fid} != {franchise.franchise_id}")

        created_at = game_time.parse_iso(payload["created_at"], field="created_at")
        updated_at = game_time.parse_iso(payload["updated_at"], field="updated_at")
        if created_at is None or updated_at is None:
            raise ValueError("created_at/updated_at are required")

        return cls(
            league_id=str(payload["league_id"]),
            season_name=str(payload["season_name"]),
            config=LeagueConfig.from_mapping(payload["config"]),
            franchises=franchises,
            created_at=created_at,
            updated_at=updated_at,
            phase=Phase(payload["phase"]),
            phase_started_at=game_time.parse_iso(payload["phase_started_at"], field="phase_started_at"),
            is_paused=_strict_bool(payload["is_paused"], "is_paused"),
            paused_at=game_time.parse_iso(payload["paused_at"], field="paused_at"),
            lottery=LotteryState.from_payload(payload["lottery"]),
            trades=[TradeProposal.from_payload(p) for p in payload["trades"]],
            trade_history=[TradeRecord.from_payload(r) for r in payload["trade_history"]],
            transactions=[LeagueTransaction.from_payload(t) for t in payload["transactions"]],
            version=_strict_int(payload["version"], "version"),
        )
