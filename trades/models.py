from __future__ import annotations

"""Trade value types.

TradeProposal and TradePackage are frozen: builder/lifecycle functions return a
new instance via dataclasses.replace(). Once a proposal is proposed only its
status and timestamps change.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

import game_time
from league.errors import INVALID_STATE
from league.types import Contract, DraftPickAsset
from schema import normalize_franchise_id

from .errors import TradeError


class ProposalStatus(str, Enum):
    DRAFT = "draft"
    PROPOSED = "proposed"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    COUNTERED = "countered"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


TERMINAL_STATUSES = frozenset(
    {
        ProposalStatus.ACCEPTED,
        ProposalStatus.REJECTED,
        ProposalStatus.EXPIRED,
        ProposalStatus.CANCELLED,
    }
)
# Statuses that still hold an expiry timer.
PENDING_STATUSES = frozenset({ProposalStatus.PROPOSED, ProposalStatus.COUNTERED})


class Side(str, Enum):
    A = "A"
    B = "B"

    @property
    def other(self) -> "Side":
        return Side.B if self is Side.A else Side.A


def parse_side(value: Any) -> Side:
    try:
        return Side(str(value).strip().upper())
    except ValueError as exc:
        raise TradeError(INVALID_STATE, "side must be 'A' or 'B'", {"side": value}) from exc


@dataclass(frozen=True, slots=True)
class Reason:
    code: str
    message: str
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "code": str(self.code),
            "message": str(self.message),
            "evidence": dict(self.evidence or {}),
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "Reason":
        evidence = payload["evidence"]
        if not isinstance(evidence, Mapping):
            raise TypeError("reason.evidence must be a mapping")
        return cls(code=str(payload["code"]), message=str(payload["message"]), evidence=dict(evidence))


@dataclass(frozen=True, slots=True)
class TradePackage:
    """Assets one side sends."""

    players: Tuple[Contract, ...] = ()
    picks: Tuple[DraftPickAsset, ...] = ()
    cash: int = 0

    @property
    def player_ids(self) -> Tuple[str, ...]:
        return tuple(c.player_id for c in self.players)

    @property
    def pick_ids(self) -> Tuple[str, ...]:
        return tuple(p.pick_id for p in self.picks)

    @property
    def salary(self) -> int:
        return sum(c.salary for c in self.players)

    def is_empty(self) -> bool:
        return not self.players and not self.picks and self.cash == 0

    def to_payload(self) -> Dict[str, Any]:
        return {
            "players": [c.to_payload() for c in self.players],
            "picks": [p.to_payload() for p in self.picks],
            "cash": self.cash,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TradePackage":
        cash = payload["cash"]
        if isinstance(cash, bool) or not isinstance(cash, int):
            raise TypeError("package.cash must be an int")
        return cls(
            players=tuple(Contract.from_payload(c) for c in payload["players"]),
            picks=tuple(DraftPickAsset.from_payload(p) for p in payload["picks"]),
            cash=cash,
        )


@dataclass(frozen=True, slots=True)
class TradeProposal:
    proposal_id: str
    franchise_a: str
    franchise_b: str
    created_at: datetime
    status: ProposalStatus = ProposalStatus.DRAFT
    package_a: TradePackage = field(default_factory=TradePackage)
    package_b: TradePackage = field(default_factory=TradePackage)
    submitted_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    counter_of: Optional[str] = None
    reasons: Tuple[Reason, ...] = ()

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_pending(self) -> bool:
        return self.status in PENDING_STATUSES

    def franchise_for(self, side: Side) -> str:
        return self.franchise_a if side is Side.A else self.franchise_b

    def package_for(self, side: Side) -> TradePackage:
        return self.package_a if side is Side.A else self.package_b

    def with_package(self, side: Side, package: TradePackage) -> "TradeProposal":
        if side is Side.A:
            return replace(self, package_a=package)
        return replace(self, package_b=package)

    def side_of(self, franchise_id: str) -> Optional[Side]:
        if franchise_id == self.franchise_a:
            return Side.A
        if franchise_id == self.franchise_b:
            return Side.B
        return None

    def to_payload(self) -> Dict[str, Any]:
        return {
            "proposal_id": self.proposal_id,
            "status": self.status.value,
            "franchise_a": self.franchise_a,
            "franchise_b": self.franchise_b,
            "package_a": self.package_a.to_payload(),
            "package_b": self.package_b.to_payload(),
            "created_at": game_time.to_iso(self.created_at),
            "submitted_at": game_time.to_iso(self.submitted_at),
            "expires_at": game_time.to_iso(self.expires_at),
            "resolved_at": game_time.to_iso(self.resolved_at),
            "counter_of": self.counter_of,
            "reasons": [r.to_payload() for r in self.reasons],
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TradeProposal":
        created_at = game_time.parse_iso(payload["created_at"], field="created_at")
        if created_at is None:
            raise ValueError("proposal.created_at is required")
        counter_of = payload["counter_of"]
        return cls(
            proposal_id=str(payload["proposal_id"]),
            status=ProposalStatus(payload["status"]),
            franchise_a=normalize_franchise_id(payload["franchise_a"]),
            franchise_b=normalize_franchise_id(payload["franchise_b"]),
            package_a=TradePackage.from_payload(payload["package_a"]),
            package_b=TradePackage.from_payload(payload["package_b"]),
            created_at=created_at,
            submitted_at=game_time.parse_iso(payload["submitted_at"], field="submitted_at"),
            expires_at=game_time.parse_iso(payload["expires_at"], field="expires_at"),
            resolved_at=game_time.parse_iso(payload["resolved_at"], field="resolved_at"),
            counter_of=str(counter_of) if counter_of is not None else None,
            reasons=tuple(Reason.from_payload(r) for r in payload["reasons"]),
        )


@dataclass(frozen=True, slots=True)
class TradeRecord:
    """Completed trade, appended to League.trade_history."""

    proposal_id: str
    completed_at: datetime
    franchise_a: str
    franchise_b: str
    package_a: TradePackage
    package_b: TradePackage
    transaction_id: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "proposal_id": self.proposal_id,
            "completed_at": game_time.to_iso(self.completed_at),
            "franchise_a": self.franchise_a,
            "franchise_b": self.franchise_b,
            "package_a": self.package_a.to_payload(),
            "package_b": self.package_b.to_payload(),
            "transaction_id": self.transaction_id,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "TradeRecord":
        completed_at = game_time.parse_iso(payload["completed_at"], field="completed_at")
        if completed_at is None:
            raise ValueError("trade_record.completed_at is required")
        return cls(
            proposal_id=str(payload["proposal_id"]),
            completed_at=completed_at,
            franchise_a=normalize_franchise_id(payload["franchise_a"]),
            franchise_b=normalize_franchise_id(payload["franchise_b"]),
            package_a=TradePackage.from_payload(payload["package_a"]),
            package_b=TradePackage.from_payload(payload["package_b"]),
            transaction_id=str(payload["transaction_id"]),
        )
