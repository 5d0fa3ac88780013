from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from league.types import League

from .errors import TRADE_INVALID, TradeError
from .models import Reason, TradeProposal
from .rules import build_trade_context, validate_all
from .rules.base import Rule


@dataclass(frozen=True, slots=True)
class ValidationResult:
    ok: bool
    reasons: Tuple[Reason, ...] = ()

    def to_payload(self) -> Dict[str, Any]:
        return {"ok": self.ok, "reasons": [r.to_payload() for r in self.reasons]}


def validate_proposal(
    league: League,
    proposal: TradeProposal,
    rules: Optional[Iterable[Rule]] = None,
) -> ValidationResult:
    """Stateless legality check. Every rule runs; all violations are returned."""
    ctx = build_trade_context(league)
    reasons = tuple(validate_all(proposal, ctx, rules=rules))
    return ValidationResult(ok=not reasons, reasons=reasons)


def require_valid(league: League, proposal: TradeProposal) -> ValidationResult:
    result = validate_proposal(league, proposal)
    if not result.ok:
        raise TradeError(
            TRADE_INVALID,
            "Trade is not valid",
            {
                "proposal_id": proposal.proposal_id,
                "reasons": [r.to_payload() for r in result.reasons],
            },
        )
    return result
