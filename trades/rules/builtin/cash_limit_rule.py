from __future__ import annotations

from dataclasses import dataclass

from ...errors import CASH_LIMIT
from ...models import Reason, Side, TradeProposal
from ..base import TradeContext


@dataclass
class CashLimitRule:
    rule_id: str = "cash_limit"
    priority: int = 40
    enabled: bool = True

    def validate(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        limit = int(ctx.config.max_cash_in_trade)
        reasons: list[Reason] = []
        for side in (Side.A, Side.B):
            cash = proposal.package_for(side).cash
            if 0 <= cash <= limit:
                continue
            reasons.append(
                Reason(
                    CASH_LIMIT,
                    "Cash in trade out of bounds",
                    {"rule": self.rule_id, "franchise_id": proposal.franchise_for(side), "cash": cash, "max": limit},
                )
            )
        return reasons
