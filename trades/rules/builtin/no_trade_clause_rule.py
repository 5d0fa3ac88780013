from __future__ import annotations

from dataclasses import dataclass

from ...errors import NO_TRADE_CLAUSE
from ...models import Reason, Side, TradeProposal
from ..base import TradeContext


@dataclass
class NoTradeClauseRule:
    rule_id: str = "no_trade_clause"
    priority: int = 50
    enabled: bool = True

    def validate(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        reasons: list[Reason] = []
        for side in (Side.A, Side.B):
            fid = proposal.franchise_for(side)
            blocked = []
            for c in proposal.package_for(side).players:
                live = ctx.current_contract(fid, c.player_id)
                if live is not None and live.no_trade:
                    blocked.append(live.player_id)
            if blocked:
                reasons.append(
                    Reason(
                        NO_TRADE_CLAUSE,
                        "Player has a no-trade clause",
                        {"rule": self.rule_id, "franchise_id": fid, "player_ids": blocked},
                    )
                )
        return reasons
