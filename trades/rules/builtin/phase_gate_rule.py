from __future__ import annotations

from dataclasses import dataclass

from league.phases import trading_allowed

from ...errors import TRADING_CLOSED
from ...models import Reason, TradeProposal
from ..base import TradeContext


@dataclass
class PhaseGateRule:
    rule_id: str = "phase_gate"
    priority: int = 10
    enabled: bool = True

    def validate(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        phase = ctx.league.phase
        if trading_allowed(phase, ctx.config.trade_blocked_phases):
            return []
        return [
            Reason(
                TRADING_CLOSED,
                "Trades are not allowed in the current phase",
                {"rule": self.rule_id, "phase": phase.value, "blocked_phases": list(ctx.config.trade_blocked_phases)},
            )
        ]
