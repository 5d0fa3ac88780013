from __future__ import annotations

from dataclasses import dataclass

from ...errors import DEAL_INVALIDATED
from ...models import Reason, TradeProposal
from ..base import TradeContext


@dataclass
class DealShapeRule:
    rule_id: str = "deal_shape"
    priority: int = 15
    enabled: bool = True

    def validate(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        reasons: list[Reason] = []

        # A) Two distinct franchises.
        if proposal.franchise_a == proposal.franchise_b:
            reasons.append(
                Reason(
                    DEAL_INVALIDATED,
                    "Trade must involve two different franchises",
                    {"rule": self.rule_id, "franchise_id": proposal.franchise_a},
                )
            )

        # B) Both franchises exist in this league.
        unknown = [fid for fid in (proposal.franchise_a, proposal.franchise_b) if ctx.get_franchise(fid) is None]
        if unknown:
            reasons.append(
                Reason(
                    DEAL_INVALIDATED,
                    "Unknown franchise in trade",
                    {"rule": self.rule_id, "franchise_ids": sorted(set(unknown))},
                )
            )

        # C) Something has to move.
        if proposal.package_a.is_empty() and proposal.package_b.is_empty():
            reasons.append(
                Reason(
                    DEAL_INVALIDATED,
                    "Trade must include at least one moving asset",
                    {"rule": self.rule_id},
                )
            )
        return reasons
