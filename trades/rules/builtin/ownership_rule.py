from __future__ import annotations

from dataclasses import dataclass

from ...errors import OWNERSHIP
from ...models import Reason, Side, TradeProposal
from ..base import TradeContext


@dataclass
class OwnershipRule:
    """Every asset must be held by the side sending it, right now."""

    rule_id: str = "ownership"
    priority: int = 30
    enabled: bool = True

    def validate(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        reasons: list[Reason] = []
        for side in (Side.A, Side.B):
            fid = proposal.franchise_for(side)
            franchise = ctx.get_franchise(fid)
            if franchise is None:
                # Reported by DealShapeRule.
                continue
            package = proposal.package_for(side)
            roster_ids = ctx.get_roster_player_ids(fid)
            missing_players = [pid for pid in package.player_ids if pid not in roster_ids]
            missing_picks = [p.pick_id for p in package.picks if not franchise.holds_pick(p)]
            if missing_players or missing_picks:
                reasons.append(
                    Reason(
                        OWNERSHIP,
                        "Franchise does not own all assets it is sending",
                        {
                            "rule": self.rule_id,
                            "franchise_id": fid,
                            "player_ids": missing_players,
                            "pick_ids": missing_picks,
                        },
                    )
                )
        return reasons
