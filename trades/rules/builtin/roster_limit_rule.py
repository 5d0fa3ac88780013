from __future__ import annotations

from dataclasses import dataclass

from ...errors import ROSTER_LIMIT
from ...models import Reason, TradeProposal
from ..base import TradeContext, build_team_trade_totals


@dataclass
class RosterLimitRule:
    """Roster size after the trade must stay within [roster_min, roster_max]."""

    rule_id: str = "roster_limit"
    priority: int = 60
    enabled: bool = True

    def validate(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        lo = int(ctx.config.roster_min)
        hi = int(ctx.config.roster_max)
        totals = build_team_trade_totals(proposal, ctx)
        reasons: list[Reason] = []

        for fid, t in totals.items():
            if ctx.get_franchise(fid) is None:
                continue
            current = len(ctx.get_roster_player_ids(fid))
            new_count = current - t["outgoing_players_count"] + t["incoming_players_count"]
            if new_count > hi:
                reasons.append(
                    Reason(
                        ROSTER_LIMIT,
                        "Roster limit exceeded",
                        {"rule": self.rule_id, "franchise_id": fid, "count": new_count, "max": hi},
                    )
                )
            elif new_count < lo:
                reasons.append(
                    Reason(
                        ROSTER_LIMIT,
                        "Roster size below minimum",
                        {"rule": self.rule_id, "franchise_id": fid, "count": new_count, "min": lo},
                    )
                )
        return reasons
