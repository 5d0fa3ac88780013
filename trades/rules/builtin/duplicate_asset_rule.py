from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from ...errors import DUPLICATE_ASSET
from ...models import Reason, TradeProposal
from ..base import TradeContext


@dataclass
class DuplicateAssetRule:
    rule_id: str = "duplicate_asset"
    priority: int = 20
    enabled: bool = True

    def validate(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        players = Counter(proposal.package_a.player_ids + proposal.package_b.player_ids)
        picks = Counter(proposal.package_a.pick_ids + proposal.package_b.pick_ids)
        dup_players = sorted(pid for pid, n in players.items() if n > 1)
        dup_picks = sorted(pid for pid, n in picks.items() if n > 1)
        if not dup_players and not dup_picks:
            return []
        return [
            Reason(
                DUPLICATE_ASSET,
                "Asset appears more than once in the trade",
                {"rule": self.rule_id, "player_ids": dup_players, "pick_ids": dup_picks},
            )
        ]
