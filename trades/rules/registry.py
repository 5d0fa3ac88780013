from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional

from ..models import Reason, TradeProposal
from .base import Rule, TradeContext


@dataclass
class RuleRegistry:
    rules: list[Rule] = field(default_factory=list)

    def __post_init__(self) -> None:
        ids = [r.rule_id for r in self.rules]
        dupes = sorted({i for i in ids if ids.count(i) > 1})
        if dupes:
            raise ValueError(f"duplicate rule_id(s): {dupes}")

    def ordered(self) -> list[Rule]:
        return sorted((r for r in self.rules if r.enabled), key=lambda r: (r.priority, r.rule_id))

    def validate_all(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        """Run every enabled rule in priority order and collect all reasons."""
        reasons: list[Reason] = []
        for rule in self.ordered():
            reasons.extend(rule.validate(proposal, ctx))
        return reasons


_DEFAULT_REGISTRY: Optional[RuleRegistry] = None


def get_default_registry() -> RuleRegistry:
    global _DEFAULT_REGISTRY
    if _DEFAULT_REGISTRY is None:
        from .builtin import BUILTIN_RULES

        _DEFAULT_REGISTRY = RuleRegistry(list(BUILTIN_RULES))
    return _DEFAULT_REGISTRY


def validate_all(
    proposal: TradeProposal,
    ctx: TradeContext,
    rules: Optional[Iterable[Rule]] = None,
) -> list[Reason]:
    registry = RuleRegistry(list(rules)) if rules is not None else get_default_registry()
    return registry.validate_all(proposal, ctx)
