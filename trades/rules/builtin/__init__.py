from __future__ import annotations

from .cash_limit_rule import CashLimitRule
from .deal_shape_rule import DealShapeRule
from .duplicate_asset_rule import DuplicateAssetRule
from .no_trade_clause_rule import NoTradeClauseRule
from .ownership_rule import OwnershipRule
from .phase_gate_rule import PhaseGateRule
from .roster_limit_rule import RosterLimitRule
from .salary_matching_rule import SalaryMatchingRule

BUILTIN_RULES = [
    PhaseGateRule(),
    DealShapeRule(),
    DuplicateAssetRule(),
    OwnershipRule(),
    CashLimitRule(),
    NoTradeClauseRule(),
    RosterLimitRule(),
    SalaryMatchingRule(),
]
