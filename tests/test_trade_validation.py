"""
Trade legality rules (trades/validator.py + trades/rules).

Every enabled rule runs; the result lists all violations, not just the first.
"""

from dataclasses import replace

import pytest

from league.phases import advance_phase
from league.roster import seed_contracts
from league.service import update_config
from trades.builder import add_cash, add_pick, add_player, new_proposal
from trades.errors import TradeError
from trades.models import TradePackage, TradeProposal
from trades.rules import RuleRegistry
from trades.rules.builtin import BUILTIN_RULES
from trades.rules.builtin.cash_limit_rule import CashLimitRule
from trades.rules.builtin.salary_matching_rule import SalaryMatchingRule
from trades.validator import require_valid, validate_proposal

from conftest import make_contract


def _codes(result):
    return sorted(r.code for r in result.reasons)


def _swap(league, t0, a_players=(), b_players=(), a="F1", b="F2"):
    p = new_proposal(league, a, b, now=t0)
    for pid in a_players:
        p = add_player(league, p, "A", pid)
    for pid in b_players:
        p = add_player(league, p, "B", pid)
    return p


class TestLegalTrades:
    def test_matching_at_the_boundary(self, league, t0):
        """F1 (over cap) sends 10M and takes back exactly 12.6M."""
        result = validate_proposal(league, _swap(league, t0, ["a3"], ["b3"]))
        assert result.ok
        assert result.reasons == ()

    def test_under_cap_team_absorbs_salary(self, league, t0):
        p = _swap(league, t0, ["a1"], [], a="F1", b="F3")
        assert validate_proposal(league, p).ok

    def test_picks_only(self, league, t0):
        p = add_pick(league, new_proposal(league, "F1", "F2", now=t0), "A", "2027_R2_F1")
        assert validate_proposal(league, p).ok


class TestSalaryMatching:
    def test_over_cap_team_cannot_take_back_too_much(self, league, t0):
        result = validate_proposal(league, _swap(league, t0, ["a3"], ["b2"]))
        assert _codes(result) == ["SALARY_MATCHING"]
        evidence = result.reasons[0].evidence
        assert evidence["franchise_id"] == "F1"
        assert evidence["method"] == "outgoing_pct"
        assert evidence["allowed_in"] == 12_600_000
        assert evidence["incoming_salary"] == 40_000_000
        assert evidence["tier"] == "OVER_CAP"

    def test_one_dollar_over_the_band(self, league, t0):
        lg = seed_contracts(league, "F2", [make_contract("b4", 12_600_001)], replace=False)
        result = validate_proposal(lg, _swap(lg, t0, ["a3"], ["b4"]))
        assert _codes(result) == ["SALARY_MATCHING"]

    def test_under_cap_team_over_its_room(self, league, t0):
        result = validate_proposal(league, _swap(league, t0, ["a1", "a2"], [], a="F1", b="F3"))
        assert _codes(result) == ["SALARY_MATCHING"]
        assert result.reasons[0].evidence["method"] == "cap_room"

    def test_uses_live_salary_not_the_draft_copy(self, league, t0):
        p = _swap(league, t0, ["a3"], ["b3"])
        lg = seed_contracts(league, "F2", [make_contract("b3", 30_000_000)], replace=False)
        assert _codes(validate_proposal(lg, p)) == ["SALARY_MATCHING"]


class TestOtherRules:
    def test_phase_gate(self, league, t0):
        lg, _ = advance_phase(league, t0)
        result = validate_proposal(lg, _swap(lg, t0, ["a3"], ["b3"]))
        assert _codes(result) == ["TRADING_CLOSED"]

    def test_no_trade_clause(self, league, t0):
        p = _swap(league, t0, [], ["c1"], a="F1", b="F3")
        result = validate_proposal(league, p)
        assert "NO_TRADE_CLAUSE" in _codes(result)

    def test_cash_limit(self, league, t0):
        p = add_pick(league, new_proposal(league, "F1", "F2", now=t0), "A", "2027_R2_F1")
        assert validate_proposal(league, add_cash(league, p, "B", 5_880_000)).ok
        result = validate_proposal(league, add_cash(league, p, "B", 5_880_001))
        assert _codes(result) == ["CASH_LIMIT"]

    def test_roster_max(self, league, t0):
        lg = update_config(league, {"roster_max": 3}, now=t0)
        p = _swap(lg, t0, [], ["c2"], a="F1", b="F3")
        result = validate_proposal(lg, p)
        assert _codes(result) == ["ROSTER_LIMIT"]
        assert result.reasons[0].evidence == {"rule": "roster_limit", "franchise_id": "F1", "count": 4, "max": 3}

    def test_roster_min(self, league, t0):
        lg = update_config(league, {"roster_min": 2}, now=t0)
        p = _swap(lg, t0, [], ["c2"], a="F1", b="F3")
        result = validate_proposal(lg, p)
        assert _codes(result) == ["ROSTER_LIMIT"]
        assert result.reasons[0].evidence["franchise_id"] == "F3"

    def test_ownership_is_checked_against_current_rosters(self, league, t0):
        p = _swap(league, t0, ["a3"], ["b3"])
        lg = seed_contracts(league, "F1", [make_contract("a1", 60_000_000)])
        result = validate_proposal(lg, p)
        assert "OWNERSHIP" in _codes(result)

    def test_duplicate_asset(self, league, t0):
        a3 = league.get_franchise("F1").find_contract("a3")
        p = replace(
            new_proposal(league, "F1", "F2", now=t0),
            package_a=TradePackage(players=(a3,)),
            package_b=TradePackage(players=(a3,)),
        )
        codes = _codes(validate_proposal(league, p))
        assert "DUPLICATE_ASSET" in codes
        assert "OWNERSHIP" in codes

    def test_empty_trade(self, league, t0):
        result = validate_proposal(league, new_proposal(league, "F1", "F2", now=t0))
        assert _codes(result) == ["DEAL_INVALIDATED"]

    def test_all_violations_reported_together(self, league, t0):
        lg, _ = advance_phase(league, t0)
        p = add_cash(lg, _swap(lg, t0, ["a3"], ["b2"]), "A", 10_000_000)
        assert _codes(validate_proposal(lg, p)) == ["CASH_LIMIT", "SALARY_MATCHING", "TRADING_CLOSED"]


class TestRegistry:
    def test_builtin_rules_in_priority_order(self):
        ordered = RuleRegistry(list(BUILTIN_RULES)).ordered()
        assert [r.priority for r in ordered] == sorted(r.priority for r in BUILTIN_RULES)
        assert ordered[0].rule_id == "phase_gate"
        assert ordered[-1].rule_id == "salary_matching"

    def test_duplicate_rule_ids_rejected(self):
        with pytest.raises(ValueError):
            RuleRegistry([CashLimitRule(), CashLimitRule()])

    def test_disabled_rule_is_skipped(self, league, t0):
        p = _swap(league, t0, ["a3"], ["b2"])
        rules = [CashLimitRule(), SalaryMatchingRule(enabled=False)]
        assert validate_proposal(league, p, rules=rules).ok

    def test_require_valid_raises_with_reasons(self, league, t0):
        p = _swap(league, t0, ["a3"], ["b2"])
        with pytest.raises(TradeError) as exc:
            require_valid(league, p)
        assert exc.value.code == "TRADE_INVALID"
        assert [r["code"] for r in exc.value.details["reasons"]] == ["SALARY_MATCHING"]
        assert exc.value.details["proposal_id"] == p.proposal_id
