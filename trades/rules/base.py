from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol

from cap_model import CapThresholds, compute_payroll
from league.types import Contract, Franchise, League, LeagueConfig

from ..models import Reason, Side, TradeProposal


@dataclass
class TradeContext:
    """Read-only view of the league a rule validates against.

    Rules never mutate `league`; they only read rosters, picks, phase and config.
    """

    league: League
    thresholds: CapThresholds

    @property
    def config(self) -> LeagueConfig:
        return self.league.config

    def get_franchise(self, franchise_id: str) -> Optional[Franchise]:
        return self.league.franchises.get(franchise_id)

    def current_contract(self, franchise_id: str, player_id: str) -> Optional[Contract]:
        franchise = self.get_franchise(franchise_id)
        if franchise is None:
            return None
        return franchise.find_contract(player_id)

    def get_roster_player_ids(self, franchise_id: str) -> set[str]:
        franchise = self.get_franchise(franchise_id)
        if franchise is None:
            return set()
        return {c.player_id for c in franchise.contracts}

    def get_team_payroll_before(self, franchise_id: str) -> int:
        franchise = self.get_franchise(franchise_id)
        if franchise is None:
            return 0
        return compute_payroll(franchise)


class Rule(Protocol):
    rule_id: str
    priority: int
    enabled: bool

    def validate(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        ...


def _side_salary(proposal: TradeProposal, side: Side, ctx: TradeContext) -> int:
    # Salaries come from the live roster; the package copy may be stale.
    sender = proposal.franchise_for(side)
    total = 0
    for c in proposal.package_for(side).players:
        live = ctx.current_contract(sender, c.player_id)
        total += (live or c).salary
    return total


def build_team_trade_totals(
    proposal: TradeProposal,
    ctx: TradeContext,
) -> dict[str, dict[str, int]]:
    totals: dict[str, dict[str, int]] = {}
    for side in (Side.A, Side.B):
        fid = proposal.franchise_for(side)
        out_pkg = proposal.package_for(side)
        in_pkg = proposal.package_for(side.other)
        totals[fid] = {
            "outgoing_salary": _side_salary(proposal, side, ctx),
            "incoming_salary": _side_salary(proposal, side.other, ctx),
            "outgoing_players_count": len(out_pkg.players),
            "incoming_players_count": len(in_pkg.players),
            "outgoing_cash": out_pkg.cash,
            "incoming_cash": in_pkg.cash,
        }
    return totals


def build_team_payrolls(
    proposal: TradeProposal,
    ctx: TradeContext,
    trade_totals: Optional[dict[str, dict[str, int]]] = None,
) -> dict[str, dict[str, int]]:
    totals = trade_totals or build_team_trade_totals(proposal, ctx)
    payrolls: dict[str, dict[str, int]] = {}
    for fid in (proposal.franchise_a, proposal.franchise_b):
        before = ctx.get_team_payroll_before(fid)
        payrolls[fid] = {
            "payroll_before": before,
            "payroll_after": before - totals[fid]["outgoing_salary"] + totals[fid]["incoming_salary"],
        }
    return payrolls


def build_trade_context(league: League) -> TradeContext:
    return TradeContext(league=league, thresholds=CapThresholds.from_config(league.config))
