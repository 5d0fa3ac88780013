from __future__ import annotations

from dataclasses import dataclass

from ...errors import SALARY_MATCHING
from ...models import Reason, TradeProposal
from ..base import TradeContext, build_team_payrolls, build_team_trade_totals
from ..policies.salary_matching_policy import (
    SalaryMatchingParams,
    build_evidence,
    check_salary_matching,
)


@dataclass
class SalaryMatchingRule:
    rule_id: str = "salary_matching"
    priority: int = 90
    enabled: bool = True

    def validate(self, proposal: TradeProposal, ctx: TradeContext) -> list[Reason]:
        params = SalaryMatchingParams.from_config(ctx.config)
        trade_totals = build_team_trade_totals(proposal, ctx)
        payrolls = build_team_payrolls(proposal, ctx, trade_totals=trade_totals)
        reasons: list[Reason] = []

        for fid in (proposal.franchise_a, proposal.franchise_b):
            if ctx.get_franchise(fid) is None:
                continue
            totals = trade_totals[fid]
            payroll_before = payrolls[fid]["payroll_before"]
            result = check_salary_matching(
                payroll_before_d=payroll_before,
                outgoing_salary_d=totals["outgoing_salary"],
                incoming_salary_d=totals["incoming_salary"],
                params=params,
                thresholds=ctx.thresholds,
            )
            if result.ok:
                continue
            reasons.append(
                Reason(
                    SALARY_MATCHING,
                    "Salary matching failed",
                    build_evidence(
                        rule_id=self.rule_id,
                        franchise_id=fid,
                        payroll_before_d=payroll_before,
                        outgoing_salary_d=totals["outgoing_salary"],
                        incoming_salary_d=totals["incoming_salary"],
                        result=result,
                    ),
                )
            )
        return reasons
