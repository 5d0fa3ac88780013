from __future__ import annotations

"""Salary matching policy.

Centralizes the per-side salary legality check so the rule, the API's dry-run
validation and tests share identical behavior.

- The side's tier is classified on its *current* (pre-trade) payroll.
- UNDER_CAP: incoming <= cap_space + outgoing ("cap_room").
- Any other tier: incoming <= outgoing * multiplier_pct / 100 + buffer
  ("outgoing_pct"). Defaults 125% + $100,000.
- A side with no incoming salary always passes.

Everything is integer dollars; the percentage uses floor division so
125% of 10,000,000 + 100,000 is exactly 12,600,000.

Each side is checked independently. No aggregate (both-sides) condition is
applied; add one as a separate rule if needed.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from cap_model import CapThresholds, CapTier, classify


@dataclass(frozen=True, slots=True)
class SalaryMatchingParams:
    salary_cap_d: int
    multiplier_pct: int
    buffer_d: int

    @classmethod
    def from_config(cls, cfg: Any) -> "SalaryMatchingParams":
        return cls(
            salary_cap_d=int(cfg.salary_cap),
            multiplier_pct=int(cfg.match_multiplier_pct),
            buffer_d=int(cfg.match_buffer),
        )


@dataclass(frozen=True, slots=True)
class SalaryMatchingResult:
    ok: bool
    tier: CapTier
    method: str
    allowed_in_d: int
    payroll_after_d: int
    reason: Optional[str] = None


def allowed_incoming_over_cap(outgoing_salary_d: int, params: SalaryMatchingParams) -> int:
    return (int(outgoing_salary_d) * params.multiplier_pct) // 100 + params.buffer_d


def check_salary_matching(
    *,
    payroll_before_d: int,
    outgoing_salary_d: int,
    incoming_salary_d: int,
    params: SalaryMatchingParams,
    thresholds: CapThresholds,
) -> SalaryMatchingResult:
    """Check salary matching for a single side."""
    payroll_after_d = int(payroll_before_d - outgoing_salary_d + incoming_salary_d)
    tier = classify(thresholds, payroll_before_d)

    if incoming_salary_d <= 0:
        return SalaryMatchingResult(
            ok=True,
            tier=tier,
            method="no_incoming",
            allowed_in_d=0,
            payroll_after_d=payroll_after_d,
            reason="no_incoming",
        )

    if tier is CapTier.UNDER_CAP:
        allowed_in_d = (params.salary_cap_d - payroll_before_d) + outgoing_salary_d
        method = "cap_room"
    else:
        allowed_in_d = allowed_incoming_over_cap(outgoing_salary_d, params)
        method = "outgoing_pct"

    if incoming_salary_d > allowed_in_d:
        return SalaryMatchingResult(
            ok=False,
            tier=tier,
            method=method,
            allowed_in_d=allowed_in_d,
            payroll_after_d=payroll_after_d,
            reason="incoming_gt_allowed_in",
        )

    return SalaryMatchingResult(
        ok=True,
        tier=tier,
        method=method,
        allowed_in_d=allowed_in_d,
        payroll_after_d=payroll_after_d,
        reason="ok",
    )


def build_evidence(
    *,
    rule_id: str,
    franchise_id: str,
    payroll_before_d: int,
    outgoing_salary_d: int,
    incoming_salary_d: int,
    result: SalaryMatchingResult,
) -> Dict[str, Any]:
    return {
        "rule": rule_id,
        "franchise_id": franchise_id,
        "tier": result.tier.name,
        "method": result.method,
        "payroll_before": int(payroll_before_d),
        "payroll_after": int(result.payroll_after_d),
        "outgoing_salary": int(outgoing_salary_d),
        "incoming_salary": int(incoming_salary_d),
        "allowed_in": int(result.allowed_in_d),
        "reason": result.reason,
    }
