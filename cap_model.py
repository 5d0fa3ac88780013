from __future__ import annotations

"""cap_model.py

Salary cap ledger SSOT.

Every payroll / cap-space / tier number in the engine comes from here:
- trades/rules (salary matching, evidence payloads)
- league/roster.py (cap snapshots stored on each franchise)
- the API layer (read-only summaries)

Design goals
------------
- Deterministic, integer dollars only (no floats, no rounding surprises).
- Thresholds come from a league's own LeagueConfig; module defaults live in config.py.
- Pure functions; nothing here mutates a franchise.

This file intentionally does NOT import league.types to avoid circular imports.
Anything with a `.contracts` list of objects carrying `.salary` works as a franchise.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Dict, Iterable, Mapping

import config


class CapTier(IntEnum):
    """Ordered cap classification. Compare with <, > (monotone in payroll)."""

    UNDER_CAP = 0
    OVER_CAP = 1
    LUXURY_TAX = 2
    FIRST_APRON = 3
    SECOND_APRON = 4


@dataclass(frozen=True, slots=True)
class CapThresholds:
    salary_cap: int = config.SALARY_CAP
    luxury_tax: int = config.LUXURY_TAX
    first_apron: int = config.FIRST_APRON
    second_apron: int = config.SECOND_APRON

    def __post_init__(self) -> None:
        if not (0 < self.salary_cap < self.luxury_tax < self.first_apron < self.second_apron):
            raise ValueError(
                "thresholds must be ascending: "
                f"cap={self.salary_cap} tax={self.luxury_tax} "
                f"first_apron={self.first_apron} second_apron={self.second_apron}"
            )

    @classmethod
    def from_config(cls, cfg: Any) -> "CapThresholds":
        """Build from a LeagueConfig (or any object with the four threshold attributes)."""
        return cls(
            salary_cap=int(cfg.salary_cap),
            luxury_tax=int(cfg.luxury_tax),
            first_apron=int(cfg.first_apron),
            second_apron=int(cfg.second_apron),
        )

    def ordered(self) -> tuple[tuple[CapTier, int], ...]:
        return (
            (CapTier.SECOND_APRON, self.second_apron),
            (CapTier.FIRST_APRON, self.first_apron),
            (CapTier.LUXURY_TAX, self.luxury_tax),
            (CapTier.OVER_CAP, self.salary_cap),
        )


@dataclass(frozen=True, slots=True)
class CapSnapshot:
    """Derived cap position of one franchise. Rebuilt on every roster mutation."""

    payroll: int
    cap_space: int
    tier: CapTier
    room_under_tax: int
    room_under_first_apron: int
    room_under_second_apron: int

    def to_payload(self) -> Dict[str, Any]:
        return {
            "payroll": self.payroll,
            "cap_space": self.cap_space,
            "tier": self.tier.name,
            "room_under_tax": self.room_under_tax,
            "room_under_first_apron": self.room_under_first_apron,
            "room_under_second_apron": self.room_under_second_apron,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CapSnapshot":
        return cls(
            payroll=int(payload["payroll"]),
            cap_space=int(payload["cap_space"]),
            tier=CapTier[str(payload["tier"])],
            room_under_tax=int(payload["room_under_tax"]),
            room_under_first_apron=int(payload["room_under_first_apron"]),
            room_under_second_apron=int(payload["room_under_second_apron"]),
        )


def sum_salaries(contracts: Iterable[Any]) -> int:
    return sum(int(c.salary) for c in contracts)


def compute_payroll(franchise: Any) -> int:
    return sum_salaries(franchise.contracts)


def cap_space(thresholds: CapThresholds, franchise: Any) -> int:
    """Cap minus payroll. Negative when over the cap."""
    return thresholds.salary_cap - compute_payroll(franchise)


def classify(thresholds: CapThresholds, payroll: int) -> CapTier:
    # Highest threshold strictly exceeded wins; payroll == cap is still UNDER_CAP.
    for tier, line in thresholds.ordered():
        if payroll > line:
            return tier
    return CapTier.UNDER_CAP


def classification(thresholds: CapThresholds, franchise: Any) -> CapTier:
    return classify(thresholds, compute_payroll(franchise))


def build_cap_snapshot(thresholds: CapThresholds, franchise: Any) -> CapSnapshot:
    payroll = compute_payroll(franchise)
    return CapSnapshot(
        payroll=payroll,
        cap_space=thresholds.salary_cap - payroll,
        tier=classify(thresholds, payroll),
        room_under_tax=thresholds.luxury_tax - payroll,
        room_under_first_apron=thresholds.first_apron - payroll,
        room_under_second_apron=thresholds.second_apron - payroll,
    )


def format_currency(amount: int) -> str:
    """Short display form: $12.6M, $850K, -$1.2M."""
    amount = int(amount)
    sign = "-" if amount < 0 else ""
    a = abs(amount)
    if a >= 1_000_000:
        return f"{sign}${a / 1_000_000:.1f}M"
    if a >= 1_000:
        return f"{sign}${a // 1_000}K"
    return f"{sign}${a}"
