"""
Salary matching policy tests.

Over the cap: incoming <= outgoing * 125% + 100K.
Under the cap: incoming <= cap space + outgoing.
"""

import pytest

from cap_model import CapThresholds, CapTier
from trades.rules.policies.salary_matching_policy import (
    SalaryMatchingParams,
    allowed_incoming_over_cap,
    check_salary_matching,
)

from conftest import M


@pytest.fixture
def params(small_config):
    return SalaryMatchingParams.from_config(small_config)


@pytest.fixture
def thresholds(small_config):
    return CapThresholds.from_config(small_config)


def _check(params, thresholds, *, payroll, outgoing, incoming):
    return check_salary_matching(
        payroll_before_d=payroll,
        outgoing_salary_d=outgoing,
        incoming_salary_d=incoming,
        params=params,
        thresholds=thresholds,
    )


class TestOverCapBand:
    def test_allowed_amount_is_exact(self, params):
        # 125% of 10M + 100K, integer math.
        assert allowed_incoming_over_cap(10 * M, params) == 12_600_000

    def test_boundary_passes(self, params, thresholds):
        result = _check(params, thresholds, payroll=110 * M, outgoing=10 * M, incoming=12_600_000)
        assert result.ok
        assert result.method == "outgoing_pct"
        assert result.tier is CapTier.OVER_CAP

    def test_one_dollar_over_fails(self, params, thresholds):
        result = _check(params, thresholds, payroll=110 * M, outgoing=10 * M, incoming=12_600_001)
        assert not result.ok
        assert result.allowed_in_d == 12_600_000
        assert result.reason == "incoming_gt_allowed_in"

    def test_band_applies_at_every_over_cap_tier(self, params, thresholds):
        for payroll in (101 * M, 125 * M, 135 * M, 150 * M):
            assert _check(params, thresholds, payroll=payroll, outgoing=4 * M, incoming=5_100_000).ok
            assert not _check(params, thresholds, payroll=payroll, outgoing=4 * M, incoming=5_100_001).ok


class TestUnderCap:
    def test_absorb_into_cap_room(self, params, thresholds):
        result = _check(params, thresholds, payroll=20 * M, outgoing=0, incoming=80 * M)
        assert result.ok
        assert result.method == "cap_room"

    def test_cap_room_plus_outgoing(self, params, thresholds):
        assert _check(params, thresholds, payroll=90 * M, outgoing=5 * M, incoming=15 * M).ok
        assert not _check(params, thresholds, payroll=90 * M, outgoing=5 * M, incoming=15 * M + 1).ok

    def test_payroll_equal_to_cap_is_under_cap(self, params, thresholds):
        result = _check(params, thresholds, payroll=100 * M, outgoing=1 * M, incoming=1 * M)
        assert result.ok
        assert result.tier is CapTier.UNDER_CAP


def test_no_incoming_salary_always_passes(params, thresholds):
    result = _check(params, thresholds, payroll=150 * M, outgoing=30 * M, incoming=0)
    assert result.ok
    assert result.method == "no_incoming"
