"""
Proposal lifecycle: reject, cancel, counter, expiry sweep and garbage collection.
"""

import pytest

from league.errors import LeagueError
from league.phases import pause
from trades.apply import execute
from trades.builder import add_player, counter, new_proposal, submit
from trades.errors import TradeError
from trades.lifecycle import cancel, expire_if_past, expire_pending, reject
from trades.maintenance import gc_terminal_proposals, sweep_trade_state
from trades.models import ProposalStatus


@pytest.fixture
def proposed(league, t0):
    p = new_proposal(league, "F1", "F2", now=t0)
    p = add_player(league, p, "A", "a3")
    p = add_player(league, p, "B", "b3")
    return submit(league, p, now=t0)


class TestRejectCancel:
    def test_receiver_rejects(self, proposed, later):
        lg, p = proposed
        lg, rejected = reject(lg, p.proposal_id, "F2", now=later(minutes=5))
        assert rejected.status is ProposalStatus.REJECTED
        assert rejected.resolved_at == later(minutes=5)
        assert lg.find_proposal(p.proposal_id).is_terminal

    def test_initiator_cannot_reject(self, proposed, t0):
        lg, p = proposed
        with pytest.raises(TradeError) as exc:
            reject(lg, p.proposal_id, "F1", now=t0)
        assert exc.value.code == "NOT_PROPOSAL_PARTY"

    def test_initiator_cancels(self, proposed, t0):
        lg, p = proposed
        lg, cancelled = cancel(lg, p.proposal_id, "F1", now=t0)
        assert cancelled.status is ProposalStatus.CANCELLED
        with pytest.raises(TradeError) as exc:
            cancel(lg, p.proposal_id, "F1", now=t0)
        assert exc.value.code == "INVALID_STATE"

    def test_terminal_proposals_never_change(self, proposed, t0):
        lg, p = proposed
        lg, _ = reject(lg, p.proposal_id, now=t0)
        for action in (reject, cancel, execute, counter):
            with pytest.raises(TradeError):
                action(lg, p.proposal_id, None, t0)


class TestCounter:
    def test_counter_swaps_packages(self, proposed, later):
        lg, p = proposed
        lg, draft = counter(lg, p.proposal_id, "F2", now=later(hours=1))
        assert lg.find_proposal(p.proposal_id).status is ProposalStatus.COUNTERED
        assert draft.status is ProposalStatus.DRAFT
        assert draft.counter_of == p.proposal_id
        assert (draft.franchise_a, draft.franchise_b) == ("F2", "F1")
        assert draft.package_a == p.package_b
        assert draft.package_b == p.package_a
        # The counter draft is not stored until submitted.
        assert lg.find_proposal(draft.proposal_id) is None

    def test_countered_original_can_be_cancelled_but_not_accepted(self, proposed, t0):
        lg, p = proposed
        lg, _ = counter(lg, p.proposal_id, now=t0)
        with pytest.raises(TradeError) as exc:
            execute(lg, p.proposal_id, now=t0)
        assert exc.value.code == "INVALID_STATE"
        lg, cancelled = cancel(lg, p.proposal_id, "F1", now=t0)
        assert cancelled.status is ProposalStatus.CANCELLED

    def test_counter_submit_and_accept(self, proposed, t0):
        lg, p = proposed
        lg, draft = counter(lg, p.proposal_id, now=t0)
        lg, sent = submit(lg, draft, now=t0)
        lg, record = execute(lg, sent.proposal_id, "F1", now=t0)
        assert lg.get_franchise("F2").find_contract("a3") is not None
        assert record.franchise_a == "F2"


class TestExpiry:
    def test_expire_if_past_is_pure(self, proposed, later):
        _, p = proposed
        assert expire_if_past(p, later(hours=23)) is p
        expired = expire_if_past(p, later(hours=24))
        assert expired.status is ProposalStatus.EXPIRED
        assert p.status is ProposalStatus.PROPOSED

    def test_sweep_expires_pending_and_countered(self, proposed, later):
        lg, p = proposed
        lg, _ = counter(lg, p.proposal_id, now=later(hours=1))
        other = add_player(lg, new_proposal(lg, "F1", "F3", now=later(hours=2)), "A", "a2")
        lg, other = submit(lg, other, now=later(hours=2))

        lg, expired = expire_pending(lg, later(hours=24, minutes=30))
        assert expired == [p.proposal_id]
        assert lg.find_proposal(p.proposal_id).status is ProposalStatus.EXPIRED
        assert lg.find_proposal(other.proposal_id).status is ProposalStatus.PROPOSED

    def test_nothing_due_returns_same_snapshot(self, proposed, later):
        lg, _ = proposed
        same, expired = expire_pending(lg, later(hours=1))
        assert same is lg and expired == []

    def test_paused_league_does_not_expire(self, proposed, later):
        lg, _ = proposed
        lg = pause(lg, later(hours=1))
        with pytest.raises(LeagueError) as exc:
            expire_pending(lg, later(days=3))
        assert exc.value.code == "LEAGUE_PAUSED"
        with pytest.raises(LeagueError):
            sweep_trade_state(lg, later(days=3))


class TestGarbageCollection:
    def test_old_terminal_proposals_are_dropped(self, proposed, t0, later):
        lg, p = proposed
        lg, _ = reject(lg, p.proposal_id, now=t0)
        kept, removed = gc_terminal_proposals(lg, later(days=29))
        assert removed == [] and kept is lg
        lg, removed = gc_terminal_proposals(lg, later(days=31))
        assert removed == [p.proposal_id]
        assert lg.find_proposal(p.proposal_id) is None

    def test_history_survives_gc(self, proposed, t0, later):
        lg, p = proposed
        lg, record = execute(lg, p.proposal_id, now=t0)
        lg, result = sweep_trade_state(lg, later(days=60))
        assert result == {"expired": [], "removed": [p.proposal_id]}
        assert lg.trades == []
        assert lg.trade_history == [record]
