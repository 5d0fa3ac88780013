"""
GM lottery tests: registration, draw fairness, turn order and claims.
"""

import itertools
import random
from collections import Counter

import pytest

from gm_lottery.service import (
    claim_franchise,
    current_picker,
    draw,
    open_registration,
    register,
    shuffle_order,
    unregister,
)
from league.errors import LeagueError
from league.phases import advance_phase
from league.service import assign_gm
from league.types import Phase


@pytest.fixture
def lottery_league(league, t0):
    lg, phase = advance_phase(league, t0)
    assert phase is Phase.GM_LOTTERY
    return lg


def _codes(excinfo):
    return excinfo.value.code


class TestRegistration:
    def test_entering_lottery_phase_opens_registration(self, league, lottery_league):
        assert not league.lottery.registration_open
        assert lottery_league.lottery.registration_open

    def test_register_and_unregister(self, lottery_league):
        lg, count = register(lottery_league, "u1")
        lg, count = register(lg, "u2")
        assert count == 2
        lg, count = unregister(lg, "u1")
        assert count == 1
        assert lg.lottery.registered == ["u2"]
        # Inputs are never mutated.
        assert lottery_league.lottery.registered == []

    def test_closed_registration(self, league):
        with pytest.raises(LeagueError) as exc:
            register(league, "u1")
        assert _codes(exc) == "REGISTRATION_CLOSED"

    def test_duplicate_registration(self, lottery_league):
        lg, _ = register(lottery_league, "u1")
        with pytest.raises(LeagueError) as exc:
            register(lg, "u1")
        assert _codes(exc) == "ALREADY_REGISTERED"

    def test_full_lottery(self, lottery_league):
        lg = lottery_league
        for uid in ("u1", "u2", "u3"):
            lg, _ = register(lg, uid)
        with pytest.raises(LeagueError) as exc:
            register(lg, "u4")
        assert _codes(exc) == "LOTTERY_FULL"

    def test_existing_gm_cannot_register(self, lottery_league, t0):
        lg = assign_gm(lottery_league, "u1", "F1", now=t0)
        with pytest.raises(LeagueError) as exc:
            register(lg, "u1")
        assert _codes(exc) == "ALREADY_GM"

    def test_unregister_unknown(self, lottery_league):
        with pytest.raises(LeagueError) as exc:
            unregister(lottery_league, "ghost")
        assert _codes(exc) == "NOT_REGISTERED"

    @pytest.mark.parametrize("blank", ["", "   "])
    def test_blank_participant_id(self, lottery_league, blank):
        for op in (register, unregister):
            with pytest.raises(LeagueError) as exc:
                op(lottery_league, blank)
            assert _codes(exc) == "INVALID_STATE"

    def test_capacity_counts_unclaimed_franchises(self, lottery_league, t0):
        lg = assign_gm(lottery_league, "admin-pick", "F1", now=t0)
        lg, _ = register(lg, "u1")
        lg, _ = register(lg, "u2")
        with pytest.raises(LeagueError) as exc:
            register(lg, "u3")
        assert _codes(exc) == "LOTTERY_FULL"
        assert exc.value.details == {"slots": 2}


class TestDraw:
    def test_draw_requires_registrants(self, lottery_league):
        with pytest.raises(LeagueError) as exc:
            draw(lottery_league, random.Random(1))
        assert _codes(exc) == "NO_REGISTRANTS"

    def test_draw_closes_registration_and_is_one_shot(self, lottery_league, t0):
        lg = lottery_league
        for uid in ("u1", "u2", "u3"):
            lg, _ = register(lg, uid)
        lg, order = draw(lg, random.Random(7), now=t0)
        assert sorted(order) == ["u1", "u2", "u3"]
        assert lg.lottery.drawn_at == t0
        assert not lg.lottery.registration_open
        with pytest.raises(LeagueError) as exc:
            draw(lg, random.Random(7))
        assert _codes(exc) == "INVALID_STATE"
        with pytest.raises(LeagueError) as exc:
            open_registration(lg)
        assert _codes(exc) == "REGISTRATION_CLOSED"

    def test_shuffle_is_uniform(self):
        """Every ordering of three entrants shows up about equally often."""
        rng = random.Random(20260701)
        entrants = ["u1", "u2", "u3"]
        trials = 6000
        counts = Counter(tuple(shuffle_order(entrants, rng)) for _ in range(trials))
        assert set(counts) == set(itertools.permutations(entrants))
        for n in counts.values():
            assert 850 <= n <= 1150

    def test_shuffle_does_not_touch_input(self):
        entrants = ["a", "b", "c", "d"]
        shuffle_order(entrants, random.Random(3))
        assert entrants == ["a", "b", "c", "d"]


class TestClaims:
    @pytest.fixture
    def drawn(self, lottery_league, t0):
        lg = lottery_league
        for uid in ("u1", "u2", "u3"):
            lg, _ = register(lg, uid)
        lg, _ = draw(lg, random.Random(11), now=t0)
        return lg

    def test_picks_in_lottery_order(self, drawn, t0):
        order = list(drawn.lottery.lottery_order)
        lg = drawn
        for uid, fid in zip(order, ("F2", "F3", "F1")):
            assert current_picker(lg) == uid
            lg = claim_franchise(lg, uid, fid, now=t0)
            assert lg.get_franchise(fid).gm_id == uid
            assert lg.get_franchise(fid).assigned_via == "lottery"
        assert current_picker(lg) is None
        assert [t.txn_type for t in lg.transactions] == ["FRANCHISE_CLAIMED"] * 3

    def test_out_of_turn(self, drawn, t0):
        second = drawn.lottery.lottery_order[1]
        with pytest.raises(LeagueError) as exc:
            claim_franchise(drawn, second, "F1", now=t0)
        assert _codes(exc) == "NOT_YOUR_TURN"

    def test_no_franchise_claimed_twice(self, drawn, t0):
        first, second, _ = drawn.lottery.lottery_order
        lg = claim_franchise(drawn, first, "F1", now=t0)
        with pytest.raises(LeagueError) as exc:
            claim_franchise(lg, second, "F1", now=t0)
        assert _codes(exc) == "FRANCHISE_TAKEN"

    def test_unknown_franchise(self, drawn, t0):
        first = drawn.lottery.lottery_order[0]
        with pytest.raises(LeagueError) as exc:
            claim_franchise(drawn, first, "ZZZ", now=t0)
        assert _codes(exc) == "UNKNOWN_FRANCHISE"

    def test_admin_assignment_skips_a_turn_holder(self, drawn, t0):
        """A participant given a franchise by the commissioner drops out of the pick order."""
        first, second, _ = drawn.lottery.lottery_order
        lg = assign_gm(drawn, first, "F3", now=t0)
        assert current_picker(lg) == second

    def test_blank_claimant(self, drawn, t0):
        with pytest.raises(LeagueError) as exc:
            claim_franchise(drawn, "  ", "F1", now=t0)
        assert _codes(exc) == "INVALID_STATE"

    def test_no_picker_once_every_franchise_has_a_gm(self, drawn, t0):
        """Commissioner assignments after the draw can use up the free franchises."""
        first, second, last = drawn.lottery.lottery_order
        lg = claim_franchise(drawn, first, "F1", now=t0)
        lg = claim_franchise(lg, second, "F2", now=t0)
        lg = assign_gm(lg, "late-admin-pick", "F3", now=t0)
        assert lg.franchise_of_gm(last) is None
        assert current_picker(lg) is None
