"""
Roster feed import (pandas) and seeding helpers.
"""

import pandas as pd
import pytest

from league.errors import LeagueError
from league.roster import import_roster_table, parse_salary_int, read_roster_table, seed_contracts, seed_draft_picks

from conftest import make_contract


@pytest.fixture
def feed():
    return pd.DataFrame(
        [
            {"team_id": "f1", "player_id": "x1", "name": "Guard One", "pos": "pg", "salary": "$15,161,800", "years_remaining": 3},
            {"team_id": "F1", "player_id": "x2", "name": "Wing Two", "pos": "SF", "salary": 2_000_000, "years_remaining": 1, "no_trade": "yes"},
            {"team_id": "F2", "player_id": "a3", "name": "Moved Big", "pos": "C", "salary": "10,000,000", "years_remaining": 2},
        ]
    )


class TestReadTable:
    def test_aliases_and_parsing(self, feed):
        rows = read_roster_table(feed)
        assert [fid for fid, _ in rows] == ["F1", "F1", "F2"]
        first = rows[0][1]
        assert first.salary == 15_161_800
        assert first.position == "PG"
        assert rows[1][1].no_trade is True
        assert rows[0][1].no_trade is False

    def test_missing_columns(self):
        with pytest.raises(ValueError):
            read_roster_table(pd.DataFrame([{"player_id": "x"}]))

    def test_unparseable_salary(self, feed):
        feed.loc[0, "salary"] = "lots"
        with pytest.raises(ValueError):
            read_roster_table(feed)

    def test_csv_file(self, feed, tmp_path):
        path = tmp_path / "roster.csv"
        feed.to_csv(path, index=False)
        assert len(read_roster_table(path)) == 3

    @pytest.mark.parametrize(
        "raw, value",
        [(15161800, 15161800), ("15,161,800", 15161800), ("$1,000", 1000), ("", None), (None, None), ("abc", None)],
    )
    def test_parse_salary(self, raw, value):
        assert parse_salary_int(raw) == value


class TestImport:
    def test_replace_mode(self, league, feed):
        lg = import_roster_table(league, feed)
        assert sorted(c.player_id for c in lg.get_franchise("F1").contracts) == ["x1", "x2"]
        # a3 moved from F1 to F2 inside the same feed.
        assert [c.player_id for c in lg.get_franchise("F2").contracts] == ["a3"]
        # F3 was not in the feed.
        assert len(lg.get_franchise("F3").contracts) == 2
        assert lg.get_franchise("F1").cap_snapshot.payroll == 17_161_800

    def test_upsert_mode(self, league, feed):
        lg = import_roster_table(league, feed.iloc[:2], mode="upsert")
        assert sorted(c.player_id for c in lg.get_franchise("F1").contracts) == ["a1", "a2", "a3", "x1", "x2"]

    def test_unknown_franchise(self, league, feed):
        feed.loc[2, "team_id"] = "ZZZ"
        with pytest.raises(LeagueError) as exc:
            import_roster_table(league, feed)
        assert exc.value.code == "UNKNOWN_FRANCHISE"

    def test_bad_feed_is_a_league_error(self, league, feed):
        feed.loc[0, "salary"] = "lots"
        with pytest.raises(LeagueError) as exc:
            import_roster_table(league, feed)
        assert exc.value.code == "INVALID_STATE"

    def test_unknown_mode(self, league, feed):
        with pytest.raises(LeagueError) as exc:
            import_roster_table(league, feed, mode="merge")
        assert exc.value.code == "INVALID_STATE"


class TestSeeding:
    def test_player_on_two_rosters_rejected(self, league):
        with pytest.raises(LeagueError) as exc:
            seed_contracts(league, "F2", [make_contract("a1", 1)], replace=False)
        assert exc.value.code == "INVALID_STATE"

    def test_duplicate_in_feed_rejected(self, league):
        with pytest.raises(LeagueError):
            seed_contracts(league, "F3", [make_contract("z", 1), make_contract("z", 2)])

    def test_pick_seeding_is_idempotent(self, league):
        counts = {fid: len(f.draft_picks) for fid, f in league.franchises.items()}
        again = seed_draft_picks(league, 2027, years_ahead=2, rounds=2)
        assert {fid: len(f.draft_picks) for fid, f in again.franchises.items()} == counts
        assert counts["F1"] == 4
        extended = seed_draft_picks(league, 2027, years_ahead=3, rounds=2)
        assert len(extended.get_franchise("F1").draft_picks) == 6
