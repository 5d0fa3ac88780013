"""Project-wide defaults.

Values here are *defaults* only. A league carries its own LeagueConfig (see
league/types.py) so commissioners can change thresholds per league without
touching code.
"""

from __future__ import annotations

# Runtime store location (SQLite). The API layer refuses to start without it.
LEAGUE_DB_PATH_ENV = "MOCK_LEAGUE_DB_PATH"

# -----------------------------------------------------------------------------
# CBA constants (2024-25 season)
# -----------------------------------------------------------------------------
SALARY_CAP = 140_588_000
LUXURY_TAX = 170_814_000
FIRST_APRON = 178_655_000
SECOND_APRON = 189_489_000
MAX_CASH_IN_TRADE = 5_880_000

# Over-cap salary matching band: incoming <= outgoing * 125% + 100K.
MATCH_MULTIPLIER_PCT = 125
MATCH_BUFFER = 100_000

# Roster bounds enforced at trade time (standard contracts only).
ROSTER_MIN = 0
ROSTER_MAX = 15

# Future picks seeded per franchise when a league is created.
DRAFT_PICK_YEARS_AHEAD = 7
DRAFT_ROUNDS = 2

# -----------------------------------------------------------------------------
# Timing (seconds)
# -----------------------------------------------------------------------------
TRADE_PROPOSAL_EXPIRY_S = 24 * 60 * 60
TRADE_RETENTION_S = 30 * 24 * 60 * 60

# Phases with a timed end. Phases not listed only advance on command.
PHASE_DURATIONS_S = {
    "GM_LOTTERY": 7 * 24 * 60 * 60,
    "FA_MORATORIUM": 3 * 24 * 60 * 60,
}

TRADE_BLOCKED_PHASES = ("GM_LOTTERY", "DRAFT")

# -----------------------------------------------------------------------------
# Franchise slots
# -----------------------------------------------------------------------------
NBA_TEAMS = {
    "ATL": "Atlanta Hawks",
    "BOS": "Boston Celtics",
    "BKN": "Brooklyn Nets",
    "CHA": "Charlotte Hornets",
    "CHI": "Chicago Bulls",
    "CLE": "Cleveland Cavaliers",
    "DAL": "Dallas Mavericks",
    "DEN": "Denver Nuggets",
    "DET": "Detroit Pistons",
    "GSW": "Golden State Warriors",
    "HOU": "Houston Rockets",
    "IND": "Indiana Pacers",
    "LAC": "LA Clippers",
    "LAL": "Los Angeles Lakers",
    "MEM": "Memphis Grizzlies",
    "MIA": "Miami Heat",
    "MIL": "Milwaukee Bucks",
    "MIN": "Minnesota Timberwolves",
    "NOP": "New Orleans Pelicans",
    "NYK": "New York Knicks",
    "OKC": "Oklahoma City Thunder",
    "ORL": "Orlando Magic",
    "PHI": "Philadelphia 76ers",
    "PHX": "Phoenix Suns",
    "POR": "Portland Trail Blazers",
    "SAC": "Sacramento Kings",
    "SAS": "San Antonio Spurs",
    "TOR": "Toronto Raptors",
    "UTA": "Utah Jazz",
    "WAS": "Washington Wizards",
}
