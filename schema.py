"""Canonical identifiers.

- franchise_id: uppercase slot code (e.g. "LAL", "F1")
- player_id: non-empty string, kept as given (import feeds use slugs)
- participant_id: opaque string supplied by the calling layer (chat user id)
- pick_id: "{year}_R{round}_{ORIGINAL_FRANCHISE}" (e.g. "2027_R2_BOS")
"""

from __future__ import annotations

import re
from typing import Any

SCHEMA_VERSION = "1"

FranchiseId = str
PlayerId = str
ParticipantId = str

_FRANCHISE_ID_RE = re.compile(r"^[A-Z0-9_]{1,16}$")
_PICK_ID_RE = re.compile(r"^(\d{4})_R(\d+)_([A-Z0-9_]{1,16})$")


def normalize_franchise_id(value: Any) -> FranchiseId:
    fid = str(value or "").strip().upper()
    if not _FRANCHISE_ID_RE.fullmatch(fid):
        raise ValueError(f"invalid franchise_id: {value!r}")
    return fid


def normalize_player_id(value: Any) -> PlayerId:
    pid = str(value or "").strip()
    if not pid:
        raise ValueError(f"invalid player_id: {value!r}")
    return pid


def normalize_participant_id(value: Any) -> ParticipantId:
    uid = str(value or "").strip()
    if not uid:
        raise ValueError(f"invalid participant_id: {value!r}")
    return uid


def make_pick_id(year: int, round_no: int, original_franchise_id: str) -> str:
    return f"{int(year)}_R{int(round_no)}_{normalize_franchise_id(original_franchise_id)}"


def parse_pick_id(pick_id: str) -> tuple[int, int, FranchiseId]:
    """Split a pick_id into (year, round, original_franchise_id)."""
    m = _PICK_ID_RE.fullmatch(str(pick_id or "").strip().upper())
    if not m:
        raise ValueError(f"invalid pick_id: {pick_id!r}")
    return int(m.group(1)), int(m.group(2)), m.group(3)
