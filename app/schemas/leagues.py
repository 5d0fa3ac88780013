from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class LeagueCreateRequest(BaseModel):
    league_id: str
    season_name: str = ""
    config: Optional[Dict[str, Any]] = None
    franchise_names: Optional[Dict[str, str]] = None


class LeagueConfigPatchRequest(BaseModel):
    patch: Dict[str, Any]


class NewSeasonRequest(BaseModel):
    season_name: str


class GmAssignRequest(BaseModel):
    participant_id: str = Field(..., min_length=1)
    franchise_id: str


class GmRemoveRequest(BaseModel):
    participant_id: str = Field(..., min_length=1)


class SeedPicksRequest(BaseModel):
    start_year: int
    years_ahead: Optional[int] = None
    rounds: Optional[int] = None


class ContractIn(BaseModel):
    player_id: str
    name: str = ""
    position: str = ""
    salary: int
    years_remaining: int = 1
    no_trade: bool = False
    extension_eligible: bool = False


class RosterSeedRequest(BaseModel):
    franchise_id: str
    contracts: List[ContractIn]
    replace: bool = True
