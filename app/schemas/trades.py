from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class TradeNewRequest(BaseModel):
    franchise_a: str
    franchise_b: str


class TradeAddPlayerRequest(BaseModel):
    proposal: Dict[str, Any]
    side: str
    player_id: str = Field(..., min_length=1)


class TradeAddPickRequest(BaseModel):
    proposal: Dict[str, Any]
    side: str
    pick_id: str


class TradeAddCashRequest(BaseModel):
    proposal: Dict[str, Any]
    side: str
    amount: int


class TradeRemoveAssetRequest(BaseModel):
    proposal: Dict[str, Any]
    side: str
    asset_key: str


class TradeProposalRequest(BaseModel):
    proposal: Dict[str, Any]


class TradeActionRequest(BaseModel):
    proposal_id: str
    acting_franchise_id: Optional[str] = None
