from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class LotteryEntryRequest(BaseModel):
    participant_id: str = Field(..., min_length=1)


class LotteryDrawRequest(BaseModel):
    # Fixed seed for reproducible draws (admin/testing only).
    seed: Optional[int] = None


class LotteryClaimRequest(BaseModel):
    participant_id: str = Field(..., min_length=1)
    franchise_id: str
