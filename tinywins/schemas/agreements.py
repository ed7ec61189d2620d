"""
Agreement coverage schemas.

POST /agreements/coverage → CoverageRequest → CoverageResponse
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from tinywins.schemas.snapshots import AgreementVersionIn, RewardIn


class CoverageRequest(BaseModel):
    child_id: uuid.UUID
    agreement_versions: list[AgreementVersionIn] = Field(default_factory=list)
    rewards: list[RewardIn] = Field(default_factory=list)
    active_behavior_type_ids: Optional[list[uuid.UUID]] = Field(
        default=None,
        description="Currently active behavior types. Omit to compare rewards only.",
    )
    now: Optional[datetime] = None


class CoverageResponse(BaseModel):
    child_id: uuid.UUID
    status: str = Field(description='"never_signed" | "signed_current" | "signed_out_of_date"')
    pill_text: str
    subtext: str
    latest_agreement_id: Optional[uuid.UUID] = None
    signed_date: Optional[datetime] = None
    covered_reward_ids: list[uuid.UUID] = Field(
        description="Active rewards included in the latest signed agreement."
    )
    rewards_needing_agreement: list[uuid.UUID] = Field(
        description="Active rewards added since the latest signed agreement."
    )
