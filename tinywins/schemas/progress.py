"""
Goal progress schemas.

POST /progress/rewards → RewardProgressRequest → RewardProgressListResponse
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from tinywins.schemas.snapshots import BehaviorEventIn, RewardIn


class RewardProgressRequest(BaseModel):
    rewards: list[RewardIn] = Field(min_length=1, max_length=200)
    events: list[BehaviorEventIn] = Field(default_factory=list)
    now: Optional[datetime] = Field(
        default=None,
        description="Evaluation instant for deadlines. Defaults to server time.",
    )


class RewardProgressResponse(BaseModel):
    reward_id: uuid.UUID
    child_id: uuid.UUID
    is_primary: bool = Field(description="True for the child's priority-0 active goal.")
    points_earned: int = Field(ge=0)
    target_points: int
    points_remaining: int = Field(ge=0)
    progress: float = Field(ge=0.0, le=1.0, examples=[0.6])
    status: str = Field(
        description='"active" | "active_with_deadline" | "ready_to_redeem" | "completed" | "expired"'
    )
    status_display: str
    milestones: list[int] = Field(description="Mini-milestone star counts below the target.")
    milestones_reached: list[int]
    next_milestone: Optional[int] = None


class RewardProgressListResponse(BaseModel):
    items: list[RewardProgressResponse]
    default_star_targets: dict[str, Optional[uuid.UUID]] = Field(
        description="Per child id: reward that new stars go to by default (null = none)."
    )
