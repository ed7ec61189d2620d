"""
Celebration ledger schemas.

POST /celebrations/streak → StreakCelebrationRequest → StreakCelebrationResponse
POST /celebrations/goal   → GoalCelebrationRequest   → GoalCelebrationResponse
GET  /celebrations        → CelebrationListResponse
"""
from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from tinywins.schemas.snapshots import BehaviorEventIn, ParentNoteIn, RewardIn
from tinywins.services.milestones import CelebrationKind


class CelebrationOut(BaseModel):
    kind: CelebrationKind
    threshold: int
    payload: dict[str, Any] = Field(description="Kind-specific copy and ids.")


class StreakCelebrationRequest(BaseModel):
    family_id: uuid.UUID = Field(
        description="Household the parent notes belong to. The streak is shared by all children.",
    )
    notes: list[ParentNoteIn] = Field(default_factory=list)
    today: Optional[date] = None
    timezone: Optional[str] = None


class StreakCelebrationResponse(BaseModel):
    family_id: uuid.UUID
    streak: int
    celebrated_through: Optional[int] = None
    celebration: Optional[CelebrationOut] = None


class GoalCelebrationRequest(BaseModel):
    reward: RewardIn
    events: list[BehaviorEventIn] = Field(default_factory=list)
    previous_points: Optional[int] = Field(
        default=None,
        ge=0,
        description="Stars earned before the latest change. Omit if unknown (never fires).",
    )
    is_primary_reward: bool = False
    child_name: str = Field(min_length=1, max_length=100)
    now: Optional[datetime] = None


class GoalCelebrationResponse(BaseModel):
    celebration: Optional[CelebrationOut] = None


class CelebrationRecordResponse(BaseModel):
    id: int
    owner_id: str = Field(description="Child id for goal celebrations, family id for streaks.")
    kind: CelebrationKind
    subject_id: Optional[str] = None
    threshold: int
    metadata: Optional[dict[str, Any]] = None
    created_at: str


class CelebrationListResponse(BaseModel):
    total: int
    items: list[CelebrationRecordResponse]
