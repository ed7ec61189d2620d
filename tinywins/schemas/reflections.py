"""
Reflection streak and milestone-check schemas.

POST /reflections/streak → StreakRequest → StreakResponse
POST /milestones/check   → MilestoneCheckRequest → MilestoneCheckResponse
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, Field

from tinywins.schemas.snapshots import ParentNoteIn


class StreakRequest(BaseModel):
    notes: list[ParentNoteIn] = Field(default_factory=list)
    today: Optional[date] = Field(
        default=None, description="Local calendar day to count back from. Defaults to today."
    )
    timezone: Optional[str] = Field(
        default=None,
        description="IANA zone for day boundaries. Defaults to LOCAL_TIMEZONE.",
        examples=["America/New_York"],
    )


class StreakResponse(BaseModel):
    streak: int = Field(ge=0)
    today: str
    timezone: str
    reflection_days: int = Field(ge=0, description="Distinct days with a qualifying note.")


class MilestoneCheckRequest(BaseModel):
    new_value: int
    previous_value: Optional[int] = Field(
        default=None, description="Unknown previous value never fires."
    )
    thresholds: list[int] = Field(min_length=1, examples=[[7, 14, 30]])


class MilestoneCheckResponse(BaseModel):
    fired: bool
    milestone: Optional[int] = None
