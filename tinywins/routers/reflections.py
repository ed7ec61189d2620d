"""
Reflection streak router.

POST /reflections/streak   — consecutive days with a parent-win or reflection note
"""
from __future__ import annotations

from fastapi import APIRouter

from tinywins.core.config import settings
from tinywins.schemas.common import UNPROCESSABLE
from tinywins.schemas.reflections import StreakRequest, StreakResponse
from tinywins.services.streaks import (
    calculate_reflection_streak,
    local_today,
    reflection_days,
    resolve_timezone,
)

router = APIRouter(prefix="/reflections", tags=["reflections"])


@router.post(
    "/streak",
    response_model=StreakResponse,
    summary="Current reflection streak",
    responses={
        200: {"description": "Streak length in days, counted back from `today`."},
        **UNPROCESSABLE,
    },
)
def reflection_streak(body: StreakRequest):
    """
    Count consecutive calendar days, ending today (or yesterday when today
    has no note yet), with at least one `parent_win` or `reflection` note.
    `good_moment` notes never count.

    Days are bucketed in `timezone` (default `LOCAL_TIMEZONE`).
    """
    tz_name = body.timezone or settings.LOCAL_TIMEZONE
    tz = resolve_timezone(tz_name)
    notes = [n.to_domain() for n in body.notes]
    today = body.today or local_today(tz)

    return StreakResponse(
        streak=calculate_reflection_streak(notes, today=today, tz=tz),
        today=str(today),
        timezone=tz_name,
        reflection_days=len(reflection_days(notes, tz)),
    )
