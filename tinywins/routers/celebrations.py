"""
Celebrations router — once-only delivery backed by the celebration ledger.

POST /celebrations/streak   — evaluate the reflection streak and fire its next milestone
POST /celebrations/goal     — evaluate a goal after its stars changed
GET  /celebrations          — list celebrations already delivered (newest first)
"""
from __future__ import annotations

import dataclasses
import json
import uuid
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from tinywins.core.config import settings
from tinywins.db.base import get_db
from tinywins.models.celebration import CelebrationRecord
from tinywins.schemas.celebrations import (
    CelebrationListResponse,
    CelebrationOut,
    CelebrationRecordResponse,
    GoalCelebrationRequest,
    GoalCelebrationResponse,
    StreakCelebrationRequest,
    StreakCelebrationResponse,
)
from tinywins.schemas.common import UNPROCESSABLE
from tinywins.services.celebration_ledger import evaluate_goal, evaluate_streak, list_celebrations
from tinywins.services.milestones import Celebration, CelebrationKind
from tinywins.services.streaks import resolve_timezone

router = APIRouter(prefix="/celebrations", tags=["celebrations"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _parse_metadata(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        return None


def _celebration_out(celebration: Optional[Celebration]) -> Optional[CelebrationOut]:
    if celebration is None:
        return None
    payload = json.loads(json.dumps(dataclasses.asdict(celebration), default=str))
    payload.pop("kind", None)
    return CelebrationOut(
        kind=celebration.kind,
        threshold=celebration.threshold,
        payload=payload,
    )


def _record_to_response(rec: CelebrationRecord) -> CelebrationRecordResponse:
    return CelebrationRecordResponse(
        id=rec.id,
        owner_id=rec.owner_id,
        kind=rec.kind,
        subject_id=rec.subject_key or None,
        threshold=rec.threshold,
        metadata=_parse_metadata(rec.celebration_metadata),
        created_at=rec.created_at.isoformat() if rec.created_at else "",
    )


# ---------------------------------------------------------------------------
# POST /celebrations/streak
# ---------------------------------------------------------------------------

@router.post(
    "/streak",
    response_model=StreakCelebrationResponse,
    summary="Reflection streak celebration (at most once per threshold)",
    responses={
        200: {"description": "Current streak and the celebration to show, if any."},
        **UNPROCESSABLE,
    },
)
def streak_celebration(body: StreakCelebrationRequest, db: Session = Depends(get_db)):
    """
    Recompute the family's reflection streak and fire the lowest milestone in
    `REFLECTION_STREAK_MILESTONES` that the streak has reached and the
    ledger has not yet recorded. Calling again fires the next one, if any.

    The streak is the parent's, not a child's: celebrations are keyed on
    `family_id`, so asking once per child never replays one.
    """
    tz = resolve_timezone(body.timezone or settings.LOCAL_TIMEZONE)
    result = evaluate_streak(
        db,
        body.family_id,
        [n.to_domain() for n in body.notes],
        today=body.today,
        tz=tz,
        thresholds=settings.streak_milestones_list,
    )
    return StreakCelebrationResponse(
        family_id=result.family_id,
        streak=result.streak,
        celebrated_through=result.celebrated_through,
        celebration=_celebration_out(result.celebration),
    )


# ---------------------------------------------------------------------------
# POST /celebrations/goal
# ---------------------------------------------------------------------------

@router.post(
    "/goal",
    response_model=GoalCelebrationResponse,
    summary="Goal milestone / goal reached celebration",
    responses={
        200: {"description": "The celebration to show, if any."},
        **UNPROCESSABLE,
    },
)
def goal_celebration(body: GoalCelebrationRequest, db: Session = Depends(get_db)):
    """
    Compare `previous_points` with the stars the reward has now.

    - Reaching the target fires `goal_reached` (wins over a mini-milestone).
    - Otherwise crossing a mini-milestone fires `goal_milestone` with an
      encouraging message naming the child.

    Each (reward, threshold) is delivered once.
    """
    celebration = evaluate_goal(
        db,
        body.reward.to_domain(),
        body.previous_points,
        [e.to_domain() for e in body.events],
        body.is_primary_reward,
        body.child_name,
        now=body.now,
    )
    return GoalCelebrationResponse(celebration=_celebration_out(celebration))


# ---------------------------------------------------------------------------
# GET /celebrations
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=CelebrationListResponse,
    summary="List delivered celebrations (newest first)",
)
def list_delivered(
    owner_id: Optional[uuid.UUID] = Query(
        default=None, description="Filter by child (goal celebrations) or family (streaks).",
    ),
    kind: Optional[CelebrationKind] = Query(default=None, description="Filter by kind. Omit for all."),
    limit: int = Query(default=50, ge=1, le=200, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    db: Session = Depends(get_db),
):
    total, items = list_celebrations(db, owner_id=owner_id, kind=kind, limit=limit, offset=offset)
    return CelebrationListResponse(
        total=total,
        items=[_record_to_response(rec) for rec in items],
    )
