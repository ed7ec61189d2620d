"""
Milestone trigger router.

POST /milestones/check   — did this update cross a celebration threshold?
"""
from __future__ import annotations

from fastapi import APIRouter

from tinywins.schemas.common import UNPROCESSABLE
from tinywins.schemas.reflections import MilestoneCheckRequest, MilestoneCheckResponse
from tinywins.services.milestones import check_milestone

router = APIRouter(prefix="/milestones", tags=["milestones"])


@router.post(
    "/check",
    response_model=MilestoneCheckResponse,
    summary="Edge-triggered threshold check",
    responses={
        200: {"description": "The lowest threshold newly crossed, if any."},
        **UNPROCESSABLE,
    },
)
def milestone_check(body: MilestoneCheckRequest):
    """
    Fires only when `previous_value < threshold <= new_value`. Staying at or
    above a threshold, falling back, or an unknown `previous_value` never
    fires. When one jump crosses several thresholds the lowest is returned.

    Stateless: use `/celebrations/*` for once-only delivery.
    """
    milestone = check_milestone(body.new_value, body.previous_value, body.thresholds)
    return MilestoneCheckResponse(fired=milestone is not None, milestone=milestone)
