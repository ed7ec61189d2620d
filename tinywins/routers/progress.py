"""
Goal progress router.

POST /progress/rewards   — progress, status and mini-milestones per reward
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from fastapi import APIRouter

from tinywins.domain import BehaviorEvent, Reward
from tinywins.schemas.common import UNPROCESSABLE
from tinywins.schemas.progress import (
    RewardProgressListResponse,
    RewardProgressRequest,
    RewardProgressResponse,
)
from tinywins.services.progress import (
    default_star_target,
    is_primary,
    milestones_reached,
    next_milestone,
    points_earned_in_window,
    progress,
    reward_milestones,
    reward_status,
)

router = APIRouter(prefix="/progress", tags=["progress"])


# ---------------------------------------------------------------------------
# Serialization helper
# ---------------------------------------------------------------------------

def _to_response(
    reward: Reward,
    rewards: list[Reward],
    events: list[BehaviorEvent],
    now: Optional[datetime],
) -> RewardProgressResponse:
    primary = is_primary(reward, rewards, now)
    earned = points_earned_in_window(reward, events, primary)
    status = reward_status(reward, events, primary, now)
    return RewardProgressResponse(
        reward_id=reward.id,
        child_id=reward.child_id,
        is_primary=primary,
        points_earned=earned,
        target_points=reward.target_points,
        points_remaining=max(0, reward.target_points - earned),
        progress=progress(reward, events, primary),
        status=status.value,
        status_display=status.display_name,
        milestones=reward_milestones(reward),
        milestones_reached=milestones_reached(reward, earned),
        next_milestone=next_milestone(reward, earned),
    )


# ---------------------------------------------------------------------------
# POST /progress/rewards
# ---------------------------------------------------------------------------

@router.post(
    "/rewards",
    response_model=RewardProgressListResponse,
    summary="Progress toward each reward",
    responses={
        200: {"description": "One entry per reward, in request order."},
        **UNPROCESSABLE,
    },
)
def reward_progress(body: RewardProgressRequest):
    """
    Derive progress for every reward in the snapshot from the event ledger.

    ### Counting rules
    - Only positive events count; challenges never reduce a goal.
    - Events must fall inside the reward's window (`start_date` .. `due_date`).
    - An event tagged with `reward_id` counts for that reward only; untagged
      events count for the child's primary reward (lowest `priority`).
    - Redeemed rewards with `frozen_earned_points` report the frozen value.

    `default_star_targets` tells the client where a new moment's stars go
    for each child (null once the primary goal is ready to redeem).
    """
    now = body.now
    rewards = [r.to_domain() for r in body.rewards]
    events = [e.to_domain() for e in body.events]

    targets = {}
    for child_id in dict.fromkeys(r.child_id for r in rewards):
        target = default_star_target(rewards, events, child_id, now)
        targets[str(child_id)] = target.id if target else None

    return RewardProgressListResponse(
        items=[_to_response(r, rewards, events, now) for r in rewards],
        default_star_targets=targets,
    )
