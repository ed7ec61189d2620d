"""
Goal progress service.

Derives how far a child is toward a Reward from the behavior-event ledger.

Earning window
--------------
An event counts toward a reward when ALL of these hold:
  1. It belongs to the reward's child.
  2. points_applied > 0 (challenges never take stars away from a goal).
  3. window_start <= timestamp (<= due_date when the reward has one).
  4. It is tagged with this reward's id, OR it is untagged and the reward
     is the child's primary reward.

A redeemed reward with frozen points reports the frozen value. The raw sum
is scaled by progress_reduction_factor (< 1.0 after a soft reset).

Public API
----------
points_earned_in_window(reward, events, is_primary_reward)   -> int
progress(reward, events, is_primary_reward)                  -> float in [0, 1]
points_remaining(reward, events, is_primary_reward)          -> int
reward_status(reward, events, is_primary_reward, now)        -> RewardStatus
active_reward(rewards, child_id, now)                        -> Reward | None
default_star_target(rewards, events, child_id, now)          -> Reward | None
reward_milestones(reward)                                    -> list[int]
redeem_reward / apply_soft_reset / promote_next_reward       -> new snapshots
"""
from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import datetime
from typing import Iterable, Optional

from tinywins.domain import BehaviorEvent, Reward, RewardStatus

logger = logging.getLogger(__name__)

SOFT_RESET_FACTOR = 0.5


# ---------------------------------------------------------------------------
# Earning window
# ---------------------------------------------------------------------------

def _counts_toward(reward: Reward, event: BehaviorEvent, is_primary_reward: bool) -> bool:
    if event.child_id != reward.child_id:
        return False
    if event.points_applied <= 0:
        return False
    if event.timestamp < reward.window_start:
        return False
    if reward.due_date is not None and event.timestamp > reward.due_date:
        return False
    if event.reward_id is not None:
        return event.reward_id == reward.id
    return is_primary_reward


def points_earned_in_window(
    reward: Reward,
    events: Iterable[BehaviorEvent],
    is_primary_reward: bool = False,
) -> int:
    """Stars earned toward `reward`; never negative."""
    if reward.is_redeemed and reward.frozen_earned_points is not None:
        return reward.frozen_earned_points

    try:
        raw = sum(e.points_applied for e in events if _counts_toward(reward, e, is_primary_reward))
    except TypeError:
        # naive and aware timestamps mixed in one snapshot
        logger.warning("Unorderable timestamps in event snapshot for reward %s", reward.id)
        return 0
    return max(0, int(raw * reward.progress_reduction_factor))


def progress(
    reward: Reward,
    events: Iterable[BehaviorEvent],
    is_primary_reward: bool = False,
) -> float:
    """Fraction of the target earned, clamped to [0, 1]."""
    if reward.target_points <= 0:
        return 0.0
    earned = points_earned_in_window(reward, events, is_primary_reward)
    return min(max(earned / reward.target_points, 0.0), 1.0)


def points_remaining(
    reward: Reward,
    events: Iterable[BehaviorEvent],
    is_primary_reward: bool = False,
) -> int:
    return max(0, reward.target_points - points_earned_in_window(reward, events, is_primary_reward))


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

def reward_status(
    reward: Reward,
    events: Iterable[BehaviorEvent],
    is_primary_reward: bool = False,
    now: Optional[datetime] = None,
) -> RewardStatus:
    """completed > expired > ready_to_redeem > active(_with_deadline)."""
    if reward.is_redeemed:
        return RewardStatus.completed
    if reward.is_expired(now):
        return RewardStatus.expired
    if points_earned_in_window(reward, events, is_primary_reward) >= reward.target_points:
        return RewardStatus.ready_to_redeem
    if reward.has_deadline:
        return RewardStatus.active_with_deadline
    return RewardStatus.active


def is_redeemable(
    reward: Reward,
    events: Iterable[BehaviorEvent],
    is_primary_reward: bool = False,
    now: Optional[datetime] = None,
) -> bool:
    return reward_status(reward, events, is_primary_reward, now) == RewardStatus.ready_to_redeem


def can_accept_points(reward: Reward, now: Optional[datetime] = None) -> bool:
    return reward.is_active(now)


# ---------------------------------------------------------------------------
# Primary reward selection
# ---------------------------------------------------------------------------

def active_rewards(
    rewards: Iterable[Reward],
    child_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> list[Reward]:
    """The child's non-redeemed, non-expired rewards, lowest priority first."""
    return sorted(
        (r for r in rewards if r.child_id == child_id and r.is_active(now)),
        key=lambda r: r.priority,
    )


def active_reward(
    rewards: Iterable[Reward],
    child_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> Optional[Reward]:
    """The child's primary reward, or None when nothing is active."""
    candidates = active_rewards(rewards, child_id, now)
    return candidates[0] if candidates else None


def is_primary(
    reward: Reward,
    rewards: Iterable[Reward],
    now: Optional[datetime] = None,
) -> bool:
    primary = active_reward(rewards, reward.child_id, now)
    return primary is not None and primary.id == reward.id


def default_star_target(
    rewards: Iterable[Reward],
    events: Iterable[BehaviorEvent],
    child_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> Optional[Reward]:
    """Where a newly logged moment's stars go by default."""
    primary = active_reward(rewards, child_id, now)
    if primary is None:
        return None
    status = reward_status(primary, events, is_primary_reward=True, now=now)
    if status in (RewardStatus.ready_to_redeem, RewardStatus.completed, RewardStatus.expired):
        return None
    return primary


# ---------------------------------------------------------------------------
# Mini milestones (~25% / 50% / 75%)
# ---------------------------------------------------------------------------

def reward_milestones(reward: Reward) -> list[int]:
    """Checkpoint star counts strictly below the target."""
    target = reward.target_points
    if target <= 0:
        return []
    if target <= 10:
        return [target // 2]
    if target <= 20:
        return [target // 4, target // 2, (target * 3) // 4]

    step = max(5, (target // 4 // 5) * 5)
    return list(range(step, target, step))


def milestones_reached(reward: Reward, current_points: int) -> list[int]:
    return [m for m in reward_milestones(reward) if current_points >= m]


def next_milestone(reward: Reward, current_points: int) -> Optional[int]:
    return next((m for m in reward_milestones(reward) if current_points < m), None)


def just_reached_milestone(
    reward: Reward,
    previous_points: int,
    current_points: int,
) -> Optional[int]:
    """First mini-milestone crossed by this change, if any."""
    crossed = [m for m in reward_milestones(reward) if previous_points < m <= current_points]
    return crossed[0] if crossed else None


# ---------------------------------------------------------------------------
# Lifecycle (returns new snapshots; callers persist them)
# ---------------------------------------------------------------------------

def redeem_reward(
    reward: Reward,
    events: Iterable[BehaviorEvent],
    is_primary_reward: bool = False,
    now: Optional[datetime] = None,
) -> Reward:
    """Mark delivered and freeze earned stars so later events don't move it."""
    earned = points_earned_in_window(reward, events, is_primary_reward)
    logger.info("Redeeming reward %s with %d/%d stars", reward.id, earned, reward.target_points)
    return dataclasses.replace(
        reward,
        is_redeemed=True,
        redeemed_date=now or datetime.now(),
        frozen_earned_points=earned,
    )


def apply_soft_reset(reward: Reward, now: Optional[datetime] = None) -> Reward:
    """Halve progress, restart the window, drop the deadline."""
    return dataclasses.replace(
        reward,
        progress_reduction_factor=reward.progress_reduction_factor * SOFT_RESET_FACTOR,
        start_date=now or datetime.now(),
        due_date=None,
    )


def promote_next_reward(
    rewards: Iterable[Reward],
    child_id: uuid.UUID,
    now: Optional[datetime] = None,
) -> list[Reward]:
    """
    Move the next queued reward (priority > 0) to priority 0 with a fresh
    earning window. Returns the full list with the promoted reward replaced.
    """
    rewards = list(rewards)
    queued = [r for r in active_rewards(rewards, child_id, now) if r.priority > 0]
    if not queued:
        return rewards

    nxt = queued[0]
    promoted = dataclasses.replace(nxt, priority=0, start_date=now or datetime.now())
    logger.info("Promoted reward %s to primary for child %s", nxt.id, child_id)
    return [promoted if r.id == nxt.id else r for r in rewards]
