"""
Milestone / celebration trigger.

Celebrations are edge-triggered: a threshold fires only on the update that
moves a counter from below it to at-or-above it, so re-rendering at the
same value never replays a celebration. An unknown previous value never
fires.

Celebration kinds (one dataclass per kind, matched exhaustively by callers):

  StreakMilestoneCelebration   reflection streak hit 7 / 14 / 30 ... days
  GoalMilestoneCelebration     a goal crossed a mini-milestone below target
  GoalReachedCelebration       a goal reached its target (supersedes a milestone)
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional, Union

from tinywins.core.errors import InvalidThresholdsError
from tinywins.domain import BehaviorEvent, Reward
from tinywins.services.progress import just_reached_milestone, points_earned_in_window


DEFAULT_STREAK_MILESTONES = (7, 14, 30)


class CelebrationKind(str, enum.Enum):
    streak_milestone = "streak_milestone"
    goal_milestone = "goal_milestone"
    goal_reached = "goal_reached"


# ---------------------------------------------------------------------------
# Edge trigger
# ---------------------------------------------------------------------------

def _validated(thresholds: Iterable[int]) -> list[int]:
    values = sorted(set(thresholds))
    if any(t <= 0 for t in values):
        raise InvalidThresholdsError(values)
    return values


def crossed_thresholds(
    new_value: int,
    previous_value: Optional[int],
    thresholds: Iterable[int],
) -> list[int]:
    """Every threshold t with previous_value < t <= new_value, ascending."""
    if previous_value is None:
        return []
    return [t for t in _validated(thresholds) if previous_value < t <= new_value]


def check_milestone(
    new_value: int,
    previous_value: Optional[int],
    thresholds: Iterable[int],
) -> Optional[int]:
    """
    The lowest newly crossed threshold, or None. When one jump crosses
    several thresholds the first one is celebrated now and the rest are
    left for the ledger to deliver on later evaluations.
    """
    crossed = crossed_thresholds(new_value, previous_value, thresholds)
    return crossed[0] if crossed else None


@dataclass(frozen=True)
class MilestoneState:
    """Highest threshold already celebrated for one tracked counter."""
    celebrated_through: Optional[int] = None


def advance_milestone(
    state: MilestoneState,
    value: int,
    thresholds: Iterable[int],
) -> tuple[MilestoneState, Optional[int]]:
    """
    Forward-only transition. Fires the lowest threshold above
    `celebrated_through` that `value` has reached and marks it celebrated,
    so thresholds passed in one jump are delivered one per call.
    A falling counter leaves the state untouched.
    """
    floor = state.celebrated_through or 0
    reached = [t for t in _validated(thresholds) if floor < t <= value]
    if not reached:
        return state, None
    return MilestoneState(celebrated_through=reached[0]), reached[0]


# ---------------------------------------------------------------------------
# Celebration payloads
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StreakMilestoneCelebration:
    days: int
    title: str
    message: str
    icon: str
    kind: CelebrationKind = CelebrationKind.streak_milestone

    @property
    def threshold(self) -> int:
        return self.days

    @property
    def subject_id(self) -> Optional[uuid.UUID]:
        return None


@dataclass(frozen=True)
class GoalMilestoneCelebration:
    child_id: uuid.UUID
    reward_id: uuid.UUID
    reward_name: str
    milestone: int
    target: int
    message: str
    kind: CelebrationKind = CelebrationKind.goal_milestone

    @property
    def percentage(self) -> int:
        return int(self.milestone / self.target * 100)

    @property
    def threshold(self) -> int:
        return self.milestone

    @property
    def subject_id(self) -> Optional[uuid.UUID]:
        return self.reward_id


@dataclass(frozen=True)
class GoalReachedCelebration:
    child_id: uuid.UUID
    reward_id: uuid.UUID
    reward_name: str
    target: int
    reward_icon: Optional[str] = None
    kind: CelebrationKind = CelebrationKind.goal_reached

    @property
    def threshold(self) -> int:
        return self.target

    @property
    def subject_id(self) -> Optional[uuid.UUID]:
        return self.reward_id


Celebration = Union[StreakMilestoneCelebration, GoalMilestoneCelebration, GoalReachedCelebration]


# ---------------------------------------------------------------------------
# Streak milestones
# ---------------------------------------------------------------------------

_STREAK_COPY = {
    7: (
        "One Week Strong!",
        "You've shown up for yourself 7 days in a row. "
        "That's the foundation of a powerful habit.",
        "star.fill",
    ),
    14: (
        "Two Weeks!",
        "14 days of self-reflection. You're proving that you're committed "
        "to being the best parent you can be.",
        "trophy.fill",
    ),
    30: (
        "One Month!",
        "30 days of consistent reflection. You're not just building a habit, "
        "you're transforming your parenting journey.",
        "crown.fill",
    ),
}


def streak_milestone_copy(days: int) -> StreakMilestoneCelebration:
    title, message, icon = _STREAK_COPY.get(days, (
        f"{days} Days!",
        "Keep up the amazing work. Every day of reflection makes a difference.",
        "flame.fill",
    ))
    return StreakMilestoneCelebration(days=days, title=title, message=message, icon=icon)


def streak_celebration(
    new_streak: int,
    previous_streak: Optional[int],
    thresholds: Iterable[int] = DEFAULT_STREAK_MILESTONES,
) -> Optional[StreakMilestoneCelebration]:
    days = check_milestone(new_streak, previous_streak, thresholds)
    return streak_milestone_copy(days) if days is not None else None


# ---------------------------------------------------------------------------
# Goal milestones
# ---------------------------------------------------------------------------

def milestone_message(percentage: int, child_name: str) -> str:
    if percentage < 30:
        return f"Great start! Tell {child_name} what they did well this week."
    if percentage < 50:
        return "Making progress! Keep noticing those positive moments."
    if percentage < 75:
        return f"Halfway there! {child_name} is doing great."
    if percentage < 100:
        return "Almost there! The goal is within reach."
    return "Nice progress on the way to the goal!"


def goal_celebration(
    reward: Reward,
    previous_points: Optional[int],
    events: Iterable[BehaviorEvent],
    is_primary_reward: bool,
    child_name: str,
    now: Optional[datetime] = None,
) -> Optional[Union[GoalMilestoneCelebration, GoalReachedCelebration]]:
    """
    What, if anything, to celebrate after `reward` moved from
    `previous_points`. Reaching the target wins over a mini-milestone.
    """
    if previous_points is None:
        return None

    current = points_earned_in_window(reward, events, is_primary_reward)

    if previous_points < reward.target_points <= current and reward.is_active(now):
        return GoalReachedCelebration(
            child_id=reward.child_id,
            reward_id=reward.id,
            reward_name=reward.name,
            target=reward.target_points,
            reward_icon=reward.image_name,
        )

    milestone = just_reached_milestone(reward, previous_points, current)
    if milestone is None or milestone >= reward.target_points:
        return None

    percentage = int(milestone / reward.target_points * 100)
    return GoalMilestoneCelebration(
        child_id=reward.child_id,
        reward_id=reward.id,
        reward_name=reward.name,
        milestone=milestone,
        target=reward.target_points,
        message=milestone_message(percentage, child_name),
    )
