"""
Tests for the edge-triggered milestone trigger and celebration payloads.

Covered scenarios:
  A) check_milestone   — fires once on the crossing update only
  B) advance_milestone — forward-only celebrated-through state
  C) streak copy       — known thresholds and the generic fallback
  D) goal celebrations — reaching the target wins over a mini-milestone
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta

import pytest

from tinywins.core.errors import InvalidThresholdsError
from tinywins.domain import BehaviorEvent, Reward
from tinywins.services.milestones import (
    CelebrationKind,
    GoalMilestoneCelebration,
    GoalReachedCelebration,
    MilestoneState,
    advance_milestone,
    check_milestone,
    crossed_thresholds,
    goal_celebration,
    milestone_message,
    streak_celebration,
    streak_milestone_copy,
)

STREAK = (7, 14, 30)


# ---------------------------------------------------------------------------
# A) check_milestone
# ---------------------------------------------------------------------------

class TestCheckMilestone:
    def test_crossing_fires(self):
        assert check_milestone(7, 6, STREAK) == 7

    def test_already_past_does_not_fire(self):
        assert check_milestone(8, 7, STREAK) is None

    def test_jump_fires_lowest_crossed(self):
        assert check_milestone(15, 10, STREAK) == 14
        assert crossed_thresholds(35, 0, STREAK) == [7, 14, 30]
        assert check_milestone(35, 0, STREAK) == 7
        assert check_milestone(31, 8, STREAK) == 14

    def test_unknown_previous_never_fires(self):
        assert check_milestone(7, None, STREAK) is None

    def test_falling_value_never_fires(self):
        assert check_milestone(5, 8, STREAK) is None

    def test_same_value_never_fires(self):
        assert check_milestone(7, 7, STREAK) is None

    def test_unsorted_thresholds(self):
        assert check_milestone(14, 13, [30, 14, 7]) == 14

    def test_non_positive_threshold_rejected(self):
        with pytest.raises(InvalidThresholdsError) as exc:
            check_milestone(3, 0, [0, 7])
        assert exc.value.details["thresholds"] == [0, 7]


# ---------------------------------------------------------------------------
# B) advance_milestone
# ---------------------------------------------------------------------------

class TestAdvanceMilestone:
    def test_first_threshold(self):
        state, fired = advance_milestone(MilestoneState(), 8, STREAK)
        assert fired == 7
        assert state.celebrated_through == 7

    def test_repeat_does_not_fire(self):
        state, fired = advance_milestone(MilestoneState(7), 8, STREAK)
        assert fired is None
        assert state.celebrated_through == 7

    def test_drop_leaves_state(self):
        state, fired = advance_milestone(MilestoneState(7), 2, STREAK)
        assert fired is None
        assert state == MilestoneState(7)

    def test_jump_delivers_one_threshold_per_step(self):
        state, fired = advance_milestone(MilestoneState(7), 31, STREAK)
        assert fired == 14
        assert state.celebrated_through == 14
        state, fired = advance_milestone(state, 31, STREAK)
        assert fired == 30
        assert advance_milestone(state, 31, STREAK) == (state, None)


# ---------------------------------------------------------------------------
# C) Streak copy
# ---------------------------------------------------------------------------

class TestStreakCopy:
    def test_one_week(self):
        celebration = streak_celebration(7, 6)
        assert celebration.title == "One Week Strong!"
        assert celebration.icon == "star.fill"
        assert celebration.kind == CelebrationKind.streak_milestone
        assert celebration.threshold == 7
        assert celebration.subject_id is None

    def test_one_month(self):
        assert streak_milestone_copy(30).title == "One Month!"

    def test_custom_threshold_copy(self):
        celebration = streak_celebration(21, 20, thresholds=[21])
        assert celebration.title == "21 Days!"
        assert celebration.icon == "flame.fill"

    def test_no_crossing(self):
        assert streak_celebration(8, 7) is None

    def test_kind_is_a_string_enum(self):
        assert CelebrationKind("goal_reached") is CelebrationKind.goal_reached
        assert CelebrationKind.streak_milestone == "streak_milestone"
        with pytest.raises(ValueError):
            CelebrationKind("birthday")


# ---------------------------------------------------------------------------
# D) Goal celebrations
# ---------------------------------------------------------------------------

CHILD = uuid.uuid4()
T0 = datetime(2026, 5, 1, 8, 0)


def _reward(target: int = 10) -> Reward:
    return Reward(child_id=CHILD, name="Ice cream", target_points=target, created_date=T0, image_name="gift")


def _events(*points: int) -> list[BehaviorEvent]:
    return [
        BehaviorEvent(
            child_id=CHILD,
            behavior_type_id=uuid.uuid4(),
            points_applied=p,
            timestamp=T0 + timedelta(hours=i + 1),
        )
        for i, p in enumerate(points)
    ]


class TestGoalCelebration:
    def test_mini_milestone(self):
        celebration = goal_celebration(_reward(), 4, _events(2, 3), True, "Sam", now=T0)
        assert isinstance(celebration, GoalMilestoneCelebration)
        assert celebration.milestone == 5
        assert celebration.percentage == 50
        assert celebration.message == "Halfway there! Sam is doing great."
        assert celebration.subject_id == celebration.reward_id

    def test_target_reached(self):
        reward = _reward()
        celebration = goal_celebration(reward, 8, _events(5, 5), True, "Sam", now=T0)
        assert isinstance(celebration, GoalReachedCelebration)
        assert celebration.target == 10
        assert celebration.reward_icon == "gift"
        assert celebration.threshold == 10

    def test_jump_celebrates_first_milestone_crossed(self):
        celebration = goal_celebration(_reward(20), 0, _events(8, 8), True, "Sam", now=T0)
        assert isinstance(celebration, GoalMilestoneCelebration)
        assert celebration.milestone == 5
        assert celebration.percentage == 25
        assert celebration.message == "Great start! Tell Sam what they did well this week."

    def test_target_wins_over_milestone(self):
        celebration = goal_celebration(_reward(), 3, _events(10), True, "Sam", now=T0)
        assert isinstance(celebration, GoalReachedCelebration)

    def test_unknown_previous(self):
        assert goal_celebration(_reward(), None, _events(10), True, "Sam", now=T0) is None

    def test_no_change(self):
        assert goal_celebration(_reward(), 6, _events(6), True, "Sam", now=T0) is None

    def test_non_primary_ignores_untagged_stars(self):
        assert goal_celebration(_reward(), 0, _events(10), False, "Sam", now=T0) is None

    @pytest.mark.parametrize("percentage,fragment", [
        (25, "Great start! Tell Sam"),
        (40, "Making progress!"),
        (50, "Halfway there! Sam"),
        (75, "Almost there!"),
    ])
    def test_messages(self, percentage, fragment):
        assert milestone_message(percentage, "Sam").startswith(fragment)
