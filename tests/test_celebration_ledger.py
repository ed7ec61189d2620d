"""
Tests for the celebration ledger (once-only delivery).

Covered scenarios:
  A) streak milestones   — fire once per family and threshold, lowest first when jumping
  B) goal celebrations   — fire once per (reward, threshold)
  C) isolation           — families and goals don't share state
  D) listing             — filters and newest-first order

Every test uses fresh child and family ids so rows from other tests never collide.
"""
from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta

from tinywins.domain import BehaviorEvent, NoteType, ParentNote, Reward
from tinywins.models.celebration import CelebrationRecord
from tinywins.services.celebration_ledger import (
    celebrated_through,
    evaluate_goal,
    evaluate_streak,
    list_celebrations,
    record_celebration,
)
from tinywins.services.milestones import CelebrationKind, streak_milestone_copy


TODAY = date(2026, 6, 30)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _streak_notes(days: int) -> list[ParentNote]:
    return [
        ParentNote(
            content="Reflected tonight",
            note_type=NoteType.reflection,
            date=datetime.combine(TODAY - timedelta(days=i), datetime.min.time()) + timedelta(hours=21),
        )
        for i in range(days)
    ]


def _reward(child_id: uuid.UUID, target: int = 10) -> Reward:
    return Reward(
        child_id=child_id,
        name="Movie night",
        target_points=target,
        created_date=datetime(2026, 6, 1),
    )


def _events(child_id: uuid.UUID, *points: int) -> list[BehaviorEvent]:
    return [
        BehaviorEvent(
            child_id=child_id,
            behavior_type_id=uuid.uuid4(),
            points_applied=p,
            timestamp=datetime(2026, 6, 2) + timedelta(hours=i),
        )
        for i, p in enumerate(points)
    ]


# ---------------------------------------------------------------------------
# A) Streak milestones
# ---------------------------------------------------------------------------

class TestStreakLedger:
    def test_fires_once(self, db):
        family = uuid.uuid4()
        first = evaluate_streak(db, family, _streak_notes(7), today=TODAY)
        assert first.streak == 7
        assert first.celebration is not None
        assert first.celebration.days == 7
        assert first.celebrated_through == 7

        again = evaluate_streak(db, family, _streak_notes(7), today=TODAY)
        assert again.celebration is None
        assert again.celebrated_through == 7

    def test_below_first_threshold(self, db):
        result = evaluate_streak(db, uuid.uuid4(), _streak_notes(6), today=TODAY)
        assert result.streak == 6
        assert result.celebration is None
        assert result.celebrated_through is None

    def test_jump_delivers_lowest_first(self, db):
        family = uuid.uuid4()
        first = evaluate_streak(db, family, _streak_notes(15), today=TODAY)
        assert first.celebration.days == 7
        second = evaluate_streak(db, family, _streak_notes(15), today=TODAY)
        assert second.celebration.days == 14
        third = evaluate_streak(db, family, _streak_notes(15), today=TODAY)
        assert third.celebration is None
        assert celebrated_through(db, family, CelebrationKind.streak_milestone) == 14

    def test_next_threshold_after_earlier_one(self, db):
        family = uuid.uuid4()
        evaluate_streak(db, family, _streak_notes(7), today=TODAY)
        result = evaluate_streak(db, family, _streak_notes(14), today=TODAY)
        assert result.celebration.days == 14

    def test_broken_streak_does_not_replay(self, db):
        family = uuid.uuid4()
        evaluate_streak(db, family, _streak_notes(7), today=TODAY)
        result = evaluate_streak(db, family, _streak_notes(2), today=TODAY)
        assert result.streak == 2
        assert result.celebration is None
        assert result.celebrated_through == 7

    def test_shared_notes_celebrate_once_per_family(self, db):
        family = uuid.uuid4()
        notes = _streak_notes(7)
        # the parent opens each child's screen with the same notes
        results = [evaluate_streak(db, family, notes, today=TODAY) for _ in range(2)]
        assert [r.celebration is not None for r in results] == [True, False]
        total, _ = list_celebrations(db, owner_id=family, kind=CelebrationKind.streak_milestone)
        assert total == 1


# ---------------------------------------------------------------------------
# B) Goal celebrations
# ---------------------------------------------------------------------------

class TestGoalLedger:
    def test_goal_reached_once(self, db):
        child = uuid.uuid4()
        reward = _reward(child)
        events = _events(child, 6, 4)
        first = evaluate_goal(db, reward, 6, events, True, "Ava")
        assert first is not None
        assert first.kind == CelebrationKind.goal_reached

        # another device reports the same transition
        assert evaluate_goal(db, reward, 6, events, True, "Ava") is None

    def test_milestone_then_goal(self, db):
        child = uuid.uuid4()
        reward = _reward(child)
        half = evaluate_goal(db, reward, 3, _events(child, 5), True, "Ava")
        assert half.kind == CelebrationKind.goal_milestone
        full = evaluate_goal(db, reward, 5, _events(child, 5, 5), True, "Ava")
        assert full.kind == CelebrationKind.goal_reached
        assert celebrated_through(db, child, CelebrationKind.goal_milestone, reward.id) == 5
        assert celebrated_through(db, child, CelebrationKind.goal_reached, reward.id) == 10

    def test_nothing_to_celebrate_writes_nothing(self, db):
        child = uuid.uuid4()
        assert evaluate_goal(db, _reward(child), 1, _events(child, 2), True, "Ava") is None
        total, _ = list_celebrations(db, owner_id=child)
        assert total == 0


# ---------------------------------------------------------------------------
# C) Isolation
# ---------------------------------------------------------------------------

class TestIsolation:
    def test_families_independent(self, db):
        a, b = uuid.uuid4(), uuid.uuid4()
        assert evaluate_streak(db, a, _streak_notes(7), today=TODAY).celebration is not None
        assert evaluate_streak(db, b, _streak_notes(7), today=TODAY).celebration is not None

    def test_goals_independent(self, db):
        child = uuid.uuid4()
        first, second = _reward(child), _reward(child)
        assert evaluate_goal(db, first, 0, _events(child, 10), True, "Ava") is not None
        tagged = [
            BehaviorEvent(
                child_id=child,
                behavior_type_id=uuid.uuid4(),
                points_applied=10,
                timestamp=datetime(2026, 6, 3),
                reward_id=second.id,
            )
        ]
        assert evaluate_goal(db, second, 0, tagged, False, "Ava") is not None

    def test_record_is_idempotent(self, db):
        child = uuid.uuid4()
        celebration = streak_milestone_copy(30)
        assert record_celebration(db, child, celebration) is True
        assert record_celebration(db, child, celebration) is False
        count = (
            db.query(CelebrationRecord)
            .filter(CelebrationRecord.owner_id == str(child))
            .count()
        )
        assert count == 1


# ---------------------------------------------------------------------------
# D) Listing
# ---------------------------------------------------------------------------

class TestListCelebrations:
    def test_filters_by_owner_and_kind(self, db):
        child = uuid.uuid4()
        evaluate_streak(db, child, _streak_notes(7), today=TODAY)
        reward = _reward(child)
        evaluate_goal(db, reward, 0, _events(child, 10), True, "Ava")

        total, items = list_celebrations(db, owner_id=child)
        assert total == 2
        assert {i.kind for i in items} == {
            CelebrationKind.streak_milestone,
            CelebrationKind.goal_reached,
        }

        total, items = list_celebrations(db, owner_id=child, kind=CelebrationKind.goal_reached)
        assert total == 1
        assert items[0].subject_key == str(reward.id)
        assert items[0].threshold == 10

    def test_newest_first_and_paging(self, db):
        child = uuid.uuid4()
        for days in (7, 14, 30):
            record_celebration(db, child, streak_milestone_copy(days))
        total, items = list_celebrations(db, owner_id=child, limit=2)
        assert total == 3
        assert [i.threshold for i in items] == [30, 14]
        _, rest = list_celebrations(db, owner_id=child, limit=2, offset=2)
        assert [i.threshold for i in rest] == [7]
