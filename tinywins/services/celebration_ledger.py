"""
Celebration ledger — remembers which celebrations a family has already seen.

The milestone trigger is pure and edge-triggered; this module persists the
"celebrated through threshold K" state per (owner, kind, subject) so a
celebration is delivered at most once, across devices and restarts.

Owners
------
Goal celebrations belong to the reward's child. The reflection streak is the
parent's, computed over every parent note regardless of child, so streak
celebrations belong to the family: evaluating it once per child must not
replay "One Week Strong!" for each of them.

Idempotency
-----------
Each (owner_id, kind, subject_key, threshold) is unique in `celebrations`.
Before recording, the ledger checks whether that row exists; the unique
constraint is the final guard when two writers race.

Public API
----------
celebrated_through(db, owner_id, kind, subject_id)                 -> int | None
record_celebration(db, owner_id, celebration)                      -> bool
evaluate_streak(db, family_id, notes, today, tz, thresholds)       -> StreakEvaluation
evaluate_goal(db, reward, previous_points, events, is_primary, ...) -> Celebration | None
list_celebrations(db, owner_id, kind, limit, offset)               -> (total, rows)
"""
from __future__ import annotations

import dataclasses
import json
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Iterable, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tinywins.domain import BehaviorEvent, ParentNote, Reward
from tinywins.models.celebration import CelebrationRecord
from tinywins.services.milestones import (
    DEFAULT_STREAK_MILESTONES,
    Celebration,
    CelebrationKind,
    MilestoneState,
    StreakMilestoneCelebration,
    advance_milestone,
    goal_celebration,
    streak_milestone_copy,
)
from tinywins.services.streaks import calculate_reflection_streak

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class StreakEvaluation:
    family_id: uuid.UUID
    streak: int
    celebrated_through: Optional[int]
    celebration: Optional[StreakMilestoneCelebration]


# ---------------------------------------------------------------------------
# Ledger primitives
# ---------------------------------------------------------------------------

def _subject_key(subject_id: Optional[uuid.UUID]) -> str:
    return str(subject_id) if subject_id is not None else ""


def _payload(celebration: Celebration) -> str:
    payload = dataclasses.asdict(celebration)
    payload["kind"] = celebration.kind.value
    return json.dumps(payload, default=str)


def _record_exists(
    db: Session,
    owner_id: uuid.UUID,
    kind: CelebrationKind,
    subject_key: str,
    threshold: int,
) -> bool:
    return (
        db.query(CelebrationRecord.id)
        .filter(
            CelebrationRecord.owner_id == str(owner_id),
            CelebrationRecord.kind == kind.value,
            CelebrationRecord.subject_key == subject_key,
            CelebrationRecord.threshold == threshold,
        )
        .first()
        is not None
    )


def celebrated_through(
    db: Session,
    owner_id: uuid.UUID,
    kind: CelebrationKind,
    subject_id: Optional[uuid.UUID] = None,
) -> Optional[int]:
    """Highest threshold already celebrated, or None if nothing has been."""
    return (
        db.query(func.max(CelebrationRecord.threshold))
        .filter(
            CelebrationRecord.owner_id == str(owner_id),
            CelebrationRecord.kind == kind.value,
            CelebrationRecord.subject_key == _subject_key(subject_id),
        )
        .scalar()
    )


def record_celebration(db: Session, owner_id: uuid.UUID, celebration: Celebration) -> bool:
    """
    Persist a delivered celebration. Returns True if inserted, False if it
    was already on record. Commits on insert.
    """
    subject_key = _subject_key(celebration.subject_id)
    if _record_exists(db, owner_id, celebration.kind, subject_key, celebration.threshold):
        return False

    db.add(CelebrationRecord(
        owner_id=str(owner_id),
        kind=celebration.kind.value,
        subject_key=subject_key,
        threshold=celebration.threshold,
        celebration_metadata=_payload(celebration),
    ))
    try:
        db.commit()
    except IntegrityError:
        # Another writer recorded it first
        db.rollback()
        return False

    logger.info(
        "Recorded %s celebration for %s at threshold %d",
        celebration.kind.value, owner_id, celebration.threshold,
    )
    return True


# ---------------------------------------------------------------------------
# Evaluators
# ---------------------------------------------------------------------------

def evaluate_streak(
    db: Session,
    family_id: uuid.UUID,
    notes: Iterable[ParentNote],
    today: Optional[date] = None,
    tz: Optional[tzinfo] = None,
    thresholds: Iterable[int] = DEFAULT_STREAK_MILESTONES,
) -> StreakEvaluation:
    """
    Compute the family's reflection streak and fire the next streak
    milestone beyond what the ledger already holds. A streak that passed
    several thresholds at once delivers them one per call, lowest first.
    """
    streak = calculate_reflection_streak(notes, today=today, tz=tz)
    state = MilestoneState(
        celebrated_through(db, family_id, CelebrationKind.streak_milestone)
    )
    new_state, fired = advance_milestone(state, streak, thresholds)

    celebration = None
    if fired is not None:
        candidate = streak_milestone_copy(fired)
        if record_celebration(db, family_id, candidate):
            celebration = candidate
        else:
            # Already delivered elsewhere; report the ledger's state
            new_state = MilestoneState(
                celebrated_through(db, family_id, CelebrationKind.streak_milestone)
            )

    return StreakEvaluation(
        family_id=family_id,
        streak=streak,
        celebrated_through=new_state.celebrated_through,
        celebration=celebration,
    )


def evaluate_goal(
    db: Session,
    reward: Reward,
    previous_points: Optional[int],
    events: Iterable[BehaviorEvent],
    is_primary_reward: bool,
    child_name: str,
    now: Optional[datetime] = None,
) -> Optional[Celebration]:
    """Fire a goal celebration at most once per (reward, threshold)."""
    celebration = goal_celebration(
        reward, previous_points, events, is_primary_reward, child_name, now=now,
    )
    if celebration is None:
        return None
    if not record_celebration(db, reward.child_id, celebration):
        return None
    return celebration


# ---------------------------------------------------------------------------
# Query helpers
# ---------------------------------------------------------------------------

def list_celebrations(
    db: Session,
    owner_id: Optional[uuid.UUID] = None,
    kind: Optional[CelebrationKind] = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[int, list[CelebrationRecord]]:
    """Return (total, page) of CelebrationRecords ordered by created_at desc."""
    q = db.query(CelebrationRecord)
    if owner_id is not None:
        q = q.filter(CelebrationRecord.owner_id == str(owner_id))
    if kind is not None:
        q = q.filter(CelebrationRecord.kind == kind.value)
    total = q.count()
    items = (
        q.order_by(CelebrationRecord.created_at.desc(), CelebrationRecord.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return total, items
