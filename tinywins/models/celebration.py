"""
CelebrationRecord — celebrations already shown to a family.

Append-only. One row per (owner_id, kind, subject_key, threshold); the
unique constraint is the final guard against replaying a celebration.

kind values (see tinywins/services/milestones.py):
  "streak_milestone"  — reflection streak threshold (subject_key = "")
  "goal_milestone"    — goal mini-milestone (subject_key = reward id)
  "goal_reached"      — goal target reached (subject_key = reward id)

celebration_metadata: JSON-encoded payload of the celebration as shown.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from tinywins.db.base import Base


class CelebrationRecord(Base):
    __tablename__ = "celebrations"
    __table_args__ = (
        UniqueConstraint(
            "owner_id", "kind", "subject_key", "threshold",
            name="uq_celebration_owner_kind_subject_threshold",
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner_id: Mapped[str] = mapped_column(
        String(36), nullable=False, index=True,
        comment="Child id for goal celebrations, family id for streaks",
    )
    kind: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    subject_key: Mapped[str] = mapped_column(
        String(36), nullable=False, default="",
        comment='Reward id for goal celebrations, "" for streaks',
    )
    threshold: Mapped[int] = mapped_column(Integer, nullable=False)
    celebration_metadata: Mapped[str | None] = mapped_column(
        "celebration_metadata", Text, nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
