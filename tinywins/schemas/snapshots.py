"""
Snapshot input schemas shared by every endpoint.

The engine owns no events, rewards, agreements or notes: clients send the
snapshot they render from, and each model converts itself into the frozen
domain dataclass with `to_domain()`.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from tinywins.domain import (
    AgreementVersion,
    BehaviorEvent,
    NoteType,
    ParentNote,
    Reward,
    SignatureRecord,
)


class BehaviorEventIn(BaseModel):
    """A logged moment."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    child_id: uuid.UUID
    behavior_type_id: uuid.UUID
    timestamp: datetime
    points_applied: int = Field(description="Signed star value; negative for challenges.")
    note: Optional[str] = None
    media: list[str] = Field(default_factory=list)
    reward_id: Optional[uuid.UUID] = Field(
        default=None,
        description="Goal the stars were directed to. Omit for the primary reward.",
    )
    logged_by_parent_id: Optional[str] = None
    logged_by_parent_name: Optional[str] = None

    def to_domain(self) -> BehaviorEvent:
        return BehaviorEvent(
            id=self.id,
            child_id=self.child_id,
            behavior_type_id=self.behavior_type_id,
            timestamp=self.timestamp,
            points_applied=self.points_applied,
            note=self.note,
            media=tuple(self.media),
            reward_id=self.reward_id,
            logged_by_parent_id=self.logged_by_parent_id,
            logged_by_parent_name=self.logged_by_parent_name,
        )


class RewardIn(BaseModel):
    """A goal with a star target."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    child_id: uuid.UUID
    name: str = Field(min_length=1, max_length=200)
    target_points: int = Field(gt=0, examples=[10])
    priority: int = Field(default=0, ge=0, description="Lower = more primary.")
    created_date: datetime
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    image_name: Optional[str] = None
    is_redeemed: bool = False
    redeemed_date: Optional[datetime] = None
    auto_reset_on_expire: bool = False
    progress_reduction_factor: float = Field(default=1.0, ge=0.0, le=1.0)
    frozen_earned_points: Optional[int] = Field(default=None, ge=0)

    def to_domain(self) -> Reward:
        return Reward(
            id=self.id,
            child_id=self.child_id,
            name=self.name,
            target_points=self.target_points,
            priority=self.priority,
            created_date=self.created_date,
            start_date=self.start_date,
            due_date=self.due_date,
            image_name=self.image_name,
            is_redeemed=self.is_redeemed,
            redeemed_date=self.redeemed_date,
            auto_reset_on_expire=self.auto_reset_on_expire,
            progress_reduction_factor=self.progress_reduction_factor,
            frozen_earned_points=self.frozen_earned_points,
        )


class SignatureIn(BaseModel):
    is_signed: bool = False
    signature_data: Optional[str] = Field(
        default=None, description="Opaque signature payload (e.g. base64 PNG)."
    )
    signed_at: Optional[datetime] = None

    def to_domain(self) -> SignatureRecord:
        return SignatureRecord(
            is_signed=self.is_signed,
            signature_data=self.signature_data.encode() if self.signature_data else None,
            signed_at=self.signed_at,
        )


class AgreementVersionIn(BaseModel):
    """A signed (or in-progress) family agreement snapshot."""
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    child_id: uuid.UUID
    created_at: datetime
    covered_behavior_type_ids: list[uuid.UUID] = Field(default_factory=list)
    covered_reward_ids: list[uuid.UUID] = Field(default_factory=list)
    child_signature: SignatureIn = Field(default_factory=SignatureIn)
    parent_signature: SignatureIn = Field(default_factory=SignatureIn)

    def to_domain(self) -> AgreementVersion:
        return AgreementVersion(
            id=self.id,
            child_id=self.child_id,
            created_at=self.created_at,
            covered_behavior_type_ids=frozenset(self.covered_behavior_type_ids),
            covered_reward_ids=frozenset(self.covered_reward_ids),
            child_signature=self.child_signature.to_domain(),
            parent_signature=self.parent_signature.to_domain(),
        )


class ParentNoteIn(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    content: str = Field(min_length=1, max_length=10_000)
    note_type: NoteType = Field(examples=["reflection"])
    date: datetime
    child_id: Optional[uuid.UUID] = None
    is_shared_with_partner: bool = False
    logged_by_parent_id: Optional[str] = None
    logged_by_parent_name: Optional[str] = None

    def to_domain(self) -> ParentNote:
        return ParentNote(
            id=self.id,
            content=self.content,
            note_type=self.note_type,
            date=self.date,
            child_id=self.child_id,
            is_shared_with_partner=self.is_shared_with_partner,
            logged_by_parent_id=self.logged_by_parent_id,
            logged_by_parent_name=self.logged_by_parent_name,
        )
