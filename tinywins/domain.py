"""
Domain snapshots consumed by the engine.

Plain frozen dataclasses (no ORM, no Pydantic). The caller owns storage of
events, rewards, agreements and notes and hands the engine full snapshots;
every derived value is recomputed from them.

    BehaviorEvent      — one logged moment (signed star value)
    Reward             — a goal with a star target
    AgreementVersion   — a signed snapshot of covered rewards/behaviors
    ParentNote         — a parent check-in note (feeds the reflection streak)
"""
from __future__ import annotations

import enum
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from tinywins.core.errors import InvalidRewardError


def _now() -> datetime:
    return datetime.now()


def _aligned(value: datetime, reference: datetime) -> datetime:
    """`value` made comparable with `reference`; naive times are local wall time."""
    if (value.tzinfo is None) == (reference.tzinfo is None):
        return value
    if value.tzinfo is None:
        return value.astimezone(reference.tzinfo)
    return value.astimezone().replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Behavior events
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BehaviorEvent:
    child_id: uuid.UUID
    behavior_type_id: uuid.UUID
    points_applied: int
    timestamp: datetime = field(default_factory=_now)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    note: Optional[str] = None
    media: tuple[str, ...] = ()
    # Goal these stars were directed to; None = primary reward.
    reward_id: Optional[uuid.UUID] = None
    logged_by_parent_id: Optional[str] = None
    logged_by_parent_name: Optional[str] = None

    @property
    def is_positive(self) -> bool:
        return self.points_applied >= 0

    @property
    def is_challenge(self) -> bool:
        return self.points_applied < 0


# ---------------------------------------------------------------------------
# Rewards
# ---------------------------------------------------------------------------

class RewardStatus(str, enum.Enum):
    active = "active"
    active_with_deadline = "active_with_deadline"
    ready_to_redeem = "ready_to_redeem"
    completed = "completed"
    expired = "expired"

    @property
    def display_name(self) -> str:
        return _REWARD_STATUS_NAMES[self]

    @property
    def is_terminal(self) -> bool:
        return self in (RewardStatus.completed, RewardStatus.expired)


_REWARD_STATUS_NAMES = {
    RewardStatus.active: "Active",
    RewardStatus.active_with_deadline: "Timed",
    RewardStatus.ready_to_redeem: "Earned",
    RewardStatus.completed: "Completed",
    RewardStatus.expired: "Expired",
}


@dataclass(frozen=True)
class Reward:
    """
    A goal a child works toward.

    `priority` orders goals (lower first); the lowest active one is the
    primary reward and absorbs untagged stars. `start_date` opens the
    earning window and defaults to `created_date`.
    """
    child_id: uuid.UUID
    name: str
    target_points: int
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    priority: int = 0
    created_date: datetime = field(default_factory=_now)
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    image_name: Optional[str] = None
    is_redeemed: bool = False
    redeemed_date: Optional[datetime] = None
    auto_reset_on_expire: bool = False
    progress_reduction_factor: float = 1.0
    frozen_earned_points: Optional[int] = None

    def __post_init__(self) -> None:
        if self.target_points <= 0:
            raise InvalidRewardError(self.target_points)
        if self.start_date is None:
            object.__setattr__(self, "start_date", self.created_date)

    @property
    def window_start(self) -> datetime:
        return self.start_date or self.created_date

    @property
    def has_deadline(self) -> bool:
        return self.due_date is not None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.due_date is None or self.is_redeemed:
            return False
        return _aligned(now or _now(), self.due_date) > self.due_date

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """Neither redeemed nor past its deadline."""
        return not self.is_redeemed and not self.is_expired(now)


# ---------------------------------------------------------------------------
# Agreements
# ---------------------------------------------------------------------------

class SignatureParty(str, enum.Enum):
    child = "child"
    parent = "parent"


@dataclass(frozen=True)
class SignatureRecord:
    is_signed: bool = False
    signature_data: Optional[bytes] = None
    signed_at: Optional[datetime] = None


UNSIGNED = SignatureRecord()


@dataclass(frozen=True)
class AgreementVersion:
    child_id: uuid.UUID
    covered_behavior_type_ids: frozenset[uuid.UUID] = frozenset()
    covered_reward_ids: frozenset[uuid.UUID] = frozenset()
    child_signature: SignatureRecord = UNSIGNED
    parent_signature: SignatureRecord = UNSIGNED
    created_at: datetime = field(default_factory=_now)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @property
    def is_fully_signed(self) -> bool:
        return (
            self.child_signature.is_signed
            and self.parent_signature.is_signed
            and self.child_signature.signed_at is not None
            and self.parent_signature.signed_at is not None
        )

    @property
    def signed_date(self) -> Optional[datetime]:
        """Later of the two signature times; None until both have signed."""
        if not self.is_fully_signed:
            return None
        return max(self.child_signature.signed_at, self.parent_signature.signed_at)


class AgreementCoverageStatus(str, enum.Enum):
    never_signed = "never_signed"
    signed_current = "signed_current"
    signed_out_of_date = "signed_out_of_date"

    @property
    def pill_text(self) -> str:
        return _COVERAGE_COPY[self][0]

    @property
    def subtext(self) -> str:
        return _COVERAGE_COPY[self][1]


_COVERAGE_COPY = {
    AgreementCoverageStatus.never_signed: (
        "Not signed yet",
        "Sign your agreement together to get started.",
    ),
    AgreementCoverageStatus.signed_current: (
        "Included in agreement",
        "Your goals and rules match what you signed together.",
    ),
    AgreementCoverageStatus.signed_out_of_date: (
        "Needs update",
        "You added new goals. Review and sign again together.",
    ),
}


# ---------------------------------------------------------------------------
# Parent notes
# ---------------------------------------------------------------------------

class NoteType(str, enum.Enum):
    parent_win = "parent_win"      # "I stayed calm"
    good_moment = "good_moment"    # general positive observation
    reflection = "reflection"      # end-of-day reflection


REFLECTION_NOTE_TYPES = frozenset({NoteType.parent_win, NoteType.reflection})


@dataclass(frozen=True)
class ParentNote:
    content: str
    note_type: NoteType = NoteType.good_moment
    date: datetime = field(default_factory=_now)
    id: uuid.UUID = field(default_factory=uuid.uuid4)
    child_id: Optional[uuid.UUID] = None
    is_shared_with_partner: bool = False
    logged_by_parent_id: Optional[str] = None
    logged_by_parent_name: Optional[str] = None

    @property
    def counts_toward_streak(self) -> bool:
        return self.note_type in REFLECTION_NOTE_TYPES
