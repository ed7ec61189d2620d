"""
Agreement coverage service.

Compares a child's current goals and behaviors with the most recent fully
signed AgreementVersion ("Family Plan").

Coverage status
---------------
  never_signed        no fully signed version exists for the child
  signed_out_of_date  the active behavior-type set differs from the signed
                      one, or an active reward is missing from it
  signed_current      otherwise

Removing a reward never makes an agreement out of date; adding one does.

Selection of the authoritative version: latest signed_date, then latest
created_at, then latest position in the input sequence.

Public API
----------
latest_agreement(child_id, agreement_versions)                   -> AgreementVersion | None
coverage_status(child_id, versions, rewards, behavior_ids, now)  -> AgreementCoverageStatus
is_reward_covered_by_agreement(reward_id, child_id, versions)    -> bool
rewards_needing_agreement(child_id, versions, rewards, now)      -> list[Reward]
rewards_covered_by_agreement(child_id, versions, rewards, now)   -> list[Reward]
draft_agreement_version(child_id, rewards, behavior_ids, now)    -> AgreementVersion
sign_agreement(version, party, signature_data, now)              -> AgreementVersion
"""
from __future__ import annotations

import dataclasses
import logging
import uuid
from datetime import datetime
from typing import Iterable, Optional

from tinywins.domain import (
    AgreementCoverageStatus,
    AgreementVersion,
    Reward,
    SignatureParty,
    SignatureRecord,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Version selection
# ---------------------------------------------------------------------------

def latest_agreement(
    child_id: uuid.UUID,
    agreement_versions: Iterable[AgreementVersion],
) -> Optional[AgreementVersion]:
    """The authoritative signed version for the child, if any."""
    signed = [
        (v.signed_date, v.created_at, idx, v)
        for idx, v in enumerate(agreement_versions)
        if v.child_id == child_id and v.is_fully_signed
    ]
    if not signed:
        return None
    try:
        return max(signed, key=lambda item: item[:3])[3]
    except TypeError:
        logger.warning("Agreement versions for child %s are not orderable by date", child_id)
        return None


# ---------------------------------------------------------------------------
# Coverage
# ---------------------------------------------------------------------------

def _active_rewards(
    rewards: Iterable[Reward],
    child_id: uuid.UUID,
    now: Optional[datetime],
) -> list[Reward]:
    return [r for r in rewards if r.child_id == child_id and r.is_active(now)]


def is_reward_covered_by_agreement(
    reward_id: uuid.UUID,
    child_id: uuid.UUID,
    agreement_versions: Iterable[AgreementVersion],
) -> bool:
    agreement = latest_agreement(child_id, agreement_versions)
    if agreement is None:
        return False
    return reward_id in agreement.covered_reward_ids


def coverage_status(
    child_id: uuid.UUID,
    agreement_versions: Iterable[AgreementVersion],
    rewards: Iterable[Reward],
    active_behavior_type_ids: Optional[Iterable[uuid.UUID]] = None,
    now: Optional[datetime] = None,
) -> AgreementCoverageStatus:
    """
    Three-state coverage for the child.

    When `active_behavior_type_ids` is None the behavior set is not compared
    and only reward coverage decides between current and out of date.
    """
    agreement = latest_agreement(child_id, agreement_versions)
    if agreement is None:
        return AgreementCoverageStatus.never_signed

    if active_behavior_type_ids is not None:
        if frozenset(active_behavior_type_ids) != agreement.covered_behavior_type_ids:
            return AgreementCoverageStatus.signed_out_of_date

    active_ids = {r.id for r in _active_rewards(rewards, child_id, now)}
    if not active_ids.issubset(agreement.covered_reward_ids):
        return AgreementCoverageStatus.signed_out_of_date

    return AgreementCoverageStatus.signed_current


def rewards_needing_agreement(
    child_id: uuid.UUID,
    agreement_versions: Iterable[AgreementVersion],
    rewards: Iterable[Reward],
    now: Optional[datetime] = None,
) -> list[Reward]:
    """Active rewards that the latest signed agreement does not cover."""
    agreement = latest_agreement(child_id, agreement_versions)
    covered = agreement.covered_reward_ids if agreement else frozenset()
    return [r for r in _active_rewards(rewards, child_id, now) if r.id not in covered]


def rewards_covered_by_agreement(
    child_id: uuid.UUID,
    agreement_versions: Iterable[AgreementVersion],
    rewards: Iterable[Reward],
    now: Optional[datetime] = None,
) -> list[Reward]:
    agreement = latest_agreement(child_id, agreement_versions)
    if agreement is None:
        return []
    return [
        r for r in _active_rewards(rewards, child_id, now)
        if r.id in agreement.covered_reward_ids
    ]


# ---------------------------------------------------------------------------
# Versioning (append-only: each sign-off round is a new version)
# ---------------------------------------------------------------------------

def draft_agreement_version(
    child_id: uuid.UUID,
    rewards: Iterable[Reward],
    active_behavior_type_ids: Iterable[uuid.UUID],
    now: Optional[datetime] = None,
) -> AgreementVersion:
    """Snapshot the child's active rewards and behaviors into an unsigned version."""
    now = now or datetime.now()
    return AgreementVersion(
        child_id=child_id,
        covered_behavior_type_ids=frozenset(active_behavior_type_ids),
        covered_reward_ids=frozenset(r.id for r in _active_rewards(rewards, child_id, now)),
        created_at=now,
    )


def sign_agreement(
    version: AgreementVersion,
    party: SignatureParty,
    signature_data: Optional[bytes] = None,
    now: Optional[datetime] = None,
) -> AgreementVersion:
    record = SignatureRecord(
        is_signed=True,
        signature_data=signature_data,
        signed_at=now or datetime.now(),
    )
    if party == SignatureParty.child:
        return dataclasses.replace(version, child_signature=record)
    return dataclasses.replace(version, parent_signature=record)
