"""
Agreement coverage router.

POST /agreements/coverage   — is the family plan signed and up to date?
"""
from __future__ import annotations

from fastapi import APIRouter

from tinywins.schemas.agreements import CoverageRequest, CoverageResponse
from tinywins.schemas.common import UNPROCESSABLE
from tinywins.services.agreements import (
    coverage_status,
    latest_agreement,
    rewards_covered_by_agreement,
    rewards_needing_agreement,
)

router = APIRouter(prefix="/agreements", tags=["agreements"])


# ---------------------------------------------------------------------------
# POST /agreements/coverage
# ---------------------------------------------------------------------------

@router.post(
    "/coverage",
    response_model=CoverageResponse,
    summary="Agreement coverage status for a child",
    responses={
        200: {"description": "Coverage status plus the display copy for the status pill."},
        **UNPROCESSABLE,
    },
)
def agreement_coverage(body: CoverageRequest):
    """
    Compare the child's active goals (and optionally behaviors) with the most
    recent agreement version that **both** child and parent have signed.

    | Status | Meaning |
    |---|---|
    | `never_signed`       | no fully signed version for this child |
    | `signed_current`     | every active goal is in the signed version |
    | `signed_out_of_date` | a goal was added, or the behavior set changed |

    Removing a goal never makes the agreement out of date.
    """
    versions = [v.to_domain() for v in body.agreement_versions]
    rewards = [r.to_domain() for r in body.rewards]

    status = coverage_status(
        body.child_id,
        versions,
        rewards,
        active_behavior_type_ids=body.active_behavior_type_ids,
        now=body.now,
    )
    latest = latest_agreement(body.child_id, versions)

    return CoverageResponse(
        child_id=body.child_id,
        status=status.value,
        pill_text=status.pill_text,
        subtext=status.subtext,
        latest_agreement_id=latest.id if latest else None,
        signed_date=latest.signed_date if latest else None,
        covered_reward_ids=[
            r.id for r in rewards_covered_by_agreement(body.child_id, versions, rewards, body.now)
        ],
        rewards_needing_agreement=[
            r.id for r in rewards_needing_agreement(body.child_id, versions, rewards, body.now)
        ],
    )
