# =============================================================================
# app/routers/admin.py - Administrator Endpoints
# =============================================================================
# Claim review, ownership revocation and role correction.
# Every endpoint depends on require_admin; the services check the role
# again before writing.
# =============================================================================

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from app.auth import require_admin
from app.auth.routes import build_profile_response
from core.access import Actor
from core.models.account import ProfileResponse, RoleChangeRequest
from core.models.ownership import Claim, ClaimReject
from core.services.claim_service import ClaimService
from core.services.ownership_service import OwnershipService
from core.services.profile_service import ProfileService

router = APIRouter()


# =============================================================================
# Claims
# =============================================================================

@router.get("/claims", response_model=list[Claim])
def list_pending_claims(
    admin: Actor = Depends(require_admin),
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    """Pending claims awaiting review, newest first."""
    return ClaimService.list_pending_claims(admin, limit=limit)


@router.post("/claims/{claim_id}/approve", response_model=Claim)
def approve_claim(
    claim_id: UUID,
    admin: Actor = Depends(require_admin),
):
    """
    Approve a claim and link the claimant to the business.

    409 CLAIM_ALREADY_PROCESSED if the claim is no longer pending.
    """
    return ClaimService.approve_claim(admin, claim_id)


@router.post("/claims/{claim_id}/reject", response_model=Claim)
def reject_claim(
    claim_id: UUID,
    body: ClaimReject | None = None,
    admin: Actor = Depends(require_admin),
):
    """Reject a claim, optionally with a reason shown to the claimant."""
    reason = body.reason if body else None
    return ClaimService.reject_claim(admin, claim_id, reason)


# =============================================================================
# Ownership & Roles
# =============================================================================

@router.delete(
    "/businesses/{business_id}/owners/{profile_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def revoke_ownership(
    business_id: UUID,
    profile_id: UUID,
    admin: Actor = Depends(require_admin),
):
    """Remove an ownership link. Idempotent."""
    OwnershipService.revoke_ownership(admin, business_id, profile_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/profiles/{profile_id}/role", response_model=ProfileResponse)
def change_role(
    profile_id: UUID,
    request: RoleChangeRequest,
    admin: Actor = Depends(require_admin),
):
    """
    Correct the role of an account.

    Takes effect on the account's next request.
    """
    profile = ProfileService.set_role(admin, profile_id, request.role)
    return build_profile_response(profile, None)
