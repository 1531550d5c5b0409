# =============================================================================
# app/routers/claims.py - Ownership Claim Endpoints
# =============================================================================
# Business accounts submit, list and cancel their own claims. Review
# happens in admin.py.
# =============================================================================

from uuid import UUID

from fastapi import APIRouter, Depends, status

from app.auth import get_current_actor, require_business_owner
from core.access import Actor
from core.models.ownership import Claim, ClaimCreate
from core.services.claim_service import ClaimService

router = APIRouter()


@router.post("", response_model=Claim, status_code=status.HTTP_201_CREATED)
def submit_claim(
    claim: ClaimCreate,
    actor: Actor = Depends(require_business_owner),
):
    """
    Claim a business listing.

    Requires a valid email or a phone number with at least 8 digits.
    Answers 409 if the caller already owns the business or already has a
    pending claim on it.
    """
    return ClaimService.submit_claim(actor, claim)


@router.get("", response_model=list[Claim])
def list_my_claims(actor: Actor = Depends(get_current_actor)):
    """The caller's claims, newest first."""
    return ClaimService.list_claims_for_user(actor)


@router.delete("/{claim_id}", response_model=Claim)
def cancel_claim(
    claim_id: UUID,
    actor: Actor = Depends(get_current_actor),
):
    """Withdraw a pending claim."""
    return ClaimService.cancel_claim(actor, claim_id)
