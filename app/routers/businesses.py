# =============================================================================
# app/routers/businesses.py - Owner Listing Endpoints
# =============================================================================
# Business accounts list their listings and edit or delete the ones they
# own. Every mutation re-checks ownership server-side.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Response, status

from app.auth import get_access_token, require_business_owner
from core.access import Actor
from core.models.ownership import BusinessUpdate, OwnershipSummary
from core.services.business_service import BusinessService
from core.services.ownership_service import OwnershipService

router = APIRouter()

BusinessIdentifier = Annotated[str, Path(min_length=1, description="Business UUID or slug")]


@router.get("/mine", response_model=OwnershipSummary)
def list_my_businesses(actor: Actor = Depends(require_business_owner)):
    """
    Listings owned by the caller.

    `state` tells an empty dashboard apart: no claims yet, a claim still
    pending review, or a rejected claim.
    """
    return OwnershipService.ownership_summary(actor.account_id)


@router.patch("/{business_id}")
def update_business(
    business_id: BusinessIdentifier,
    update: BusinessUpdate,
    actor: Actor = Depends(require_business_owner),
    access_token: str = Depends(get_access_token),
):
    """
    Edit a listing.

    403 PERMISSION_DENIED if the caller doesn't own it.
    """
    return BusinessService.update_business(actor, business_id, update, access_token)


@router.delete("/{business_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_business(
    business_id: BusinessIdentifier,
    actor: Actor = Depends(require_business_owner),
    access_token: str = Depends(get_access_token),
):
    """Delete a listing the caller owns."""
    BusinessService.delete_business(actor, business_id, access_token)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
