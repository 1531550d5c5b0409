# =============================================================================
# app/routers/access.py - Access Decision Endpoint
# =============================================================================
# Lets an edge renderer (or the web client) ask the same question the page
# middleware answers: may the caller open this path, and if not, where to.
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.auth import AuthUser, get_current_user_optional
from core.access import Actor, business_id_from_path, classify
from core.models.account import Role
from core.services.ownership_service import OwnershipService
from core.services.profile_service import ProfileService

router = APIRouter()


@router.get("/access")
def check_access(
    path: Annotated[str, Query(min_length=1, description="Page path, optionally with query string")],
    user: AuthUser | None = Depends(get_current_user_optional),
):
    """
    Classify a page path for the caller.

    Signed-out callers (or invalid tokens) are classified as anonymous.

    Returns:
        {"allowed": bool, "redirect_to": str | None, "reason": str}
    """
    if not path.startswith("/"):
        path = f"/{path}"

    actor = ProfileService.load_actor(user.id, user.email_verified) if user else Actor.anonymous()

    owns_business = None
    business_id = business_id_from_path(path)
    if business_id is not None and actor.role is Role.BUSINESS_OWNER:
        owns_business = OwnershipService.is_owner(actor.account_id, business_id)

    return classify(actor, path, owns_business=owns_business).to_dict()
