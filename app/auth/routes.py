# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# API endpoints for authentication-related operations.
#
# Note: Actual signup/login is handled by Supabase Auth client-side.
# These routes are for getting account info after authentication.
# =============================================================================

import logging
from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_profile, get_current_user
from app.auth.models import AuthUser
from core.access.routing_table import home_path_for
from core.models.account import Profile, ProfileResponse, Role

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def build_profile_response(profile: Profile, email: str | None) -> ProfileResponse:
    """Profile plus the surface the client should land on after sign-in."""
    home_path = home_path_for(profile.role)
    if profile.role is Role.USER and not profile.onboarding_complete:
        home_path = profile.onboarding_step.route

    return ProfileResponse(
        user_id=profile.user_id,
        email=email,
        role=profile.role,
        onboarding_step=profile.onboarding_step,
        onboarding_complete=profile.onboarding_complete,
        display_name=profile.display_name,
        username=profile.username,
        avatar_url=profile.avatar_url,
        home_path=home_path,
    )


@router.get("/me", response_model=ProfileResponse)
def get_current_user_info(
    user: AuthUser = Depends(get_current_user),
    profile: Profile = Depends(get_current_profile),
) -> ProfileResponse:
    """
    Get the current account's profile and home surface.

    Raises:
        401: If not authenticated
        404: If the identity has no profile yet
    """
    return build_profile_response(profile, user.email)


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Useful for checking if a stored token is still valid.

    Raises:
        401: If token is invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
