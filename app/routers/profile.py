# =============================================================================
# app/routers/profile.py - Profile Endpoints
# =============================================================================
# Read/update/delete of the caller's own profile, plus the one-time account
# type selection made during signup. Role can't be changed through PATCH.
# =============================================================================

from fastapi import APIRouter, Depends, Response, status

from app.auth import AuthUser, get_current_profile, get_current_user
from app.auth.routes import build_profile_response
from core.models.account import AccountTypeRequest, Profile, ProfileResponse, ProfileUpdate
from core.services.profile_service import ProfileService

router = APIRouter()


@router.get("", response_model=ProfileResponse)
def get_profile(
    user: AuthUser = Depends(get_current_user),
    profile: Profile = Depends(get_current_profile),
):
    """Get the caller's profile."""
    return build_profile_response(profile, user.email)


@router.patch("", response_model=ProfileResponse)
def update_profile(
    update: ProfileUpdate,
    user: AuthUser = Depends(get_current_user),
):
    """
    Update display fields.

    Unknown fields, including `role` and `account_role`, are rejected
    with 422.
    """
    profile = ProfileService.update_profile(user.id, update)
    return build_profile_response(profile, user.email)


@router.post("/account-type", response_model=ProfileResponse)
def select_account_type(
    request: AccountTypeRequest,
    user: AuthUser = Depends(get_current_user),
):
    """
    Choose personal or business account during signup.

    Allowed once. Returns 409 ROLE_LOCKED afterwards.
    """
    profile = ProfileService.select_account_type(user.id, request.account_type)
    return build_profile_response(profile, user.email)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
def delete_account(user: AuthUser = Depends(get_current_user)):
    """Delete the caller's account and everything it owns."""
    ProfileService.delete_account(user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
