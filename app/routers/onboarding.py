# =============================================================================
# app/routers/onboarding.py - Onboarding Endpoints
# =============================================================================

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from app.auth import AuthUser, get_current_profile, get_current_user
from core.models.account import OnboardingStep, Profile
from core.services.onboarding_service import OnboardingService

router = APIRouter()


@router.get("")
def get_onboarding_status(profile: Profile = Depends(get_current_profile)):
    """Current onboarding step and its page route."""
    return OnboardingService.status(profile)


@router.post("/{step}")
def complete_onboarding_step(
    step: Annotated[OnboardingStep, Path(description="Step just finished")],
    user: AuthUser = Depends(get_current_user),
):
    """
    Mark a step as done and return the new status.

    Completing a step ahead of the required one answers 409.
    """
    profile = OnboardingService.complete_step(user.id, step)
    return OnboardingService.status(profile)
