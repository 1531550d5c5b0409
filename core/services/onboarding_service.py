# =============================================================================
# core/services/onboarding_service.py - Onboarding Step Machine
# =============================================================================
# Personal accounts walk interests -> subcategories -> deal-breakers ->
# complete. The stored onboarding_step is the next step still to do; the
# access classifier reads it to pick the "next incomplete step" redirect.
#
# Transition rules:
# - completing the required step advances to the following step
# - completing "complete" sets onboarding_complete = true
# - re-saving an earlier step changes nothing (back navigation)
# - completing a later step than required is refused (no skipping)
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.models.account import OnboardingStep, Profile, Role
from app.exceptions import (
    OnboardingStepError,
    PersonalAccountRequiredError,
    ProfileNotFoundError,
)
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)


class OnboardingService:
    """Service for the personal-account onboarding flow."""

    @staticmethod
    def status(profile: Profile) -> dict[str, Any]:
        """Where a profile stands in onboarding."""
        return {
            "step": profile.onboarding_step.value,
            "route": profile.onboarding_step.route,
            "complete": profile.onboarding_complete,
            "steps": [step.value for step in OnboardingStep.ordered()],
        }

    @staticmethod
    def complete_step(account_id: UUID | str, step: OnboardingStep) -> Profile:
        """
        Mark an onboarding step as done.

        Args:
            account_id: The profile's account id
            step: The step the client just finished

        Returns:
            The profile after the transition

        Raises:
            PersonalAccountRequiredError: If the profile isn't a personal account
            OnboardingStepError: If `step` is later than the required step
        """
        profile = ProfileService.get_profile(account_id)

        if profile.role is not Role.USER:
            raise PersonalAccountRequiredError()

        if profile.onboarding_complete:
            return profile

        required = profile.onboarding_step
        if step.position > required.position:
            raise OnboardingStepError(step.value, required.value)
        if step.position < required.position:
            logger.debug(f"Re-saved earlier onboarding step {step.value} for {account_id}")
            return profile

        following = step.next()
        if following is None:
            changes: dict[str, Any] = {"onboarding_complete": True}
        else:
            changes = {"onboarding_step": following.value}

        row = SupabaseClient.update_profile(account_id, changes)
        if not row:
            raise ProfileNotFoundError(str(account_id))

        logger.info(f"Onboarding step {step.value} completed for {account_id}")
        return Profile.from_db_row(row)
