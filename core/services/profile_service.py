# =============================================================================
# core/services/profile_service.py - Profile & Role Business Logic
# =============================================================================
# Handles profile reads/updates, the once-only account type selection made
# at signup, administrative role changes and account deletion.
#
# load_actor() is what the access middleware calls on every page request;
# it never raises and answers an anonymous actor on any failure.
# =============================================================================

import logging
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.access.classifier import Actor
from core.models.account import OnboardingStep, Profile, ProfileUpdate, Role
from app.exceptions import AdminRequiredError, ProfileNotFoundError, RoleLockedError

logger = logging.getLogger(__name__)

SELECTABLE_ACCOUNT_TYPES = frozenset({Role.USER, Role.BUSINESS_OWNER})


class ProfileService:
    """
    Service for profile and role operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def get_profile(account_id: UUID | str) -> Profile:
        """
        Get the profile of an identity.

        Raises:
            ProfileNotFoundError: If the identity has no profile row
            SupabaseClientError: If the lookup fails
        """
        row = SupabaseClient.fetch_profile(account_id)
        if not row:
            raise ProfileNotFoundError(str(account_id))
        return Profile.from_db_row(row)

    @staticmethod
    def load_actor(account_id: UUID | str | None, email_verified: bool = True) -> Actor:
        """
        Build the access-control actor for an identity.

        Fails closed: a missing identity, a missing profile or a database
        error all produce Actor.anonymous().
        """
        if account_id is None:
            return Actor.anonymous()

        try:
            row = SupabaseClient.fetch_profile(account_id)
        except Exception as e:
            logger.warning(f"Profile lookup failed for {account_id}, treating as anonymous: {e}")
            return Actor.anonymous()

        if not row:
            logger.warning(f"No profile for authenticated account {account_id}, treating as anonymous")
            return Actor.anonymous()

        try:
            return Actor.from_profile(Profile.from_db_row(row), email_verified=email_verified)
        except (KeyError, ValueError) as e:
            logger.warning(f"Unreadable profile row for {account_id}, treating as anonymous: {e}")
            return Actor.anonymous()

    @staticmethod
    def update_profile(account_id: UUID | str, update: ProfileUpdate) -> Profile:
        """
        Update display fields of a profile.

        Role and onboarding columns are never touched here.

        Raises:
            ProfileNotFoundError: If the identity has no profile row
        """
        changes = update.changes()
        if not changes:
            return ProfileService.get_profile(account_id)

        row = SupabaseClient.update_profile(account_id, changes)
        if not row:
            raise ProfileNotFoundError(str(account_id))

        logger.info(f"Updated profile {account_id}: {sorted(changes)}")
        return Profile.from_db_row(row)

    @staticmethod
    def select_account_type(account_id: UUID | str, account_type: Role) -> Profile:
        """
        Record the account type chosen during signup.

        Allowed exactly once, and only for personal or business accounts.
        Business accounts skip personal onboarding.

        Raises:
            AdminRequiredError: If the caller asks for the admin role
            RoleLockedError: If an account type was already chosen
        """
        if account_type not in SELECTABLE_ACCOUNT_TYPES:
            raise AdminRequiredError()

        profile = ProfileService.get_profile(account_id)
        if profile.role_selected:
            raise RoleLockedError()

        changes: dict = {"account_role": account_type.value, "role": account_type.value}
        if account_type is Role.BUSINESS_OWNER:
            changes["onboarding_step"] = OnboardingStep.COMPLETE.value
            changes["onboarding_complete"] = True

        row = SupabaseClient.update_profile(account_id, changes)
        if not row:
            raise ProfileNotFoundError(str(account_id))

        logger.info(f"Account type selected for {account_id}: {account_type.value}")
        return Profile.from_db_row(row)

    @staticmethod
    def set_role(admin: Actor, account_id: UUID | str, role: Role) -> Profile:
        """
        Administrative role change.

        Takes effect on the target's next request; already-rendered pages
        are not revoked.

        Raises:
            AdminRequiredError: If the acting profile is not an admin
            ProfileNotFoundError: If the target has no profile row
        """
        if admin.role is not Role.ADMIN:
            raise AdminRequiredError()

        row = SupabaseClient.update_profile(
            account_id,
            {"account_role": role.value, "role": role.value},
        )
        if not row:
            raise ProfileNotFoundError(str(account_id))

        logger.info(f"Admin {admin.account_id} set role of {account_id} to {role.value}")
        return Profile.from_db_row(row)

    @staticmethod
    def delete_account(account_id: UUID | str) -> None:
        """Delete the identity; the database cascades everything it owns."""
        ProfileService.get_profile(account_id)
        SupabaseClient.delete_auth_user(account_id)
        logger.info(f"Deleted account {account_id}")
