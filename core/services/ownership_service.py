# =============================================================================
# core/services/ownership_service.py - Ownership Verification
# =============================================================================
# Answers "does profile P control business B" for both the access
# middleware (listing-scoped dashboard pages) and the mutation handlers.
#
# Ownership is security-relevant, so nothing here is cached: every call
# reads the business_owners table. Every failure answers "not an owner".
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient
from core.access.classifier import Actor
from core.models.account import Role
from core.models.ownership import (
    Claim,
    ClaimStatus,
    OwnedBusiness,
    OwnershipState,
    OwnershipSummary,
)
from app.exceptions import AdminRequiredError, PermissionDeniedError

logger = logging.getLogger(__name__)


class OwnershipService:
    """Service for ownership lookups and revocation."""

    @staticmethod
    def resolve_business_id(business_identifier: str | UUID) -> str | None:
        """
        Resolve a UUID or an active listing slug to the business UUID.

        Returns None when the business doesn't exist.

        Raises:
            SupabaseClientError: If the lookup fails
        """
        business = SupabaseClient.fetch_business(business_identifier)
        if not business or not business.get("id"):
            return None
        return str(business["id"])

    @staticmethod
    def is_owner(
        profile_id: UUID | str | None,
        business_identifier: UUID | str | None,
    ) -> bool:
        """
        Check for an approved ownership link.

        Args:
            profile_id: The acting profile's account id
            business_identifier: Business UUID or slug

        Returns:
            True only if an ownership link exists. Missing arguments,
            unknown businesses and lookup errors all return False.
        """
        if not profile_id or not business_identifier:
            return False

        try:
            business_id = OwnershipService.resolve_business_id(business_identifier)
            if business_id is None:
                logger.debug(f"Ownership check on unknown business {business_identifier}")
                return False

            link = SupabaseClient.fetch_owner_link(business_id, profile_id)
            return link is not None

        except Exception as e:
            logger.warning(
                f"Ownership check failed for profile {profile_id} on {business_identifier}, "
                f"treating as non-owner: {e}"
            )
            return False

    @staticmethod
    def require_owner(profile_id: UUID | str | None, business_identifier: UUID | str) -> str:
        """
        Guard for mutation handlers.

        Returns:
            The resolved business UUID

        Raises:
            PermissionDeniedError: If the profile doesn't own the business
        """
        if not OwnershipService.is_owner(profile_id, business_identifier):
            logger.info(f"Denied business mutation: profile {profile_id} on {business_identifier}")
            raise PermissionDeniedError()

        business_id = OwnershipService.resolve_business_id(business_identifier)
        if business_id is None:
            raise PermissionDeniedError()
        return business_id

    @staticmethod
    def list_owned_businesses(profile_id: UUID | str) -> list[OwnedBusiness]:
        """
        Businesses linked to a profile, deduplicated by id.

        Raises:
            SupabaseClientError: If the lookup fails
        """
        rows = SupabaseClient.fetch_owned_businesses(profile_id)

        seen: set[str] = set()
        businesses: list[OwnedBusiness] = []
        for row in rows:
            business_id = str(row.get("id") or "")
            if not business_id or business_id in seen:
                continue
            seen.add(business_id)
            businesses.append(OwnedBusiness(**_business_fields(row)))
        return businesses

    @staticmethod
    def ownership_summary(profile_id: UUID | str) -> OwnershipSummary:
        """
        Owned businesses plus where the profile's claims stand.

        State precedence: owner > claim_pending > claim_rejected >
        no_businesses. Cancelled claims don't count.
        """
        businesses = OwnershipService.list_owned_businesses(profile_id)
        claims = [Claim.from_db_row(row) for row in SupabaseClient.fetch_claims(user_id=profile_id)]
        statuses = {claim.status for claim in claims}

        if businesses:
            state = OwnershipState.OWNER
        elif ClaimStatus.PENDING in statuses:
            state = OwnershipState.CLAIM_PENDING
        elif ClaimStatus.REJECTED in statuses:
            state = OwnershipState.CLAIM_REJECTED
        else:
            state = OwnershipState.NO_BUSINESSES

        return OwnershipSummary(state=state, businesses=businesses, claims=claims)

    @staticmethod
    def revoke_ownership(admin: Actor, business_id: UUID | str, profile_id: UUID | str) -> bool:
        """
        Remove an ownership link.

        Returns:
            True if a link was removed, False if there was none

        Raises:
            AdminRequiredError: If the acting profile is not an admin
        """
        if admin.role is not Role.ADMIN:
            raise AdminRequiredError()

        removed = SupabaseClient.delete_owner_link(business_id, profile_id)
        if removed:
            logger.info(f"Admin {admin.account_id} revoked ownership of {business_id} from {profile_id}")
        return removed


def _business_fields(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": row["id"],
        "name": row.get("name") or "",
        "slug": row.get("slug"),
        "status": row.get("status"),
        "owner_verified": bool(row.get("owner_verified")),
    }
