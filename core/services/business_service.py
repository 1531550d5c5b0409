# =============================================================================
# core/services/business_service.py - Owner Listing Mutations
# =============================================================================
# Edits and deletions of a listing by its owner.
#
# Ownership is re-checked here on every call even though the page that
# issued the request was already gated by the access middleware: the link
# may have been revoked in between. Writes then go through a user-scoped
# client, so row-level security has the final word.
# =============================================================================

import logging
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from core.access.classifier import Actor
from core.models.ownership import BusinessUpdate
from core.services.ownership_service import OwnershipService
from app.exceptions import PermissionDeniedError

logger = logging.getLogger(__name__)


class BusinessService:
    """Service for owner-side listing management."""

    @staticmethod
    def update_business(
        actor: Actor,
        business_identifier: UUID | str,
        update: BusinessUpdate,
        access_token: str,
    ) -> dict:
        """
        Update editable listing fields.

        Args:
            actor: The acting profile
            business_identifier: Business UUID or slug
            update: Fields to change
            access_token: The caller's JWT, used for the RLS-scoped write

        Raises:
            PermissionDeniedError: If the actor doesn't own the business, or
                the database refuses the write
        """
        business_id = OwnershipService.require_owner(actor.account_id, business_identifier)

        changes = update.changes()
        if not changes:
            return SupabaseClient.fetch_business(business_id) or {"id": business_id}

        client = SupabaseClient.for_user(access_token)
        try:
            row = SupabaseClient.update_business(business_id, changes, client=client)
        except SupabaseClientError as e:
            if e.is_permission_denied:
                logger.warning(f"RLS refused update of {business_id} by {actor.account_id}")
                raise PermissionDeniedError()
            raise

        if row is None:
            logger.warning(f"Update of {business_id} by {actor.account_id} matched no visible row")
            raise PermissionDeniedError()

        logger.info(f"Business {business_id} updated by {actor.account_id}: {sorted(changes)}")
        return row

    @staticmethod
    def delete_business(actor: Actor, business_identifier: UUID | str, access_token: str) -> None:
        """
        Delete a listing. Ownership links and claims cascade.

        Raises:
            PermissionDeniedError: If the actor doesn't own the business, or
                the database refuses the delete
        """
        business_id = OwnershipService.require_owner(actor.account_id, business_identifier)

        client = SupabaseClient.for_user(access_token)
        try:
            deleted = SupabaseClient.delete_business(business_id, client=client)
        except SupabaseClientError as e:
            if e.is_permission_denied:
                logger.warning(f"RLS refused delete of {business_id} by {actor.account_id}")
                raise PermissionDeniedError()
            raise

        if not deleted:
            raise PermissionDeniedError()

        logger.info(f"Business {business_id} deleted by {actor.account_id}")
