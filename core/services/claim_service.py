# =============================================================================
# core/services/claim_service.py - Ownership Claim Workflow
# =============================================================================
# A business account asks to be associated with a listing by submitting a
# claim; an administrator approves or rejects it; the claimant may cancel
# while it is still pending.
#
# Claim lifecycle:
#   pending -> approved   (admin; creates the business_owners link)
#   pending -> rejected   (admin; optional reason)
#   pending -> cancelled  (claimant)
#
# Every transition is a conditional update on status = 'pending', so two
# reviewers racing on one claim cannot both succeed.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import utc_now_iso
from core.access.classifier import Actor
from core.models.account import Role
from core.models.ownership import Claim, ClaimantRole, ClaimCreate, ClaimStatus, OwnershipLink
from app.exceptions import (
    AdminRequiredError,
    AlreadyOwnerError,
    BusinessAccountRequiredError,
    BusinessNotFoundError,
    ClaimAlreadyProcessedError,
    ClaimNotFoundError,
    DuplicateClaimError,
)

logger = logging.getLogger(__name__)

CLAIM_NOTIFICATION_TYPE = "claim_status_changed"
LISTING_DASHBOARD_PATH = "/my-businesses/businesses/{business_id}"


def _require_admin(actor: Actor) -> None:
    if actor.role is not Role.ADMIN:
        raise AdminRequiredError()


class ClaimService:
    """
    Service for ownership claims.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Claimant operations
    # -------------------------------------------------------------------------

    @staticmethod
    def submit_claim(actor: Actor, claim: ClaimCreate) -> Claim:
        """
        Submit a claim on a business.

        Args:
            actor: The claimant (must be a business account)
            claim: Claim details; business_id may be a UUID or a slug

        Returns:
            The created pending claim

        Raises:
            BusinessAccountRequiredError: If the actor isn't a business account
            BusinessNotFoundError: If the business doesn't resolve
            AlreadyOwnerError: If the actor already owns the business
            DuplicateClaimError: If a pending claim already exists
        """
        if actor.role is not Role.BUSINESS_OWNER:
            raise BusinessAccountRequiredError()

        business = SupabaseClient.fetch_business(claim.business_id)
        if not business:
            raise BusinessNotFoundError(claim.business_id)
        business_id = str(business["id"])

        if SupabaseClient.fetch_owner_link(business_id, actor.account_id):
            raise AlreadyOwnerError(business_id)

        pending = SupabaseClient.fetch_claims(
            user_id=actor.account_id,
            business_id=business_id,
            status=ClaimStatus.PENDING.value,
            limit=1,
        )
        if pending:
            raise DuplicateClaimError(business_id)

        now = utc_now_iso()
        try:
            row = SupabaseClient.insert_claim({
                "business_id": business_id,
                "user_id": str(actor.account_id),
                "status": ClaimStatus.PENDING.value,
                "verification_method": claim.verification_method.value,
                "verification_data": claim.verification_data(),
                "requested_at": now,
            })
        except SupabaseClientError as e:
            # Partial unique index on (business_id, user_id) where pending
            if e.is_unique_violation:
                raise DuplicateClaimError(business_id)
            raise

        try:
            SupabaseClient.update_business(business_id, {"owner_verification_requested_at": now})
        except SupabaseClientError as e:
            logger.warning(f"Could not stamp verification request on business {business_id}: {e}")

        logger.info(f"Claim {row.get('id')} submitted by {actor.account_id} for business {business_id}")
        return Claim.from_db_row(row)

    @staticmethod
    def cancel_claim(actor: Actor, claim_id: UUID | str) -> Claim:
        """
        Withdraw a pending claim.

        Claims made by someone else are reported as not found.

        Raises:
            ClaimNotFoundError: If the claim doesn't exist or isn't the actor's
            ClaimAlreadyProcessedError: If the claim is no longer pending
        """
        current = ClaimService._get_claim(claim_id)
        if str(current.user_id) != str(actor.account_id):
            raise ClaimNotFoundError(str(claim_id))

        updated = ClaimService._transition(current, ClaimStatus.CANCELLED, {})
        logger.info(f"Claim {claim_id} cancelled by claimant {actor.account_id}")
        return updated

    @staticmethod
    def list_claims_for_user(actor: Actor) -> list[Claim]:
        """All claims the actor has made, newest first."""
        rows = SupabaseClient.fetch_claims(user_id=actor.account_id)
        return [Claim.from_db_row(row) for row in rows]

    # -------------------------------------------------------------------------
    # Administrator operations
    # -------------------------------------------------------------------------

    @staticmethod
    def list_pending_claims(admin: Actor, limit: int = 100) -> list[Claim]:
        """Pending claims awaiting review, newest first."""
        _require_admin(admin)
        rows = SupabaseClient.fetch_claims(status=ClaimStatus.PENDING.value, limit=limit)
        return [Claim.from_db_row(row) for row in rows]

    @staticmethod
    def approve_claim(admin: Actor, claim_id: UUID | str) -> Claim:
        """
        Approve a pending claim and create the ownership link.

        Raises:
            AdminRequiredError: If the actor isn't an administrator
            ClaimNotFoundError: If the claim doesn't exist
            ClaimAlreadyProcessedError: If the claim is no longer pending
            SupabaseClientError: If the owner link can't be written; the
                claim is put back to pending so the approval can be retried
        """
        _require_admin(admin)
        current = ClaimService._get_claim(claim_id)

        updated = ClaimService._transition(
            current,
            ClaimStatus.APPROVED,
            {"reviewed_at": utc_now_iso(), "reviewed_by": str(admin.account_id)},
        )

        business_id = str(updated.business_id)
        claimant_id = str(updated.user_id)
        claimant_role = updated.verification_data.get("role")
        if claimant_role not in {r.value for r in ClaimantRole}:
            claimant_role = ClaimantRole.OWNER

        link = OwnershipLink(
            business_id=updated.business_id,
            user_id=updated.user_id,
            role=claimant_role,
            verified_at=updated.reviewed_at or utc_now_iso(),
            verified_by=admin.account_id,
        )
        try:
            SupabaseClient.upsert_owner_link(link.model_dump(mode="json"))
        except SupabaseClientError as e:
            # A claim is never left approved without its link
            logger.error(f"Owner link for claim {claim_id} failed, returning it to pending: {e}")
            SupabaseClient.transition_claim(
                updated.id,
                ClaimStatus.APPROVED.value,
                {"status": ClaimStatus.PENDING.value, "reviewed_at": None, "reviewed_by": None},
            )
            raise

        try:
            SupabaseClient.update_business(
                business_id,
                {"owner_id": claimant_id, "owner_verified": True},
            )
        except SupabaseClientError as e:
            logger.warning(f"Could not mark business {business_id} as owner-verified: {e}")

        ClaimService._notify(
            updated,
            title="Business claim approved",
            message="Your claim was approved. You can now manage this business.",
        )

        logger.info(f"Claim {claim_id} approved by {admin.account_id}: {claimant_id} owns {business_id}")
        return updated

    @staticmethod
    def reject_claim(admin: Actor, claim_id: UUID | str, reason: str | None = None) -> Claim:
        """
        Reject a pending claim.

        Raises:
            AdminRequiredError: If the actor isn't an administrator
            ClaimNotFoundError: If the claim doesn't exist
            ClaimAlreadyProcessedError: If the claim is no longer pending
        """
        _require_admin(admin)
        current = ClaimService._get_claim(claim_id)

        changes: dict[str, Any] = {
            "reviewed_at": utc_now_iso(),
            "reviewed_by": str(admin.account_id),
        }
        if reason:
            changes["rejection_reason"] = reason

        updated = ClaimService._transition(current, ClaimStatus.REJECTED, changes)

        message = "Your claim was not approved."
        if reason:
            message = f"{message} Reason: {reason}"
        ClaimService._notify(updated, title="Business claim rejected", message=message)

        logger.info(f"Claim {claim_id} rejected by {admin.account_id}")
        return updated

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def _get_claim(claim_id: UUID | str) -> Claim:
        row = SupabaseClient.fetch_claim(claim_id)
        if not row:
            raise ClaimNotFoundError(str(claim_id))
        return Claim.from_db_row(row)

    @staticmethod
    def _transition(current: Claim, target: ClaimStatus, changes: dict[str, Any]) -> Claim:
        """Move a claim out of pending, or raise if it already left."""
        if not current.status.can_transition(target):
            raise ClaimAlreadyProcessedError(str(current.id), current.status.value)

        row = SupabaseClient.transition_claim(
            current.id,
            ClaimStatus.PENDING.value,
            {**changes, "status": target.value},
        )
        if row is None:
            # Another reviewer got there first; report what it became
            latest = SupabaseClient.fetch_claim(current.id)
            status = latest.get("status", "unknown") if latest else "unknown"
            raise ClaimAlreadyProcessedError(str(current.id), status)

        return Claim.from_db_row(row)

    @staticmethod
    def _notify(claim: Claim, title: str, message: str) -> None:
        try:
            SupabaseClient.insert_notification({
                "user_id": str(claim.user_id),
                "type": CLAIM_NOTIFICATION_TYPE,
                "title": title,
                "message": message,
                "link": LISTING_DASHBOARD_PATH.format(business_id=claim.business_id),
                "data": {"claim_id": str(claim.id), "status": claim.status.value},
            })
        except SupabaseClientError as e:
            logger.warning(f"Claim {claim.id} notification not delivered: {e}")
