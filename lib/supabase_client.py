# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It keeps one service-role client for server-side reads and hands out
# user-scoped clients (anon key + the caller's JWT) for owner mutations, so
# row-level security stays in force as a second enforcement layer.
#
# Tables used:
# - profiles: one row per identity (role, onboarding state)
# - businesses: listings
# - business_owners: approved ownership links
# - business_ownership_requests: claims
# - notifications: in-app notifications
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   profile = SupabaseClient.fetch_profile(account_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import Client, create_client

from app.config import settings
from lib.utils import ApplicationError, is_uuid, normalize_uuid

# Set up logging for this module
logger = logging.getLogger(__name__)

# Postgres error codes surfaced through PostgREST
UNIQUE_VIOLATION = "23505"
INSUFFICIENT_PRIVILEGE = "42501"

BUSINESS_SUMMARY_COLUMNS = "id, name, slug, status, owner_id, owner_verified"


class SupabaseClientError(ApplicationError):
    """
    Error during Supabase operations.

    `db_code` carries the Postgres/PostgREST error code when there is one,
    so services can map unique violations and RLS denials to domain errors.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        db_code: str | None = None,
    ):
        super().__init__(message, code=code, suggestion=suggestion, details=details)
        self.db_code = db_code

    @property
    def is_unique_violation(self) -> bool:
        return self.db_code == UNIQUE_VIOLATION

    @property
    def is_permission_denied(self) -> bool:
        return self.db_code == INSUFFICIENT_PRIVILEGE


def _db_code(error: Exception) -> str | None:
    """PostgREST APIError exposes the Postgres code as `.code`."""
    code = getattr(error, "code", None)
    return str(code) if code is not None else None


def _first(response: Any) -> dict[str, Any] | None:
    rows = getattr(response, "data", None) or []
    return rows[0] if rows else None


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern for the service-role client. All methods
    are class methods for easy access without instantiation. Methods that
    mutate owner data accept an optional `client` so callers can pass a
    user-scoped client from `for_user()`.

    Example:
        profile = SupabaseClient.fetch_profile("550e8400-...")
        link = SupabaseClient.fetch_owner_link(business_id, profile_id)
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        Only use it for reads and for administrator-driven writes.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def for_user(cls, access_token: str) -> Client:
        """
        Create a client that acts as the signed-in user.

        Queries made through it are subject to the project's RLS policies,
        exactly as if the browser had made them.
        """
        try:
            client = create_client(settings.SUPABASE_URL, settings.SUPABASE_ANON_KEY)
            client.postgrest.auth(access_token)
            return client
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to create user-scoped Supabase client: {e}",
                code="USER_CLIENT_INIT_FAILED",
                suggestion="Check SUPABASE_URL and SUPABASE_ANON_KEY in your .env file"
            )

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        return normalize_uuid(uuid_value)

    # -------------------------------------------------------------------------
    # Profiles
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_profile(cls, account_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch the profile row of an identity.

        Returns:
            Profile dict, or None if the identity has no profile yet

        Raises:
            SupabaseClientError: If query fails
        """
        client = cls.get_client()
        account_id_str = cls._normalize_uuid(account_id)

        try:
            response = (
                client.table("profiles")
                .select(
                    "user_id, account_role, role, onboarding_step, onboarding_complete, "
                    "display_name, username, avatar_url"
                )
                .eq("user_id", account_id_str)
                .limit(1)
                .execute()
            )
            return _first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch profile: {e}",
                code="FETCH_PROFILE_FAILED",
                details={"account_id": account_id_str},
                db_code=_db_code(e),
            )

    @classmethod
    def update_profile(
        cls,
        account_id: str | UUID,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update profile columns.

        Returns:
            Updated profile dict, or None if no row matched

        Raises:
            SupabaseClientError: If update fails
        """
        client = cls.get_client()
        account_id_str = cls._normalize_uuid(account_id)

        try:
            response = (
                client.table("profiles")
                .update(data)
                .eq("user_id", account_id_str)
                .execute()
            )
            return _first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update profile: {e}",
                code="UPDATE_PROFILE_FAILED",
                details={"account_id": account_id_str, "fields": sorted(data)},
                db_code=_db_code(e),
            )

    @classmethod
    def delete_auth_user(cls, account_id: str | UUID) -> None:
        """
        Delete an identity through the Auth admin API.

        The database cascades the profile, ownership links and claims.
        """
        client = cls.get_client()
        account_id_str = cls._normalize_uuid(account_id)

        try:
            client.auth.admin.delete_user(account_id_str)
            logger.info(f"Deleted auth user: {account_id_str}")
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete account: {e}",
                code="DELETE_ACCOUNT_FAILED",
                details={"account_id": account_id_str},
            )

    # -------------------------------------------------------------------------
    # Businesses
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_business(cls, identifier: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a business by UUID or by slug.

        Slugs only resolve to active listings.

        Returns:
            Business summary dict, or None if not found
        """
        client = cls.get_client()
        identifier_str = cls._normalize_uuid(identifier)

        try:
            query = client.table("businesses").select(BUSINESS_SUMMARY_COLUMNS)
            if is_uuid(identifier_str):
                query = query.eq("id", identifier_str)
            else:
                query = query.eq("slug", identifier_str).eq("status", "active")

            return _first(query.limit(1).execute())

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch business: {e}",
                code="FETCH_BUSINESS_FAILED",
                suggestion="Check that the business id or slug exists",
                details={"business": identifier_str},
                db_code=_db_code(e),
            )

    @classmethod
    def update_business(
        cls,
        business_id: str | UUID,
        data: dict[str, Any],
        client: Client | None = None,
    ) -> dict[str, Any] | None:
        """
        Update listing columns.

        Returns:
            Updated business dict, or None when no row was visible/updated
            (with a user-scoped client, RLS hides rows the caller can't edit)
        """
        client = client or cls.get_client()
        business_id_str = cls._normalize_uuid(business_id)

        try:
            response = (
                client.table("businesses")
                .update(data)
                .eq("id", business_id_str)
                .execute()
            )
            return _first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update business: {e}",
                code="UPDATE_BUSINESS_FAILED",
                details={"business_id": business_id_str},
                db_code=_db_code(e),
            )

    @classmethod
    def delete_business(
        cls,
        business_id: str | UUID,
        client: Client | None = None,
    ) -> bool:
        """
        Delete a listing. Ownership links and claims cascade.

        Returns:
            True if a row was deleted
        """
        client = client or cls.get_client()
        business_id_str = cls._normalize_uuid(business_id)

        try:
            response = (
                client.table("businesses")
                .delete()
                .eq("id", business_id_str)
                .execute()
            )
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete business: {e}",
                code="DELETE_BUSINESS_FAILED",
                details={"business_id": business_id_str},
                db_code=_db_code(e),
            )

    # -------------------------------------------------------------------------
    # Ownership Links
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_owner_link(
        cls,
        business_id: str | UUID,
        user_id: str | UUID,
    ) -> dict[str, Any] | None:
        """
        Fetch the ownership link between a profile and a business.

        Returns:
            business_owners row, or None when there is no link
        """
        client = cls.get_client()
        business_id_str = cls._normalize_uuid(business_id)
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("business_owners")
                .select("business_id, user_id, role, verified_at, verified_by")
                .eq("business_id", business_id_str)
                .eq("user_id", user_id_str)
                .limit(1)
                .execute()
            )
            return _first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch ownership link: {e}",
                code="FETCH_OWNER_LINK_FAILED",
                details={"business_id": business_id_str, "user_id": user_id_str},
                db_code=_db_code(e),
            )

    @classmethod
    def fetch_owned_businesses(cls, user_id: str | UUID) -> list[dict[str, Any]]:
        """
        Fetch every business linked to a profile.

        Returns:
            List of business summary dicts (may contain duplicates if the
            join returns the same listing twice; callers dedupe)
        """
        client = cls.get_client()
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("business_owners")
                .select(f"business_id, businesses!inner ({BUSINESS_SUMMARY_COLUMNS})")
                .eq("user_id", user_id_str)
                .execute()
            )

            businesses: list[dict[str, Any]] = []
            for row in response.data or []:
                joined = row.get("businesses")
                # PostgREST returns an object or a list depending on the FK shape
                if isinstance(joined, list):
                    businesses.extend(b for b in joined if b)
                elif joined:
                    businesses.append(joined)
            return businesses

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch owned businesses: {e}",
                code="FETCH_OWNED_BUSINESSES_FAILED",
                details={"user_id": user_id_str},
                db_code=_db_code(e),
            )

    @classmethod
    def upsert_owner_link(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Create (or refresh) an ownership link.

        Conflicts on (business_id, user_id) update the existing row.
        """
        client = cls.get_client()

        try:
            response = (
                client.table("business_owners")
                .upsert(data, on_conflict="business_id,user_id")
                .execute()
            )
            row = _first(response)
            if row is None:
                raise SupabaseClientError(
                    message="Upsert returned no data",
                    code="UPSERT_NO_DATA"
                )
            return row

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to write ownership link: {e}",
                code="UPSERT_OWNER_LINK_FAILED",
                details={
                    "business_id": data.get("business_id"),
                    "user_id": data.get("user_id"),
                },
                db_code=_db_code(e),
            )

    @classmethod
    def delete_owner_link(cls, business_id: str | UUID, user_id: str | UUID) -> bool:
        """
        Remove an ownership link.

        Returns:
            True if a link existed and was removed
        """
        client = cls.get_client()
        business_id_str = cls._normalize_uuid(business_id)
        user_id_str = cls._normalize_uuid(user_id)

        try:
            response = (
                client.table("business_owners")
                .delete()
                .eq("business_id", business_id_str)
                .eq("user_id", user_id_str)
                .execute()
            )
            return bool(response.data)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to delete ownership link: {e}",
                code="DELETE_OWNER_LINK_FAILED",
                details={"business_id": business_id_str, "user_id": user_id_str},
                db_code=_db_code(e),
            )

    # -------------------------------------------------------------------------
    # Claims
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_claim(cls, claim_id: str | UUID) -> dict[str, Any] | None:
        """Fetch a claim by id, or None if it doesn't exist."""
        client = cls.get_client()
        claim_id_str = cls._normalize_uuid(claim_id)

        try:
            response = (
                client.table("business_ownership_requests")
                .select("*")
                .eq("id", claim_id_str)
                .limit(1)
                .execute()
            )
            return _first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch claim: {e}",
                code="FETCH_CLAIM_FAILED",
                details={"claim_id": claim_id_str},
                db_code=_db_code(e),
            )

    @classmethod
    def fetch_claims(
        cls,
        user_id: str | UUID | None = None,
        business_id: str | UUID | None = None,
        status: str | None = None,
        limit: int = 100,
    ) -> list[dict[str, Any]]:
        """
        List claims, newest first.

        Args:
            user_id: Only claims made by this profile
            business_id: Only claims on this business
            status: Only claims in this status
            limit: Maximum rows to return
        """
        client = cls.get_client()

        try:
            query = client.table("business_ownership_requests").select("*")
            if user_id is not None:
                query = query.eq("user_id", cls._normalize_uuid(user_id))
            if business_id is not None:
                query = query.eq("business_id", cls._normalize_uuid(business_id))
            if status is not None:
                query = query.eq("status", status)

            response = query.order("requested_at", desc=True).limit(limit).execute()
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to list claims: {e}",
                code="FETCH_CLAIMS_FAILED",
                details={"user_id": str(user_id), "status": status},
                db_code=_db_code(e),
            )

    @classmethod
    def insert_claim(cls, data: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a new claim.

        Raises:
            SupabaseClientError: If insert fails (unique violations carry
                db_code "23505")
        """
        client = cls.get_client()

        try:
            response = (
                client.table("business_ownership_requests")
                .insert(data)
                .execute()
            )
            row = _first(response)
            if row is None:
                raise SupabaseClientError(
                    message="Insert returned no data",
                    code="INSERT_NO_DATA"
                )
            return row

        except SupabaseClientError:
            raise
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert claim: {e}",
                code="INSERT_CLAIM_FAILED",
                details={"business_id": data.get("business_id")},
                db_code=_db_code(e),
            )

    @classmethod
    def transition_claim(
        cls,
        claim_id: str | UUID,
        from_status: str,
        data: dict[str, Any],
    ) -> dict[str, Any] | None:
        """
        Update a claim only if it is still in `from_status`.

        The status filter makes the transition a compare-and-set: of two
        concurrent reviewers only one sees a row come back.

        Returns:
            Updated claim dict, or None if the claim had already moved on
        """
        client = cls.get_client()
        claim_id_str = cls._normalize_uuid(claim_id)

        try:
            response = (
                client.table("business_ownership_requests")
                .update(data)
                .eq("id", claim_id_str)
                .eq("status", from_status)
                .execute()
            )
            return _first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to update claim: {e}",
                code="UPDATE_CLAIM_FAILED",
                details={"claim_id": claim_id_str, "from_status": from_status},
                db_code=_db_code(e),
            )

    # -------------------------------------------------------------------------
    # Notifications
    # -------------------------------------------------------------------------

    @classmethod
    def insert_notification(cls, data: dict[str, Any]) -> dict[str, Any] | None:
        """Insert an in-app notification row."""
        client = cls.get_client()

        try:
            response = client.table("notifications").insert(data).execute()
            return _first(response)

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert notification: {e}",
                code="INSERT_NOTIFICATION_FAILED",
                details={"user_id": data.get("user_id"), "type": data.get("type")},
                db_code=_db_code(e),
            )
