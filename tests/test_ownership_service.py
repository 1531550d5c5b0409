# =============================================================================
# tests/test_ownership_service.py - Ownership Verification Tests
# =============================================================================
# Run with: poetry run pytest tests/test_ownership_service.py -v
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import AdminRequiredError, PermissionDeniedError
from core.models.ownership import OwnershipState
from core.services.ownership_service import OwnershipService
from lib.supabase_client import SupabaseClientError

from tests.conftest import BUSINESS_ID, OWNER_ID


@pytest.fixture
def db():
    with patch("core.services.ownership_service.SupabaseClient") as mock:
        yield mock


@pytest.fixture
def owner_link():
    return {"business_id": BUSINESS_ID, "user_id": OWNER_ID, "role": "owner"}


class TestIsOwner:
    """is_owner() answers True only for an existing link."""

    def test_owner(self, db, business_row, owner_link):
        db.fetch_business.return_value = business_row
        db.fetch_owner_link.return_value = owner_link

        assert OwnershipService.is_owner(OWNER_ID, BUSINESS_ID) is True
        db.fetch_owner_link.assert_called_once_with(BUSINESS_ID, OWNER_ID)

    def test_slug_is_resolved_first(self, db, business_row, owner_link):
        db.fetch_business.return_value = business_row
        db.fetch_owner_link.return_value = owner_link

        assert OwnershipService.is_owner(OWNER_ID, "the-corner-cafe") is True
        db.fetch_business.assert_called_once_with("the-corner-cafe")
        db.fetch_owner_link.assert_called_once_with(BUSINESS_ID, OWNER_ID)

    def test_no_link(self, db, business_row):
        db.fetch_business.return_value = business_row
        db.fetch_owner_link.return_value = None

        assert OwnershipService.is_owner(OWNER_ID, BUSINESS_ID) is False

    def test_unknown_business(self, db):
        db.fetch_business.return_value = None

        assert OwnershipService.is_owner(OWNER_ID, "no-such-place") is False
        db.fetch_owner_link.assert_not_called()

    @pytest.mark.parametrize("profile_id,business_id", [
        (None, BUSINESS_ID),
        (OWNER_ID, None),
        ("", ""),
    ])
    def test_missing_arguments(self, db, profile_id, business_id):
        assert OwnershipService.is_owner(profile_id, business_id) is False
        db.fetch_business.assert_not_called()

    def test_database_error_is_false(self, db, business_row):
        db.fetch_business.return_value = business_row
        db.fetch_owner_link.side_effect = SupabaseClientError("timeout")

        assert OwnershipService.is_owner(OWNER_ID, BUSINESS_ID) is False


class TestRequireOwner:
    """Tests for require_owner()."""

    def test_returns_business_id(self, db, business_row, owner_link):
        db.fetch_business.return_value = business_row
        db.fetch_owner_link.return_value = owner_link

        assert OwnershipService.require_owner(OWNER_ID, "the-corner-cafe") == BUSINESS_ID

    def test_non_owner_denied(self, db, business_row):
        db.fetch_business.return_value = business_row
        db.fetch_owner_link.return_value = None

        with pytest.raises(PermissionDeniedError) as exc_info:
            OwnershipService.require_owner(OWNER_ID, BUSINESS_ID)

        # No ownership detail leaks to the client
        assert exc_info.value.details == {}


class TestListOwnedBusinesses:
    """Tests for list_owned_businesses()."""

    def test_deduplicates(self, db, business_row):
        db.fetch_owned_businesses.return_value = [business_row, business_row]

        businesses = OwnershipService.list_owned_businesses(OWNER_ID)

        assert len(businesses) == 1
        assert businesses[0].slug == "the-corner-cafe"


class TestOwnershipSummary:
    """The dashboard tells an empty account apart from a rejected claim."""

    def test_owner(self, db, business_row):
        db.fetch_owned_businesses.return_value = [business_row]
        db.fetch_claims.return_value = []

        assert OwnershipService.ownership_summary(OWNER_ID).state is OwnershipState.OWNER

    def test_pending_claim(self, db, pending_claim_row):
        db.fetch_owned_businesses.return_value = []
        db.fetch_claims.return_value = [pending_claim_row]

        summary = OwnershipService.ownership_summary(OWNER_ID)

        assert summary.state is OwnershipState.CLAIM_PENDING
        assert len(summary.claims) == 1

    def test_rejected_claim(self, db, pending_claim_row):
        db.fetch_owned_businesses.return_value = []
        db.fetch_claims.return_value = [{**pending_claim_row, "status": "rejected"}]

        assert OwnershipService.ownership_summary(OWNER_ID).state is OwnershipState.CLAIM_REJECTED

    def test_nothing_yet(self, db, pending_claim_row):
        db.fetch_owned_businesses.return_value = []
        db.fetch_claims.return_value = [{**pending_claim_row, "status": "cancelled"}]

        summary = OwnershipService.ownership_summary(OWNER_ID)

        assert summary.state is OwnershipState.NO_BUSINESSES
        assert summary.businesses == []


class TestRevokeOwnership:
    """Tests for revoke_ownership()."""

    def test_admin_revokes(self, db, admin_actor):
        db.delete_owner_link.return_value = True

        assert OwnershipService.revoke_ownership(admin_actor, BUSINESS_ID, OWNER_ID) is True
        db.delete_owner_link.assert_called_once_with(BUSINESS_ID, OWNER_ID)

    def test_non_admin_refused(self, db, owner_actor):
        with pytest.raises(AdminRequiredError):
            OwnershipService.revoke_ownership(owner_actor, BUSINESS_ID, OWNER_ID)
        db.delete_owner_link.assert_not_called()
