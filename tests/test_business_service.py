# =============================================================================
# tests/test_business_service.py - Owner Listing Mutation Tests
# =============================================================================
# Run with: poetry run pytest tests/test_business_service.py -v
# =============================================================================

from unittest.mock import patch

import pytest

from app.exceptions import PermissionDeniedError
from core.models.ownership import BusinessUpdate
from core.services.business_service import BusinessService
from lib.supabase_client import SupabaseClientError

from tests.conftest import BUSINESS_ID

TOKEN = "user-access-token"


@pytest.fixture
def db():
    with patch("core.services.business_service.SupabaseClient") as mock:
        yield mock


@pytest.fixture
def owns():
    with patch(
        "core.services.business_service.OwnershipService.require_owner",
        return_value=BUSINESS_ID,
    ) as mock:
        yield mock


@pytest.fixture
def does_not_own():
    with patch(
        "core.services.business_service.OwnershipService.require_owner",
        side_effect=PermissionDeniedError(),
    ) as mock:
        yield mock


class TestUpdateBusiness:
    """Tests for update_business()."""

    def test_owner_updates_through_user_client(self, db, owns, owner_actor, business_row):
        db.update_business.return_value = {**business_row, "name": "Corner Cafe & Bakery"}

        row = BusinessService.update_business(
            owner_actor, "the-corner-cafe", BusinessUpdate(name="Corner Cafe & Bakery"), TOKEN
        )

        db.for_user.assert_called_once_with(TOKEN)
        db.update_business.assert_called_once_with(
            BUSINESS_ID, {"name": "Corner Cafe & Bakery"}, client=db.for_user.return_value
        )
        assert row["name"] == "Corner Cafe & Bakery"

    def test_non_owner_denied_before_write(self, db, does_not_own, owner_actor):
        with pytest.raises(PermissionDeniedError):
            BusinessService.update_business(owner_actor, BUSINESS_ID, BusinessUpdate(name="x"), TOKEN)
        db.update_business.assert_not_called()

    def test_revoked_between_check_and_write(self, db, owns, owner_actor):
        """RLS hides the row, so the update matches nothing."""
        db.update_business.return_value = None

        with pytest.raises(PermissionDeniedError):
            BusinessService.update_business(owner_actor, BUSINESS_ID, BusinessUpdate(name="x"), TOKEN)

    def test_rls_refusal_is_permission_denied(self, db, owns, owner_actor):
        db.update_business.side_effect = SupabaseClientError("denied", db_code="42501")

        with pytest.raises(PermissionDeniedError):
            BusinessService.update_business(owner_actor, BUSINESS_ID, BusinessUpdate(name="x"), TOKEN)

    def test_empty_update_writes_nothing(self, db, owns, owner_actor, business_row):
        db.fetch_business.return_value = business_row

        row = BusinessService.update_business(owner_actor, BUSINESS_ID, BusinessUpdate(), TOKEN)

        db.update_business.assert_not_called()
        assert row == business_row


class TestDeleteBusiness:
    """Tests for delete_business()."""

    def test_owner_deletes(self, db, owns, owner_actor):
        db.delete_business.return_value = True

        BusinessService.delete_business(owner_actor, BUSINESS_ID, TOKEN)

        db.delete_business.assert_called_once_with(BUSINESS_ID, client=db.for_user.return_value)

    def test_nothing_deleted_is_denied(self, db, owns, owner_actor):
        db.delete_business.return_value = False

        with pytest.raises(PermissionDeniedError):
            BusinessService.delete_business(owner_actor, BUSINESS_ID, TOKEN)

    def test_non_owner_denied(self, db, does_not_own, owner_actor):
        with pytest.raises(PermissionDeniedError):
            BusinessService.delete_business(owner_actor, BUSINESS_ID, TOKEN)
        db.delete_business.assert_not_called()
