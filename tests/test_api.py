# =============================================================================
# tests/test_api.py - API Route Tests
# =============================================================================
# Route-level checks: guards answer the right status codes and errors are
# rendered as {"detail", "code"} JSON.
#
# Run with: poetry run pytest tests/test_api.py -v
# =============================================================================

import inspect
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from app.main import app

from tests.conftest import ADMIN_ID, BUSINESS_ID, CLAIM_ID, OWNER_ID, USER_ID


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def profiles():
    with patch("core.services.profile_service.SupabaseClient") as mock:
        yield mock


@pytest.fixture
def claims_db():
    with patch("core.services.claim_service.SupabaseClient") as mock:
        yield mock


def _auth(token):
    return {"Authorization": f"Bearer {token}"}


class TestAuthRoutes:
    """Tests for /api/v1/auth."""

    def test_me_requires_token(self, client):
        response = client.get("/api/v1/auth/me")
        assert response.status_code in (401, 403)

    def test_me_returns_home(self, client, profiles, make_token, owner_profile_row):
        profiles.fetch_profile.return_value = owner_profile_row

        response = client.get("/api/v1/auth/me", headers=_auth(make_token(sub=OWNER_ID)))

        assert response.status_code == 200
        body = response.json()
        assert body["role"] == "business_owner"
        assert body["home_path"] == "/my-businesses"

    def test_me_points_new_users_at_onboarding(self, client, profiles, make_token, new_user_profile_row):
        profiles.fetch_profile.return_value = new_user_profile_row

        response = client.get("/api/v1/auth/me", headers=_auth(make_token(sub=USER_ID)))

        assert response.json()["home_path"] == "/interests"

    def test_me_without_profile(self, client, profiles, make_token):
        profiles.fetch_profile.return_value = None

        response = client.get("/api/v1/auth/me", headers=_auth(make_token(sub=USER_ID)))

        assert response.status_code == 404
        assert response.json()["code"] == "PROFILE_NOT_FOUND"

    def test_verify(self, client, make_token):
        response = client.get("/api/v1/auth/verify", headers=_auth(make_token(sub=USER_ID)))

        assert response.json()["valid"] is True

    def test_expired_token(self, client, make_token):
        response = client.get("/api/v1/auth/verify", headers=_auth(make_token(expires_in=-10)))

        assert response.status_code == 401


class TestAccessRoute:
    """Tests for GET /api/v1/access."""

    def test_anonymous(self, client):
        response = client.get("/api/v1/access", params={"path": "/saved"})

        assert response.json() == {
            "allowed": False,
            "redirect_to": "/login?redirect=/saved",
            "reason": "authentication required",
        }

    def test_unconfirmed_email(self, client, profiles, make_token, user_profile_row):
        profiles.fetch_profile.return_value = user_profile_row

        response = client.get(
            "/api/v1/access",
            params={"path": "/saved"},
            headers=_auth(make_token(sub=USER_ID, user_metadata={"email_verified": False})),
        )

        assert response.json()["redirect_to"] == "/verify-email"

    def test_business_account_on_personal_page(self, client, profiles, make_token, owner_profile_row):
        profiles.fetch_profile.return_value = owner_profile_row

        response = client.get(
            "/api/v1/access",
            params={"path": "/saved"},
            headers=_auth(make_token(sub=OWNER_ID)),
        )

        assert response.json()["redirect_to"] == "/my-businesses"


class TestProfileRoutes:
    """Tests for /api/v1/profile."""

    def test_role_cannot_be_patched(self, client, profiles, make_token):
        response = client.patch(
            "/api/v1/profile",
            json={"role": "admin"},
            headers=_auth(make_token(sub=USER_ID)),
        )

        assert response.status_code == 422
        profiles.update_profile.assert_not_called()

    def test_account_type_locked(self, client, profiles, make_token, user_profile_row):
        profiles.fetch_profile.return_value = user_profile_row

        response = client.post(
            "/api/v1/profile/account-type",
            json={"account_type": "business_owner"},
            headers=_auth(make_token(sub=USER_ID)),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "ROLE_LOCKED"


class TestOnboardingRoutes:
    """Tests for /api/v1/onboarding."""

    def test_skip_ahead_is_conflict(self, client, profiles, make_token, new_user_profile_row):
        profiles.fetch_profile.return_value = new_user_profile_row

        response = client.post(
            "/api/v1/onboarding/deal-breakers",
            headers=_auth(make_token(sub=USER_ID)),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "ONBOARDING_STEP_OUT_OF_ORDER"

    def test_unknown_step(self, client, make_token):
        response = client.post("/api/v1/onboarding/welcome", headers=_auth(make_token(sub=USER_ID)))

        assert response.status_code == 422


class TestClaimRoutes:
    """Tests for /api/v1/claims and /api/v1/admin/claims."""

    def test_personal_account_cannot_claim(self, client, profiles, make_token, user_profile_row):
        profiles.fetch_profile.return_value = user_profile_row

        response = client.post(
            "/api/v1/claims",
            json={"business_id": BUSINESS_ID, "email": "a@b.co"},
            headers=_auth(make_token(sub=USER_ID)),
        )

        assert response.status_code == 403
        assert response.json()["code"] == "BUSINESS_ACCOUNT_REQUIRED"

    def test_claim_needs_contact(self, client, profiles, make_token, owner_profile_row):
        profiles.fetch_profile.return_value = owner_profile_row

        response = client.post(
            "/api/v1/claims",
            json={"business_id": BUSINESS_ID},
            headers=_auth(make_token(sub=OWNER_ID)),
        )

        assert response.status_code == 422

    def test_submit(self, client, profiles, claims_db, make_token,
                    owner_profile_row, business_row, pending_claim_row):
        profiles.fetch_profile.return_value = owner_profile_row
        claims_db.fetch_business.return_value = business_row
        claims_db.fetch_owner_link.return_value = None
        claims_db.fetch_claims.return_value = []
        claims_db.insert_claim.return_value = pending_claim_row

        response = client.post(
            "/api/v1/claims",
            json={"business_id": "the-corner-cafe", "email": "hello@cornercafe.co.za"},
            headers=_auth(make_token(sub=OWNER_ID)),
        )

        assert response.status_code == 201
        assert response.json()["status"] == "pending"

    def test_non_admin_cannot_approve(self, client, profiles, claims_db, make_token, owner_profile_row):
        """A business account can't approve its own claim."""
        profiles.fetch_profile.return_value = owner_profile_row

        response = client.post(
            f"/api/v1/admin/claims/{CLAIM_ID}/approve",
            headers=_auth(make_token(sub=OWNER_ID)),
        )

        assert response.status_code == 403
        assert response.json()["code"] == "ADMIN_REQUIRED"
        claims_db.transition_claim.assert_not_called()

    def test_admin_approves(self, client, profiles, claims_db, make_token,
                            admin_profile_row, pending_claim_row):
        profiles.fetch_profile.return_value = admin_profile_row
        claims_db.fetch_claim.return_value = pending_claim_row
        claims_db.transition_claim.return_value = {**pending_claim_row, "status": "approved"}

        response = client.post(
            f"/api/v1/admin/claims/{CLAIM_ID}/approve",
            headers=_auth(make_token(sub=ADMIN_ID)),
        )

        assert response.status_code == 200
        assert response.json()["status"] == "approved"

    def test_second_approval_conflicts(self, client, profiles, claims_db, make_token,
                                       admin_profile_row, pending_claim_row):
        profiles.fetch_profile.return_value = admin_profile_row
        claims_db.fetch_claim.return_value = {**pending_claim_row, "status": "approved"}

        response = client.post(
            f"/api/v1/admin/claims/{CLAIM_ID}/approve",
            headers=_auth(make_token(sub=ADMIN_ID)),
        )

        assert response.status_code == 409
        assert response.json()["code"] == "CLAIM_ALREADY_PROCESSED"


class TestBusinessRoutes:
    """Tests for /api/v1/businesses."""

    def test_non_owner_edit_is_forbidden(self, client, profiles, make_token, owner_profile_row, business_row):
        profiles.fetch_profile.return_value = owner_profile_row

        with patch("core.services.ownership_service.SupabaseClient") as ownership_db, \
                patch("core.services.business_service.SupabaseClient") as business_db:
            ownership_db.fetch_business.return_value = business_row
            ownership_db.fetch_owner_link.return_value = None

            response = client.patch(
                f"/api/v1/businesses/{BUSINESS_ID}",
                json={"name": "Mine Now"},
                headers=_auth(make_token(sub=OWNER_ID)),
            )

        assert response.status_code == 403
        assert response.json()["code"] == "PERMISSION_DENIED"
        business_db.update_business.assert_not_called()

    def test_personal_account_has_no_businesses(self, client, profiles, make_token, user_profile_row):
        profiles.fetch_profile.return_value = user_profile_row

        response = client.get("/api/v1/businesses/mine", headers=_auth(make_token(sub=USER_ID)))

        assert response.status_code == 403


class TestHandlerKinds:
    """Handlers that reach the database run in the threadpool."""

    def test_database_handlers_are_sync(self):
        from app.routers import access, admin, businesses, claims, onboarding, profile

        handlers = [
            access.check_access,
            admin.approve_claim,
            admin.reject_claim,
            businesses.list_my_businesses,
            businesses.update_business,
            claims.submit_claim,
            claims.cancel_claim,
            onboarding.complete_onboarding_step,
            profile.update_profile,
        ]
        for handler in handlers:
            assert not inspect.iscoroutinefunction(handler), handler.__name__
