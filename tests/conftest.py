# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides profile/claim rows shaped like the Supabase tables
# - Mints HS256 access tokens signed with the test JWT secret
# =============================================================================

import os
import time

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret-with-enough-length-for-hs256")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest
from jose import jwt

from core.access import Actor
from core.models.account import OnboardingStep, Role

USER_ID = "11111111-1111-4111-8111-111111111111"
OWNER_ID = "22222222-2222-4222-8222-222222222222"
ADMIN_ID = "33333333-3333-4333-8333-333333333333"
BUSINESS_ID = "44444444-4444-4444-8444-444444444444"
CLAIM_ID = "55555555-5555-4555-8555-555555555555"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def make_token():
    """Factory for Supabase-style access tokens."""
    def _make(sub: str = USER_ID, email: str = "person@example.com", expires_in: int = 3600, **claims):
        now = int(time.time())
        payload = {
            "sub": sub,
            "email": email,
            "aud": "authenticated",
            "role": "authenticated",
            "iat": now,
            "exp": now + expires_in,
            **claims,
        }
        return jwt.encode(payload, os.environ["SUPABASE_JWT_SECRET"], algorithm="HS256")
    return _make


@pytest.fixture
def user_profile_row():
    """Onboarded personal account."""
    return {
        "user_id": USER_ID,
        "account_role": "user",
        "role": "user",
        "onboarding_step": "complete",
        "onboarding_complete": True,
        "display_name": "Thandi",
        "username": "thandi",
        "avatar_url": None,
    }


@pytest.fixture
def new_user_profile_row():
    """Personal account that hasn't started onboarding."""
    return {
        "user_id": USER_ID,
        "account_role": "user",
        "role": "user",
        "onboarding_step": "interests",
        "onboarding_complete": False,
        "display_name": None,
        "username": None,
        "avatar_url": None,
    }


@pytest.fixture
def owner_profile_row():
    """Business account."""
    return {
        "user_id": OWNER_ID,
        "account_role": "business_owner",
        "role": "user",
        "onboarding_step": "complete",
        "onboarding_complete": True,
        "display_name": "Corner Cafe",
        "username": "cornercafe",
        "avatar_url": None,
    }


@pytest.fixture
def admin_profile_row():
    """Operator account."""
    return {
        "user_id": ADMIN_ID,
        "account_role": "admin",
        "role": "admin",
        "onboarding_step": "complete",
        "onboarding_complete": True,
        "display_name": "Ops",
        "username": "ops",
        "avatar_url": None,
    }


@pytest.fixture
def business_row():
    """Active listing."""
    return {
        "id": BUSINESS_ID,
        "name": "The Corner Cafe",
        "slug": "the-corner-cafe",
        "status": "active",
        "owner_id": None,
        "owner_verified": False,
    }


@pytest.fixture
def pending_claim_row():
    """Pending claim by the business account on the listing."""
    return {
        "id": CLAIM_ID,
        "business_id": BUSINESS_ID,
        "user_id": OWNER_ID,
        "status": "pending",
        "verification_method": "email",
        "verification_data": {"role": "owner", "email": "hello@cornercafe.co.za"},
        "requested_at": "2026-10-01T09:00:00+00:00",
        "reviewed_at": None,
        "reviewed_by": None,
        "rejection_reason": None,
    }


@pytest.fixture
def user_actor():
    return Actor(
        account_id=USER_ID,
        role=Role.USER,
        onboarding_step=OnboardingStep.COMPLETE,
        onboarding_complete=True,
    )


@pytest.fixture
def owner_actor():
    return Actor(
        account_id=OWNER_ID,
        role=Role.BUSINESS_OWNER,
        onboarding_step=OnboardingStep.COMPLETE,
        onboarding_complete=True,
    )


@pytest.fixture
def admin_actor():
    return Actor(
        account_id=ADMIN_ID,
        role=Role.ADMIN,
        onboarding_step=OnboardingStep.COMPLETE,
        onboarding_complete=True,
    )
