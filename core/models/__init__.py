# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - account.py: Profile, Role and onboarding step schemas
# - ownership.py: Claim, ownership link and business edit schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

# -----------------------------------------------------------------------------
# Account Models - Profiles, roles, onboarding
# -----------------------------------------------------------------------------
from .account import (
    AccountTypeRequest,
    OnboardingStep,
    Profile,
    ProfileResponse,
    ProfileUpdate,
    Role,
    RoleChangeRequest,
)

# -----------------------------------------------------------------------------
# Ownership Models - Claims and ownership links
# -----------------------------------------------------------------------------
from .ownership import (
    BusinessUpdate,
    Claim,
    ClaimantRole,
    ClaimCreate,
    ClaimReject,
    ClaimStatus,
    OwnedBusiness,
    OwnershipLink,
    OwnershipState,
    OwnershipSummary,
    VerificationMethod,
)

__all__ = [
    # Account
    "AccountTypeRequest",
    "OnboardingStep",
    "Profile",
    "ProfileResponse",
    "ProfileUpdate",
    "Role",
    "RoleChangeRequest",
    # Ownership
    "BusinessUpdate",
    "Claim",
    "ClaimantRole",
    "ClaimCreate",
    "ClaimReject",
    "ClaimStatus",
    "OwnedBusiness",
    "OwnershipLink",
    "OwnershipState",
    "OwnershipSummary",
    "VerificationMethod",
]
