# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .profile_service import ProfileService
from .onboarding_service import OnboardingService
from .ownership_service import OwnershipService
from .claim_service import ClaimService
from .business_service import BusinessService

__all__ = [
    "ProfileService",
    "OnboardingService",
    "OwnershipService",
    "ClaimService",
    "BusinessService",
]
