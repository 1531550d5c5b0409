# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - access.py: Page access decision for the caller
# - profile.py: Profile read/update/delete and account type selection
# - onboarding.py: Onboarding status and step completion
# - businesses.py: Owned listings and owner mutations
# - claims.py: Ownership claim submission and cancellation
# - admin.py: Claim review, ownership revocation, role changes
# - pages.py: Page surfaces guarded by the access middleware
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import access
from . import profile
from . import onboarding
from . import businesses
from . import claims
from . import admin
from . import pages

__all__ = [
    "health",
    "access",
    "profile",
    "onboarding",
    "businesses",
    "claims",
    "admin",
    "pages",
]
