# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the access and ownership logic:
# - access/: route classification table and the pure access classifier
# - models/: Pydantic schemas for profiles, claims and ownership
# - services/: profile, onboarding, ownership, claim and listing operations
#
# Code in core/access must NOT import from FastAPI or touch the database.
# This keeps the classifier testable without a running app.
# =============================================================================
