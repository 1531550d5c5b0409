# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed, without leaking
# internal details (ownership rows, SQL errors) to the client.
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class SaysoException(Exception):
    """
    Base exception for the Sayso API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "SAYSO_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Authorization Exceptions
# =============================================================================

class PermissionDeniedError(SaysoException):
    """
    Raised when the acting profile may not mutate a business.

    Covers both "never owned it" and "ownership was revoked since the page
    loaded". The response intentionally carries no ownership details.
    """

    def __init__(self):
        super().__init__(
            message="You do not have permission to manage this business",
            code="PERMISSION_DENIED",
            status_code=403,
            suggestion="Reload the page; if you believe you own this business, submit a claim",
        )


class AdminRequiredError(SaysoException):
    """Raised when a non-admin calls an administrative endpoint."""

    def __init__(self):
        super().__init__(
            message="This action requires an administrator account",
            code="ADMIN_REQUIRED",
            status_code=403,
        )


class BusinessAccountRequiredError(SaysoException):
    """Raised when a personal account calls a business-account endpoint."""

    def __init__(self):
        super().__init__(
            message="This action requires a business account",
            code="BUSINESS_ACCOUNT_REQUIRED",
            status_code=403,
            suggestion="Sign in with your business account",
        )


class PersonalAccountRequiredError(SaysoException):
    """Raised when a business or admin account calls a personal-only endpoint."""

    def __init__(self):
        super().__init__(
            message="This action is only available to personal accounts",
            code="PERSONAL_ACCOUNT_REQUIRED",
            status_code=403,
        )


# =============================================================================
# Profile Exceptions
# =============================================================================

class ProfileNotFoundError(SaysoException):
    """Raised when an authenticated identity has no profile row."""

    def __init__(self, account_id: str):
        super().__init__(
            message="Profile not found for this account",
            code="PROFILE_NOT_FOUND",
            status_code=404,
            suggestion="Finish signing up, or sign out and sign in again",
            details={"account_id": account_id},
        )


class RoleLockedError(SaysoException):
    """Raised when a profile tries to pick an account type a second time."""

    def __init__(self):
        super().__init__(
            message="The account type has already been selected",
            code="ROLE_LOCKED",
            status_code=409,
            suggestion="Contact support to switch between personal and business accounts",
        )


class OnboardingStepError(SaysoException):
    """Raised when an onboarding step is completed out of order."""

    def __init__(self, step: str, required_step: str):
        super().__init__(
            message=f"Cannot complete '{step}' before '{required_step}'",
            code="ONBOARDING_STEP_OUT_OF_ORDER",
            status_code=409,
            suggestion=f"Complete the '{required_step}' step first",
            details={"step": step, "required_step": required_step},
        )


# =============================================================================
# Business & Claim Exceptions
# =============================================================================

class BusinessNotFoundError(SaysoException):
    """Raised when a business id or slug doesn't resolve."""

    def __init__(self, business_id: str):
        super().__init__(
            message=f"Business not found: {business_id}",
            code="BUSINESS_NOT_FOUND",
            status_code=404,
            suggestion="Check that the business id or slug is correct",
            details={"business_id": business_id},
        )


class ClaimNotFoundError(SaysoException):
    """Raised when a claim id doesn't exist (or isn't visible to the caller)."""

    def __init__(self, claim_id: str):
        super().__init__(
            message=f"Claim not found: {claim_id}",
            code="CLAIM_NOT_FOUND",
            status_code=404,
            details={"claim_id": claim_id},
        )


class ClaimAlreadyProcessedError(SaysoException):
    """Raised when a claim is no longer pending."""

    def __init__(self, claim_id: str, status: str):
        super().__init__(
            message=f"Claim already processed: {status}",
            code="CLAIM_ALREADY_PROCESSED",
            status_code=409,
            suggestion="Approved, rejected and cancelled claims cannot be changed",
            details={"claim_id": claim_id, "status": status},
        )


class DuplicateClaimError(SaysoException):
    """Raised when a pending claim already exists for the business."""

    def __init__(self, business_id: str):
        super().__init__(
            message="You already have a claim in progress for this business",
            code="DUPLICATE_CLAIM",
            status_code=409,
            suggestion="Wait for the pending claim to be reviewed, or cancel it first",
            details={"business_id": business_id},
        )


class AlreadyOwnerError(SaysoException):
    """Raised when the claimant already owns the business."""

    def __init__(self, business_id: str):
        super().__init__(
            message="You already own this business",
            code="ALREADY_OWNER",
            status_code=409,
            details={"business_id": business_id},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def sayso_exception_handler(
    request: Request,
    exc: SaysoException
) -> JSONResponse:
    """
    Convert SaysoException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )
