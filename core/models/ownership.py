# =============================================================================
# core/models/ownership.py - Business Ownership & Claim Schemas
# =============================================================================
# These models describe who may manage a business listing:
# - ClaimStatus: claim state machine (pending -> approved | rejected | cancelled)
# - ClaimCreate: input for submitting a claim, with contact validation
# - Claim: a business_ownership_requests row
# - OwnershipLink: a business_owners row (an approved association)
# - OwnershipState / OwnershipSummary: what a business account currently has
# - BusinessUpdate: editable listing fields for owners
# =============================================================================

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

MIN_PHONE_DIGITS = 8


class ClaimStatus(str, Enum):
    """
    Status of an ownership claim.

    - pending: submitted, waiting for an administrator
    - approved: ownership link created (terminal)
    - rejected: declined by an administrator (terminal)
    - cancelled: withdrawn by the claimant (terminal)

    Terminal states can only be corrected directly in the database.
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self is not ClaimStatus.PENDING

    def can_transition(self, target: ClaimStatus) -> bool:
        return target in _CLAIM_TRANSITIONS.get(self, frozenset())


_CLAIM_TRANSITIONS: dict[ClaimStatus, frozenset[ClaimStatus]] = {
    ClaimStatus.PENDING: frozenset(
        {ClaimStatus.APPROVED, ClaimStatus.REJECTED, ClaimStatus.CANCELLED}
    ),
}


class VerificationMethod(str, Enum):
    """How the claimant proposes to prove control of the business."""
    EMAIL = "email"
    PHONE = "phone"
    DOCUMENT = "document"
    MANUAL = "manual"


class ClaimantRole(str, Enum):
    """Position of the claimant inside the business."""
    OWNER = "owner"
    MANAGER = "manager"


class ClaimCreate(BaseModel):
    """
    Request body for submitting an ownership claim.

    At least one contact method is required. Unknown claimant roles fall
    back to owner.

    Example:
        {
            "business_id": "the-corner-cafe",
            "role": "owner",
            "email": "hello@cornercafe.co.za",
            "phone": "+27 21 555 0101",
            "note": "I opened the cafe in 2019"
        }
    """

    business_id: str = Field(
        ...,
        min_length=1,
        description="Business UUID or slug"
    )
    role: ClaimantRole = ClaimantRole.OWNER
    email: EmailStr | None = None
    phone: str | None = None
    note: str | None = Field(default=None, max_length=2000)

    @field_validator("role", mode="before")
    @classmethod
    def default_unknown_role(cls, value: Any) -> Any:
        if value not in {r.value for r in ClaimantRole}:
            return ClaimantRole.OWNER
        return value

    @field_validator("email", "phone", mode="before")
    @classmethod
    def blank_to_none(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip()
        return value or None

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, value: str | None) -> str | None:
        if value is not None and sum(ch.isdigit() for ch in value) < MIN_PHONE_DIGITS:
            raise ValueError(
                f"Please enter a valid phone number (at least {MIN_PHONE_DIGITS} digits)"
            )
        return value

    @model_validator(mode="after")
    def require_contact_method(self) -> ClaimCreate:
        if not self.email and not self.phone:
            raise ValueError("Please provide a business email or phone number")
        return self

    @property
    def verification_method(self) -> VerificationMethod:
        return VerificationMethod.PHONE if self.phone else VerificationMethod.EMAIL

    def verification_data(self) -> dict[str, Any]:
        data = {
            "role": self.role.value,
            "email": self.email,
            "phone": self.phone,
            "notes": self.note,
        }
        return {key: value for key, value in data.items() if value is not None}


class ClaimReject(BaseModel):
    """Optional reason recorded when an administrator rejects a claim."""
    reason: str | None = Field(default=None, max_length=1000)


class Claim(BaseModel):
    """A row from business_ownership_requests."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    business_id: UUID
    user_id: UUID
    status: ClaimStatus
    verification_method: VerificationMethod | None = None
    verification_data: dict[str, Any] = Field(default_factory=dict)
    requested_at: datetime | None = None
    reviewed_at: datetime | None = None
    reviewed_by: UUID | None = None
    rejection_reason: str | None = None

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> Claim:
        return cls(**{
            **row,
            "verification_data": row.get("verification_data") or {},
        })


class OwnershipLink(BaseModel):
    """An approved association between a profile and a business."""

    model_config = ConfigDict(frozen=True)

    business_id: UUID
    user_id: UUID
    role: ClaimantRole = ClaimantRole.OWNER
    verified_at: datetime | None = None
    verified_by: UUID | None = None


class OwnershipState(str, Enum):
    """
    Where a business account stands with respect to its listings.

    Distinguishes "never claimed anything" from "claim was rejected", which
    the web client used to render identically.
    """
    OWNER = "owner"
    CLAIM_PENDING = "claim_pending"
    CLAIM_REJECTED = "claim_rejected"
    NO_BUSINESSES = "no_businesses"


class OwnedBusiness(BaseModel):
    """Listing summary for the business dashboard."""
    id: UUID
    name: str
    slug: str | None = None
    status: str | None = None
    owner_verified: bool = False


class OwnershipSummary(BaseModel):
    """Response for GET /businesses/mine."""
    state: OwnershipState
    businesses: list[OwnedBusiness] = Field(default_factory=list)
    claims: list[Claim] = Field(default_factory=list)


class BusinessUpdate(BaseModel):
    """
    Listing fields an owner may edit.

    Ownership columns (owner_id, owner_verified, status) are not accepted.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, max_length=5000)
    phone: str | None = Field(default=None, max_length=40)
    email: str | None = Field(default=None, max_length=254)
    website: str | None = Field(default=None, max_length=2048)
    address: str | None = Field(default=None, max_length=500)
    price_range: str | None = Field(default=None, pattern=r"^\${1,4}$")

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)
