# =============================================================================
# core/models/account.py - Profile, Role and Onboarding Schemas
# =============================================================================
# These models describe the application-level account record:
# - Role: closed enumeration of account contexts (personal, business, admin)
# - OnboardingStep: ordered onboarding steps for personal accounts
# - Profile: one row per authenticated identity (public.profiles)
# - ProfileUpdate / AccountTypeRequest / RoleChangeRequest: API inputs
#
# Role is only ever written by the signup account-type selection or by an
# administrator. ProfileUpdate forbids unknown fields so a role can't be
# smuggled in through a profile edit.
# =============================================================================

from __future__ import annotations

from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    """
    Account context of a profile.

    - user: personal account (reviews, saved items, personal feed)
    - business_owner: business account (manages claimed listings)
    - admin: operator account (reviews claims, corrects roles)
    """
    USER = "user"
    BUSINESS_OWNER = "business_owner"
    ADMIN = "admin"

    @classmethod
    def from_raw(cls, value: Any) -> Role | None:
        """
        Normalize a stored or token-provided role string.

        Returns None for empty or unknown values so callers can fall back
        to the next candidate column.
        """
        raw = str(value or "").strip().lower()
        if not raw:
            return None
        if raw in ("admin", "super_admin", "superadmin"):
            return cls.ADMIN
        if raw in ("business_owner", "business", "owner"):
            return cls.BUSINESS_OWNER
        if raw in ("user", "personal"):
            return cls.USER
        return None


class OnboardingStep(str, Enum):
    """
    Onboarding steps for personal accounts, in the order they must be done.

    Flow: interests -> subcategories -> deal-breakers -> complete
    """
    INTERESTS = "interests"
    SUBCATEGORIES = "subcategories"
    DEAL_BREAKERS = "deal-breakers"
    COMPLETE = "complete"

    @classmethod
    def ordered(cls) -> list[OnboardingStep]:
        return [cls.INTERESTS, cls.SUBCATEGORIES, cls.DEAL_BREAKERS, cls.COMPLETE]

    @classmethod
    def from_raw(cls, value: Any) -> OnboardingStep:
        """Missing or unrecognised steps restart at interests."""
        try:
            return cls(str(value))
        except ValueError:
            return cls.INTERESTS

    @classmethod
    def from_route(cls, path: str) -> OnboardingStep | None:
        """Map an exact onboarding page path back to its step."""
        for step in cls.ordered():
            if path == step.route:
                return step
        return None

    @property
    def position(self) -> int:
        return OnboardingStep.ordered().index(self)

    @property
    def route(self) -> str:
        return f"/{self.value}"

    def next(self) -> OnboardingStep | None:
        """The step after this one, or None after the last step."""
        steps = OnboardingStep.ordered()
        following = self.position + 1
        return steps[following] if following < len(steps) else None


class Profile(BaseModel):
    """
    Application-level account record (one per Supabase identity).

    Built from a public.profiles row. Role resolution prefers
    `account_role`, then the legacy `role` column, defaulting to user.

    Example:
        {
            "user_id": "550e8400-e29b-41d4-a716-446655440000",
            "role": "business_owner",
            "role_selected": true,
            "onboarding_step": "complete",
            "onboarding_complete": true
        }
    """

    model_config = ConfigDict(frozen=True)

    user_id: UUID
    role: Role = Role.USER
    role_selected: bool = Field(
        default=False,
        description="Whether account_role has been written (signup selection done)"
    )
    onboarding_step: OnboardingStep = OnboardingStep.INTERESTS
    onboarding_complete: bool = False
    display_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None

    @classmethod
    def from_db_row(cls, row: dict[str, Any]) -> Profile:
        """Create a Profile from a public.profiles row."""
        account_role = Role.from_raw(row.get("account_role"))
        role = account_role or Role.from_raw(row.get("role")) or Role.USER

        return cls(
            user_id=row["user_id"],
            role=role,
            role_selected=account_role is not None,
            onboarding_step=OnboardingStep.from_raw(row.get("onboarding_step")),
            onboarding_complete=bool(row.get("onboarding_complete")),
            display_name=row.get("display_name"),
            username=row.get("username"),
            avatar_url=row.get("avatar_url"),
        )


class ProfileUpdate(BaseModel):
    """
    Editable profile fields.

    Extra fields (including role) are rejected with a validation error.
    """

    model_config = ConfigDict(extra="forbid")

    display_name: str | None = Field(default=None, min_length=1, max_length=80)
    username: str | None = Field(
        default=None,
        min_length=3,
        max_length=30,
        pattern=r"^[A-Za-z0-9_.]+$",
    )
    avatar_url: str | None = Field(default=None, max_length=2048)

    def changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


class AccountTypeRequest(BaseModel):
    """Signup-time account type selection (personal or business)."""
    account_type: Role = Field(..., description="user or business_owner")


class RoleChangeRequest(BaseModel):
    """Administrative role correction."""
    role: Role


class ProfileResponse(BaseModel):
    """Profile as returned to clients, with the role's home surface."""
    user_id: UUID
    email: str | None = None
    role: Role
    onboarding_step: OnboardingStep
    onboarding_complete: bool
    display_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None
    home_path: str
