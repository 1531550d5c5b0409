# =============================================================================
# core/access/classifier.py - Request-Time Access Classifier
# =============================================================================
# Pure function deciding, for an actor and a requested page path, whether the
# page may render or where the actor is sent instead.
#
# The profile/ownership lookups happen once upstream (see
# app/middleware.py); this module does no I/O and can be unit tested with
# plain values. The same (actor, path) always gives the same decision.
#
# Redirect targets are always fixed surfaces (login page, a role's home,
# an onboarding step), never the requested path, so a reclassified home
# surface can't produce a loop.
#
# Usage:
#   from core.access import Actor, classify
#   decision = classify(Actor.anonymous(), "/saved")
#   decision.destination  # "/login?redirect=/saved"
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable
from urllib.parse import quote
from uuid import UUID

from core.access.routing_table import (
    RouteClass,
    classify_path,
    home_path_for,
    normalize_path,
)
from core.models.account import OnboardingStep, Profile, Role

LOGIN_PATH = "/login"
VERIFY_EMAIL_PATH = "/verify-email"
RETURN_TO_PARAM = "redirect"


# =============================================================================
# Data Classes
# =============================================================================

@dataclass(frozen=True)
class Actor:
    """
    Who is asking, as far as access control cares.

    An actor without an account_id is anonymous. Lookup failures upstream
    produce an anonymous actor too. email_verified comes from the session
    token, not the profile row.
    """
    account_id: UUID | None = None
    role: Role | None = None
    onboarding_step: OnboardingStep = OnboardingStep.INTERESTS
    onboarding_complete: bool = False
    email_verified: bool = True

    @classmethod
    def anonymous(cls) -> Actor:
        return cls()

    @classmethod
    def from_profile(cls, profile: Profile, email_verified: bool = True) -> Actor:
        return cls(
            account_id=profile.user_id,
            role=profile.role,
            onboarding_step=profile.onboarding_step,
            onboarding_complete=profile.onboarding_complete,
            email_verified=email_verified,
        )

    @property
    def is_authenticated(self) -> bool:
        return self.account_id is not None and self.role is not None

    @property
    def needs_onboarding(self) -> bool:
        return self.role is Role.USER and not self.onboarding_complete

    @property
    def home_path(self) -> str:
        if self.role is None:
            return LOGIN_PATH
        return home_path_for(self.role)


class DecisionKind(str, Enum):
    PASS_THROUGH = "pass_through"
    REDIRECT = "redirect"


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of classify(): render the page, or go somewhere else."""
    kind: DecisionKind
    destination: str | None = None
    reason: str = ""

    @classmethod
    def pass_through(cls, reason: str = "") -> AccessDecision:
        return cls(kind=DecisionKind.PASS_THROUGH, reason=reason)

    @classmethod
    def redirect(cls, destination: str, reason: str = "") -> AccessDecision:
        return cls(kind=DecisionKind.REDIRECT, destination=destination, reason=reason)

    @property
    def allowed(self) -> bool:
        return self.kind is DecisionKind.PASS_THROUGH

    def to_dict(self) -> dict[str, str | bool | None]:
        return {
            "allowed": self.allowed,
            "redirect_to": self.destination,
            "reason": self.reason,
        }


# =============================================================================
# Helpers
# =============================================================================

def login_redirect(requested: str) -> str:
    """
    Login URL that remembers where the visitor was going.

    Example:
        login_redirect("/my-businesses")  # "/login?redirect=/my-businesses"
    """
    return f"{LOGIN_PATH}?{RETURN_TO_PARAM}={quote(requested, safe='/')}"


def _onboarding_decision(actor: Actor, path: str, route_class: RouteClass) -> AccessDecision:
    """
    Decision for a personal account that hasn't finished onboarding.

    The required step and any earlier step (back navigation) may render;
    skipping ahead, or visiting anything else, lands on the required step.
    """
    required = actor.onboarding_step
    if route_class is RouteClass.ONBOARDING:
        requested = OnboardingStep.from_route(path)
        if requested is not None and requested.position <= required.position:
            return AccessDecision.pass_through("onboarding step available")
        return AccessDecision.redirect(required.route, "onboarding step not reached yet")

    return AccessDecision.redirect(required.route, "onboarding incomplete")


def _business_owner_decision(
    actor: Actor,
    path: str,
    route_class: RouteClass,
    owns_business: bool | None,
) -> AccessDecision:
    home = home_path_for(Role.BUSINESS_OWNER)

    if route_class is RouteClass.BUSINESS_ONLY:
        if owns_business is False:
            return AccessDecision.redirect(home, "listing not owned by this account")
        return AccessDecision.pass_through("business surface")
    if route_class in (RouteClass.SHARED, RouteClass.MESSAGING):
        return AccessDecision.pass_through("shared surface")

    # personal-only, onboarding, admin-only and unclassified all land home
    return AccessDecision.redirect(home, f"{route_class.value} closed to business accounts")


def _user_decision(
    actor: Actor,
    path: str,
    route_class: RouteClass,
    owns_business: bool | None,
) -> AccessDecision:
    if actor.needs_onboarding:
        return _onboarding_decision(actor, path, route_class)

    home = home_path_for(Role.USER)

    if route_class in (RouteClass.PERSONAL_ONLY, RouteClass.SHARED, RouteClass.MESSAGING):
        return AccessDecision.pass_through("personal surface")
    if route_class is RouteClass.ONBOARDING:
        if path == OnboardingStep.COMPLETE.route:
            return AccessDecision.pass_through("onboarding celebration page")
        return AccessDecision.redirect(home, "onboarding already complete")

    # business-only, admin-only and unclassified all land home
    return AccessDecision.redirect(home, f"{route_class.value} closed to personal accounts")


def _admin_decision(
    actor: Actor,
    path: str,
    route_class: RouteClass,
    owns_business: bool | None,
) -> AccessDecision:
    return AccessDecision.pass_through("administrator")


_ROLE_POLICIES: dict[Role, Callable[[Actor, str, RouteClass, bool | None], AccessDecision]] = {
    Role.ADMIN: _admin_decision,
    Role.BUSINESS_OWNER: _business_owner_decision,
    Role.USER: _user_decision,
}


# =============================================================================
# Classifier
# =============================================================================

def classify(
    actor: Actor,
    path: str,
    *,
    owns_business: bool | None = None,
) -> AccessDecision:
    """
    Decide whether `actor` may open the page at `path`.

    Args:
        actor: The requesting actor (Actor.anonymous() when signed out)
        path: Requested page path, optionally with a query string
        owns_business: For listing-scoped dashboard pages, whether the actor
            has an approved ownership link for that listing. None when the
            page isn't listing-scoped or no lookup was made.

    Returns:
        AccessDecision: pass-through, or redirect with a fixed destination

    Example:
        classify(business_actor, "/profile").destination  # "/my-businesses"
        classify(business_actor, "/dm").allowed            # True
    """
    normalized = normalize_path(path)
    route_class = classify_path(normalized)

    if route_class is RouteClass.PUBLIC:
        return AccessDecision.pass_through("public page")

    if not actor.is_authenticated:
        if route_class is RouteClass.AUTH:
            return AccessDecision.pass_through("sign-in page")
        return AccessDecision.redirect(login_redirect(path), "authentication required")

    if not actor.email_verified:
        return AccessDecision.redirect(VERIFY_EMAIL_PATH, "email address not confirmed")

    if route_class is RouteClass.AUTH:
        if actor.needs_onboarding:
            return AccessDecision.redirect(actor.onboarding_step.route, "already signed in")
        return AccessDecision.redirect(actor.home_path, "already signed in")

    policy = _ROLE_POLICIES[actor.role]
    return policy(actor, normalized, route_class, owns_business)
