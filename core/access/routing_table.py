# =============================================================================
# core/access/routing_table.py - Declarative Route Classification
# =============================================================================
# A single ordered table of (path prefix, RouteClass) pairs. The access
# classifier never inspects path strings itself; it asks this module which
# bucket a path falls in.
#
# Matching rules:
# - first matching rule wins
# - a prefix matches the exact path or anything below it on a "/" boundary
#   ("/dm" matches "/dm" and "/dm/42", not "/dmx")
# - exact rules match only the path itself (used for "/")
# - no match -> UNCLASSIFIED, which the classifier treats as deny
# =============================================================================

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from core.models.account import Role


class RouteClass(str, Enum):
    """Access bucket of a page path."""
    PUBLIC = "public"
    AUTH = "auth"
    ONBOARDING = "onboarding"
    PERSONAL_ONLY = "personal_only"
    BUSINESS_ONLY = "business_only"
    MESSAGING = "messaging"
    SHARED = "shared"
    ADMIN_ONLY = "admin_only"
    UNCLASSIFIED = "unclassified"


@dataclass(frozen=True)
class RouteRule:
    """One row of the routing table."""
    prefix: str
    route_class: RouteClass
    exact: bool = False

    def matches(self, path: str) -> bool:
        if self.exact:
            return path == self.prefix
        return path == self.prefix or path.startswith(self.prefix + "/")


ROUTE_TABLE: tuple[RouteRule, ...] = (
    # Public pages - no session needed
    RouteRule("/", RouteClass.PUBLIC, exact=True),
    RouteRule("/forgot-password", RouteClass.PUBLIC),
    RouteRule("/reset-password", RouteClass.PUBLIC),
    RouteRule("/verify-email", RouteClass.PUBLIC),
    RouteRule("/auth/callback", RouteClass.PUBLIC),
    RouteRule("/business", RouteClass.PUBLIC),
    RouteRule("/category", RouteClass.PUBLIC),
    RouteRule("/trending", RouteClass.PUBLIC),
    RouteRule("/events-specials", RouteClass.PUBLIC),
    RouteRule("/owners", RouteClass.PUBLIC),

    # Sign-in pages - signed-in actors are sent home
    RouteRule("/login", RouteClass.AUTH),
    RouteRule("/register", RouteClass.AUTH),
    RouteRule("/onboarding", RouteClass.AUTH),

    # Onboarding steps
    RouteRule("/interests", RouteClass.ONBOARDING),
    RouteRule("/subcategories", RouteClass.ONBOARDING),
    RouteRule("/deal-breakers", RouteClass.ONBOARDING),
    RouteRule("/complete", RouteClass.ONBOARDING),

    # Personal account context
    RouteRule("/home", RouteClass.PERSONAL_ONLY),
    RouteRule("/for-you", RouteClass.PERSONAL_ONLY),
    RouteRule("/profile", RouteClass.PERSONAL_ONLY),
    RouteRule("/saved", RouteClass.PERSONAL_ONLY),
    RouteRule("/write-review", RouteClass.PERSONAL_ONLY),
    RouteRule("/reviews", RouteClass.PERSONAL_ONLY),
    RouteRule("/reviewer", RouteClass.PERSONAL_ONLY),

    # Business account context
    RouteRule("/my-businesses", RouteClass.BUSINESS_ONLY),
    RouteRule("/claim-business", RouteClass.BUSINESS_ONLY),
    RouteRule("/add-business", RouteClass.BUSINESS_ONLY),

    # Customer messaging is reachable from both contexts
    RouteRule("/dm", RouteClass.MESSAGING),

    RouteRule("/notifications", RouteClass.SHARED),
    RouteRule("/leaderboard", RouteClass.SHARED),
    RouteRule("/settings", RouteClass.SHARED),

    RouteRule("/admin", RouteClass.ADMIN_ONLY),
)

HOME_PATHS: dict[Role, str] = {
    Role.USER: "/home",
    Role.BUSINESS_OWNER: "/my-businesses",
    Role.ADMIN: "/admin",
}

# Dashboard pages scoped to a single listing: /my-businesses/businesses/<id>/...
_BUSINESS_PAGE = re.compile(r"^/my-businesses/businesses/([^/]+)(?:/.*)?$")


def normalize_path(path: str) -> str:
    """
    Canonical form used for matching.

    Strips query/fragment, collapses duplicate slashes and drops a
    trailing slash (except for the root).
    """
    path = path.split("?", 1)[0].split("#", 1)[0]
    path = "/" + "/".join(part for part in path.split("/") if part)
    return path


def classify_path(path: str, table: tuple[RouteRule, ...] = ROUTE_TABLE) -> RouteClass:
    """
    Resolve a path to exactly one RouteClass.

    Example:
        classify_path("/my-businesses/businesses/abc")  # BUSINESS_ONLY
        classify_path("/dm/thread-1")                   # MESSAGING
        classify_path("/somewhere-new")                 # UNCLASSIFIED
    """
    normalized = normalize_path(path)
    for rule in table:
        if rule.matches(normalized):
            return rule.route_class
    return RouteClass.UNCLASSIFIED


def home_path_for(role: Role) -> str:
    """Fixed landing page of an account context."""
    return HOME_PATHS[role]


def business_id_from_path(path: str) -> str | None:
    """
    Business identifier (UUID or slug) of a listing-scoped dashboard page.

    Returns None for every other path.
    """
    match = _BUSINESS_PAGE.match(normalize_path(path))
    return match.group(1) if match else None
