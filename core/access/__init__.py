# =============================================================================
# core/access/ - Role-Based Page Access
# =============================================================================
# - routing_table.py: ordered (prefix, RouteClass) table and home surfaces
# - classifier.py: pure classify(actor, path) -> AccessDecision
#
# Nothing in this package performs I/O. The middleware in app/ fetches the
# profile (and, for listing pages, ownership) and passes plain values in.
# =============================================================================

from core.access.classifier import (
    AccessDecision,
    Actor,
    DecisionKind,
    classify,
    login_redirect,
)
from core.access.routing_table import (
    HOME_PATHS,
    ROUTE_TABLE,
    RouteClass,
    RouteRule,
    business_id_from_path,
    classify_path,
    home_path_for,
)

__all__ = [
    "AccessDecision",
    "Actor",
    "DecisionKind",
    "classify",
    "login_redirect",
    "HOME_PATHS",
    "ROUTE_TABLE",
    "RouteClass",
    "RouteRule",
    "business_id_from_path",
    "classify_path",
    "home_path_for",
]
