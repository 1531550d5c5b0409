# =============================================================================
# app/routers/pages.py - Page Surfaces
# =============================================================================
# Server-side page context for the web client. Each route answers the name
# of the surface and a summary of the actor viewing it; rendering happens
# client-side.
#
# These routes carry no guards of their own. AccessControlMiddleware has
# already classified the request and left the actor on request.state.
# =============================================================================

from fastapi import APIRouter, Request

from core.access import Actor, classify_path

router = APIRouter(include_in_schema=False)

# (path, surface name)
PAGE_SURFACES: tuple[tuple[str, str], ...] = (
    # Public
    ("/forgot-password", "forgot_password"),
    ("/reset-password", "reset_password"),
    ("/verify-email", "verify_email"),
    ("/business/{slug}", "business_listing"),
    ("/category/{slug}", "category"),
    ("/trending", "trending"),
    ("/events-specials", "events_specials"),
    ("/owners", "owners"),
    # Sign-in
    ("/login", "login"),
    ("/register", "register"),
    ("/onboarding", "account_type"),
    # Onboarding steps
    ("/interests", "onboarding_interests"),
    ("/subcategories", "onboarding_subcategories"),
    ("/deal-breakers", "onboarding_deal_breakers"),
    ("/complete", "onboarding_complete"),
    # Personal
    ("/home", "home"),
    ("/for-you", "for_you"),
    ("/profile", "profile"),
    ("/saved", "saved"),
    ("/write-review/{business_slug}", "write_review"),
    ("/reviews", "reviews"),
    ("/reviewer/{username}", "reviewer"),
    # Business
    ("/my-businesses", "business_dashboard"),
    ("/my-businesses/businesses/{business_id}", "business_listing_dashboard"),
    ("/my-businesses/businesses/{business_id}/edit", "business_listing_edit"),
    ("/claim-business", "claim_business"),
    ("/add-business", "add_business"),
    # Both contexts
    ("/dm", "messages"),
    ("/dm/{thread_id}", "message_thread"),
    ("/notifications", "notifications"),
    ("/leaderboard", "leaderboard"),
    ("/settings", "settings"),
    # Operator
    ("/admin", "admin_dashboard"),
    ("/admin/claims", "admin_claims"),
)


def _actor_summary(actor: Actor) -> dict:
    return {
        "account_id": str(actor.account_id) if actor.account_id else None,
        "role": actor.role.value if actor.role else None,
        "onboarding_step": actor.onboarding_step.value,
        "onboarding_complete": actor.onboarding_complete,
    }


def _surface_handler(surface: str):
    async def render(request: Request) -> dict:
        actor = getattr(request.state, "actor", None) or Actor.anonymous()
        return {
            "surface": surface,
            "route_class": classify_path(request.url.path).value,
            "params": dict(request.path_params),
            "actor": _actor_summary(actor),
        }

    render.__name__ = f"page_{surface}"
    return render


for _path, _surface in PAGE_SURFACES:
    router.add_api_route(_path, _surface_handler(_surface), methods=["GET"])
