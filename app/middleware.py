# =============================================================================
# app/middleware.py - Page Access Control Middleware
# =============================================================================
# Runs before every page handler and either lets the request through or
# answers with a redirect, using core.access.classify().
#
# Per request it does at most:
# - one JWT verification (Authorization header or access-token cookie),
#   which may fetch the JWKS
# - one profile lookup
# - one ownership lookup, only for listing-scoped dashboard pages
#
# Any failure while resolving the actor is logged and the request is
# classified as anonymous. API, docs and static paths are not page
# surfaces; the API routes carry their own dependency guards.
# =============================================================================

import logging
from collections.abc import Callable

from fastapi import HTTPException
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse
from starlette.types import ASGIApp

from app.auth.dependencies import decode_access_token
from app.config import settings
from core.access import Actor, business_id_from_path, classify
from core.access.routing_table import normalize_path
from core.models.account import Role
from core.services.ownership_service import OwnershipService
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

EXCLUDED_PREFIXES = ("/api", "/docs", "/redoc", "/openapi.json", "/static", "/favicon.ico")


def _is_excluded(path: str) -> bool:
    return any(path == prefix or path.startswith(f"{prefix}/") for prefix in EXCLUDED_PREFIXES)


def _extract_token(request: Request, cookie_name: str) -> str | None:
    """Bearer header first, then the session cookie set by the web client."""
    authorization = request.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(cookie_name) or None


class AccessControlMiddleware(BaseHTTPMiddleware):
    """
    Gate page surfaces by role, onboarding state and listing ownership.

    The resolved actor is stored on `request.state.actor` so page handlers
    don't look the profile up a second time.
    """

    def __init__(self, app: ASGIApp, cookie_name: str | None = None) -> None:
        super().__init__(app)
        self.cookie_name = cookie_name or settings.ACCESS_TOKEN_COOKIE

    async def dispatch(self, request: Request, call_next: Callable):
        path = request.url.path
        if _is_excluded(path):
            return await call_next(request)

        requested = path
        if request.url.query:
            requested = f"{path}?{request.url.query}"

        actor = await self._resolve_actor(request)
        owns_business = await self._resolve_ownership(actor, path)

        decision = classify(actor, requested, owns_business=owns_business)
        if not decision.allowed:
            logger.debug(
                f"Redirecting {requested} -> {decision.destination} "
                f"(actor={actor.account_id}, role={actor.role}, reason={decision.reason})"
            )
            return RedirectResponse(url=decision.destination, status_code=307)

        request.state.actor = actor
        return await call_next(request)

    async def _resolve_actor(self, request: Request) -> Actor:
        token = _extract_token(request, self.cookie_name)
        if not token:
            return Actor.anonymous()

        try:
            user = await run_in_threadpool(decode_access_token, token)
        except HTTPException as e:
            logger.debug(f"Session token rejected, treating as anonymous: {e.detail}")
            return Actor.anonymous()

        return await run_in_threadpool(ProfileService.load_actor, user.id, user.email_verified)

    async def _resolve_ownership(self, actor: Actor, path: str) -> bool | None:
        """Ownership answer for listing-scoped pages, None elsewhere."""
        if actor.role is not Role.BUSINESS_OWNER:
            return None

        business_id = business_id_from_path(normalize_path(path))
        if business_id is None:
            return None

        return await run_in_threadpool(OwnershipService.is_owner, actor.account_id, business_id)
