# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# Provides dependency injection for authentication and role guards.
#
# Supports both:
# - ES256 (new Supabase JWT signing keys) via JWKS
# - HS256 (legacy Supabase JWT secret) as fallback
#
# Usage:
#   from app.auth import get_current_actor, require_admin
#
#   @router.post("/admin/thing")
#   def admin_only(admin: Actor = Depends(require_admin)):
#       return {"admin_id": admin.account_id}
# =============================================================================

import logging
import time
from typing import Optional
from uuid import UUID

import httpx
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError, ExpiredSignatureError
from pydantic import ValidationError

from app.config import settings
from app.auth.models import AuthUser, TokenPayload
from app.exceptions import AdminRequiredError, BusinessAccountRequiredError
from core.access.classifier import Actor
from core.models.account import Profile, Role
from core.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

TOKEN_AUDIENCE = "authenticated"

# HTTP Bearer token extractor
security = HTTPBearer()
security_optional = HTTPBearer(auto_error=False)

# Cache for JWKS keys
_jwks_cache: dict = {}
_jwks_cache_time: float = 0
JWKS_CACHE_TTL = 3600  # 1 hour


def _fetch_jwks() -> dict:
    """Fetch JWKS from Supabase with caching."""
    global _jwks_cache, _jwks_cache_time

    current_time = time.time()

    # Return cached if valid
    if _jwks_cache and (current_time - _jwks_cache_time) < JWKS_CACHE_TTL:
        return _jwks_cache

    try:
        response = httpx.get(settings.jwks_url, timeout=10)
        response.raise_for_status()
        _jwks_cache = response.json()
        _jwks_cache_time = current_time
        logger.debug(f"Fetched JWKS from {settings.jwks_url}")
        return _jwks_cache
    except Exception as e:
        logger.warning(f"Failed to fetch JWKS: {e}")
        # Return cached even if expired, as fallback
        if _jwks_cache:
            return _jwks_cache
        return {"keys": []}


def _get_signing_key(token: str) -> tuple[str | dict, str]:
    """
    Get the appropriate signing key for a token.

    Returns:
        Tuple of (key, algorithm) to use for verification
    """
    # Decode header without verification to get algorithm and key ID
    try:
        unverified_header = jwt.get_unverified_header(token)
    except JWTError:
        # Fall back to HS256 if we can't read the header
        return settings.SUPABASE_JWT_SECRET, "HS256"

    alg = unverified_header.get("alg", "HS256")
    kid = unverified_header.get("kid")

    # If HS256, use the legacy secret
    if alg == "HS256":
        return settings.SUPABASE_JWT_SECRET, "HS256"

    # For ES256 or other algorithms, use JWKS
    if kid:
        for key in _fetch_jwks().get("keys", []):
            if key.get("kid") == kid:
                return key, alg

    logger.warning(f"Could not find key for alg={alg}, kid={kid}, falling back to HS256")
    return settings.SUPABASE_JWT_SECRET, "HS256"


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_access_token(token: str) -> AuthUser:
    """
    Verify a Supabase access token and return the identity it carries.

    Shared by the bearer dependencies and the page access middleware.

    Raises:
        HTTPException: 401 if token is invalid, expired or malformed
    """
    try:
        signing_key, algorithm = _get_signing_key(token)
        claims = jwt.decode(
            token,
            signing_key,
            algorithms=[algorithm],
            audience=TOKEN_AUDIENCE,
        )
        payload = TokenPayload(**claims)

    except ExpiredSignatureError:
        logger.warning("JWT token has expired")
        raise _unauthorized("Token has expired")

    except JWTError as e:
        logger.warning(f"JWT validation failed: {e}")
        raise _unauthorized(f"Invalid token: {str(e)}")

    except ValidationError:
        logger.warning("JWT token missing required claims")
        raise _unauthorized("Invalid token: missing user ID")

    # Convert string UUID to UUID object
    try:
        user_uuid = UUID(payload.sub)
    except ValueError:
        logger.warning(f"Invalid UUID in token: {payload.sub}")
        raise _unauthorized("Invalid token: malformed user ID")

    logger.debug(f"Authenticated user: {user_uuid}")
    return AuthUser(id=user_uuid, email=payload.email, email_verified=payload.email_verified)


async def get_access_token(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> str:
    """Raw bearer token, for handlers that act as the user (RLS clients)."""
    return credentials.credentials


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> AuthUser:
    """
    Extract and validate the identity from a Supabase JWT.

    This dependency:
    1. Extracts the Bearer token from the Authorization header
    2. Verifies the JWT signature (supports ES256 and HS256)
    3. Validates the token hasn't expired
    4. Returns an AuthUser with the account ID and email

    Raises:
        HTTPException: 401 if token is invalid or expired
    """
    return decode_access_token(credentials.credentials)


def get_current_user_optional(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_optional)
) -> Optional[AuthUser]:
    """
    Optionally get the current identity from a JWT token.

    Returns None if no token is provided, or if the token is invalid,
    instead of raising an error.
    """
    if credentials is None:
        return None

    try:
        return decode_access_token(credentials.credentials)
    except HTTPException:
        # If token is invalid, treat as no auth rather than error
        return None


def get_current_profile(user: AuthUser = Depends(get_current_user)) -> Profile:
    """
    Load the profile row of the authenticated identity.

    Raises:
        ProfileNotFoundError: 404 if the identity has no profile yet
    """
    return ProfileService.get_profile(user.id)


def get_current_actor(profile: Profile = Depends(get_current_profile)) -> Actor:
    """Access-control view of the caller, built from the profile row."""
    return Actor.from_profile(profile)


def require_admin(actor: Actor = Depends(get_current_actor)) -> Actor:
    """
    Guard for administrative endpoints.

    Raises:
        AdminRequiredError: 403 for any non-admin role
    """
    if actor.role is not Role.ADMIN:
        logger.info(f"Admin endpoint refused for {actor.account_id} ({actor.role})")
        raise AdminRequiredError()
    return actor


def require_business_owner(actor: Actor = Depends(get_current_actor)) -> Actor:
    """
    Guard for business-account endpoints.

    Raises:
        BusinessAccountRequiredError: 403 for personal and admin accounts
    """
    if actor.role is not Role.BUSINESS_OWNER:
        raise BusinessAccountRequiredError()
    return actor
