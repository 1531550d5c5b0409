# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication using Supabase Auth, plus the role
# guards that API routes depend on.
#
# Usage:
#   from app.auth import get_current_actor, Actor
#
#   @router.get("/protected")
#   def protected(actor: Actor = Depends(get_current_actor)):
#       return {"account_id": actor.account_id}
# =============================================================================

from app.auth.dependencies import (
    decode_access_token,
    get_access_token,
    get_current_actor,
    get_current_profile,
    get_current_user,
    get_current_user_optional,
    require_admin,
    require_business_owner,
)
from app.auth.models import AuthUser, TokenPayload

__all__ = [
    "decode_access_token",
    "get_access_token",
    "get_current_actor",
    "get_current_profile",
    "get_current_user",
    "get_current_user_optional",
    "require_admin",
    "require_business_owner",
    "AuthUser",
    "TokenPayload",
]
