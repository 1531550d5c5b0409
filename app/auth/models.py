# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated identity extracted from a Supabase JWT.

    This is the minimal info available from the token itself, without
    querying the database. Roles are NOT taken from the token; they come
    from the profile row.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
    email_verified: bool = True


class TokenPayload(BaseModel):
    """
    Decoded JWT token payload from Supabase.

    Supabase tokens include standard JWT claims plus custom claims.
    """
    sub: str  # Account ID
    email: Optional[str] = None
    aud: str  # Audience (should be "authenticated")
    exp: int  # Expiration timestamp
    iat: Optional[int] = None  # Issued at timestamp
    role: Optional[str] = None  # Postgres role, not the account role
    user_metadata: Optional[dict[str, Any]] = None

    @property
    def email_verified(self) -> bool:
        """Only an explicit false counts; phone and OAuth sessions may omit it."""
        return (self.user_metadata or {}).get("email_verified") is not False
