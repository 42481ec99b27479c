"""
Talent Trust - Authentication

Resolves a bearer JWT to the calling user's id and role. Tokens are issued
by the marketplace's auth provider and signed with the shared JWT_SECRET;
this service only verifies them. The role is looked up in the store
(users.user_role) and defaults to 'talent'.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
import structlog
from fastapi import Depends, HTTPException, Request

from talent_trust.config import get_settings
from talent_trust.dependencies import get_talent_store
from talent_trust.errors import AuthenticationError
from talent_trust.trust.store import TalentStore

logger = structlog.get_logger()

DEFAULT_ROLE = "talent"


# ===========================================
# JWT Token Helpers
# ===========================================

def create_access_token(user_id: str, expires_in: timedelta = timedelta(hours=1)) -> str:
    """Create a JWT access token. Used by tooling and tests."""
    settings = get_settings()
    now = datetime.now(timezone.utc)
    payload = {
        "sub": user_id,
        "iat": now,
        "exp": now + expires_in,
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[str]:
    """Decode and validate a JWT. Returns the user id, or None if invalid."""
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None
    return payload.get("sub") or payload.get("user_id")


def bearer_token(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        return None
    if auth_header.startswith("Bearer "):
        return auth_header[7:]
    return auth_header


# ===========================================
# Auth Dependency
# ===========================================

def get_current_user(
    request: Request,
    store: TalentStore = Depends(get_talent_store),
) -> dict:
    """Caller identity as {id, role}. Raises AuthenticationError (401)."""
    token = bearer_token(request)
    if not token:
        raise AuthenticationError("Authorization header is required")

    user_id = decode_access_token(token)
    if not user_id:
        raise AuthenticationError("Invalid or expired token")

    try:
        role = store.get_user_role(user_id)
    except Exception as e:
        logger.error("user_role_lookup_failed", user_id=user_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to get user role") from e

    user = {"id": user_id, "role": role or DEFAULT_ROLE}
    request.state.user = user
    return user
