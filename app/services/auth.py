from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from supabase import AuthError, Client, create_client

from app.core.config import auth_configured, settings

logger = logging.getLogger("chainraffle.auth")


@dataclass(frozen=True)
class AuthUser:
    id: str
    email: Optional[str] = None


@lru_cache(maxsize=1)
def _client() -> Client:
    return create_client(settings.supabase_url, settings.supabase_anon_key)


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def resolve_user(token: str) -> Optional[AuthUser]:
    """Resolve an access token to the user it was issued for, or ``None``."""
    if not auth_configured():
        logger.error("Supabase auth is not configured")
        return None
    try:
        response = _client().auth.get_user(token)
    except AuthError as exc:
        logger.warning("Token resolution failed: %s", exc)
        return None
    user = getattr(response, "user", None) if response else None
    if user is None:
        return None
    return AuthUser(id=str(user.id), email=getattr(user, "email", None))
