import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException

from app.core.config import db_configured, settings
from app.core.session import WalletSession
from app.services import auth


def require_db() -> None:
    if not db_configured():
        raise HTTPException(status_code=500, detail="Database is not configured")


def wallet_session(
    x_wallet_address: Optional[str] = Header(None),
    x_chain_id: Optional[int] = Header(None),
) -> WalletSession:
    chain_id = x_chain_id if x_chain_id is not None else settings.default_chain_id
    return WalletSession(account=x_wallet_address or None, chain_id=chain_id)


def current_user(authorization: Optional[str] = Header(None)) -> auth.AuthUser:
    token = auth.bearer_token(authorization)
    if token is None:
        raise HTTPException(status_code=401, detail="Missing bearer token")
    user = auth.resolve_user(token)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    return user


def require_self(user_id: uuid.UUID, user: auth.AuthUser = Depends(current_user)) -> auth.AuthUser:
    """Only the signed-in user may read data scoped to their own id."""
    if str(user_id) != user.id.lower():
        raise HTTPException(status_code=403, detail="Not allowed to access another user's data")
    return user
