"""Session cookie authentication dependency (get_current_account_id)."""

from typing import Annotated

import jwt
from fastapi import Cookie, HTTPException, status

from app.core.security import SESSION_COOKIE_NAME, decode_session_token


def get_current_account_id(
    token: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> int:
    """Dependency: require a valid session cookie and return its account id. Raises 401 otherwise."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not authenticated",
        )
    try:
        payload = decode_session_token(token)
    except jwt.PyJWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )
    account_id = payload.get("account_id")
    if not isinstance(account_id, int):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )
    return account_id
