from __future__ import annotations

from fastapi import Header, HTTPException


def get_current_user(x_user_id: str | None = Header(default=None)) -> str | None:
    """Return the caller id forwarded by the gateway, or ``None``."""
    if x_user_id is None:
        return None
    return x_user_id.strip() or None


def require_user(x_user_id: str | None = Header(default=None)) -> str:
    """Raise 401 if the gateway did not forward a caller id."""
    user_id = get_current_user(x_user_id)
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return user_id
