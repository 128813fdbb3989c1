"""Supabase authentication dependency for FastAPI, with guest fallback."""
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional
import os

security = HTTPBearer(auto_error=False)

DEFAULT_USER = "default_user"


def _auth_configured() -> bool:
    return bool(os.getenv("SUPABASE_URL"))


def verify_token(token: str) -> str:
    """Resolve a Supabase access token to the user's id.

    Raises:
        HTTPException: 401 when Supabase rejects the token
    """
    from backend.supabase_client import get_supabase

    try:
        response = get_supabase().auth.get_user(token)
    except Exception as e:
        print(f"[Auth] Token verification failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = getattr(response, "user", None)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user.id


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    x_guest_id: Optional[str] = Header(default=None),
) -> str:
    """
    Return the id whose progress the request reads and writes.

    Signed-in users are identified by their Supabase access token. Guests send
    the id the client generated for them in ``X-Guest-Id``. Without either,
    everything is stored under a shared development user.
    """
    if credentials and _auth_configured():
        user_id = verify_token(credentials.credentials)
        print(f"[Auth] Authenticated user: {user_id}")
        return user_id

    if x_guest_id and x_guest_id.strip():
        return f"guest:{x_guest_id.strip()}"

    return DEFAULT_USER
