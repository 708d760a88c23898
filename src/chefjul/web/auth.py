"""
Authentication utilities for FastAPI routes.

Shared auth dependency used by all route modules.
"""

import logging

from fastapi import HTTPException, Header
from pydantic import BaseModel

from chefjul.config import settings
from chefjul.db.client import get_client

logger = logging.getLogger(__name__)


class AuthenticatedUser(BaseModel):
    """Authenticated user info from the Supabase JWT."""
    id: str
    email: str | None = None
    access_token: str = ""


async def get_current_user(authorization: str = Header(None)) -> AuthenticatedUser:
    """
    Validate the Supabase JWT and extract user info.

    Expects Authorization header: "Bearer <access_token>"

    In development without Supabase configured, requests without a header
    act as DEV_USER_ID.
    """
    if not authorization:
        if settings.is_development and not settings.supabase_url:
            return AuthenticatedUser(id=settings.dev_user_id)
        raise HTTPException(status_code=401, detail="Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    access_token = authorization[7:]

    try:
        client = get_client()
        user_response = client.auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Auth validation failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token") from e

    if not user_response or not user_response.user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = user_response.user
    return AuthenticatedUser(id=user.id, email=user.email, access_token=access_token)
