"""
Authentication dependencies for FastAPI routes.

`get_auth_context` opens an AuthContext for the request's bearer token
and closes it when the request finishes. Route handlers receive the
context explicitly and pass it to the services.
"""

import logging
from typing import AsyncIterator

from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel

from zipparents.auth.context import AuthContext, open_context
from zipparents.db.client import get_authenticated_client, get_service_client

logger = logging.getLogger(__name__)


class AuthenticatedUser(BaseModel):
    """Authenticated user info from a Supabase access token."""
    id: str
    email: str | None
    access_token: str


async def get_current_user(authorization: str = Header(None)) -> AuthenticatedUser:
    """
    Validate the Supabase JWT and extract user info.

    Expects Authorization header: "Bearer <access_token>"
    """
    if not authorization:
        raise HTTPException(status_code=401, detail="Missing authorization header")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    access_token = authorization[7:]  # Remove "Bearer " prefix

    try:
        # Use service client to validate the token
        user_response = get_service_client().auth.get_user(access_token)
    except Exception as e:
        logger.warning(f"Auth validation failed: {e}")
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    if not user_response or not user_response.user:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    user = user_response.user
    return AuthenticatedUser(id=str(user.id), email=user.email, access_token=access_token)


async def get_auth_context(
    user: AuthenticatedUser = Depends(get_current_user),
) -> AsyncIterator[AuthContext]:
    """Per-request session acting as the token's owner."""
    client = get_authenticated_client(user.access_token)
    ctx = await open_context(client, user.id, email=user.email, access_token=user.access_token)
    try:
        yield ctx
    finally:
        ctx.close()
