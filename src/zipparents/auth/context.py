"""
ZipParents - Authentication Context.

An explicit session object passed to every service call. It is created
when a session starts (token validated or sign-in succeeded) and torn
down at sign-out or at the end of a request. Nothing in ZipParents reads
the current user from ambient global state.
"""

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from zipparents.db.adapter import StoreClient
from zipparents.db.client import fetch_one
from zipparents.errors import AuthError
from zipparents.models.profile import Viewer
from zipparents.models.user import (
    UserRole,
    UserStatus,
    VerificationStatus,
    decode_user,
)

logger = logging.getLogger(__name__)


@dataclass
class AuthContext:
    """
    Authenticated session.

    `client` acts as the signed-in user (row level security applies).
    After close() every accessor raises AuthError("session-closed").
    """
    user_id: str
    client: StoreClient
    email: str | None = None
    access_token: str | None = None
    role: UserRole = UserRole.USER
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    _closed: bool = field(default=False, repr=False)

    @property
    def is_active(self) -> bool:
        return not self._closed

    @property
    def store(self) -> StoreClient:
        """The backend client for this session."""
        self.require_active()
        return self.client

    def require_active(self) -> None:
        if self._closed:
            raise AuthError("Session has ended", code="session-closed")

    def viewer(self) -> Viewer:
        """This session's identity as seen by the privacy projection."""
        self.require_active()
        return Viewer(uid=self.user_id, verification_status=self.verification_status)

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    @property
    def is_staff(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.MODERATOR)

    def close(self) -> None:
        """Tear the session down. Idempotent."""
        if not self._closed:
            logger.debug(f"Closing auth context for {self.user_id}")
        self._closed = True
        self.access_token = None


async def open_context(
    client: StoreClient,
    user_id: str,
    email: str | None = None,
    access_token: str | None = None,
) -> AuthContext:
    """
    Start a session for `user_id`.

    Loads role and verification status from the user's document when it
    exists (a freshly signed-up user may not have one yet). Suspended and
    banned accounts cannot open a session.
    """
    row = fetch_one(client, "users", "load session user", id=user_id)

    ctx = AuthContext(user_id=user_id, client=client, email=email, access_token=access_token)
    if row is None:
        return ctx

    user = decode_user(row)
    if user.status == UserStatus.SUSPENDED:
        raise AuthError("This account has been suspended", code="account-suspended")
    if user.status == UserStatus.BANNED:
        raise AuthError("This account has been banned", code="account-banned")

    ctx.role = user.role
    ctx.verification_status = user.verification_status
    ctx.email = email or user.email or None
    return ctx


@asynccontextmanager
async def session(
    client: StoreClient,
    user_id: str,
    email: str | None = None,
    access_token: str | None = None,
) -> AsyncIterator[AuthContext]:
    """Open a context for the duration of a block and close it afterwards."""
    ctx = await open_context(client, user_id, email=email, access_token=access_token)
    try:
        yield ctx
    finally:
        ctx.close()
