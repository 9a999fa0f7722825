"""
Account API endpoints: sign-up, login, logout, password reset and
email verification.
"""

import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from zipparents.auth.context import AuthContext
from zipparents.auth.service import (
    SignUpData,
    login,
    logout,
    resend_verification_email,
    reset_password,
    sign_up,
    sync_email_verified,
)
from zipparents.db.client import get_client, get_service_client
from zipparents.web.auth import get_auth_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class LoginRequest(BaseModel):
    email: str
    password: str


class PasswordResetRequest(BaseModel):
    email: str
    redirect_to: str | None = None


class SessionResponse(BaseModel):
    access_token: str
    refresh_token: str | None = None
    user_id: str
    role: str
    verification_status: str


@router.post("/signup", status_code=201)
async def create_account(data: SignUpData):
    """Create the account and its user document. Email confirmation follows."""
    result = sign_up(get_client(), data, store=get_service_client())
    return {
        "user_id": result.user_id,
        "requires_email_verification": result.requires_email_verification,
    }


@router.post("/login", response_model=SessionResponse)
async def sign_in(request: LoginRequest) -> SessionResponse:
    result = await login(get_client(), request.email, request.password)
    ctx = result.context
    try:
        return SessionResponse(
            access_token=result.access_token,
            refresh_token=result.refresh_token,
            user_id=ctx.user_id,
            role=ctx.role.value,
            verification_status=ctx.verification_status.value,
        )
    finally:
        # The client keeps the tokens; the server side session is per request
        ctx.close()


@router.post("/logout")
async def sign_out(ctx: AuthContext = Depends(get_auth_context)):
    logout(ctx)
    return {"success": True}


@router.post("/reset-password")
async def send_password_reset(request: PasswordResetRequest):
    reset_password(get_client(), request.email, request.redirect_to)
    return {"success": True}


@router.post("/resend-verification")
async def resend_verification(ctx: AuthContext = Depends(get_auth_context)):
    resend_verification_email(ctx)
    return {"success": True}


@router.post("/verify-email")
async def refresh_email_verification(ctx: AuthContext = Depends(get_auth_context)):
    """Pick up a confirmed email address from the auth provider."""
    return {"email_verified": sync_email_verified(ctx)}


@router.get("/me")
async def whoami(ctx: AuthContext = Depends(get_auth_context)):
    return {
        "user_id": ctx.user_id,
        "email": ctx.email,
        "role": ctx.role.value,
        "verification_status": ctx.verification_status.value,
    }
