"""
ZipParents - Account lifecycle.

Sign-up, sign-in, sign-out, password reset and email verification on
top of the hosted auth API. Backend error codes are mapped to messages
a parent can act on.
"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Callable

from pydantic import BaseModel, Field, field_validator

from zipparents.auth.age import age_verification_error, calculate_age
from zipparents.auth.context import AuthContext, open_context
from zipparents.db.adapter import StoreClient
from zipparents.db.client import execute, get_authenticated_client
from zipparents.errors import AuthError, StoreError, ValidationFailedError
from zipparents.models.base import utc_now_iso
from zipparents.models.user import normalize_zip_code

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Backend error code / message fragment -> (message, code)
_SIGN_UP_ERRORS = {
    "user_already_exists": ("This email is already registered", "email-already-in-use"),
    "already registered": ("This email is already registered", "email-already-in-use"),
    "weak_password": ("Password should be at least 6 characters", "weak-password"),
    "email_address_invalid": ("Invalid email address", "invalid-email"),
}

_LOGIN_ERRORS = {
    "invalid_credentials": ("Invalid email or password", "invalid-credentials"),
    "invalid login credentials": ("Invalid email or password", "invalid-credentials"),
    "email_not_confirmed": ("Please verify your email before logging in", "email-not-verified"),
    "over_request_rate_limit": ("Too many failed attempts. Please try again later", "too-many-requests"),
    "user_banned": ("This account has been disabled", "user-disabled"),
}


def _map_auth_error(error: Exception, table: dict[str, tuple[str, str]], fallback: str) -> AuthError:
    code = str(getattr(error, "code", "") or "").lower()
    text = str(error).lower()
    for key, (message, mapped_code) in table.items():
        if key == code or key in text:
            return AuthError(message, code=mapped_code)
    return AuthError(fallback, code=code or None)


class SignUpData(BaseModel):
    """Sign-up form."""
    email: str
    password: str
    display_name: str = Field(min_length=2, max_length=50)
    date_of_birth: date
    zip_code: str
    accepted_terms: bool = False
    accepted_privacy: bool = False

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        v = v.strip().lower()
        if "@" not in v or v.startswith("@") or v.endswith("@"):
            raise ValueError("Invalid email address")
        return v

    @field_validator("display_name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        return v.strip()


@dataclass
class SignUpResult:
    user_id: str
    requires_email_verification: bool


@dataclass
class LoginResult:
    access_token: str
    refresh_token: str | None
    context: AuthContext


def sign_up(client: StoreClient, data: SignUpData, store: StoreClient | None = None) -> SignUpResult:
    """
    Create an account and its `users` document.

    `client` talks to the auth API; `store` (defaults to `client`) writes
    the document. Age and terms are checked before the backend is called.
    """
    age_error = age_verification_error(data.date_of_birth)
    if age_error:
        raise AuthError(age_error, code="age-verification-failed")

    if not data.accepted_terms or not data.accepted_privacy:
        raise AuthError(
            "You must accept the Terms of Service and Privacy Policy",
            code="terms-not-accepted",
        )

    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise AuthError("Password should be at least 6 characters", code="weak-password")

    try:
        zip_code = normalize_zip_code(data.zip_code)
    except ValueError as e:
        raise ValidationFailedError({"zip_code": str(e)})
    if zip_code is None:
        raise ValidationFailedError({"zip_code": "Zip code is required"})

    try:
        response = client.auth.sign_up({
            "email": data.email,
            "password": data.password,
            "options": {"data": {"display_name": data.display_name}},
        })
    except Exception as e:
        logger.warning(f"Sign up failed for {data.email}: {e}")
        raise _map_auth_error(e, _SIGN_UP_ERRORS, "Failed to sign up")

    if not response or not response.user:
        raise AuthError("Failed to sign up")

    user_id = str(response.user.id)
    now = utc_now_iso()
    row = {
        "id": user_id,
        "email": data.email,
        "display_name": data.display_name,
        "email_verified": False,
        "zip_code": zip_code,
        "role": "user",
        "status": "active",
        "date_of_birth": data.date_of_birth.isoformat(),
        "age_verified": True,
        "age_verified_at": now,
        "verification_status": "unverified",
        "onboarding_completed": False,
        "created_at": now,
        "updated_at": now,
    }
    execute((store or client).table("users").insert(row), "create user document")
    logger.info(f"Created account {user_id} (age {calculate_age(data.date_of_birth)})")

    return SignUpResult(user_id=user_id, requires_email_verification=True)


async def login(
    client: StoreClient,
    email: str,
    password: str,
    client_factory: Callable[[str], StoreClient] = get_authenticated_client,
) -> LoginResult:
    """
    Sign in and open a session.

    Suspended or banned accounts are signed straight back out.
    """
    try:
        response = client.auth.sign_in_with_password({
            "email": email.strip().lower(),
            "password": password,
        })
    except Exception as e:
        logger.info(f"Login failed for {email}: {e}")
        raise _map_auth_error(e, _LOGIN_ERRORS, "Failed to login")

    if not response or not response.user or not response.session:
        raise AuthError("Invalid email or password", code="invalid-credentials")

    access_token = response.session.access_token
    user_client = client_factory(access_token)
    try:
        ctx = await open_context(
            user_client,
            user_id=str(response.user.id),
            email=response.user.email,
            access_token=access_token,
        )
    except AuthError:
        try:
            client.auth.sign_out()
        except Exception as e:
            logger.warning(f"Sign out after rejected login failed: {e}")
        raise

    return LoginResult(
        access_token=access_token,
        refresh_token=getattr(response.session, "refresh_token", None),
        context=ctx,
    )


def logout(ctx: AuthContext) -> None:
    """End the session on the backend and tear down the context."""
    try:
        ctx.store.auth.sign_out()
    except AuthError:
        raise
    except Exception as e:
        logger.error(f"Logout failed for {ctx.user_id}: {e}")
        raise AuthError("Failed to logout") from e
    finally:
        ctx.close()


def reset_password(client: StoreClient, email: str, redirect_to: str | None = None) -> None:
    """Send a password reset email."""
    options = {"redirect_to": redirect_to} if redirect_to else {}
    try:
        client.auth.reset_password_for_email(email.strip().lower(), options)
    except Exception as e:
        logger.warning(f"Password reset failed for {email}: {e}")
        raise _map_auth_error(
            e,
            {"email_address_invalid": ("Invalid email address", "invalid-email")},
            "Failed to send password reset email",
        )


def resend_verification_email(ctx: AuthContext) -> None:
    """Resend the sign-up confirmation email for the session's address."""
    if not ctx.email:
        raise AuthError("No email address on this account")
    try:
        ctx.store.auth.resend({"type": "signup", "email": ctx.email})
    except Exception as e:
        logger.warning(f"Resend verification failed for {ctx.user_id}: {e}")
        raise AuthError("Failed to send verification email") from e


def sync_email_verified(ctx: AuthContext) -> bool:
    """
    Copy the auth provider's confirmation state onto the user document.

    Returns whether the email is verified.
    """
    try:
        response = ctx.store.auth.get_user(ctx.access_token)
    except Exception as e:
        raise StoreError("Failed to read account status") from e

    confirmed = bool(response and response.user and getattr(response.user, "email_confirmed_at", None))
    if confirmed:
        execute(
            ctx.store.table("users")
            .update({"email_verified": True, "updated_at": utc_now_iso()})
            .eq("id", ctx.user_id),
            "mark email verified",
        )
    return confirmed
