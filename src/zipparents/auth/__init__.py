"""
ZipParents - Authentication.

Session contexts, age checks and the account lifecycle.
"""

from zipparents.auth.age import calculate_age, is_age_verified
from zipparents.auth.context import AuthContext, open_context, session
from zipparents.auth.service import (
    LoginResult,
    SignUpData,
    SignUpResult,
    login,
    logout,
    reset_password,
    sign_up,
)

__all__ = [
    "AuthContext",
    "LoginResult",
    "SignUpData",
    "SignUpResult",
    "calculate_age",
    "is_age_verified",
    "login",
    "logout",
    "open_context",
    "reset_password",
    "session",
    "sign_up",
]
