"""
ZipParents - Record types.

Everything read from the backend is decoded into these models at the
store boundary.
"""

from zipparents.models.base import decode_row, decode_rows, validation_errors
from zipparents.models.profile import PublicProfile, Viewer
from zipparents.models.user import (
    AgeRange,
    ChildrenAgeRange,
    PrivacySettings,
    ProfileVisibility,
    RelationshipStatus,
    User,
    UserRole,
    UserStatus,
    VerificationStatus,
    decode_user,
)

__all__ = [
    "AgeRange",
    "ChildrenAgeRange",
    "PrivacySettings",
    "ProfileVisibility",
    "PublicProfile",
    "RelationshipStatus",
    "User",
    "UserRole",
    "UserStatus",
    "VerificationStatus",
    "Viewer",
    "decode_row",
    "decode_rows",
    "decode_user",
    "validation_errors",
]
