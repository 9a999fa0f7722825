"""
User records and the value types they are built from.

The `users` table is owned by the backend. Rows are decoded into `User`
at the store boundary (see `decode_user`).
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from zipparents.models.base import decode_row, dedupe

ZIP_CODE_PATTERN = re.compile(r"^[0-9]{5}$")


class AgeRange(str, Enum):
    """Parent's own age bracket."""
    AGE_18_24 = "18-24"
    AGE_25_34 = "25-34"
    AGE_35_44 = "35-44"
    AGE_45_54 = "45-54"
    AGE_55_PLUS = "55+"


class ChildrenAgeRange(str, Enum):
    """Age brackets of a parent's children."""
    EXPECTING = "Expecting"
    AGE_0_2 = "0-2"
    AGE_3_5 = "3-5"
    AGE_6_12 = "6-12"
    AGE_13_17 = "13-17"
    AGE_18_PLUS = "18+"


class RelationshipStatus(str, Enum):
    SINGLE = "single"
    PARTNERED = "partnered"
    MARRIED = "married"
    PREFER_NOT_TO_SAY = "prefer-not-to-say"


class ProfileVisibility(str, Enum):
    """Who may see a user's public profile."""
    PUBLIC = "public"
    VERIFIED_ONLY = "verified-only"
    PRIVATE = "private"


class VerificationStatus(str, Enum):
    """Moderation-assigned trust level."""
    UNVERIFIED = "unverified"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class UserRole(str, Enum):
    USER = "user"
    MODERATOR = "moderator"
    ADMIN = "admin"


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"
    BANNED = "banned"


class PrivacySettings(BaseModel):
    """Per-user visibility switches. Defaults apply to anything left untouched."""

    show_email: bool = False
    show_phone: bool = False
    show_exact_location: bool = True
    profile_visibility: ProfileVisibility = ProfileVisibility.PUBLIC


def normalize_zip_code(value: Any) -> str | None:
    """Strip a zip code; empty means unset. Raises ValueError if not 5 digits."""
    if value is None:
        return None
    zip_code = str(value).strip()
    if not zip_code:
        return None
    if not ZIP_CODE_PATTERN.match(zip_code):
        raise ValueError("Must be a valid 5-digit US zip code")
    return zip_code


class User(BaseModel):
    """
    Authoritative user record.

    Interests and children age ranges have set semantics: duplicates are
    dropped on decode, first-occurrence order is kept for display.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    uid: str = Field(validation_alias=AliasChoices("uid", "id"))
    email: str = ""

    # Profile
    display_name: str = ""
    photo_url: str | None = None
    bio: str = ""
    zip_code: str | None = None
    phone_number: str | None = None
    age_range: AgeRange | None = None
    interests: list[str] = Field(default_factory=list)
    children_age_ranges: list[ChildrenAgeRange] = Field(default_factory=list)
    relationship_status: RelationshipStatus | None = None

    # Verification
    email_verified: bool = False
    age_verified: bool = False
    date_of_birth: date | None = None
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED

    privacy_settings: PrivacySettings = Field(default_factory=PrivacySettings)

    # Account
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.ACTIVE
    onboarding_completed: bool = False
    profile_completeness: int = 0

    # Lifecycle
    last_active: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("zip_code", mode="before")
    @classmethod
    def validate_zip_code(cls, v: Any) -> str | None:
        return normalize_zip_code(v)

    @field_validator("bio", "email", "display_name", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @field_validator("interests", "children_age_ranges", mode="before")
    @classmethod
    def as_unique_list(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, (list, tuple, set)):
            if not all(isinstance(item, str) for item in v):
                raise ValueError("List entries must be strings")
            return dedupe(list(v))
        return v

    @field_validator("privacy_settings", mode="before")
    @classmethod
    def default_privacy(cls, v: Any) -> Any:
        return PrivacySettings() if v is None else v

    @field_validator("verification_status", "role", "status", mode="before")
    @classmethod
    def default_enum(cls, v: Any, info) -> Any:
        if v is not None:
            return v
        return cls.model_fields[info.field_name].default

    @property
    def is_admin(self) -> bool:
        return self.role in (UserRole.ADMIN, UserRole.MODERATOR)


def decode_user(row: Any) -> User:
    """Decode a `users` row, raising DecodeError on shape mismatch."""
    return decode_row(User, "users", row)


def age_range_from_age(age: int) -> AgeRange:
    """Map an age in years to its bracket."""
    if 18 <= age <= 24:
        return AgeRange.AGE_18_24
    if 25 <= age <= 34:
        return AgeRange.AGE_25_34
    if 35 <= age <= 44:
        return AgeRange.AGE_35_44
    if 45 <= age <= 54:
        return AgeRange.AGE_45_54
    return AgeRange.AGE_55_PLUS
