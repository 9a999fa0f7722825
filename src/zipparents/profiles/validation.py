"""
Profile field validation and completeness scoring.

Validators return an error message, or None when the value is fine.
"""

from typing import Any

from zipparents.models.user import ZIP_CODE_PATTERN, User, age_range_from_age
from zipparents.profiles.constants import (
    BIO_MAX_LENGTH,
    DISPLAY_NAME_MAX_LENGTH,
    DISPLAY_NAME_MIN_LENGTH,
    MIN_INTERESTS,
    PROFILE_PHOTO_ALLOWED_TYPES,
    PROFILE_PHOTO_MAX_SIZE,
    ZIP_CODE_ERROR,
)

__all__ = [
    "age_range_from_age",
    "calculate_profile_completeness",
    "validate_bio",
    "validate_display_name",
    "validate_interests",
    "validate_profile_photo",
    "validate_zip_code",
]

# Completeness weights. They sum to 110 and the score is capped at 100.
COMPLETENESS_WEIGHTS = {
    "display_name": 10,
    "bio": 10,
    "age_range": 10,
    "zip_code": 10,
    "photo_url": 15,
    "interests": 15,
    "children_age_ranges": 10,
    "relationship_status": 10,
    "phone_number": 10,
    "privacy_settings": 10,
}


def validate_zip_code(zip_code: Any) -> str | None:
    if not isinstance(zip_code, str) or not ZIP_CODE_PATTERN.match(zip_code.strip()):
        return ZIP_CODE_ERROR
    return None


def validate_display_name(name: Any) -> str | None:
    if not isinstance(name, str) or not name.strip():
        return "Display name is required"
    trimmed = name.strip()
    if len(trimmed) < DISPLAY_NAME_MIN_LENGTH:
        return f"Display name must be at least {DISPLAY_NAME_MIN_LENGTH} characters"
    if len(trimmed) > DISPLAY_NAME_MAX_LENGTH:
        return f"Display name must be less than {DISPLAY_NAME_MAX_LENGTH} characters"
    return None


def validate_bio(bio: Any) -> str | None:
    """Bio is optional; only the length is checked."""
    if not bio:
        return None
    if not isinstance(bio, str):
        return "Bio must be text"
    if len(bio) > BIO_MAX_LENGTH:
        return f"Bio must be less than {BIO_MAX_LENGTH} characters"
    return None


def validate_interests(interests: Any, min_count: int = MIN_INTERESTS) -> str | None:
    if not isinstance(interests, (list, tuple)):
        return "Interests must be a list"
    unique = {str(i).strip() for i in interests if str(i).strip()}
    if len(unique) < min_count:
        return f"Please select at least {min_count} interests"
    return None


def validate_profile_photo(content_type: str | None, size: int) -> str | None:
    """Check MIME type and size before anything is uploaded."""
    if content_type not in PROFILE_PHOTO_ALLOWED_TYPES:
        return "Please upload a JPEG, PNG, or WebP image"
    if size > PROFILE_PHOTO_MAX_SIZE:
        return "Image must be less than 5MB"
    if size <= 0:
        return "Image file is empty"
    return None


def calculate_profile_completeness(user: User | dict, min_interests: int = MIN_INTERESTS) -> int:
    """
    Score a (possibly partial) profile from 0 to 100.

    Accepts a User or a dict of user fields. Interests count once at
    least `min_interests` distinct ones are set; callers pass the
    configured minimum so the score agrees with the onboarding gate.
    """
    data = user.model_dump() if isinstance(user, User) else user

    def present(name: str) -> bool:
        value = data.get(name)
        if isinstance(value, str):
            return bool(value.strip())
        return bool(value)

    score = 0
    for name in ("display_name", "bio", "age_range", "photo_url",
                 "children_age_ranges", "relationship_status", "phone_number",
                 "privacy_settings"):
        if present(name):
            score += COMPLETENESS_WEIGHTS[name]

    zip_code = data.get("zip_code")
    if zip_code and validate_zip_code(zip_code) is None:
        score += COMPLETENESS_WEIGHTS["zip_code"]

    interests = data.get("interests") or []
    if len(set(interests)) >= min_interests:
        score += COMPLETENESS_WEIGHTS["interests"]

    # Weights add up to 110; a complete profile without a phone still reads 100
    return min(score, 100)
