"""ZipParents - Profiles: validation, privacy projection and editing."""

from zipparents.profiles.privacy import can_view, project
from zipparents.profiles.service import (
    ProfileUpdate,
    get_public_profile,
    get_user,
    replace_profile_photo,
    request_verification,
    update_profile,
    upload_profile_photo,
)
from zipparents.profiles.validation import calculate_profile_completeness

__all__ = [
    "ProfileUpdate",
    "calculate_profile_completeness",
    "can_view",
    "get_public_profile",
    "get_user",
    "project",
    "replace_profile_photo",
    "request_verification",
    "update_profile",
    "upload_profile_photo",
]
