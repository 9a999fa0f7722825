"""
ZipParents - Privacy projection.

`project` turns an authoritative User into what a particular viewer is
allowed to see. It is pure: same user and viewer, same result.
"""

from zipparents.models.profile import PublicProfile, Viewer
from zipparents.models.user import ProfileVisibility, User

# Digits of the zip code kept when exact location is hidden
PARTIAL_ZIP_LENGTH = 3


def is_owner(user: User, viewer: Viewer | None) -> bool:
    return viewer is not None and viewer.uid == user.uid


def can_view(user: User, viewer: Viewer | None) -> bool:
    """Visibility gate, independent of field redaction."""
    if is_owner(user, viewer):
        return True
    visibility = user.privacy_settings.profile_visibility
    if visibility == ProfileVisibility.PRIVATE:
        return False
    if visibility == ProfileVisibility.VERIFIED_ONLY:
        return viewer is not None and viewer.is_verified
    return True


def partial_zip(zip_code: str | None) -> str | None:
    if not zip_code:
        return None
    return zip_code[:PARTIAL_ZIP_LENGTH]


def project(user: User, viewer: Viewer | None) -> PublicProfile | None:
    """
    Redacted profile of `user` as seen by `viewer` (None = anonymous).

    Returns None when the profile is not visible to this viewer. The owner
    always sees every field.
    """
    if not can_view(user, viewer):
        return None

    owner = is_owner(user, viewer)
    privacy = user.privacy_settings

    if owner or privacy.show_exact_location:
        zip_code = user.zip_code
    else:
        zip_code = partial_zip(user.zip_code)

    return PublicProfile(
        uid=user.uid,
        display_name=user.display_name,
        photo_url=user.photo_url,
        bio=user.bio,
        age_range=user.age_range,
        interests=list(user.interests),
        children_age_ranges=list(user.children_age_ranges),
        relationship_status=user.relationship_status,
        verification_status=user.verification_status,
        profile_completeness=user.profile_completeness,
        last_active=user.last_active,
        zip_code=zip_code,
        email=(user.email or None) if (owner or privacy.show_email) else None,
        phone_number=user.phone_number if (owner or privacy.show_phone) else None,
        shows_exact_location=privacy.show_exact_location,
        is_public=privacy.profile_visibility == ProfileVisibility.PUBLIC,
    )
