"""
ZipParents - Profile service.

Reading, editing and verifying user profiles. Reads of other users'
profiles always go through the privacy projection.
"""

import logging
import time
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from zipparents.auth.context import AuthContext
from zipparents.config import settings
from zipparents.db.client import (
    execute,
    fetch_one,
    insert_one,
    remove_file,
    storage_path_from_url,
    update_one,
    upload_file,
)
from zipparents.errors import ConflictError, NotFoundError, StoreError, ValidationFailedError
from zipparents.models.base import decode_row, dedupe, utc_now_iso, validation_errors
from zipparents.models.profile import PublicProfile
from zipparents.models.safety import VerificationRequest
from zipparents.models.user import (
    AgeRange,
    ChildrenAgeRange,
    PrivacySettings,
    RelationshipStatus,
    User,
    VerificationStatus,
    decode_user,
    normalize_zip_code,
)
from zipparents.profiles.privacy import project
from zipparents.profiles.validation import (
    calculate_profile_completeness,
    validate_bio,
    validate_display_name,
    validate_interests,
    validate_profile_photo,
)
from zipparents.safety.service import is_blocked

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


class ProfileUpdate(BaseModel):
    """
    Editable profile fields. Anything left as None is not touched.

    Identity, verification and account fields cannot be edited here.
    """

    model_config = ConfigDict(extra="forbid")

    display_name: str | None = None
    bio: str | None = None
    zip_code: str | None = None
    phone_number: str | None = None
    age_range: AgeRange | None = None
    interests: list[str] | None = None
    children_age_ranges: list[ChildrenAgeRange] | None = None
    relationship_status: RelationshipStatus | None = None
    privacy_settings: PrivacySettings | None = None

    @field_validator("display_name")
    @classmethod
    def check_display_name(cls, v: str | None) -> str | None:
        if v is None:
            return v
        error = validate_display_name(v)
        if error:
            raise ValueError(error)
        return v.strip()

    @field_validator("bio")
    @classmethod
    def check_bio(cls, v: str | None) -> str | None:
        error = validate_bio(v)
        if error:
            raise ValueError(error)
        return v.strip() if v else v

    @field_validator("zip_code")
    @classmethod
    def check_zip_code(cls, v: str | None) -> str | None:
        if v is None:
            return v
        zip_code = normalize_zip_code(v)
        if zip_code is None:
            raise ValueError("Zip code is required")
        return zip_code

    @field_validator("phone_number")
    @classmethod
    def strip_phone(cls, v: str | None) -> str | None:
        return v.strip() if v else v

    @field_validator("interests")
    @classmethod
    def check_interests(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        interests = dedupe([i.strip() for i in v if i and i.strip()])
        error = validate_interests(interests, settings.min_interests)
        if error:
            raise ValueError(error)
        return interests

    @field_validator("children_age_ranges")
    @classmethod
    def check_children(cls, v: list[ChildrenAgeRange] | None) -> list[ChildrenAgeRange] | None:
        if v is None:
            return v
        if not v:
            raise ValueError("Please select at least one age range")
        return dedupe(v)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


# =============================================================================
# Reads
# =============================================================================


async def get_user(ctx: AuthContext, uid: str) -> User | None:
    """Authoritative record, or None if there is no such user."""
    row = fetch_one(ctx.store, "users", "load user", id=uid)
    return decode_user(row) if row else None


async def get_own_profile(ctx: AuthContext) -> User:
    user = await get_user(ctx, ctx.user_id)
    if user is None:
        raise NotFoundError("Profile not found")
    return user


async def get_public_profile(ctx: AuthContext, uid: str) -> PublicProfile | None:
    """
    What the session's user may see of `uid`.

    None when the profile does not exist, is hidden by its privacy
    settings, or either side has blocked the other.
    """
    if uid != ctx.user_id and await is_blocked(ctx, uid):
        return None
    user = await get_user(ctx, uid)
    if user is None:
        return None
    return project(user, ctx.viewer())


# =============================================================================
# Writes
# =============================================================================


def parse_profile_update(data: dict[str, Any]) -> ProfileUpdate:
    try:
        return ProfileUpdate.model_validate(data)
    except ValidationError as e:
        raise ValidationFailedError(validation_errors(e))


async def update_profile(ctx: AuthContext, update: ProfileUpdate | dict[str, Any]) -> User:
    """Merge validated edits into the user's record and rescore completeness."""
    if isinstance(update, dict):
        update = parse_profile_update(update)

    current = await get_own_profile(ctx)
    changes = update.changes()
    merged = {**current.model_dump(mode="json"), **changes}

    changes["profile_completeness"] = calculate_profile_completeness(merged, settings.min_interests)
    changes["updated_at"] = utc_now_iso()

    row = update_one(ctx.store, "users", ctx.user_id, changes, "update profile")
    logger.info(f"Updated profile {ctx.user_id}: {sorted(changes)}")
    return decode_user(row)


def photo_path(user_id: str, filename: str | None, content_type: str) -> str:
    """Storage path for a new photo: <user>/<millis>.<ext>."""
    extension = None
    if filename and "." in filename:
        extension = filename.rsplit(".", 1)[1].lower()
    extension = extension or _EXTENSIONS.get(content_type, "jpg")
    return f"{user_id}/{int(time.time() * 1000)}.{extension}"


async def upload_profile_photo(
    ctx: AuthContext,
    data: bytes,
    content_type: str,
    filename: str | None = None,
) -> str:
    """Validate and upload a photo. Returns its public URL; the record is not changed."""
    error = validate_profile_photo(content_type, len(data))
    if error:
        raise ValidationFailedError({"photo": error})

    path = photo_path(ctx.user_id, filename, content_type)
    url = upload_file(ctx.store, settings.profile_photo_bucket, path, data, content_type)
    logger.info(f"Uploaded profile photo for {ctx.user_id} to {path}")
    return url


async def delete_profile_photo(ctx: AuthContext, photo_url: str) -> bool:
    """
    Remove a previously uploaded photo.

    Failures are logged and reported as False; a stale object is harmless.
    """
    path = storage_path_from_url(photo_url, settings.profile_photo_bucket)
    if not path:
        return False
    try:
        remove_file(ctx.store, settings.profile_photo_bucket, path)
        return True
    except StoreError as e:
        logger.warning(f"Could not delete old photo for {ctx.user_id}: {e}")
        return False


async def replace_profile_photo(
    ctx: AuthContext,
    data: bytes,
    content_type: str,
    filename: str | None = None,
) -> str:
    """Upload a new photo, point the record at it, then delete the old one."""
    current = await get_own_profile(ctx)
    url = await upload_profile_photo(ctx, data, content_type, filename)

    merged = {**current.model_dump(mode="json"), "photo_url": url}
    try:
        update_one(
            ctx.store,
            "users",
            ctx.user_id,
            {
                "photo_url": url,
                "profile_completeness": calculate_profile_completeness(merged, settings.min_interests),
                "updated_at": utc_now_iso(),
            },
            "update profile photo",
        )
    except StoreError:
        await delete_profile_photo(ctx, url)
        raise

    if current.photo_url:
        await delete_profile_photo(ctx, current.photo_url)
    return url


async def request_verification(ctx: AuthContext, notes: str = "") -> VerificationRequest:
    """Queue the user for manual verification review."""
    user = await get_own_profile(ctx)
    if user.verification_status == VerificationStatus.VERIFIED:
        raise ConflictError("Your profile is already verified")
    if user.verification_status == VerificationStatus.PENDING:
        raise ConflictError("A verification request is already pending")

    now = utc_now_iso()
    row = insert_one(
        ctx.store,
        "verification_requests",
        {
            "user_id": user.uid,
            "user_email": user.email,
            "display_name": user.display_name,
            "notes": notes.strip(),
            "status": "pending",
            "requested_at": now,
        },
        "create verification request",
    )
    update_one(
        ctx.store,
        "users",
        ctx.user_id,
        {
            "verification_status": VerificationStatus.PENDING.value,
            "verification_requested_at": now,
            "updated_at": now,
        },
        "mark verification pending",
    )
    ctx.verification_status = VerificationStatus.PENDING
    logger.info(f"Verification requested by {ctx.user_id}")
    return decode_row(VerificationRequest, "verification_requests", row)


async def touch_last_active(ctx: AuthContext) -> None:
    execute(
        ctx.store.table("users").update({"last_active": utc_now_iso()}).eq("id", ctx.user_id),
        "update last active",
    )
