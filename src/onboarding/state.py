"""
Onboarding State Management.

The wizard is a plain value: current step, accumulated fields, per-field
errors and an optional pending photo. It only changes through the pure
transition functions below, so the whole flow can be exercised without
any UI or network.

    BASIC_INFO -> ABOUT_YOU -> INTERESTS -> PRIVACY_PHOTO -> COMPLETE

COMPLETE is reached only by a successful submission (see submit.py).
"""

import base64
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from typing import Any

from zipparents.auth.age import calculate_age
from zipparents.models.base import utc_now_iso
from zipparents.models.user import (
    AgeRange,
    PrivacySettings,
    RelationshipStatus,
    User,
    age_range_from_age,
)
from zipparents.profiles.validation import validate_profile_photo

from .forms import validate_step


class OnboardingStep(Enum):
    """Wizard steps, in order."""
    BASIC_INFO = 1       # display name, zip code, age range
    ABOUT_YOU = 2        # bio, relationship status, children
    INTERESTS = 3
    PRIVACY_PHOTO = 4    # privacy settings, optional photo
    COMPLETE = 5


LAST_STEP = OnboardingStep.PRIVACY_PHOTO

DEFAULT_AGE_RANGE = AgeRange.AGE_25_34
DEFAULT_RELATIONSHIP_STATUS = RelationshipStatus.PREFER_NOT_TO_SAY


class InvalidTransition(Exception):
    """A transition was requested that the current step does not allow."""


@dataclass
class PendingPhoto:
    """Photo chosen on step 4, uploaded only on submission."""
    data: bytes
    content_type: str
    filename: str = "photo"

    def to_dict(self) -> dict:
        return {
            "data": base64.b64encode(self.data).decode("ascii"),
            "content_type": self.content_type,
            "filename": self.filename,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PendingPhoto":
        return cls(
            data=base64.b64decode(data["data"]),
            content_type=data["content_type"],
            filename=data.get("filename", "photo"),
        )


@dataclass
class OnboardingState:
    """
    One user's pass through the wizard.

    `fields` holds JSON-ready values keyed by User field name. Values from
    every step are kept while moving back and forth; only `advance` replaces
    them with their validated form.
    """
    user_id: str = ""
    current_step: OnboardingStep = OnboardingStep.BASIC_INFO
    fields: dict[str, Any] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    photo: PendingPhoto | None = None

    # Set when step 4 passes; cleared by back()
    ready_to_submit: bool = False
    submit_error: str | None = None
    redirect_to: str | None = None

    # Metadata
    created_at: str = ""
    updated_at: str = ""

    def __post_init__(self):
        """Set timestamps if not provided."""
        now = utc_now_iso()
        if not self.created_at:
            self.created_at = now
        if not self.updated_at:
            self.updated_at = now

    @property
    def is_complete(self) -> bool:
        return self.current_step == OnboardingStep.COMPLETE

    def to_dict(self) -> dict:
        """Serialize for API responses. Photo bytes are base64 encoded."""
        data = asdict(self)
        data["current_step"] = self.current_step.value
        data["photo"] = self.photo.to_dict() if self.photo else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "OnboardingState":
        data = dict(data)
        if "current_step" in data:
            data["current_step"] = OnboardingStep(data["current_step"])
        if isinstance(data.get("photo"), dict):
            data["photo"] = PendingPhoto.from_dict(data["photo"])
        return cls(**data)


# =============================================================================
# Initial State
# =============================================================================


def initial_fields(user: User | None = None) -> dict[str, Any]:
    """
    Field values the wizard opens with.

    Anything already on the user's record wins over the defaults. A record
    with a date of birth but no age range gets the range derived from it.
    """
    privacy = PrivacySettings()
    fields: dict[str, Any] = {
        "display_name": "",
        "zip_code": "",
        "age_range": DEFAULT_AGE_RANGE.value,
        "bio": "",
        "relationship_status": DEFAULT_RELATIONSHIP_STATUS.value,
        "children_age_ranges": [],
        "interests": [],
        "privacy_settings": privacy.model_dump(mode="json"),
        "photo_url": None,
    }
    if user is None:
        return fields

    if user.display_name:
        fields["display_name"] = user.display_name
    if user.zip_code:
        fields["zip_code"] = user.zip_code
    if user.age_range:
        fields["age_range"] = user.age_range.value
    elif user.date_of_birth:
        fields["age_range"] = age_range_from_age(calculate_age(user.date_of_birth)).value
    if user.bio:
        fields["bio"] = user.bio
    if user.relationship_status:
        fields["relationship_status"] = user.relationship_status.value
    if user.children_age_ranges:
        fields["children_age_ranges"] = [r.value for r in user.children_age_ranges]
    if user.interests:
        fields["interests"] = list(user.interests)
    fields["privacy_settings"] = user.privacy_settings.model_dump(mode="json")
    fields["photo_url"] = user.photo_url
    return fields


def start(user_id: str, user: User | None = None) -> OnboardingState:
    """Open the wizard on step 1, pre-populated from any existing record."""
    return OnboardingState(user_id=user_id, fields=initial_fields(user))


# =============================================================================
# Transitions
# =============================================================================


def _require_open(state: OnboardingState) -> None:
    if state.is_complete:
        raise InvalidTransition("Onboarding is already complete")


def advance(state: OnboardingState, values: dict[str, Any] | None = None) -> OnboardingState:
    """
    "Continue" from the current step.

    `values` are merged into the accumulated fields first, so what the user
    typed survives a failed attempt. On failure the step does not change and
    `errors` maps field -> message. On success the validated fields replace
    the raw ones and the wizard moves on; passing step 4 sets
    `ready_to_submit` instead of moving (submission is a separate action).
    """
    _require_open(state)

    fields = {**state.fields, **(values or {})}
    step = state.current_step
    cleaned, errors = validate_step(step.value, fields)

    if step == LAST_STEP and state.photo is not None:
        photo_error = validate_profile_photo(state.photo.content_type, len(state.photo.data))
        if photo_error:
            errors = {**errors, "photo": photo_error}

    if errors:
        return replace(
            state,
            fields=fields,
            errors=errors,
            ready_to_submit=False,
            updated_at=utc_now_iso(),
        )

    fields.update(cleaned)
    if step == LAST_STEP:
        return replace(
            state,
            fields=fields,
            errors={},
            ready_to_submit=True,
            submit_error=None,
            updated_at=utc_now_iso(),
        )
    return replace(
        state,
        current_step=OnboardingStep(step.value + 1),
        fields=fields,
        errors={},
        updated_at=utc_now_iso(),
    )


def back(state: OnboardingState) -> OnboardingState:
    """
    "Back" to the previous step.

    Keeps every entered value and does not re-validate. No-op on step 1.
    """
    _require_open(state)
    if state.current_step == OnboardingStep.BASIC_INFO:
        return state
    return replace(
        state,
        current_step=OnboardingStep(state.current_step.value - 1),
        fields=dict(state.fields),
        errors={},
        ready_to_submit=False,
        submit_error=None,
        updated_at=utc_now_iso(),
    )


def attach_photo(
    state: OnboardingState,
    data: bytes,
    content_type: str,
    filename: str = "photo",
) -> OnboardingState:
    """
    Stage a photo for upload on submission.

    Type and size are checked here, before anything is sent anywhere. A
    rejected photo leaves the previously staged one (if any) in place.
    """
    _require_open(state)
    error = validate_profile_photo(content_type, len(data))
    if error:
        return reject_photo(state, error)

    errors = {k: v for k, v in state.errors.items() if k != "photo"}
    return replace(
        state,
        photo=PendingPhoto(data=data, content_type=content_type, filename=filename),
        errors=errors,
        updated_at=utc_now_iso(),
    )


def reject_photo(state: OnboardingState, message: str) -> OnboardingState:
    """Record a photo error. The staged photo, if any, stays."""
    _require_open(state)
    return replace(state, errors={**state.errors, "photo": message}, updated_at=utc_now_iso())


def remove_photo(state: OnboardingState) -> OnboardingState:
    _require_open(state)
    errors = {k: v for k, v in state.errors.items() if k != "photo"}
    return replace(state, photo=None, errors=errors, updated_at=utc_now_iso())


def complete(state: OnboardingState, photo_url: str | None, redirect_to: str) -> OnboardingState:
    """Terminal state after a successful submission."""
    fields = dict(state.fields)
    if photo_url:
        fields["photo_url"] = photo_url
    return replace(
        state,
        current_step=OnboardingStep.COMPLETE,
        fields=fields,
        errors={},
        photo=None,
        ready_to_submit=False,
        submit_error=None,
        redirect_to=redirect_to,
        updated_at=utc_now_iso(),
    )


def fail_submission(state: OnboardingState, message: str) -> OnboardingState:
    """Stay on step 4 with everything kept so the user can retry."""
    return replace(state, submit_error=message, updated_at=utc_now_iso())


def completed_steps(state: OnboardingState) -> list[int]:
    return [s.value for s in OnboardingStep if s.value < state.current_step.value]
