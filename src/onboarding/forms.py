"""
Onboarding Forms - per-step validation gates.

Each wizard step has a form. A step passes only when its form validates;
otherwise the wizard stays put and shows the field -> message map.
No network call is made by anything in this module.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from zipparents.config import settings
from zipparents.models.base import dedupe, validation_errors
from zipparents.models.user import (
    AgeRange,
    ChildrenAgeRange,
    PrivacySettings,
    ProfileVisibility,
    RelationshipStatus,
)
from zipparents.profiles.constants import (
    AGE_RANGES,
    CHILDREN_AGE_RANGES,
    INTERESTS,
    PROFILE_PHOTO_ALLOWED_TYPES,
    PROFILE_PHOTO_MAX_SIZE,
    RELATIONSHIP_STATUS_LABELS,
)
from zipparents.profiles.validation import (
    validate_bio,
    validate_display_name,
    validate_interests,
    validate_zip_code,
)

logger = logging.getLogger(__name__)

VALID_INTERESTS = set(INTERESTS)


# =============================================================================
# Step Forms
# =============================================================================


class BasicInfoForm(BaseModel):
    """Step 1: who you are and where."""

    display_name: str = Field(default="", validate_default=True)
    zip_code: str = Field(default="", validate_default=True)
    age_range: AgeRange | None = Field(default=None, validate_default=True)

    @field_validator("display_name", mode="before")
    @classmethod
    def check_display_name(cls, v: Any) -> str:
        error = validate_display_name(v)
        if error:
            raise ValueError(error)
        return v.strip()

    @field_validator("zip_code", mode="before")
    @classmethod
    def check_zip_code(cls, v: Any) -> str:
        error = validate_zip_code(v)
        if error:
            raise ValueError(error)
        return v.strip()

    @field_validator("age_range", mode="before")
    @classmethod
    def check_age_range(cls, v: Any) -> Any:
        if v is None or v == "":
            raise ValueError("Please select your age range")
        return v


class AboutYouForm(BaseModel):
    """Step 2: bio, relationship status and children."""

    bio: str = ""
    relationship_status: RelationshipStatus | None = None
    children_age_ranges: list[ChildrenAgeRange] = Field(default_factory=list, validate_default=True)

    @field_validator("bio", mode="before")
    @classmethod
    def check_bio(cls, v: Any) -> str:
        error = validate_bio(v)
        if error:
            raise ValueError(error)
        return (v or "").strip()

    @field_validator("relationship_status", mode="before")
    @classmethod
    def blank_status(cls, v: Any) -> Any:
        return None if v == "" else v

    @field_validator("children_age_ranges")
    @classmethod
    def at_least_one_child_range(cls, v: list[ChildrenAgeRange]) -> list[ChildrenAgeRange]:
        if not v:
            raise ValueError("Please select at least one age range")
        return dedupe(v)


class InterestsForm(BaseModel):
    """Step 3: interests. Unknown interests are accepted."""

    interests: list[str] = Field(default_factory=list, validate_default=True)

    @field_validator("interests", mode="before")
    @classmethod
    def normalize_interests(cls, v: Any) -> list[str]:
        if not v:
            v = []
        if not isinstance(v, (list, tuple)):
            raise ValueError("Interests must be a list")

        normalized = []
        for interest in v:
            if not isinstance(interest, str) or not interest.strip():
                continue
            interest = interest.strip()
            if interest not in VALID_INTERESTS:
                logger.info(f"Unknown interest (accepted): {interest}")
            normalized.append(interest)

        normalized = dedupe(normalized)
        error = validate_interests(normalized, settings.min_interests)
        if error:
            raise ValueError(error)
        return normalized


class PrivacyPhotoForm(BaseModel):
    """Step 4: privacy switches. Anything untouched keeps its default."""

    privacy_settings: PrivacySettings = Field(default_factory=PrivacySettings)

    @field_validator("privacy_settings", mode="before")
    @classmethod
    def fill_defaults(cls, v: Any) -> Any:
        if v is None:
            return PrivacySettings()
        if isinstance(v, dict):
            return {**PrivacySettings().model_dump(mode="json"), **v}
        return v


# Keyed by step number
STEP_FORMS: dict[int, type[BaseModel]] = {
    1: BasicInfoForm,
    2: AboutYouForm,
    3: InterestsForm,
    4: PrivacyPhotoForm,
}


# =============================================================================
# Validation
# =============================================================================


def step_fields(step: int) -> list[str]:
    """Names of the fields collected on `step`."""
    return list(STEP_FORMS[step].model_fields)


def validate_step(step: int, values: dict[str, Any]) -> tuple[dict[str, Any], dict[str, str]]:
    """
    Run the gate for `step` against the accumulated `values`.

    Returns:
        (cleaned_fields, errors) - cleaned_fields is empty when errors is not
    """
    form_cls = STEP_FORMS.get(step)
    if form_cls is None:
        raise ValueError(f"No form for step {step}")

    fields = {name: values[name] for name in form_cls.model_fields if name in values}
    try:
        form = form_cls.model_validate(fields)
    except ValidationError as e:
        return {}, validation_errors(e)
    return form.model_dump(mode="json"), {}


# =============================================================================
# API Response Helpers
# =============================================================================


def get_form_options() -> dict:
    """
    Get all option lists the wizard renders.

    Returns dict with age ranges, children age ranges, relationship
    statuses, suggested interests, privacy defaults and photo limits.
    """
    return {
        "age_ranges": AGE_RANGES,
        "children_age_ranges": CHILDREN_AGE_RANGES,
        "relationship_statuses": [
            {"id": status.value, "label": label}
            for status, label in RELATIONSHIP_STATUS_LABELS.items()
        ],
        "interests": INTERESTS,
        "min_interests": settings.min_interests,
        "profile_visibility": [v.value for v in ProfileVisibility],
        "default_privacy_settings": PrivacySettings().model_dump(mode="json"),
        "photo": {
            "allowed_types": list(PROFILE_PHOTO_ALLOWED_TYPES),
            "max_size": PROFILE_PHOTO_MAX_SIZE,
        },
    }
