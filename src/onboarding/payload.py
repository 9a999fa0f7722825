"""
Onboarding Payload.

Turns the accumulated wizard fields into the single merge update written
to the user's record. Only fields the wizard edits are ever included, so
submission cannot disturb anything else on the record (email, phone,
verification, role and so on).
"""

from typing import Any

from zipparents.config import settings
from zipparents.models.user import User
from zipparents.profiles.validation import calculate_profile_completeness

from .state import OnboardingState

# Every field the wizard can change, in step order
WIZARD_FIELDS = (
    "display_name",
    "zip_code",
    "age_range",
    "bio",
    "relationship_status",
    "children_age_ranges",
    "interests",
    "privacy_settings",
)


def build_profile_update(
    state: OnboardingState,
    current: User | None = None,
    photo_url: str | None = None,
    updated_at: str | None = None,
) -> dict[str, Any]:
    """
    The merge update for a finished wizard.

    Args:
        state: Wizard state that passed step 4
        current: The user's record as it is now, for the completeness score
        photo_url: URL of a photo uploaded during this submission
        updated_at: Timestamp to stamp on the record

    Returns:
        Column -> value dict including onboarding_completed and
        profile_completeness
    """
    update = {name: state.fields[name] for name in WIZARD_FIELDS if name in state.fields}
    if photo_url:
        update["photo_url"] = photo_url

    base = current.model_dump(mode="json") if current else {}
    update["profile_completeness"] = calculate_profile_completeness({**base, **update}, settings.min_interests)
    update["onboarding_completed"] = True
    if updated_at:
        update["updated_at"] = updated_at
    return update


def apply_profile_update(user: User, update: dict[str, Any]) -> User:
    """What the store holds after merging `update` into `user`."""
    return User.model_validate({**user.model_dump(mode="json"), **update})
