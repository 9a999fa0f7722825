"""
Derived profile views.

PublicProfile is never persisted; it is recomputed for every viewer
by zipparents.profiles.privacy.project().
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from zipparents.models.user import (
    AgeRange,
    ChildrenAgeRange,
    RelationshipStatus,
    VerificationStatus,
)


class Viewer(BaseModel):
    """The person looking at a profile. `None` in place of a Viewer means anonymous."""

    model_config = ConfigDict(frozen=True)

    uid: str
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED

    @property
    def is_verified(self) -> bool:
        return self.verification_status == VerificationStatus.VERIFIED


class PublicProfile(BaseModel):
    """Redacted view of a User for a given viewer."""

    uid: str
    display_name: str
    photo_url: str | None = None
    bio: str = ""
    age_range: AgeRange | None = None
    interests: list[str] = []
    children_age_ranges: list[ChildrenAgeRange] = []
    relationship_status: RelationshipStatus | None = None
    verification_status: VerificationStatus = VerificationStatus.UNVERIFIED
    profile_completeness: int = 0
    last_active: datetime | None = None

    # May be partial (first 3 digits) depending on privacy settings
    zip_code: str | None = None

    # Conditionally shown
    email: str | None = None
    phone_number: str | None = None

    # Privacy metadata
    shows_exact_location: bool = True
    is_public: bool = True

    # Attached by discovery; miles, None when unknown
    distance: float | None = None
