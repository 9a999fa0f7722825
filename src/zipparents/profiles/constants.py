"""Profile option lists and validation limits."""

from zipparents.models.user import AgeRange, ChildrenAgeRange, RelationshipStatus

AGE_RANGES = [r.value for r in AgeRange]
CHILDREN_AGE_RANGES = [r.value for r in ChildrenAgeRange]

INTERESTS = [
    "Playdates",
    "Parenting Tips",
    "Local Events",
    "Education",
    "Health & Wellness",
    "Activities",
    "Sports",
    "Arts & Crafts",
    "Reading",
    "Outdoor Activities",
    "Music",
    "Food & Cooking",
    "Travel",
    "Technology",
    "Work-Life Balance",
    "Special Needs",
    "Single Parenting",
    "Co-parenting",
    "Adoption",
    "Foster Care",
]

RELATIONSHIP_STATUS_LABELS = {
    RelationshipStatus.SINGLE: "Single",
    RelationshipStatus.PARTNERED: "Partnered",
    RelationshipStatus.MARRIED: "Married",
    RelationshipStatus.PREFER_NOT_TO_SAY: "Prefer not to say",
}

DISPLAY_NAME_MIN_LENGTH = 2
DISPLAY_NAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 500
MIN_INTERESTS = 3

PROFILE_PHOTO_MAX_SIZE = 5 * 1024 * 1024  # 5MB
PROFILE_PHOTO_ALLOWED_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp")

ZIP_CODE_ERROR = "Must be a valid 5-digit US zip code"
