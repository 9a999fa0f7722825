"""Event create/update forms."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator, model_validator

from zipparents.models.base import dedupe
from zipparents.models.event import EventAgeRange
from zipparents.models.user import ZIP_CODE_PATTERN

MIN_TITLE = 3
MIN_DESCRIPTION = 10
MIN_LOCATION = 3
MIN_CAPACITY = 2
MAX_COMMENT = 1000


def _aware(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC."""
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _check_title(v: str) -> str:
    v = v.strip()
    if len(v) < MIN_TITLE:
        raise ValueError("Event title must be at least 3 characters")
    return v


def _check_description(v: str) -> str:
    v = v.strip()
    if len(v) < MIN_DESCRIPTION:
        raise ValueError("Event description must be at least 10 characters")
    return v


def _check_location(v: str) -> str:
    v = v.strip()
    if len(v) < MIN_LOCATION:
        raise ValueError("Event location is required")
    return v


def _check_age_ranges(v: list[EventAgeRange]) -> list[EventAgeRange]:
    if not v:
        raise ValueError("At least one age range must be selected")
    return dedupe(v)


class EventCreate(BaseModel):
    title: str
    description: str
    location: str
    zip_code: str
    start_time: datetime
    end_time: datetime
    age_ranges: list[EventAgeRange] = Field(default_factory=list, validate_default=True)
    max_attendees: int | None = None
    safety_notes: str | None = None
    is_public_place: bool = True

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        return _check_title(v)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str) -> str:
        return _check_description(v)

    @field_validator("location")
    @classmethod
    def check_location(cls, v: str) -> str:
        return _check_location(v)

    @field_validator("age_ranges")
    @classmethod
    def check_age_ranges(cls, v: list[EventAgeRange]) -> list[EventAgeRange]:
        return _check_age_ranges(v)

    @field_validator("zip_code")
    @classmethod
    def check_zip(cls, v: str) -> str:
        v = v.strip()
        if not ZIP_CODE_PATTERN.match(v):
            raise ValueError("Valid 5-digit zip code is required")
        return v

    @field_validator("start_time", "end_time")
    @classmethod
    def as_utc(cls, v: datetime) -> datetime:
        return _aware(v)

    @field_validator("max_attendees")
    @classmethod
    def check_capacity(cls, v: int | None) -> int | None:
        if v is not None and v < MIN_CAPACITY:
            raise ValueError("Max attendees must be at least 2")
        return v

    @field_validator("safety_notes")
    @classmethod
    def strip_notes(cls, v: str | None) -> str | None:
        return (v or "").strip() or None

    @model_validator(mode="after")
    def check_times(self):
        if self.start_time >= self.end_time:
            raise ValueError("End time must be after start time")
        return self


class EventUpdate(BaseModel):
    """Partial edit; None leaves a field as it is."""

    title: str | None = None
    description: str | None = None
    location: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    age_ranges: list[EventAgeRange] | None = None
    max_attendees: int | None = None
    safety_notes: str | None = None
    is_public_place: bool | None = None

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str | None) -> str | None:
        return None if v is None else _check_title(v)

    @field_validator("description")
    @classmethod
    def check_description(cls, v: str | None) -> str | None:
        return None if v is None else _check_description(v)

    @field_validator("location")
    @classmethod
    def check_location(cls, v: str | None) -> str | None:
        return None if v is None else _check_location(v)

    @field_validator("age_ranges")
    @classmethod
    def check_age_ranges(cls, v: list[EventAgeRange] | None) -> list[EventAgeRange] | None:
        return None if v is None else _check_age_ranges(v)

    @field_validator("start_time", "end_time")
    @classmethod
    def as_utc(cls, v: datetime | None) -> datetime | None:
        return None if v is None else _aware(v)

    @field_validator("max_attendees")
    @classmethod
    def check_capacity(cls, v: int | None) -> int | None:
        if v is not None and v < MIN_CAPACITY:
            raise ValueError("Max attendees must be at least 2")
        return v


class EventFilters(BaseModel):
    statuses: list[str] = Field(default_factory=list)
    zip_code: str | None = None
    age_ranges: list[EventAgeRange] = Field(default_factory=list)
    start_from: datetime | None = None
    start_to: datetime | None = None
    organizer_id: str | None = None
    attendee_id: str | None = None
    limit: int = Field(default=100, ge=1, le=100)


def check_comment(content: str | None) -> str:
    """Trimmed comment text; raises ValueError when empty or too long."""
    if not content or not content.strip():
        raise ValueError("Comment cannot be empty")
    if len(content) > MAX_COMMENT:
        raise ValueError("Comment is too long (max 1000 characters)")
    return content.strip()
