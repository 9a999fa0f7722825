"""Community events."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EventStatus(str, Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventAgeRange(str, Enum):
    """Children's age ranges an event is aimed at."""
    AGE_0_2 = "0-2"
    AGE_3_5 = "3-5"
    AGE_6_8 = "6-8"
    AGE_9_12 = "9-12"
    AGE_13_PLUS = "13+"
    ALL_AGES = "all-ages"


class Event(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    organizer_id: str
    title: str
    description: str
    location: str
    zip_code: str
    start_time: datetime
    end_time: datetime
    age_ranges: list[EventAgeRange] = Field(default_factory=list)
    max_attendees: int | None = None
    attendee_count: int = 0
    attendee_ids: list[str] = Field(default_factory=list)
    status: EventStatus = EventStatus.UPCOMING
    image_url: str | None = None
    safety_notes: str | None = None
    is_public_place: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None

    @property
    def is_full(self) -> bool:
        return self.max_attendees is not None and self.attendee_count >= self.max_attendees


class EventComment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    event_id: str
    author_id: str
    content: str
    created_at: datetime | None = None
    updated_at: datetime | None = None
