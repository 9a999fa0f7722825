"""ZipParents - Community events, RSVPs and comments."""

from zipparents.events.forms import EventCreate, EventFilters, EventUpdate
from zipparents.events.service import (
    EventImage,
    add_comment,
    cancel_event,
    cancel_rsvp,
    create_event,
    derive_status,
    get_event,
    list_comments,
    list_events,
    rsvp,
    update_event,
)

__all__ = [
    "EventCreate",
    "EventFilters",
    "EventImage",
    "EventUpdate",
    "add_comment",
    "cancel_event",
    "cancel_rsvp",
    "create_event",
    "derive_status",
    "get_event",
    "list_comments",
    "list_events",
    "rsvp",
    "update_event",
]
