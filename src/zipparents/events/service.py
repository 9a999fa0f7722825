"""
ZipParents - Events.

Parents organize meetups; others RSVP and comment. Only the organizer
may edit or cancel. Status is derived from the clock when an event is
created or rescheduled, and `cancelled` is terminal.
"""

import logging
import time
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ValidationError

from zipparents.auth.context import AuthContext
from zipparents.config import settings
from zipparents.db.client import execute, fetch_one, insert_one, update_one, upload_file
from zipparents.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailedError
from zipparents.events.forms import EventCreate, EventFilters, EventUpdate, check_comment
from zipparents.models.base import decode_row, decode_rows, utc_now, utc_now_iso, validation_errors
from zipparents.models.event import Event, EventComment, EventStatus
from zipparents.profiles.validation import validate_profile_photo
from zipparents.safety.content_filter import sanitize_input

logger = logging.getLogger(__name__)


class EventImage(BaseModel):
    data: bytes
    content_type: str
    filename: str = "image"


def derive_status(start_time: datetime, end_time: datetime, now: datetime | None = None) -> EventStatus:
    now = now or utc_now()
    if end_time <= now:
        return EventStatus.COMPLETED
    if start_time <= now:
        return EventStatus.ONGOING
    return EventStatus.UPCOMING


def _parse(model: type[BaseModel], data: Any) -> Any:
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ValidationFailedError(validation_errors(e))


def _upload_image(ctx: AuthContext, image: EventImage) -> str:
    error = validate_profile_photo(image.content_type, len(image.data))
    if error:
        raise ValidationFailedError({"image": error})
    path = f"{ctx.user_id}/{int(time.time() * 1000)}_{image.filename}"
    return upload_file(ctx.store, settings.event_image_bucket, path, image.data, image.content_type)


def _load_event(ctx: AuthContext, event_id: str) -> Event:
    row = fetch_one(ctx.store, "events", "load event", id=event_id)
    if row is None:
        raise NotFoundError("Event not found")
    return decode_row(Event, "events", row)


def _require_organizer(ctx: AuthContext, event: Event, action: str) -> None:
    if event.organizer_id != ctx.user_id:
        raise PermissionDeniedError(f"Only the event organizer can {action} this event")


async def create_event(
    ctx: AuthContext,
    form: EventCreate | dict,
    image: EventImage | None = None,
) -> Event:
    form = _parse(EventCreate, form)
    now = utc_now()
    if form.start_time < now:
        raise ValidationFailedError({"start_time": "Event cannot start in the past"})

    image_url = _upload_image(ctx, image) if image else None
    timestamp = now.isoformat()
    row = insert_one(
        ctx.store,
        "events",
        {
            "organizer_id": ctx.user_id,
            "title": sanitize_input(form.title),
            "description": sanitize_input(form.description),
            "location": sanitize_input(form.location),
            "zip_code": form.zip_code,
            "start_time": form.start_time.isoformat(),
            "end_time": form.end_time.isoformat(),
            "age_ranges": [r.value for r in form.age_ranges],
            "max_attendees": form.max_attendees,
            "attendee_count": 0,
            "attendee_ids": [],
            "status": derive_status(form.start_time, form.end_time, now).value,
            "image_url": image_url,
            "safety_notes": form.safety_notes,
            "is_public_place": form.is_public_place,
            "created_at": timestamp,
            "updated_at": timestamp,
        },
        "create event",
    )
    logger.info(f"Event created by {ctx.user_id}: {form.title}")
    return decode_row(Event, "events", row)


async def get_event(ctx: AuthContext, event_id: str) -> Event:
    return _load_event(ctx, event_id)


async def update_event(
    ctx: AuthContext,
    event_id: str,
    update: EventUpdate | dict,
    image: EventImage | None = None,
) -> Event:
    update = _parse(EventUpdate, update)
    event = _load_event(ctx, event_id)
    _require_organizer(ctx, event, "edit")
    if event.status == EventStatus.CANCELLED:
        raise ConflictError("Cannot edit a cancelled event")

    changes: dict[str, Any] = update.model_dump(mode="json", exclude_none=True)
    for field in ("title", "description", "location", "safety_notes"):
        if field in changes:
            changes[field] = sanitize_input(changes[field]) or None

    if update.start_time is not None or update.end_time is not None:
        start = update.start_time or event.start_time
        end = update.end_time or event.end_time
        if start >= end:
            raise ValidationFailedError({"end_time": "End time must be after start time"})
        if start < utc_now():
            raise ValidationFailedError({"start_time": "Event cannot start in the past"})
        changes["status"] = derive_status(start, end).value

    if update.max_attendees is not None and update.max_attendees < event.attendee_count:
        raise ValidationFailedError({
            "max_attendees": (
                f"Cannot set max attendees below current attendee count ({event.attendee_count})"
            ),
        })

    if image:
        changes["image_url"] = _upload_image(ctx, image)

    changes["updated_at"] = utc_now_iso()
    row = update_one(ctx.store, "events", event_id, changes, "update event")
    return decode_row(Event, "events", row)


async def cancel_event(ctx: AuthContext, event_id: str, reason: str | None = None) -> Event:
    event = _load_event(ctx, event_id)
    _require_organizer(ctx, event, "cancel")
    if event.status == EventStatus.CANCELLED:
        raise ConflictError("Event is already cancelled")
    if event.status == EventStatus.COMPLETED:
        raise ConflictError("Cannot cancel a completed event")

    now = utc_now_iso()
    row = update_one(
        ctx.store,
        "events",
        event_id,
        {
            "status": EventStatus.CANCELLED.value,
            "cancelled_at": now,
            "cancellation_reason": (reason or "").strip() or None,
            "updated_at": now,
        },
        "cancel event",
    )
    logger.info(f"Event {event_id} cancelled by {ctx.user_id}")
    return decode_row(Event, "events", row)


async def rsvp(ctx: AuthContext, event_id: str) -> Event:
    event = _load_event(ctx, event_id)
    if event.status == EventStatus.CANCELLED:
        raise ConflictError("Cannot RSVP to a cancelled event")
    if event.status == EventStatus.COMPLETED:
        raise ConflictError("Cannot RSVP to a completed event")
    if ctx.user_id in event.attendee_ids:
        raise ConflictError("You have already RSVP'd to this event")
    if event.is_full:
        raise ConflictError("Event is at maximum capacity")

    attendees = [*event.attendee_ids, ctx.user_id]
    row = update_one(
        ctx.store,
        "events",
        event_id,
        {"attendee_ids": attendees, "attendee_count": len(attendees), "updated_at": utc_now_iso()},
        "rsvp to event",
    )
    return decode_row(Event, "events", row)


async def cancel_rsvp(ctx: AuthContext, event_id: str) -> Event:
    event = _load_event(ctx, event_id)
    if ctx.user_id not in event.attendee_ids:
        raise ConflictError("You have not RSVP'd to this event")

    attendees = [uid for uid in event.attendee_ids if uid != ctx.user_id]
    row = update_one(
        ctx.store,
        "events",
        event_id,
        {"attendee_ids": attendees, "attendee_count": len(attendees), "updated_at": utc_now_iso()},
        "cancel rsvp",
    )
    return decode_row(Event, "events", row)


async def list_events(ctx: AuthContext, filters: EventFilters | dict | None = None) -> list[Event]:
    """Events matching `filters`, soonest first."""
    filters = _parse(EventFilters, filters or {})
    query = ctx.store.table("events").select("*")
    if filters.statuses:
        query = query.in_("status", filters.statuses)
    if filters.zip_code:
        query = query.eq("zip_code", filters.zip_code)
    if filters.start_from:
        query = query.gte("start_time", filters.start_from.isoformat())
    if filters.start_to:
        query = query.lte("start_time", filters.start_to.isoformat())
    if filters.organizer_id:
        query = query.eq("organizer_id", filters.organizer_id)
    if filters.attendee_id:
        query = query.contains("attendee_ids", [filters.attendee_id])
    result = execute(query.order("start_time").limit(filters.limit), "list events")

    events = decode_rows(Event, "events", result.data)
    if filters.age_ranges:
        wanted = set(filters.age_ranges)
        events = [e for e in events if wanted.intersection(e.age_ranges)]
    return events


async def add_comment(ctx: AuthContext, event_id: str, content: str) -> EventComment:
    try:
        text = check_comment(content)
    except ValueError as e:
        raise ValidationFailedError({"content": str(e)})
    _load_event(ctx, event_id)

    now = utc_now_iso()
    row = insert_one(
        ctx.store,
        "event_comments",
        {
            "event_id": event_id,
            "author_id": ctx.user_id,
            "content": sanitize_input(text),
            "created_at": now,
            "updated_at": now,
        },
        "add comment",
    )
    return decode_row(EventComment, "event_comments", row)


async def list_comments(ctx: AuthContext, event_id: str) -> list[EventComment]:
    """Comments on an event, newest first."""
    result = execute(
        ctx.store.table("event_comments")
        .select("*")
        .eq("event_id", event_id)
        .order("created_at", desc=True),
        "list comments",
    )
    return decode_rows(EventComment, "event_comments", result.data)
