"""
Event API endpoints.

Bodies are handed to the services as plain dicts so that form errors
come back as the same field -> message map everywhere.
"""

from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile
from pydantic import BaseModel

from zipparents.auth.context import AuthContext
from zipparents.events.service import (
    EventImage,
    add_comment,
    cancel_event,
    cancel_rsvp,
    create_event,
    get_event,
    list_comments,
    list_events,
    rsvp,
    update_event,
)
from zipparents.models.event import Event, EventComment
from zipparents.web.auth import get_auth_context
from zipparents.web.uploads import read_upload

router = APIRouter(prefix="/events", tags=["events"])


class CancelBody(BaseModel):
    reason: str | None = None


class CommentBody(BaseModel):
    content: str


@router.post("/search", response_model=list[Event])
async def find_events(
    filters: dict[str, Any] | None = None,
    ctx: AuthContext = Depends(get_auth_context),
) -> list[Event]:
    return await list_events(ctx, filters or {})


@router.post("", response_model=Event, status_code=201)
async def new_event(form: dict[str, Any], ctx: AuthContext = Depends(get_auth_context)) -> Event:
    return await create_event(ctx, form)


@router.get("/{event_id}", response_model=Event)
async def event_detail(event_id: str, ctx: AuthContext = Depends(get_auth_context)) -> Event:
    return await get_event(ctx, event_id)


@router.patch("/{event_id}", response_model=Event)
async def edit_event(
    event_id: str,
    changes: dict[str, Any],
    ctx: AuthContext = Depends(get_auth_context),
) -> Event:
    return await update_event(ctx, event_id, changes)


@router.post("/{event_id}/image", response_model=Event)
async def set_image(
    event_id: str,
    file: UploadFile = File(...),
    ctx: AuthContext = Depends(get_auth_context),
) -> Event:
    image = EventImage(
        data=await read_upload(file, field="image"),
        content_type=file.content_type or "",
        filename=file.filename or "image",
    )
    return await update_event(ctx, event_id, {}, image=image)


@router.post("/{event_id}/cancel", response_model=Event)
async def cancel(
    event_id: str,
    body: CancelBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> Event:
    return await cancel_event(ctx, event_id, body.reason)


@router.post("/{event_id}/rsvp", response_model=Event)
async def attend(event_id: str, ctx: AuthContext = Depends(get_auth_context)) -> Event:
    return await rsvp(ctx, event_id)


@router.delete("/{event_id}/rsvp", response_model=Event)
async def unattend(event_id: str, ctx: AuthContext = Depends(get_auth_context)) -> Event:
    return await cancel_rsvp(ctx, event_id)


@router.get("/{event_id}/comments", response_model=list[EventComment])
async def comments(event_id: str, ctx: AuthContext = Depends(get_auth_context)) -> list[EventComment]:
    return await list_comments(ctx, event_id)


@router.post("/{event_id}/comments", response_model=EventComment, status_code=201)
async def comment(
    event_id: str,
    body: CommentBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> EventComment:
    return await add_comment(ctx, event_id, body.content)
