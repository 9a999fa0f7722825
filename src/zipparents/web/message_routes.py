"""
Messaging API endpoints.
"""

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from pydantic import BaseModel

from zipparents.auth.context import AuthContext
from zipparents.messaging.service import (
    ConversationEntry,
    delete_message,
    list_conversations,
    list_messages,
    mark_read,
    open_conversation,
    send_message,
    toggle_mute,
    unread_total,
)
from zipparents.models.message import Conversation, Message
from zipparents.web.auth import get_auth_context
from zipparents.web.uploads import read_upload

router = APIRouter(prefix="/conversations", tags=["messages"])


class OpenConversationBody(BaseModel):
    participant_id: str


class TextMessageBody(BaseModel):
    content: str


class MuteBody(BaseModel):
    mute: bool


@router.get("", response_model=list[ConversationEntry])
async def my_conversations(ctx: AuthContext = Depends(get_auth_context)) -> list[ConversationEntry]:
    return await list_conversations(ctx)


@router.get("/unread")
async def unread(ctx: AuthContext = Depends(get_auth_context)):
    return {"count": await unread_total(ctx)}


@router.post("", response_model=Conversation)
async def start_conversation(
    body: OpenConversationBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> Conversation:
    return await open_conversation(ctx, body.participant_id)


@router.get("/{conversation_id}/messages", response_model=list[Message])
async def conversation_messages(
    conversation_id: str,
    limit: int = Query(50, ge=1, le=200),
    ctx: AuthContext = Depends(get_auth_context),
) -> list[Message]:
    return await list_messages(ctx, conversation_id, limit)


@router.post("/{conversation_id}/messages", response_model=Message, status_code=201)
async def post_text(
    conversation_id: str,
    body: TextMessageBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> Message:
    return await send_message(ctx, conversation_id, body.content)


@router.post("/{conversation_id}/images", response_model=Message, status_code=201)
async def post_image(
    conversation_id: str,
    file: UploadFile = File(...),
    caption: str = Form(""),
    ctx: AuthContext = Depends(get_auth_context),
) -> Message:
    data = await read_upload(file, field="image")
    return await send_message(
        ctx,
        conversation_id,
        caption,
        image=data,
        image_content_type=file.content_type or "",
        image_filename=file.filename,
    )


@router.post("/{conversation_id}/read")
async def read_all(conversation_id: str, ctx: AuthContext = Depends(get_auth_context)):
    return {"marked": await mark_read(ctx, conversation_id)}


@router.post("/{conversation_id}/mute")
async def mute(
    conversation_id: str,
    body: MuteBody,
    ctx: AuthContext = Depends(get_auth_context),
):
    return {"muted": await toggle_mute(ctx, conversation_id, body.mute)}


@router.delete("/messages/{message_id}")
async def remove_message(message_id: str, ctx: AuthContext = Depends(get_auth_context)):
    await delete_message(ctx, message_id)
    return {"success": True}
