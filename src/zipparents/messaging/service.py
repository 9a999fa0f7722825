"""
ZipParents - Messaging.

One conversation per pair of connected parents. Unread counters live on
the conversation row and are read-modify-written; concurrent senders
resolve last-write-wins.
"""

import logging

from pydantic import BaseModel

from zipparents.auth.context import AuthContext
from zipparents.config import settings
from zipparents.connections.service import are_connected
from zipparents.db.client import execute, fetch_one, insert_one, update_one, upload_file
from zipparents.errors import NotFoundError, PermissionDeniedError, ValidationFailedError
from zipparents.models.base import decode_row, decode_rows, utc_now_iso
from zipparents.models.message import Conversation, Message, MessageType
from zipparents.models.profile import PublicProfile
from zipparents.models.user import decode_user
from zipparents.profiles.privacy import project
from zipparents.profiles.service import photo_path
from zipparents.profiles.validation import validate_profile_photo
from zipparents.safety.content_filter import sanitize_input, validate_message_content
from zipparents.safety.service import is_blocked

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100
IMAGE_PREVIEW = "📷 Image"
DELETED_PLACEHOLDER = "[Message deleted]"


class ConversationEntry(BaseModel):
    conversation: Conversation
    other: PublicProfile | None = None
    unread: int = 0
    muted: bool = False


def _load_conversation(ctx: AuthContext, conversation_id: str) -> Conversation:
    """Load a conversation the session user takes part in."""
    row = fetch_one(ctx.store, "conversations", "load conversation", id=conversation_id)
    if row is None:
        raise NotFoundError("Conversation not found")
    conversation = decode_row(Conversation, "conversations", row)
    if ctx.user_id not in conversation.participant_ids:
        raise PermissionDeniedError("Not a participant in this conversation")
    return conversation


def _find_conversation(ctx: AuthContext, other_user_id: str) -> Conversation | None:
    result = execute(
        ctx.store.table("conversations").select("*").contains("participant_ids", [ctx.user_id]),
        "look up conversation",
    )
    for conversation in decode_rows(Conversation, "conversations", result.data):
        if other_user_id in conversation.participant_ids:
            return conversation
    return None


async def open_conversation(ctx: AuthContext, participant_id: str) -> Conversation:
    """Return the conversation with `participant_id`, creating it if needed."""
    if participant_id == ctx.user_id:
        raise ValidationFailedError("You cannot message yourself")
    if not await are_connected(ctx, participant_id):
        raise PermissionDeniedError("Can only message connected users")

    existing = _find_conversation(ctx, participant_id)
    if existing:
        return existing

    now = utc_now_iso()
    row = insert_one(
        ctx.store,
        "conversations",
        {
            "participant_ids": sorted([ctx.user_id, participant_id]),
            "unread_count": {ctx.user_id: 0, participant_id: 0},
            "muted_by": [],
            "created_at": now,
            "updated_at": now,
        },
        "create conversation",
    )
    logger.info(f"Conversation opened between {ctx.user_id} and {participant_id}")
    return decode_row(Conversation, "conversations", row)


async def send_message(
    ctx: AuthContext,
    conversation_id: str,
    content: str = "",
    image: bytes | None = None,
    image_content_type: str | None = None,
    image_filename: str | None = None,
) -> Message:
    """
    Post a message. A message with `image` is an image message and its
    text is an optional caption; otherwise the text is required.
    """
    message_type = MessageType.IMAGE if image is not None else MessageType.TEXT
    if message_type == MessageType.TEXT or content.strip():
        reason = validate_message_content(content)
        if reason:
            raise ValidationFailedError({"content": reason})
    if image is not None:
        error = validate_profile_photo(image_content_type, len(image))
        if error:
            raise ValidationFailedError({"image": error})

    conversation = _load_conversation(ctx, conversation_id)
    others = [uid for uid in conversation.participant_ids if uid != ctx.user_id]
    for other in others:
        if await is_blocked(ctx, other):
            raise PermissionDeniedError("You cannot message this user")

    image_url = None
    if image is not None:
        path = f"{conversation_id}/{photo_path(ctx.user_id, image_filename, image_content_type)}"
        image_url = upload_file(ctx.store, settings.message_image_bucket, path, image, image_content_type)

    now = utc_now_iso()
    data = {
        "conversation_id": conversation_id,
        "sender_id": ctx.user_id,
        "type": message_type.value,
        "content": sanitize_input(content),
        "read_by": [ctx.user_id],
        "created_at": now,
        "updated_at": now,
    }
    if image_url:
        data["image_url"] = image_url
    row = insert_one(ctx.store, "messages", data, "send message")

    unread = dict(conversation.unread_count)
    for other in others:
        unread[other] = unread.get(other, 0) + 1
    preview = IMAGE_PREVIEW if message_type == MessageType.IMAGE else data["content"][:PREVIEW_LENGTH]
    update_one(
        ctx.store,
        "conversations",
        conversation_id,
        {
            "last_message": {"content": preview, "sender_id": ctx.user_id, "created_at": now},
            "unread_count": unread,
            "updated_at": now,
        },
        "update conversation",
    )
    return decode_row(Message, "messages", row)


async def list_conversations(ctx: AuthContext) -> list[ConversationEntry]:
    """The session user's conversations, most recently active first."""
    result = execute(
        ctx.store.table("conversations")
        .select("*")
        .contains("participant_ids", [ctx.user_id])
        .order("updated_at", desc=True),
        "list conversations",
    )
    conversations = decode_rows(Conversation, "conversations", result.data)
    if not conversations:
        return []

    other_ids = sorted({uid for c in conversations for uid in c.participant_ids if uid != ctx.user_id})
    users = {}
    if other_ids:
        rows = execute(
            ctx.store.table("users").select("*").in_("id", other_ids),
            "load participants",
        ).data or []
        users = {u.uid: u for u in (decode_user(r) for r in rows)}

    viewer = ctx.viewer()
    entries = []
    for conversation in conversations:
        other_id = next((uid for uid in conversation.participant_ids if uid != ctx.user_id), None)
        other = users.get(other_id)
        entries.append(ConversationEntry(
            conversation=conversation,
            other=project(other, viewer) if other else None,
            unread=conversation.unread_count.get(ctx.user_id, 0),
            muted=ctx.user_id in conversation.muted_by,
        ))
    return entries


async def list_messages(ctx: AuthContext, conversation_id: str, limit: int = 50) -> list[Message]:
    """The latest `limit` visible messages, oldest first."""
    _load_conversation(ctx, conversation_id)
    result = execute(
        ctx.store.table("messages")
        .select("*")
        .eq("conversation_id", conversation_id)
        .order("created_at", desc=True)
        .limit(limit),
        "list messages",
    )
    messages = [m for m in decode_rows(Message, "messages", result.data) if not m.is_deleted]
    messages.reverse()
    return messages


async def mark_read(ctx: AuthContext, conversation_id: str) -> int:
    """Clear the session user's unread count. Returns how many messages were marked."""
    conversation = _load_conversation(ctx, conversation_id)

    unread = dict(conversation.unread_count)
    unread[ctx.user_id] = 0
    update_one(ctx.store, "conversations", conversation_id, {"unread_count": unread}, "reset unread count")

    result = execute(
        ctx.store.table("messages")
        .select("*")
        .eq("conversation_id", conversation_id)
        .neq("sender_id", ctx.user_id),
        "load unread messages",
    )
    marked = 0
    for message in decode_rows(Message, "messages", result.data):
        if ctx.user_id in message.read_by:
            continue
        update_one(
            ctx.store, "messages", message.id,
            {"read_by": [*message.read_by, ctx.user_id]},
            "mark message read",
        )
        marked += 1
    return marked


async def toggle_mute(ctx: AuthContext, conversation_id: str, mute: bool) -> bool:
    conversation = _load_conversation(ctx, conversation_id)
    muted_by = list(conversation.muted_by)
    if mute and ctx.user_id not in muted_by:
        muted_by.append(ctx.user_id)
    elif not mute and ctx.user_id in muted_by:
        muted_by.remove(ctx.user_id)
    else:
        return mute
    update_one(ctx.store, "conversations", conversation_id, {"muted_by": muted_by}, "mute conversation")
    return mute


async def delete_message(ctx: AuthContext, message_id: str) -> None:
    """Soft-delete one of the session user's own messages."""
    row = fetch_one(ctx.store, "messages", "load message", id=message_id)
    if row is None:
        raise NotFoundError("Message not found")
    message = decode_row(Message, "messages", row)
    if message.sender_id != ctx.user_id:
        raise PermissionDeniedError("Can only delete your own messages")
    if message.is_deleted:
        return
    update_one(
        ctx.store,
        "messages",
        message_id,
        {"deleted_at": utc_now_iso(), "deleted_by": ctx.user_id, "content": DELETED_PLACEHOLDER},
        "delete message",
    )


async def unread_total(ctx: AuthContext) -> int:
    """Unread messages across all conversations the user has not muted."""
    return sum(e.unread for e in await list_conversations(ctx) if not e.muted)
