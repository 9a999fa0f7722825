"""ZipParents - Conversations and messages between connected parents."""

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

__all__ = [
    "ConversationEntry",
    "delete_message",
    "list_conversations",
    "list_messages",
    "mark_read",
    "open_conversation",
    "send_message",
    "toggle_mute",
    "unread_total",
]
