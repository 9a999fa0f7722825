"""Conversation and message records."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MessageType(str, Enum):
    TEXT = "text"
    IMAGE = "image"


class LastMessage(BaseModel):
    content: str
    sender_id: str
    created_at: datetime | None = None


class Conversation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    participant_ids: list[str]
    last_message: LastMessage | None = None
    unread_count: dict[str, int] = Field(default_factory=dict)
    muted_by: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Message(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    conversation_id: str
    sender_id: str
    type: MessageType = MessageType.TEXT
    content: str = ""
    image_url: str | None = None
    read_by: list[str] = Field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None
    deleted_by: str | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
