"""Connection records between two parents."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ConnectionStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    DECLINED = "declined"
    BLOCKED = "blocked"


class Connection(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    from_user_id: str
    to_user_id: str
    status: ConnectionStatus
    message: str = ""
    requested_at: datetime | None = None
    responded_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    def other_user_id(self, user_id: str) -> str:
        """The participant that is not `user_id`."""
        return self.to_user_id if self.from_user_id == user_id else self.from_user_id

    def involves(self, user_id: str) -> bool:
        return user_id in (self.from_user_id, self.to_user_id)
