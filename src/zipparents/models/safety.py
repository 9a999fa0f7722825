"""Reports, blocks and verification requests."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ReportType(str, Enum):
    USER = "user"
    MESSAGE = "message"
    PROFILE = "profile"
    EVENT = "event"


class ReportReason(str, Enum):
    SPAM = "spam"
    HARASSMENT = "harassment"
    INAPPROPRIATE_CONTENT = "inappropriate_content"
    FAKE_PROFILE = "fake_profile"
    SAFETY_CONCERN = "safety_concern"
    OTHER = "other"


class ReportStatus(str, Enum):
    PENDING = "pending"
    REVIEWING = "reviewing"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


class Report(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    reporter_id: str
    reported_user_id: str
    type: ReportType
    reason: ReportReason
    description: str = ""
    content_id: str | None = None
    conversation_id: str | None = None
    status: ReportStatus = ReportStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    resolution: str | None = None


class BlockedUser(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    blocker_id: str
    blocked_user_id: str
    reason: str | None = None
    created_at: datetime | None = None


class VerificationRequestStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VerificationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    user_id: str
    user_email: str = ""
    display_name: str = ""
    notes: str = ""
    status: VerificationRequestStatus = VerificationRequestStatus.PENDING
    requested_at: datetime | None = None
    reviewed_at: datetime | None = None
    reviewed_by: str | None = None
    review_notes: str | None = None
