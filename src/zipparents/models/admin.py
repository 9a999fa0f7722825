"""Moderation log entries and platform metrics."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict


class ModerationAction(str, Enum):
    DISMISS_REPORT = "dismiss_report"
    WARN_USER = "warn_user"
    REMOVE_CONTENT = "remove_content"
    SUSPEND_USER = "suspend_user"
    BAN_USER = "ban_user"
    VERIFY_USER = "verify_user"
    REJECT_VERIFICATION = "reject_verification"
    UNSUSPEND_USER = "unsuspend_user"
    UNBAN_USER = "unban_user"
    CANCEL_EVENT = "cancel_event"


class ModerationLog(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    action: ModerationAction
    performed_by: str
    performed_by_name: str = ""
    target_user_id: str | None = None
    target_user_name: str = ""
    reason: str | None = None
    content_id: str | None = None
    report_id: str | None = None
    metadata: dict[str, Any] | None = None
    timestamp: datetime | None = None


class PlatformMetrics(BaseModel):
    total_users: int
    active_users: int
    verified_users: int
    suspended_users: int
    banned_users: int
    total_events: int
    total_messages: int
    pending_reports: int
    resolved_reports: int
    timestamp: datetime
