"""ZipParents - Safety: content filtering, reports and blocks."""

from zipparents.safety.content_filter import (
    contains_profanity,
    filter_profanity,
    is_spam,
    sanitize_input,
    validate_message_content,
)
from zipparents.safety.service import (
    ReportRequest,
    block_user,
    is_blocked,
    list_blocked_users,
    list_my_reports,
    submit_report,
    unblock_user,
)

__all__ = [
    "ReportRequest",
    "block_user",
    "contains_profanity",
    "filter_profanity",
    "is_blocked",
    "is_spam",
    "list_blocked_users",
    "list_my_reports",
    "sanitize_input",
    "submit_report",
    "unblock_user",
    "validate_message_content",
]
