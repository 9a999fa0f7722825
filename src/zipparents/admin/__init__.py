"""ZipParents - Staff tooling: user management, reports and metrics."""

from zipparents.admin.permissions import Permission, has_permission, require_permission
from zipparents.admin.service import (
    ban_from_report,
    dismiss_report,
    get_report,
    get_user_detail,
    list_moderation_logs,
    list_reports,
    list_users,
    list_verification_requests,
    platform_metrics,
    remove_content,
    review_verification_request,
    search_users,
    update_report_status,
    update_user_status,
    verify_user,
    warn_user,
)

__all__ = [
    "Permission",
    "ban_from_report",
    "dismiss_report",
    "get_report",
    "get_user_detail",
    "has_permission",
    "list_moderation_logs",
    "list_reports",
    "list_users",
    "list_verification_requests",
    "platform_metrics",
    "remove_content",
    "require_permission",
    "review_verification_request",
    "search_users",
    "update_report_status",
    "update_user_status",
    "verify_user",
    "warn_user",
]
