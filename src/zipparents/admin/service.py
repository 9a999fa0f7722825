"""
ZipParents - Admin & moderation.

Every action checks the caller's staff permission first and writes a
moderation log entry when it changes something.
"""

import logging
from typing import Any

from zipparents.admin.permissions import Permission, require_permission
from zipparents.auth.context import AuthContext
from zipparents.db.client import execute, fetch_one, insert_one, update_one
from zipparents.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailedError
from zipparents.models.admin import ModerationAction, ModerationLog, PlatformMetrics
from zipparents.models.base import decode_row, decode_rows, utc_now, utc_now_iso
from zipparents.models.safety import (
    Report,
    ReportStatus,
    ReportType,
    VerificationRequest,
    VerificationRequestStatus,
)
from zipparents.models.user import User, UserStatus, VerificationStatus, decode_user

logger = logging.getLogger(__name__)

SEARCH_LIMIT = 50
REMOVED_PLACEHOLDER = "[Message removed by moderator]"

_STATUS_ACTIONS = {
    UserStatus.SUSPENDED: ModerationAction.SUSPEND_USER,
    UserStatus.BANNED: ModerationAction.BAN_USER,
}


# =============================================================================
# Moderation log
# =============================================================================


def _display_name(ctx: AuthContext, user_id: str | None, fallback: str) -> str:
    if not user_id:
        return ""
    row = fetch_one(ctx.store, "users", "load user name", id=user_id)
    return (row or {}).get("display_name") or fallback


async def log_action(
    ctx: AuthContext,
    action: ModerationAction,
    target_user_id: str | None = None,
    reason: str | None = None,
    content_id: str | None = None,
    report_id: str | None = None,
    metadata: dict[str, Any] | None = None,
) -> ModerationLog:
    row = insert_one(
        ctx.store,
        "moderation_logs",
        {
            "action": action.value,
            "performed_by": ctx.user_id,
            "performed_by_name": _display_name(ctx, ctx.user_id, "Unknown Admin"),
            "target_user_id": target_user_id,
            "target_user_name": _display_name(ctx, target_user_id, "Unknown User"),
            "reason": reason,
            "content_id": content_id,
            "report_id": report_id,
            "metadata": metadata,
            "timestamp": utc_now_iso(),
        },
        "log moderation action",
    )
    logger.info(f"Moderation: {ctx.user_id} {action.value} target={target_user_id} report={report_id}")
    return decode_row(ModerationLog, "moderation_logs", row)


async def list_moderation_logs(ctx: AuthContext, limit: int = 100) -> list[ModerationLog]:
    require_permission(ctx, Permission.VIEW_REPORTS)
    result = execute(
        ctx.store.table("moderation_logs").select("*").order("timestamp", desc=True).limit(limit),
        "list moderation logs",
    )
    return decode_rows(ModerationLog, "moderation_logs", result.data)


# =============================================================================
# Users
# =============================================================================


async def list_users(ctx: AuthContext, limit: int = 50, offset: int = 0) -> list[User]:
    require_permission(ctx, Permission.VIEW_USERS)
    result = execute(
        ctx.store.table("users")
        .select("*")
        .order("created_at", desc=True)
        .range(offset, offset + limit - 1),
        "list users",
    )
    return [decode_user(row) for row in result.data or []]


async def search_users(ctx: AuthContext, term: str) -> list[User]:
    """Case-insensitive substring match on email or display name."""
    require_permission(ctx, Permission.VIEW_USERS)
    needle = term.strip().lower()
    if not needle:
        return []
    rows = execute(ctx.store.table("users").select("*"), "search users").data or []
    matches = []
    for user in (decode_user(row) for row in rows):
        if needle in user.email.lower() or needle in user.display_name.lower():
            matches.append(user)
            if len(matches) >= SEARCH_LIMIT:
                break
    return matches


async def get_user_detail(ctx: AuthContext, user_id: str) -> User:
    require_permission(ctx, Permission.VIEW_USERS)
    row = fetch_one(ctx.store, "users", "load user", id=user_id)
    if row is None:
        raise NotFoundError("User not found")
    return decode_user(row)


async def update_user_status(
    ctx: AuthContext,
    user_id: str,
    status: UserStatus,
    reason: str | None = None,
    report_id: str | None = None,
) -> User:
    """Suspend, ban or reactivate an account."""
    require_permission(ctx, Permission.BAN_USERS)
    if user_id == ctx.user_id:
        raise PermissionDeniedError("You cannot change your own account status")

    user = await get_user_detail(ctx, user_id)
    if user.status == status:
        raise ConflictError(f"User is already {status.value}")

    if status == UserStatus.ACTIVE:
        action = (
            ModerationAction.UNBAN_USER if user.status == UserStatus.BANNED
            else ModerationAction.UNSUSPEND_USER
        )
    else:
        action = _STATUS_ACTIONS[status]

    row = update_one(
        ctx.store, "users", user_id,
        {"status": status.value, "updated_at": utc_now_iso()},
        "update user status",
    )
    await log_action(ctx, action, target_user_id=user_id, reason=reason, report_id=report_id)
    return decode_user(row)


async def verify_user(ctx: AuthContext, user_id: str) -> User:
    require_permission(ctx, Permission.MODERATE_CONTENT)
    await get_user_detail(ctx, user_id)
    row = update_one(
        ctx.store, "users", user_id,
        {"verification_status": VerificationStatus.VERIFIED.value, "updated_at": utc_now_iso()},
        "verify user",
    )
    await log_action(ctx, ModerationAction.VERIFY_USER, target_user_id=user_id)
    return decode_user(row)


async def warn_user(ctx: AuthContext, user_id: str, reason: str | None = None) -> ModerationLog:
    require_permission(ctx, Permission.MODERATE_CONTENT)
    await get_user_detail(ctx, user_id)
    return await log_action(ctx, ModerationAction.WARN_USER, target_user_id=user_id, reason=reason)


# =============================================================================
# Verification requests
# =============================================================================


async def list_verification_requests(
    ctx: AuthContext,
    status: VerificationRequestStatus | None = VerificationRequestStatus.PENDING,
) -> list[VerificationRequest]:
    require_permission(ctx, Permission.VIEW_USERS)
    query = ctx.store.table("verification_requests").select("*")
    if status is not None:
        query = query.eq("status", status.value)
    result = execute(query.order("requested_at", desc=True), "list verification requests")
    return decode_rows(VerificationRequest, "verification_requests", result.data)


async def review_verification_request(
    ctx: AuthContext,
    request_id: str,
    approve: bool,
    notes: str | None = None,
) -> VerificationRequest:
    """Approve (user becomes verified) or reject (user becomes rejected)."""
    require_permission(ctx, Permission.MODERATE_CONTENT)
    row = fetch_one(ctx.store, "verification_requests", "load verification request", id=request_id)
    if row is None:
        raise NotFoundError("Verification request not found")
    request = decode_row(VerificationRequest, "verification_requests", row)
    if request.status != VerificationRequestStatus.PENDING:
        raise ConflictError("Verification request has already been reviewed")

    now = utc_now_iso()
    request_status = VerificationRequestStatus.APPROVED if approve else VerificationRequestStatus.REJECTED
    user_status = VerificationStatus.VERIFIED if approve else VerificationStatus.REJECTED

    updated = update_one(
        ctx.store, "verification_requests", request_id,
        {
            "status": request_status.value,
            "reviewed_at": now,
            "reviewed_by": ctx.user_id,
            "review_notes": notes,
        },
        "review verification request",
    )
    update_one(
        ctx.store, "users", request.user_id,
        {"verification_status": user_status.value, "updated_at": now},
        "update verification status",
    )
    action = ModerationAction.VERIFY_USER if approve else ModerationAction.REJECT_VERIFICATION
    await log_action(ctx, action, target_user_id=request.user_id, reason=notes)
    return decode_row(VerificationRequest, "verification_requests", updated)


# =============================================================================
# Reports
# =============================================================================


async def list_reports(
    ctx: AuthContext,
    status: ReportStatus | None = None,
    limit: int = 50,
) -> list[Report]:
    require_permission(ctx, Permission.VIEW_REPORTS)
    query = ctx.store.table("reports").select("*")
    if status is not None:
        query = query.eq("status", status.value)
    result = execute(query.order("created_at", desc=True).limit(limit), "list reports")
    return decode_rows(Report, "reports", result.data)


async def get_report(ctx: AuthContext, report_id: str) -> Report:
    require_permission(ctx, Permission.VIEW_REPORTS)
    row = fetch_one(ctx.store, "reports", "load report", id=report_id)
    if row is None:
        raise NotFoundError("Report not found")
    return decode_row(Report, "reports", row)


async def update_report_status(
    ctx: AuthContext,
    report_id: str,
    status: ReportStatus,
    resolution: str | None = None,
) -> Report:
    require_permission(ctx, Permission.MODERATE_CONTENT)
    await get_report(ctx, report_id)
    now = utc_now_iso()
    row = update_one(
        ctx.store, "reports", report_id,
        {
            "status": status.value,
            "reviewed_by": ctx.user_id,
            "reviewed_at": now,
            "resolution": resolution,
            "updated_at": now,
        },
        "update report",
    )
    return decode_row(Report, "reports", row)


async def dismiss_report(ctx: AuthContext, report_id: str, reason: str | None = None) -> Report:
    report = await update_report_status(ctx, report_id, ReportStatus.DISMISSED, reason)
    await log_action(ctx, ModerationAction.DISMISS_REPORT, report_id=report_id, reason=reason)
    return report


async def remove_content(ctx: AuthContext, report_id: str, reason: str | None = None) -> Report:
    """
    Take down the message or event a report points at and resolve the report.

    Messages are soft-deleted; events are cancelled.
    """
    require_permission(ctx, Permission.MODERATE_CONTENT)
    report = await get_report(ctx, report_id)
    if not report.content_id:
        raise ValidationFailedError("Report does not reference any content")

    now = utc_now_iso()
    if report.type == ReportType.MESSAGE:
        update_one(
            ctx.store, "messages", report.content_id,
            {"deleted_at": now, "deleted_by": ctx.user_id, "content": REMOVED_PLACEHOLDER},
            "remove message",
        )
    elif report.type == ReportType.EVENT:
        update_one(
            ctx.store, "events", report.content_id,
            {
                "status": "cancelled",
                "cancelled_at": now,
                "cancellation_reason": reason or "Removed by moderator",
                "updated_at": now,
            },
            "remove event",
        )
    else:
        raise ValidationFailedError(f"Cannot remove content of a {report.type.value} report")

    resolved = await update_report_status(
        ctx, report_id, ReportStatus.RESOLVED, f"Content removed: {reason or 'no reason given'}"
    )
    await log_action(
        ctx,
        ModerationAction.REMOVE_CONTENT,
        target_user_id=report.reported_user_id,
        content_id=report.content_id,
        report_id=report_id,
        reason=reason,
    )
    return resolved


async def ban_from_report(ctx: AuthContext, report_id: str, reason: str | None = None) -> Report:
    """Ban the reported user and resolve the report."""
    report = await get_report(ctx, report_id)
    await update_user_status(
        ctx, report.reported_user_id, UserStatus.BANNED, reason=reason, report_id=report_id
    )
    return await update_report_status(
        ctx, report_id, ReportStatus.RESOLVED, f"User banned: {reason or 'no reason given'}"
    )


# =============================================================================
# Metrics
# =============================================================================


def _count(ctx: AuthContext, table: str) -> int:
    result = execute(ctx.store.table(table).select("id"), f"count {table}")
    return len(result.data or [])


async def platform_metrics(ctx: AuthContext) -> PlatformMetrics:
    require_permission(ctx, Permission.VIEW_USERS)
    users = execute(
        ctx.store.table("users").select("id, status, verification_status"),
        "load user metrics",
    ).data or []
    reports = execute(ctx.store.table("reports").select("id, status"), "load report metrics").data or []

    def user_status(row: dict) -> str:
        return row.get("status") or UserStatus.ACTIVE.value

    return PlatformMetrics(
        total_users=len(users),
        active_users=sum(1 for u in users if user_status(u) == UserStatus.ACTIVE.value),
        verified_users=sum(
            1 for u in users if u.get("verification_status") == VerificationStatus.VERIFIED.value
        ),
        suspended_users=sum(1 for u in users if user_status(u) == UserStatus.SUSPENDED.value),
        banned_users=sum(1 for u in users if user_status(u) == UserStatus.BANNED.value),
        total_events=_count(ctx, "events"),
        total_messages=_count(ctx, "messages"),
        pending_reports=sum(
            1 for r in reports if r.get("status") in (ReportStatus.PENDING.value, ReportStatus.REVIEWING.value)
        ),
        resolved_reports=sum(
            1 for r in reports if r.get("status") in (ReportStatus.RESOLVED.value, ReportStatus.DISMISSED.value)
        ),
        timestamp=utc_now(),
    )
