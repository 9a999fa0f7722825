"""
ZipParents - Reports and blocks.

Blocking is symmetric for visibility: once either side blocks the other,
neither sees the other's profile, messages or connection requests.
"""

import logging

from pydantic import BaseModel, ValidationError, field_validator

from zipparents.auth.context import AuthContext
from zipparents.db.adapter import StoreClient
from zipparents.db.client import execute, fetch_one, insert_one
from zipparents.errors import ConflictError, NotFoundError, ValidationFailedError
from zipparents.models.base import decode_row, decode_rows, utc_now_iso, validation_errors
from zipparents.models.safety import BlockedUser, Report, ReportReason, ReportType

logger = logging.getLogger(__name__)

MIN_REPORT_DESCRIPTION = 10


class ReportRequest(BaseModel):
    reported_user_id: str
    type: ReportType
    reason: ReportReason
    description: str
    content_id: str | None = None
    conversation_id: str | None = None

    @field_validator("description")
    @classmethod
    def description_detail(cls, v: str) -> str:
        v = v.strip()
        if len(v) < MIN_REPORT_DESCRIPTION:
            raise ValueError("Please provide a detailed description (minimum 10 characters)")
        return v


class BlockedUserEntry(BaseModel):
    """A block together with enough of the blocked profile to list it."""
    block: BlockedUser
    display_name: str = ""
    photo_url: str | None = None


# =============================================================================
# Blocks
# =============================================================================


def find_block(client: StoreClient, blocker_id: str, blocked_user_id: str) -> BlockedUser | None:
    row = fetch_one(
        client, "blocked_users", "look up block",
        blocker_id=blocker_id, blocked_user_id=blocked_user_id,
    )
    return decode_row(BlockedUser, "blocked_users", row) if row else None


def blocked_user_ids(client: StoreClient, user_id: str) -> set[str]:
    """Everyone `user_id` has blocked or been blocked by."""
    outgoing = execute(
        client.table("blocked_users").select("blocked_user_id").eq("blocker_id", user_id),
        "list blocks",
    )
    incoming = execute(
        client.table("blocked_users").select("blocker_id").eq("blocked_user_id", user_id),
        "list blocks",
    )
    ids = {row["blocked_user_id"] for row in outgoing.data or []}
    ids.update(row["blocker_id"] for row in incoming.data or [])
    return ids


async def is_blocked(ctx: AuthContext, other_user_id: str) -> bool:
    """True if either user has blocked the other."""
    client = ctx.store
    return (
        find_block(client, ctx.user_id, other_user_id) is not None
        or find_block(client, other_user_id, ctx.user_id) is not None
    )


async def block_user(ctx: AuthContext, target_user_id: str, reason: str | None = None) -> BlockedUser:
    """
    Block `target_user_id`.

    Any connection between the two is flipped to `blocked`.
    """
    if target_user_id == ctx.user_id:
        raise ValidationFailedError("Cannot block yourself")

    client = ctx.store
    if find_block(client, ctx.user_id, target_user_id):
        raise ConflictError("User is already blocked")

    data = {
        "blocker_id": ctx.user_id,
        "blocked_user_id": target_user_id,
        "created_at": utc_now_iso(),
    }
    if reason:
        data["reason"] = reason.strip()
    row = insert_one(client, "blocked_users", data, "block user")

    for from_id, to_id in ((ctx.user_id, target_user_id), (target_user_id, ctx.user_id)):
        execute(
            client.table("connections")
            .update({"status": "blocked", "updated_at": utc_now_iso()})
            .eq("from_user_id", from_id)
            .eq("to_user_id", to_id),
            "mark connection blocked",
        )

    logger.info(f"User {ctx.user_id} blocked {target_user_id}")
    return decode_row(BlockedUser, "blocked_users", row)


async def unblock_user(ctx: AuthContext, target_user_id: str) -> None:
    client = ctx.store
    block = find_block(client, ctx.user_id, target_user_id)
    if block is None:
        raise NotFoundError("User is not blocked")
    execute(client.table("blocked_users").delete().eq("id", block.id), "unblock user")
    logger.info(f"User {ctx.user_id} unblocked {target_user_id}")


async def list_blocked_users(ctx: AuthContext) -> list[BlockedUserEntry]:
    client = ctx.store
    result = execute(
        client.table("blocked_users")
        .select("*")
        .eq("blocker_id", ctx.user_id)
        .order("created_at", desc=True),
        "list blocked users",
    )
    blocks = decode_rows(BlockedUser, "blocked_users", result.data)
    if not blocks:
        return []

    profiles = execute(
        client.table("users")
        .select("id, display_name, photo_url")
        .in_("id", [b.blocked_user_id for b in blocks]),
        "load blocked profiles",
    )
    by_id = {row["id"]: row for row in profiles.data or []}

    entries = []
    for block in blocks:
        profile = by_id.get(block.blocked_user_id, {})
        entries.append(BlockedUserEntry(
            block=block,
            display_name=profile.get("display_name") or "",
            photo_url=profile.get("photo_url"),
        ))
    return entries


# =============================================================================
# Reports
# =============================================================================


async def submit_report(ctx: AuthContext, request: ReportRequest | dict) -> Report:
    """File a report. One report per reporter, target, type and content item."""
    if isinstance(request, dict):
        try:
            request = ReportRequest.model_validate(request)
        except ValidationError as e:
            raise ValidationFailedError(validation_errors(e))

    client = ctx.store
    filters = {
        "reporter_id": ctx.user_id,
        "reported_user_id": request.reported_user_id,
        "type": request.type.value,
    }
    if request.content_id:
        filters["content_id"] = request.content_id
    if fetch_one(client, "reports", "check existing report", **filters):
        raise ConflictError("You have already reported this")

    now = utc_now_iso()
    data = {
        **filters,
        "reason": request.reason.value,
        "description": request.description,
        "status": "pending",
        "created_at": now,
        "updated_at": now,
    }
    if request.conversation_id:
        data["conversation_id"] = request.conversation_id
    row = insert_one(client, "reports", data, "submit report")

    logger.info(
        f"Report filed by {ctx.user_id} against {request.reported_user_id} "
        f"({request.type.value}/{request.reason.value})"
    )
    return decode_row(Report, "reports", row)


async def list_my_reports(ctx: AuthContext) -> list[Report]:
    result = execute(
        ctx.store.table("reports")
        .select("*")
        .eq("reporter_id", ctx.user_id)
        .order("created_at", desc=True),
        "list reports",
    )
    return decode_rows(Report, "reports", result.data)
