"""
ZipParents - Connections.

A connection is a request from one parent to another that the
recipient accepts or declines. There is at most one connection per pair,
whichever direction it was sent in.
"""

import logging

from pydantic import BaseModel

from zipparents.auth.context import AuthContext
from zipparents.db.adapter import StoreClient
from zipparents.db.client import execute, fetch_one, insert_one, update_one
from zipparents.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationFailedError
from zipparents.models.base import decode_row, decode_rows, utc_now_iso
from zipparents.models.connection import Connection, ConnectionStatus
from zipparents.models.profile import PublicProfile
from zipparents.models.user import decode_user
from zipparents.profiles.privacy import project
from zipparents.safety.content_filter import sanitize_input
from zipparents.safety.service import is_blocked

logger = logging.getLogger(__name__)

MAX_REQUEST_MESSAGE = 500


class ConnectionEntry(BaseModel):
    """A connection and the other parent's profile as the viewer may see it."""
    connection: Connection
    user: PublicProfile | None = None


def find_connection(client: StoreClient, user_a: str, user_b: str) -> Connection | None:
    """The connection between two users, in either direction."""
    for from_id, to_id in ((user_a, user_b), (user_b, user_a)):
        row = fetch_one(
            client, "connections", "look up connection",
            from_user_id=from_id, to_user_id=to_id,
        )
        if row:
            return decode_row(Connection, "connections", row)
    return None


async def send_request(ctx: AuthContext, to_user_id: str, message: str = "") -> Connection:
    if to_user_id == ctx.user_id:
        raise ValidationFailedError("You cannot connect with yourself")

    message = sanitize_input(message or "")
    if len(message) > MAX_REQUEST_MESSAGE:
        raise ValidationFailedError({"message": f"Message must be less than {MAX_REQUEST_MESSAGE} characters"})

    client = ctx.store
    if fetch_one(client, "users", "load connection target", id=to_user_id) is None:
        raise NotFoundError("User not found")
    if await is_blocked(ctx, to_user_id):
        raise PermissionDeniedError("You cannot connect with this user")
    if find_connection(client, ctx.user_id, to_user_id):
        raise ConflictError("Connection request already exists")

    now = utc_now_iso()
    row = insert_one(
        client,
        "connections",
        {
            "from_user_id": ctx.user_id,
            "to_user_id": to_user_id,
            "status": ConnectionStatus.PENDING.value,
            "message": message,
            "requested_at": now,
            "created_at": now,
            "updated_at": now,
        },
        "send connection request",
    )
    logger.info(f"Connection request {ctx.user_id} -> {to_user_id}")
    return decode_row(Connection, "connections", row)


async def respond(ctx: AuthContext, connection_id: str, accept: bool) -> Connection:
    """Accept or decline a pending request addressed to the session user."""
    client = ctx.store
    row = fetch_one(client, "connections", "load connection", id=connection_id)
    if row is None:
        raise NotFoundError("Connection not found")

    connection = decode_row(Connection, "connections", row)
    if connection.to_user_id != ctx.user_id:
        raise PermissionDeniedError("Unauthorized to respond to this connection")
    if connection.status != ConnectionStatus.PENDING:
        raise ConflictError(f"Connection is already {connection.status.value}")

    status = ConnectionStatus.ACCEPTED if accept else ConnectionStatus.DECLINED
    now = utc_now_iso()
    updated = update_one(
        client,
        "connections",
        connection_id,
        {"status": status.value, "responded_at": now, "updated_at": now},
        "respond to connection",
    )
    logger.info(f"Connection {connection_id} {status.value} by {ctx.user_id}")
    return decode_row(Connection, "connections", updated)


def _with_profiles(ctx: AuthContext, connections: list[Connection]) -> list[ConnectionEntry]:
    if not connections:
        return []
    other_ids = sorted({c.other_user_id(ctx.user_id) for c in connections})
    result = execute(
        ctx.store.table("users").select("*").in_("id", other_ids),
        "load connection profiles",
    )
    users = {u.uid: u for u in (decode_user(r) for r in result.data or [])}
    viewer = ctx.viewer()

    entries = []
    for connection in connections:
        other = users.get(connection.other_user_id(ctx.user_id))
        entries.append(ConnectionEntry(
            connection=connection,
            user=project(other, viewer) if other else None,
        ))
    return entries


async def list_connections(
    ctx: AuthContext,
    status: ConnectionStatus | None = None,
) -> list[ConnectionEntry]:
    """All of the session user's connections, newest first."""
    client = ctx.store
    rows = []
    for column in ("from_user_id", "to_user_id"):
        query = client.table("connections").select("*").eq(column, ctx.user_id)
        if status is not None:
            query = query.eq("status", status.value)
        rows.extend(execute(query, "list connections").data or [])

    connections = decode_rows(Connection, "connections", rows)
    connections.sort(key=lambda c: c.created_at.timestamp() if c.created_at else 0.0, reverse=True)
    return _with_profiles(ctx, connections)


async def pending_requests(ctx: AuthContext) -> list[ConnectionEntry]:
    """Requests waiting for the session user's answer."""
    result = execute(
        ctx.store.table("connections")
        .select("*")
        .eq("to_user_id", ctx.user_id)
        .eq("status", ConnectionStatus.PENDING.value)
        .order("requested_at", desc=True),
        "list pending requests",
    )
    return _with_profiles(ctx, decode_rows(Connection, "connections", result.data))


async def pending_count(ctx: AuthContext) -> int:
    result = execute(
        ctx.store.table("connections")
        .select("id")
        .eq("to_user_id", ctx.user_id)
        .eq("status", ConnectionStatus.PENDING.value),
        "count pending requests",
    )
    return len(result.data or [])


async def connection_status(ctx: AuthContext, other_user_id: str) -> str:
    """Status of the connection with `other_user_id`, or "none"."""
    connection = find_connection(ctx.store, ctx.user_id, other_user_id)
    return connection.status.value if connection else "none"


async def are_connected(ctx: AuthContext, other_user_id: str) -> bool:
    connection = find_connection(ctx.store, ctx.user_id, other_user_id)
    return connection is not None and connection.status == ConnectionStatus.ACCEPTED
