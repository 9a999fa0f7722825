"""
Connection API endpoints.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from zipparents.auth.context import AuthContext
from zipparents.connections.service import (
    ConnectionEntry,
    connection_status,
    list_connections,
    pending_count,
    pending_requests,
    respond,
    send_request,
)
from zipparents.models.connection import Connection, ConnectionStatus
from zipparents.web.auth import get_auth_context

router = APIRouter(prefix="/connections", tags=["connections"])


class ConnectionRequestBody(BaseModel):
    to_user_id: str
    message: str = ""


class RespondBody(BaseModel):
    accept: bool


@router.get("", response_model=list[ConnectionEntry])
async def my_connections(
    status: ConnectionStatus | None = None,
    ctx: AuthContext = Depends(get_auth_context),
) -> list[ConnectionEntry]:
    return await list_connections(ctx, status)


@router.get("/pending", response_model=list[ConnectionEntry])
async def incoming_requests(ctx: AuthContext = Depends(get_auth_context)) -> list[ConnectionEntry]:
    return await pending_requests(ctx)


@router.get("/pending/count")
async def incoming_count(ctx: AuthContext = Depends(get_auth_context)):
    return {"count": await pending_count(ctx)}


@router.get("/status/{user_id}")
async def status_with(user_id: str, ctx: AuthContext = Depends(get_auth_context)):
    return {"status": await connection_status(ctx, user_id)}


@router.post("", response_model=Connection, status_code=201)
async def request_connection(
    body: ConnectionRequestBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> Connection:
    return await send_request(ctx, body.to_user_id, body.message)


@router.post("/{connection_id}/respond", response_model=Connection)
async def answer_request(
    connection_id: str,
    body: RespondBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> Connection:
    return await respond(ctx, connection_id, body.accept)
