"""
Safety API endpoints: blocking and reporting.
"""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from zipparents.auth.context import AuthContext
from zipparents.models.safety import BlockedUser, Report
from zipparents.safety.service import (
    BlockedUserEntry,
    block_user,
    list_blocked_users,
    list_my_reports,
    submit_report,
    unblock_user,
)
from zipparents.web.auth import get_auth_context

router = APIRouter(prefix="/safety", tags=["safety"])


class BlockBody(BaseModel):
    reason: str | None = None


@router.get("/blocks", response_model=list[BlockedUserEntry])
async def blocked(ctx: AuthContext = Depends(get_auth_context)) -> list[BlockedUserEntry]:
    return await list_blocked_users(ctx)


@router.post("/blocks/{user_id}", response_model=BlockedUser, status_code=201)
async def block(
    user_id: str,
    body: BlockBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> BlockedUser:
    return await block_user(ctx, user_id, body.reason)


@router.delete("/blocks/{user_id}")
async def unblock(user_id: str, ctx: AuthContext = Depends(get_auth_context)):
    await unblock_user(ctx, user_id)
    return {"success": True}


@router.get("/reports", response_model=list[Report])
async def my_reports(ctx: AuthContext = Depends(get_auth_context)) -> list[Report]:
    return await list_my_reports(ctx)


@router.post("/reports", response_model=Report, status_code=201)
async def report(body: dict[str, Any], ctx: AuthContext = Depends(get_auth_context)) -> Report:
    return await submit_report(ctx, body)
