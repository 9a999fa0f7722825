"""
Admin & moderation API endpoints.

Permission checks live in the services; these handlers only translate
HTTP to calls.
"""

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

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
from zipparents.auth.context import AuthContext
from zipparents.models.admin import ModerationLog, PlatformMetrics
from zipparents.models.safety import Report, ReportStatus, VerificationRequest, VerificationRequestStatus
from zipparents.models.user import User, UserStatus
from zipparents.web.auth import get_auth_context

router = APIRouter(prefix="/admin", tags=["admin"])


class ReasonBody(BaseModel):
    reason: str | None = None


class StatusBody(BaseModel):
    status: UserStatus
    reason: str | None = None


class ReportStatusBody(BaseModel):
    status: ReportStatus
    resolution: str | None = None


class ReviewBody(BaseModel):
    approve: bool
    notes: str | None = None


# =============================================================================
# Users
# =============================================================================


@router.get("/users", response_model=list[User])
async def users(
    q: str | None = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    ctx: AuthContext = Depends(get_auth_context),
) -> list[User]:
    if q:
        return await search_users(ctx, q)
    return await list_users(ctx, limit=limit, offset=offset)


@router.get("/users/{user_id}", response_model=User)
async def user_detail(user_id: str, ctx: AuthContext = Depends(get_auth_context)) -> User:
    return await get_user_detail(ctx, user_id)


@router.post("/users/{user_id}/status", response_model=User)
async def set_status(
    user_id: str,
    body: StatusBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> User:
    return await update_user_status(ctx, user_id, body.status, body.reason)


@router.post("/users/{user_id}/verify", response_model=User)
async def verify(user_id: str, ctx: AuthContext = Depends(get_auth_context)) -> User:
    return await verify_user(ctx, user_id)


@router.post("/users/{user_id}/warn", response_model=ModerationLog)
async def warn(
    user_id: str,
    body: ReasonBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> ModerationLog:
    return await warn_user(ctx, user_id, body.reason)


# =============================================================================
# Verification
# =============================================================================


@router.get("/verification-requests", response_model=list[VerificationRequest])
async def verification_queue(
    status: VerificationRequestStatus | None = VerificationRequestStatus.PENDING,
    ctx: AuthContext = Depends(get_auth_context),
) -> list[VerificationRequest]:
    return await list_verification_requests(ctx, status)


@router.post("/verification-requests/{request_id}", response_model=VerificationRequest)
async def review(
    request_id: str,
    body: ReviewBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> VerificationRequest:
    return await review_verification_request(ctx, request_id, body.approve, body.notes)


# =============================================================================
# Reports
# =============================================================================


@router.get("/reports", response_model=list[Report])
async def reports(
    status: ReportStatus | None = None,
    limit: int = Query(50, ge=1, le=200),
    ctx: AuthContext = Depends(get_auth_context),
) -> list[Report]:
    return await list_reports(ctx, status, limit)


@router.get("/reports/{report_id}", response_model=Report)
async def report_detail(report_id: str, ctx: AuthContext = Depends(get_auth_context)) -> Report:
    return await get_report(ctx, report_id)


@router.post("/reports/{report_id}/status", response_model=Report)
async def set_report_status(
    report_id: str,
    body: ReportStatusBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> Report:
    return await update_report_status(ctx, report_id, body.status, body.resolution)


@router.post("/reports/{report_id}/dismiss", response_model=Report)
async def dismiss(
    report_id: str,
    body: ReasonBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> Report:
    return await dismiss_report(ctx, report_id, body.reason)


@router.post("/reports/{report_id}/remove-content", response_model=Report)
async def take_down(
    report_id: str,
    body: ReasonBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> Report:
    return await remove_content(ctx, report_id, body.reason)


@router.post("/reports/{report_id}/ban", response_model=Report)
async def ban(
    report_id: str,
    body: ReasonBody,
    ctx: AuthContext = Depends(get_auth_context),
) -> Report:
    return await ban_from_report(ctx, report_id, body.reason)


# =============================================================================
# Logs & metrics
# =============================================================================


@router.get("/logs", response_model=list[ModerationLog])
async def logs(
    limit: int = Query(100, ge=1, le=500),
    ctx: AuthContext = Depends(get_auth_context),
) -> list[ModerationLog]:
    return await list_moderation_logs(ctx, limit)


@router.get("/metrics", response_model=PlatformMetrics)
async def metrics(ctx: AuthContext = Depends(get_auth_context)) -> PlatformMetrics:
    return await platform_metrics(ctx)
