"""
Onboarding API Endpoints.

Separate router from the rest of the ZipParents API. Wizard sessions are
kept in process memory keyed by user id: they are not persisted, and two
tabs of the same user share (and overwrite) one session.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, Field

from zipparents.auth.context import AuthContext
from zipparents.errors import ValidationFailedError
from zipparents.profiles.service import get_user
from zipparents.web.auth import get_auth_context
from zipparents.web.uploads import read_upload

from .forms import get_form_options
from .state import (
    InvalidTransition,
    OnboardingState,
    OnboardingStep,
    advance,
    attach_photo,
    back,
    completed_steps,
    reject_photo,
    remove_photo,
    start,
)
from .submit import submit

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

# In-progress wizards (keyed by user_id)
_sessions: dict[str, OnboardingState] = {}


# =============================================================================
# Request/Response Models
# =============================================================================


class ContinueRequest(BaseModel):
    """Values entered on the current step."""
    values: dict[str, Any] = Field(default_factory=dict)


class StateResponse(BaseModel):
    """Current wizard state. Photo bytes are never echoed back."""
    user_id: str
    current_step: int
    complete: bool
    steps_completed: list[int]
    fields: dict[str, Any]
    errors: dict[str, str]
    has_photo: bool = False
    photo_filename: str | None = None
    ready_to_submit: bool = False
    submit_error: str | None = None
    redirect_to: str | None = None


def _response(state: OnboardingState) -> StateResponse:
    return StateResponse(
        user_id=state.user_id,
        current_step=state.current_step.value,
        complete=state.is_complete,
        steps_completed=completed_steps(state),
        fields=state.fields,
        errors=state.errors,
        has_photo=state.photo is not None,
        photo_filename=state.photo.filename if state.photo else None,
        ready_to_submit=state.ready_to_submit,
        submit_error=state.submit_error,
        redirect_to=state.redirect_to,
    )


# =============================================================================
# Session Helpers
# =============================================================================


async def get_or_create_session(ctx: AuthContext) -> OnboardingState:
    """Resume the user's wizard or open a new one from their record."""
    state = _sessions.get(ctx.user_id)
    if state is None:
        user = await get_user(ctx, ctx.user_id)
        state = start(ctx.user_id, user)
        _sessions[ctx.user_id] = state
        logger.info(f"Onboarding session started for {ctx.user_id}")
    return state


def _require_session(ctx: AuthContext) -> OnboardingState:
    state = _sessions.get(ctx.user_id)
    if state is None:
        raise HTTPException(status_code=404, detail="No onboarding in progress")
    return state


async def _submit_and_store(state: OnboardingState, ctx: AuthContext) -> OnboardingState:
    state = await submit(state, ctx)
    if state.is_complete:
        _sessions.pop(ctx.user_id, None)
    else:
        _sessions[ctx.user_id] = state
    return state


# =============================================================================
# Endpoints
# =============================================================================


@router.get("/options")
async def get_options():
    """Option lists for every step."""
    return get_form_options()


@router.get("/state", response_model=StateResponse)
async def get_onboarding_state(ctx: AuthContext = Depends(get_auth_context)) -> StateResponse:
    """Mount the wizard: resume the session or start one."""
    user = await get_user(ctx, ctx.user_id)
    if user is not None and user.onboarding_completed and ctx.user_id not in _sessions:
        state = start(ctx.user_id, user)
        state.current_step = OnboardingStep.COMPLETE
        return _response(state)
    return _response(await get_or_create_session(ctx))


@router.post("/continue", response_model=StateResponse)
async def continue_step(
    request: ContinueRequest,
    ctx: AuthContext = Depends(get_auth_context),
) -> StateResponse:
    """
    Validate the current step and move forward.

    Passing step 4 submits straight away; a failed submission comes back
    as `submit_error` on step 4.
    """
    state = await get_or_create_session(ctx)
    try:
        state = advance(state, request.values)
        _sessions[ctx.user_id] = state
        if state.ready_to_submit:
            state = await _submit_and_store(state, ctx)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _response(state)


@router.post("/back", response_model=StateResponse)
async def previous_step(ctx: AuthContext = Depends(get_auth_context)) -> StateResponse:
    state = _require_session(ctx)
    try:
        state = back(state)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    _sessions[ctx.user_id] = state
    return _response(state)


@router.post("/photo", response_model=StateResponse)
async def upload_photo(
    file: UploadFile = File(...),
    ctx: AuthContext = Depends(get_auth_context),
) -> StateResponse:
    """Stage a profile photo. It is uploaded on submission."""
    state = await get_or_create_session(ctx)
    try:
        data = await read_upload(file)
    except ValidationFailedError as e:
        data, error = None, e.errors["photo"]
    try:
        if data is None:
            state = reject_photo(state, error)
        else:
            state = attach_photo(state, data, file.content_type or "", file.filename or "photo")
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    _sessions[ctx.user_id] = state
    return _response(state)


@router.delete("/photo", response_model=StateResponse)
async def discard_photo(ctx: AuthContext = Depends(get_auth_context)) -> StateResponse:
    state = _require_session(ctx)
    try:
        state = remove_photo(state)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    _sessions[ctx.user_id] = state
    return _response(state)


@router.post("/submit", response_model=StateResponse)
async def retry_submit(ctx: AuthContext = Depends(get_auth_context)) -> StateResponse:
    """Retry a failed submission with the state as it stands."""
    state = _require_session(ctx)
    try:
        state = await _submit_and_store(state, ctx)
    except InvalidTransition as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _response(state)


@router.delete("/state")
async def abandon(ctx: AuthContext = Depends(get_auth_context)):
    """Discard the wizard without writing anything."""
    removed = _sessions.pop(ctx.user_id, None) is not None
    return {"success": True, "discarded": removed}
