"""
Profile API endpoints.

Other users' profiles are only ever returned in projected form.
"""

from typing import Any

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel

from zipparents.auth.context import AuthContext
from zipparents.models.profile import PublicProfile
from zipparents.models.user import User
from zipparents.profiles.service import (
    get_own_profile,
    get_public_profile,
    replace_profile_photo,
    request_verification,
    touch_last_active,
    update_profile,
)
from zipparents.web.auth import get_auth_context
from zipparents.web.uploads import read_upload

router = APIRouter(prefix="/profiles", tags=["profiles"])


class VerificationRequestBody(BaseModel):
    notes: str = ""


@router.get("/me", response_model=User)
async def my_profile(ctx: AuthContext = Depends(get_auth_context)) -> User:
    user = await get_own_profile(ctx)
    await touch_last_active(ctx)
    return user


@router.patch("/me", response_model=User)
async def edit_profile(
    changes: dict[str, Any],
    ctx: AuthContext = Depends(get_auth_context),
) -> User:
    return await update_profile(ctx, changes)


@router.post("/me/photo")
async def change_photo(
    file: UploadFile = File(...),
    ctx: AuthContext = Depends(get_auth_context),
):
    data = await read_upload(file)
    url = await replace_profile_photo(ctx, data, file.content_type or "", file.filename)
    return {"photo_url": url}


@router.post("/me/verification", status_code=201)
async def ask_for_verification(
    body: VerificationRequestBody,
    ctx: AuthContext = Depends(get_auth_context),
):
    request = await request_verification(ctx, body.notes)
    return request.model_dump(mode="json")


@router.get("/{user_id}", response_model=PublicProfile)
async def view_profile(user_id: str, ctx: AuthContext = Depends(get_auth_context)) -> PublicProfile:
    profile = await get_public_profile(ctx, user_id)
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not available")
    return profile
