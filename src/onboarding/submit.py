"""
Onboarding Submission.

The only part of the wizard that talks to the backend. Photo upload and
the profile update are treated as one unit: if the update fails after a
photo was uploaded in the same attempt, that photo is deleted again and
the state keeps it pending so a retry uploads it afresh.
"""

import logging

from zipparents.auth.context import AuthContext
from zipparents.config import settings
from zipparents.db.client import update_one
from zipparents.errors import ZipParentsError
from zipparents.models.base import utc_now_iso
from zipparents.profiles.service import delete_profile_photo, get_user, upload_profile_photo

from .payload import build_profile_update
from .state import (
    LAST_STEP,
    InvalidTransition,
    OnboardingState,
    complete,
    fail_submission,
)

logger = logging.getLogger(__name__)

SUBMIT_ERROR_MESSAGE = "Failed to complete profile. Please try again."


async def submit(state: OnboardingState, ctx: AuthContext) -> OnboardingState:
    """
    Write the finished wizard to the user's record.

    Returns the COMPLETE state on success. On a backend failure returns
    the same step-4 state with `submit_error` set and every field kept;
    nothing is retried automatically.

    Raises:
        InvalidTransition: wizard is not on a passed step 4
    """
    if state.is_complete:
        raise InvalidTransition("Onboarding is already complete")
    if state.current_step != LAST_STEP or not state.ready_to_submit:
        raise InvalidTransition("Finish the privacy step before submitting")
    if state.user_id != ctx.user_id:
        raise InvalidTransition("Onboarding session belongs to another user")

    uploaded_url = None
    try:
        current = await get_user(ctx, ctx.user_id)
        if state.photo is not None:
            uploaded_url = await upload_profile_photo(
                ctx,
                state.photo.data,
                state.photo.content_type,
                state.photo.filename,
            )
        update = build_profile_update(
            state,
            current=current,
            photo_url=uploaded_url,
            updated_at=utc_now_iso(),
        )
        update_one(ctx.store, "users", ctx.user_id, update, "complete onboarding")
    except ZipParentsError as e:
        logger.error(f"Onboarding submission failed for {ctx.user_id}: {e}")
        if uploaded_url:
            removed = await delete_profile_photo(ctx, uploaded_url)
            if not removed:
                logger.warning(f"Orphaned onboarding photo for {ctx.user_id}: {uploaded_url}")
        return fail_submission(state, SUBMIT_ERROR_MESSAGE)

    # The record now points at the new photo; the old one is unreferenced
    previous_photo = current.photo_url if current else None
    if uploaded_url and previous_photo and previous_photo != uploaded_url:
        await delete_profile_photo(ctx, previous_photo)

    logger.info(f"Onboarding completed for {ctx.user_id} ({update['profile_completeness']}%)")
    return complete(state, uploaded_url, settings.onboarding_redirect)
