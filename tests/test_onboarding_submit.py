"""
Tests for onboarding submission and the profile update it writes.

Submission runs against the in-memory backend; failures are injected
with FakeSupabase.fail().
"""

import pytest

from conftest import STORAGE_URL, _run, make_ctx, make_user_row
from onboarding.payload import WIZARD_FIELDS, apply_profile_update, build_profile_update
from onboarding.state import (
    InvalidTransition,
    OnboardingStep,
    advance,
    attach_photo,
    initial_fields,
    start,
)
from onboarding.submit import SUBMIT_ERROR_MESSAGE, submit
from zipparents.config import get_settings
from zipparents.models.profile import Viewer
from zipparents.models.user import decode_user
from zipparents.profiles.privacy import project

PHOTO_BUCKET = "profile-photos"
OLD_PHOTO = f"{STORAGE_URL}/{PHOTO_BUCKET}/me/old.jpg"


def _new_user_row(**overrides) -> dict:
    """A freshly signed-up user: identity and account fields only."""
    row = {
        "id": "me",
        "email": "me@example.com",
        "display_name": "Jordan",
        "zip_code": "10001",
        "phone_number": "555-0199",
        "date_of_birth": "1988-03-04",
        "email_verified": True,
        "age_verified": True,
        "verification_status": "pending",
        "role": "user",
        "status": "active",
        "onboarding_completed": False,
        "created_at": "2026-01-01T00:00:00+00:00",
    }
    row.update(overrides)
    return row


def _ready(user=None):
    """Wizard state that has passed step 4."""
    state = start("me", user)
    for values in (
        {"display_name": "Jordan", "zip_code": "10001", "age_range": "35-44"},
        {"bio": "Dad of two", "relationship_status": "married", "children_age_ranges": ["3-5", "6-12"]},
        {"interests": ["Music", "Travel", "Sports"]},
        {"privacy_settings": {"show_exact_location": False}},
    ):
        state = advance(state, values)
    assert state.ready_to_submit
    return state


@pytest.fixture
def session(fake_supabase):
    fake_supabase.seed("users", _new_user_row())
    return make_ctx(fake_supabase, "me")


def _user_updates(fake_supabase) -> int:
    return fake_supabase.calls.count(("users", "update"))


class TestSubmitSuccess:
    def test_writes_profile_and_completes(self, session, fake_supabase):
        done = _run(submit(_ready(), session))

        assert done.current_step == OnboardingStep.COMPLETE
        assert done.redirect_to == "/feed"
        assert _user_updates(fake_supabase) == 1

        row = fake_supabase.row("users", "me")
        assert row["onboarding_completed"] is True
        assert row["interests"] == ["Music", "Travel", "Sports"]
        assert row["children_age_ranges"] == ["3-5", "6-12"]
        assert row["privacy_settings"] == {
            "show_email": False,
            "show_phone": False,
            "show_exact_location": False,
            "profile_visibility": "public",
        }
        assert row["profile_completeness"] == 95

    def test_leaves_account_fields_alone(self, session, fake_supabase):
        _run(submit(_ready(), session))
        row = fake_supabase.row("users", "me")
        assert row["email"] == "me@example.com"
        assert row["phone_number"] == "555-0199"
        assert row["verification_status"] == "pending"
        assert row["role"] == "user"
        assert row["date_of_birth"] == "1988-03-04"

    def test_uploads_pending_photo(self, session, fake_supabase):
        state = attach_photo(_ready(), b"png-bytes", "image/png", "me.png")
        done = _run(submit(state, session))

        row = fake_supabase.row("users", "me")
        assert row["photo_url"].startswith(f"{STORAGE_URL}/{PHOTO_BUCKET}/me/")
        assert row["profile_completeness"] == 100
        assert done.fields["photo_url"] == row["photo_url"]
        assert done.photo is None
        assert list(fake_supabase.files.values()) == [b"png-bytes"]

    def test_replaced_photo_deleted(self, fake_supabase):
        fake_supabase.seed("users", _new_user_row(photo_url=OLD_PHOTO))
        fake_supabase.files[(PHOTO_BUCKET, "me/old.jpg")] = b"old"
        state = attach_photo(_ready(), b"new", "image/jpeg")

        _run(submit(state, make_ctx(fake_supabase, "me")))

        assert (PHOTO_BUCKET, "me/old.jpg") not in fake_supabase.files
        assert list(fake_supabase.files.values()) == [b"new"]

    def test_existing_photo_kept_without_new_upload(self, fake_supabase):
        fake_supabase.seed("users", _new_user_row(photo_url=OLD_PHOTO))
        fake_supabase.files[(PHOTO_BUCKET, "me/old.jpg")] = b"old"
        user = decode_user(fake_supabase.row("users", "me"))

        _run(submit(_ready(user), make_ctx(fake_supabase, "me")))

        assert fake_supabase.row("users", "me")["photo_url"] == OLD_PHOTO
        assert (PHOTO_BUCKET, "me/old.jpg") in fake_supabase.files


class TestSubmitFailure:
    def test_update_failure_stays_on_step_four(self, session, fake_supabase):
        fake_supabase.fail("users", "update")
        ready = _ready()

        failed = _run(submit(ready, session))

        assert failed.current_step == OnboardingStep.PRIVACY_PHOTO
        assert failed.submit_error == SUBMIT_ERROR_MESSAGE
        assert failed.fields == ready.fields
        assert fake_supabase.row("users", "me")["onboarding_completed"] is False

    def test_uploaded_photo_removed_when_update_fails(self, session, fake_supabase):
        fake_supabase.fail("users", "update")
        state = attach_photo(_ready(), b"png-bytes", "image/png")

        failed = _run(submit(state, session))

        assert fake_supabase.files == {}
        assert failed.photo is not None
        assert failed.photo.data == b"png-bytes"

    def test_upload_failure_skips_update(self, session, fake_supabase):
        fake_supabase.fail("storage", "upload")
        state = attach_photo(_ready(), b"png-bytes", "image/png")

        failed = _run(submit(state, session))

        assert failed.submit_error == SUBMIT_ERROR_MESSAGE
        assert _user_updates(fake_supabase) == 0

    def test_retry_after_failure(self, session, fake_supabase):
        fake_supabase.fail("users", "update")
        state = attach_photo(_ready(), b"png-bytes", "image/png")
        failed = _run(submit(state, session))

        fake_supabase.failures.clear()
        done = _run(submit(failed, session))

        assert done.is_complete
        assert done.submit_error is None
        assert fake_supabase.row("users", "me")["onboarding_completed"] is True
        assert len(fake_supabase.files) == 1


class TestSubmitGuards:
    def test_not_ready(self, session):
        with pytest.raises(InvalidTransition):
            _run(submit(start("me"), session))

    def test_already_complete(self, session):
        done = _run(submit(_ready(), session))
        with pytest.raises(InvalidTransition):
            _run(submit(done, session))

    def test_other_users_session(self, session, fake_supabase):
        with pytest.raises(InvalidTransition):
            _run(submit(_ready(), make_ctx(fake_supabase, "someone-else")))


class TestProfileUpdate:
    def test_only_wizard_fields(self):
        update = build_profile_update(_ready(), updated_at="2026-05-01T00:00:00+00:00")
        assert set(update) == set(WIZARD_FIELDS) | {"profile_completeness", "onboarding_completed", "updated_at"}
        assert update["onboarding_completed"] is True

    def test_photo_url_only_when_uploaded(self):
        assert "photo_url" not in build_profile_update(_ready())
        assert build_profile_update(_ready(), photo_url="https://x/p.jpg")["photo_url"] == "https://x/p.jpg"

    def test_completeness_counts_existing_record(self):
        user = decode_user(_new_user_row())
        with_record = build_profile_update(_ready(), current=user)
        without = build_profile_update(_ready())
        assert with_record["profile_completeness"] == without["profile_completeness"] + 10

    def test_completeness_uses_configured_interest_minimum(self, monkeypatch):
        state = _ready()
        default = build_profile_update(state)["profile_completeness"]

        monkeypatch.setattr(get_settings(), "min_interests", 4)

        assert build_profile_update(state)["profile_completeness"] == default - 15

    def test_non_wizard_fields_survive_update(self):
        user = decode_user(make_user_row("me", verification_status="verified", photo_url=OLD_PHOTO))
        updated = apply_profile_update(user, build_profile_update(_ready(), current=user))

        assert updated.display_name == "Jordan"
        for name in ("uid", "email", "phone_number", "photo_url", "verification_status",
                     "role", "status", "email_verified", "age_verified", "created_at", "last_active"):
            assert getattr(updated, name) == getattr(user, name), name

    def test_unchanged_wizard_round_trip_is_lossless(self):
        user = decode_user(make_user_row("me"))
        state = start("me", user)
        while not state.ready_to_submit:
            state = advance(state, {})
            assert state.errors == {}

        updated = apply_profile_update(user, build_profile_update(state, current=user))
        assert updated.model_dump(exclude={"updated_at"}) == user.model_dump(exclude={"updated_at"})

    def test_owner_projection_round_trip_is_lossless(self):
        user = decode_user(make_user_row("me", photo_url=OLD_PHOTO, profile_completeness=100))
        profile = project(user, Viewer(uid="me"))
        values = {
            name: value
            for name, value in profile.model_dump(mode="json").items()
            if name in WIZARD_FIELDS
        }
        values["privacy_settings"] = initial_fields(user)["privacy_settings"]

        state = start("me")
        state.fields.update(values)
        while not state.ready_to_submit:
            state = advance(state, {})
            assert state.errors == {}

        updated = apply_profile_update(user, build_profile_update(state, current=user))
        assert updated.model_dump(exclude={"updated_at"}) == user.model_dump(exclude={"updated_at"})
