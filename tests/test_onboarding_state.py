"""
Tests for the onboarding state machine.

The wizard is driven purely through advance/back/attach_photo; no
backend is involved until submission.
"""

from datetime import date

import pytest

from conftest import make_user_row
from onboarding.state import (
    InvalidTransition,
    OnboardingState,
    OnboardingStep,
    advance,
    attach_photo,
    back,
    complete,
    completed_steps,
    fail_submission,
    initial_fields,
    reject_photo,
    remove_photo,
    start,
)
from zipparents.models.user import decode_user

STEP_VALUES = {
    OnboardingStep.BASIC_INFO: {"display_name": "Jordan", "zip_code": "10001", "age_range": "35-44"},
    OnboardingStep.ABOUT_YOU: {"bio": "Dad of two", "children_age_ranges": ["3-5"]},
    OnboardingStep.INTERESTS: {"interests": ["Music", "Travel", "Sports"]},
    OnboardingStep.PRIVACY_PHOTO: {},
}


def _walk_to(step: OnboardingStep) -> OnboardingState:
    """Pass every step before `step`."""
    state = start("me")
    while state.current_step != step:
        state = advance(state, STEP_VALUES[state.current_step])
        assert state.errors == {}
    return state


class TestStart:
    def test_blank_wizard_defaults(self):
        state = start("me")
        assert state.current_step == OnboardingStep.BASIC_INFO
        assert state.fields["display_name"] == ""
        assert state.fields["age_range"] == "25-34"
        assert state.fields["relationship_status"] == "prefer-not-to-say"
        assert state.fields["privacy_settings"]["profile_visibility"] == "public"
        assert state.errors == {}
        assert not state.ready_to_submit

    def test_prefilled_from_record(self):
        user = decode_user(make_user_row("me", display_name="Sam", zip_code="94110", interests=["Music"]))
        fields = initial_fields(user)
        assert fields["display_name"] == "Sam"
        assert fields["zip_code"] == "94110"
        assert fields["age_range"] == "35-44"
        assert fields["interests"] == ["Music"]

    def test_age_range_derived_from_birth_date(self):
        born = date(date.today().year - 40, 1, 1)
        user = decode_user({"id": "me", "date_of_birth": born.isoformat()})
        assert initial_fields(user)["age_range"] == "35-44"

    def test_fresh_signup_keeps_defaults(self):
        user = decode_user({"id": "me", "display_name": "Sam", "zip_code": "10001"})
        fields = initial_fields(user)
        assert fields["age_range"] == "25-34"
        assert fields["children_age_ranges"] == []


class TestAdvance:
    def test_valid_step_one_moves_to_step_two(self):
        state = advance(start("me"), STEP_VALUES[OnboardingStep.BASIC_INFO])
        assert state.current_step == OnboardingStep.ABOUT_YOU
        assert state.errors == {}

    def test_bad_zip_stays_on_step_one(self):
        state = advance(start("me"), {"display_name": "Jordan", "zip_code": "1234", "age_range": "35-44"})
        assert state.current_step == OnboardingStep.BASIC_INFO
        assert state.errors == {"zip_code": "Must be a valid 5-digit US zip code"}
        assert state.fields["zip_code"] == "1234"
        assert state.fields["display_name"] == "Jordan"

    def test_non_ascii_digits_are_not_a_zip(self):
        state = advance(start("u1"), {"display_name": "Jane", "zip_code": "１０００１", "age_range": "25-34"})
        assert state.current_step == OnboardingStep.BASIC_INFO
        assert state.errors == {"zip_code": "Must be a valid 5-digit US zip code"}

    def test_fixing_the_error_clears_it(self):
        state = advance(start("me"), {"display_name": "Jordan", "zip_code": "1234"})
        state = advance(state, {"zip_code": "10001"})
        assert state.current_step == OnboardingStep.ABOUT_YOU
        assert state.errors == {}

    def test_two_interests_blocked_three_pass(self):
        state = _walk_to(OnboardingStep.INTERESTS)
        state = advance(state, {"interests": ["Music", "Travel"]})
        assert state.current_step == OnboardingStep.INTERESTS
        assert state.errors == {"interests": "Please select at least 3 interests"}

        state = advance(state, {"interests": ["Music", "Travel", "Sports"]})
        assert state.current_step == OnboardingStep.PRIVACY_PHOTO

    def test_step_four_marks_ready_without_moving(self):
        state = advance(_walk_to(OnboardingStep.PRIVACY_PHOTO), {})
        assert state.current_step == OnboardingStep.PRIVACY_PHOTO
        assert state.ready_to_submit
        assert state.fields["privacy_settings"]["show_exact_location"] is True

    def test_cleaned_values_replace_raw(self):
        state = advance(start("me"), {"display_name": "  Jordan  ", "zip_code": " 10001 ", "age_range": "35-44"})
        assert state.fields["display_name"] == "Jordan"
        assert state.fields["zip_code"] == "10001"

    def test_does_not_mutate_input_state(self):
        state = start("me")
        advance(state, STEP_VALUES[OnboardingStep.BASIC_INFO])
        assert state.current_step == OnboardingStep.BASIC_INFO
        assert state.fields["display_name"] == ""

    def test_complete_state_cannot_advance(self):
        done = complete(advance(_walk_to(OnboardingStep.PRIVACY_PHOTO), {}), None, "/feed")
        with pytest.raises(InvalidTransition):
            advance(done, {})
        with pytest.raises(InvalidTransition):
            back(done)


class TestBack:
    def test_back_keeps_entered_values(self):
        state = _walk_to(OnboardingStep.INTERESTS)
        state = advance(state, {"interests": ["Music"]})
        state = back(state)

        assert state.current_step == OnboardingStep.ABOUT_YOU
        assert state.errors == {}
        assert state.fields["interests"] == ["Music"]
        assert state.fields["bio"] == "Dad of two"
        assert state.fields["display_name"] == "Jordan"

    def test_back_does_not_revalidate(self):
        state = _walk_to(OnboardingStep.ABOUT_YOU)
        state = advance(state, {"children_age_ranges": []})
        state = back(state)
        assert state.current_step == OnboardingStep.BASIC_INFO
        assert state.errors == {}

    def test_back_on_first_step_is_noop(self):
        state = start("me")
        assert back(state) is state

    def test_back_from_ready_clears_ready(self):
        state = advance(_walk_to(OnboardingStep.PRIVACY_PHOTO), {})
        state = fail_submission(state, "boom")
        state = back(state)
        assert state.current_step == OnboardingStep.INTERESTS
        assert not state.ready_to_submit
        assert state.submit_error is None


class TestPhoto:
    def test_attach_valid_photo(self):
        state = attach_photo(start("me"), b"jpeg-bytes", "image/jpeg", "me.jpg")
        assert state.photo.filename == "me.jpg"
        assert "photo" not in state.errors

    def test_wrong_type_rejected_locally(self):
        state = attach_photo(start("me"), b"gif", "image/gif")
        assert state.photo is None
        assert state.errors["photo"] == "Please upload a JPEG, PNG, or WebP image"

    def test_oversized_rejected(self):
        state = attach_photo(start("me"), b"x" * (5 * 1024 * 1024 + 1), "image/png")
        assert state.errors["photo"] == "Image must be less than 5MB"

    def test_rejected_photo_keeps_previous(self):
        state = attach_photo(start("me"), b"good", "image/png", "good.png")
        state = attach_photo(state, b"bad", "text/plain", "bad.txt")
        assert state.photo.filename == "good.png"
        assert "photo" in state.errors

    def test_reject_photo_keeps_staged(self):
        state = attach_photo(start("me"), b"good", "image/png", "good.png")
        state = reject_photo(state, "Image must be less than 5MB")
        assert state.photo.filename == "good.png"
        assert state.errors == {"photo": "Image must be less than 5MB"}

    def test_remove_photo(self):
        state = attach_photo(start("me"), b"gif", "image/gif")
        state = attach_photo(state, b"good", "image/png")
        state = remove_photo(state)
        assert state.photo is None
        assert "photo" not in state.errors


class TestCompletion:
    def test_complete(self):
        state = advance(_walk_to(OnboardingStep.PRIVACY_PHOTO), {})
        state = attach_photo(state, b"good", "image/png")
        done = complete(state, "https://cdn.example.com/me.png", "/feed")

        assert done.is_complete
        assert done.photo is None
        assert done.fields["photo_url"] == "https://cdn.example.com/me.png"
        assert done.redirect_to == "/feed"
        assert completed_steps(done) == [1, 2, 3, 4]

    def test_failed_submission_keeps_everything(self):
        ready = advance(_walk_to(OnboardingStep.PRIVACY_PHOTO), {})
        failed = fail_submission(ready, "Failed to complete profile. Please try again.")
        assert failed.current_step == OnboardingStep.PRIVACY_PHOTO
        assert failed.ready_to_submit
        assert failed.fields == ready.fields

    def test_completed_steps(self):
        assert completed_steps(start("me")) == []
        assert completed_steps(_walk_to(OnboardingStep.INTERESTS)) == [1, 2]


class TestSerialization:
    def test_round_trip(self):
        state = attach_photo(_walk_to(OnboardingStep.PRIVACY_PHOTO), b"\x89PNG", "image/png", "p.png")
        data = state.to_dict()
        assert data["current_step"] == 4
        assert isinstance(data["photo"]["data"], str)

        restored = OnboardingState.from_dict(data)
        assert restored == state
