"""Tests for blocking, reporting and the content filter."""

import pytest

from conftest import _run, make_user_row
from zipparents.errors import ConflictError, NotFoundError, ValidationFailedError
from zipparents.models.safety import ReportReason, ReportType
from zipparents.safety.content_filter import (
    contains_profanity,
    filter_profanity,
    is_spam,
    sanitize_input,
    validate_message_content,
)
from zipparents.safety.service import (
    block_user,
    blocked_user_ids,
    is_blocked,
    list_blocked_users,
    list_my_reports,
    submit_report,
    unblock_user,
)


def _report(**overrides) -> dict:
    data = {
        "reported_user_id": "other",
        "type": "message",
        "reason": "harassment",
        "description": "Kept messaging after I asked them to stop",
        "content_id": "msg-1",
    }
    data.update(overrides)
    return data


class TestBlocking:
    def test_block_creates_record(self, ctx, fake_supabase):
        block = _run(block_user(ctx, "other", reason="  rude  "))
        assert block.blocker_id == "me"
        assert block.blocked_user_id == "other"
        assert block.reason == "rude"

    def test_cannot_block_self(self, ctx):
        with pytest.raises(ValidationFailedError):
            _run(block_user(ctx, "me"))

    def test_double_block_conflicts(self, ctx):
        _run(block_user(ctx, "other"))
        with pytest.raises(ConflictError):
            _run(block_user(ctx, "other"))

    def test_block_flips_connections_both_ways(self, ctx, fake_supabase):
        fake_supabase.seed(
            "connections",
            {"id": "c1", "from_user_id": "other", "to_user_id": "me", "status": "accepted"},
            {"id": "c2", "from_user_id": "me", "to_user_id": "third", "status": "accepted"},
        )
        _run(block_user(ctx, "other"))
        assert fake_supabase.row("connections", "c1")["status"] == "blocked"
        assert fake_supabase.row("connections", "c2")["status"] == "accepted"

    def test_block_is_symmetric_for_visibility(self, ctx, fake_supabase):
        fake_supabase.seed("blocked_users", {"id": "b1", "blocker_id": "other", "blocked_user_id": "me"})
        assert _run(is_blocked(ctx, "other"))
        assert not _run(is_blocked(ctx, "third"))

    def test_blocked_user_ids_both_directions(self, fake_supabase):
        fake_supabase.seed(
            "blocked_users",
            {"id": "b1", "blocker_id": "me", "blocked_user_id": "a"},
            {"id": "b2", "blocker_id": "b", "blocked_user_id": "me"},
            {"id": "b3", "blocker_id": "x", "blocked_user_id": "y"},
        )
        assert blocked_user_ids(fake_supabase, "me") == {"a", "b"}

    def test_unblock(self, ctx, fake_supabase):
        _run(block_user(ctx, "other"))
        _run(unblock_user(ctx, "other"))
        assert fake_supabase.rows("blocked_users") == []

    def test_unblock_only_own_blocks(self, ctx, fake_supabase):
        fake_supabase.seed("blocked_users", {"id": "b1", "blocker_id": "other", "blocked_user_id": "me"})
        with pytest.raises(NotFoundError):
            _run(unblock_user(ctx, "other"))

    def test_list_blocked_users_with_names(self, ctx, fake_supabase):
        fake_supabase.seed("users", make_user_row("other", display_name="Sam"))
        _run(block_user(ctx, "other"))
        _run(block_user(ctx, "gone"))

        entries = _run(list_blocked_users(ctx))
        names = {e.block.blocked_user_id: e.display_name for e in entries}
        assert names == {"other": "Sam", "gone": ""}

    def test_list_blocked_users_empty(self, ctx):
        assert _run(list_blocked_users(ctx)) == []


class TestReports:
    def test_submit_report(self, ctx):
        report = _run(submit_report(ctx, _report()))
        assert report.reporter_id == "me"
        assert report.type == ReportType.MESSAGE
        assert report.reason == ReportReason.HARASSMENT
        assert report.status.value == "pending"

    def test_short_description_rejected(self, ctx):
        with pytest.raises(ValidationFailedError) as exc_info:
            _run(submit_report(ctx, _report(description="  bad  ")))
        assert "description" in exc_info.value.errors

    def test_unknown_reason_rejected(self, ctx):
        with pytest.raises(ValidationFailedError) as exc_info:
            _run(submit_report(ctx, _report(reason="boredom")))
        assert "reason" in exc_info.value.errors

    def test_duplicate_report_conflicts(self, ctx):
        _run(submit_report(ctx, _report()))
        with pytest.raises(ConflictError):
            _run(submit_report(ctx, _report()))

    def test_different_content_is_a_new_report(self, ctx, fake_supabase):
        _run(submit_report(ctx, _report(content_id="msg-1")))
        _run(submit_report(ctx, _report(content_id="msg-2")))
        assert len(fake_supabase.rows("reports")) == 2

    def test_list_my_reports(self, ctx, fake_supabase):
        fake_supabase.seed("reports", {
            "id": "r-other", "reporter_id": "someone", "reported_user_id": "me",
            "type": "user", "reason": "spam",
        })
        _run(submit_report(ctx, _report()))
        reports = _run(list_my_reports(ctx))
        assert [r.reporter_id for r in reports] == ["me"]


class TestContentFilter:
    def test_profanity_whole_words_only(self):
        assert contains_profanity("What the hell")
        assert not contains_profanity("Hello there, class")

    def test_filter_masks_same_length(self):
        assert filter_profanity("Oh crap, CRAP") == "Oh ****, ****"

    @pytest.mark.parametrize("text", [
        "Click here for a deal",
        "cheap viagra",
        "see https://spam.example.com",
    ])
    def test_spam(self, text):
        assert is_spam(text)

    def test_message_validation(self):
        assert validate_message_content("   ") == "Message cannot be empty"
        assert validate_message_content(None) == "Message cannot be empty"
        assert validate_message_content("x" * 5001) == "Message too long (max 5000 characters)"
        assert validate_message_content("Buy now!") == "Message appears to be spam"
        assert validate_message_content("See you at the park") is None

    def test_sanitize_strips_markup(self):
        assert sanitize_input("  <b>Hi</b><script>alert(1)</script> there ") == "Hi there"
