"""Tests for parent search and nearby discovery."""

import pytest
from pydantic import ValidationError

from conftest import _run, make_ctx, make_user_row
from zipparents.discovery.search import (
    SearchFilters,
    coarse_distance,
    nearby_parents,
    search_parents,
    similar_parents,
)
from zipparents.errors import DecodeError, ValidationFailedError
from zipparents.models.user import VerificationStatus


@pytest.fixture
def neighborhood(fake_supabase, ctx):
    """Parents around 10001 plus a few who must never show up."""
    fake_supabase.seed(
        "users",
        make_user_row("near", zip_code="10002", interests=["Music", "Sports", "Travel"],
                      last_active="2026-01-02T00:00:00+00:00"),
        make_user_row("nearer", zip_code="10011", interests=["Reading", "Travel", "Adoption"],
                      children_age_ranges=["0-2"]),
        make_user_row("far", zip_code="10040", age_range="25-34"),
        make_user_row("la", zip_code="90001"),
        make_user_row("nowhere", zip_code="99999"),
        make_user_row("nozip", zip_code=None),
        make_user_row("private", zip_code="10003", privacy_settings={"profile_visibility": "private"}),
        make_user_row("vip", zip_code="10003", privacy_settings={"profile_visibility": "verified-only"}),
        make_user_row("new", zip_code="10003", onboarding_completed=False),
        make_user_row("banned", zip_code="10003", status="banned"),
    )
    return fake_supabase


def _uids(profiles):
    return [p.uid for p in profiles]


class TestSearchFilters:
    def test_defaults(self):
        filters = SearchFilters()
        assert filters.radius == 25
        assert filters.limit == 50

    def test_zip_normalized(self):
        assert SearchFilters(zip_code=" 10001 ").zip_code == "10001"

    @pytest.mark.parametrize("values", [
        {"zip_code": "1234"},
        {"radius": 0},
        {"limit": 500},
        {"offset": -1},
    ])
    def test_invalid(self, values):
        with pytest.raises(ValidationError):
            SearchFilters(**values)


class TestSearchParents:
    def test_radius_and_ranking(self, ctx, neighborhood):
        response = _run(search_parents(ctx, SearchFilters(radius=5)))
        assert _uids(response.results) == ["nearer", "near"]
        assert response.total == 2
        assert not response.has_more
        assert all(p.distance is not None for p in response.results)

    def test_wider_radius(self, ctx, neighborhood):
        response = _run(search_parents(ctx, SearchFilters(radius=25)))
        assert _uids(response.results) == ["nearer", "near", "far"]

    def test_unknown_locations_never_returned(self, ctx, neighborhood):
        response = _run(search_parents(ctx, SearchFilters(radius=10_000)))
        uids = _uids(response.results)
        assert "la" in uids
        assert "nowhere" not in uids
        assert "nozip" not in uids

    def test_hidden_inactive_and_self_excluded(self, ctx, neighborhood):
        uids = _uids(_run(search_parents(ctx, SearchFilters(radius=100))).results)
        for uid in ("me", "private", "vip", "new", "banned"):
            assert uid not in uids

    def test_verified_viewer_sees_verified_only_profiles(self, neighborhood):
        ctx = make_ctx(neighborhood, "me", verification_status=VerificationStatus.VERIFIED)
        uids = _uids(_run(search_parents(ctx, SearchFilters(radius=5))).results)
        assert "vip" in uids

    def test_blocked_users_excluded(self, ctx, neighborhood):
        neighborhood.seed("blocked_users", {"id": "b1", "blocker_id": "near", "blocked_user_id": "me"})
        uids = _uids(_run(search_parents(ctx, SearchFilters(radius=5))).results)
        assert uids == ["nearer"]

    def test_filters(self, ctx, neighborhood):
        by_interest = _run(search_parents(ctx, SearchFilters(interests=["Sports"])))
        assert _uids(by_interest.results) == ["near"]

        by_children = _run(search_parents(ctx, SearchFilters(children_age_ranges=["0-2"])))
        assert _uids(by_children.results) == ["nearer"]

        by_age = _run(search_parents(ctx, SearchFilters(age_ranges=["25-34"])))
        assert _uids(by_age.results) == ["far"]

    def test_explicit_origin(self, ctx, neighborhood):
        response = _run(search_parents(ctx, SearchFilters(zip_code="90002", radius=5)))
        assert _uids(response.results) == ["la"]

    def test_paging(self, ctx, neighborhood):
        first = _run(search_parents(ctx, SearchFilters(limit=2)))
        second = _run(search_parents(ctx, SearchFilters(limit=2, offset=2)))
        assert _uids(first.results) == ["nearer", "near"]
        assert first.has_more
        assert _uids(second.results) == ["far"]
        assert not second.has_more

    def test_no_origin(self, fake_supabase):
        fake_supabase.seed("users", make_user_row("me", zip_code=None))
        with pytest.raises(ValidationFailedError) as exc_info:
            _run(search_parents(make_ctx(fake_supabase), SearchFilters()))
        assert "zip_code" in exc_info.value.errors


class TestNearbyAndSimilar:
    def test_nearby(self, ctx, neighborhood):
        assert _uids(_run(nearby_parents(ctx, radius=5))) == ["nearer", "near"]

    def test_similar_shares_an_interest(self, fake_supabase):
        fake_supabase.seed(
            "users",
            make_user_row("me", interests=["Adoption"]),
            make_user_row("match", zip_code="10002", interests=["Adoption", "Music", "Travel"]),
            make_user_row("other", zip_code="10002", interests=["Music", "Travel", "Sports"]),
        )
        assert _uids(_run(similar_parents(make_ctx(fake_supabase)))) == ["match"]

    def test_similar_without_interests_is_nearby(self, fake_supabase):
        fake_supabase.seed(
            "users",
            make_user_row("me", interests=[]),
            make_user_row("other", zip_code="10002"),
        )
        assert _uids(_run(similar_parents(make_ctx(fake_supabase)))) == ["other"]


class TestHiddenLocationDistance:
    @pytest.mark.parametrize("exact, coarse", [(0.2, 1.0), (0.7, 1.0), (3.4, 3.0), (8.2, 8.0)])
    def test_coarse_distance(self, exact, coarse):
        assert coarse_distance(exact) == coarse

    def test_hidden_location_gets_whole_miles(self, fake_supabase):
        fake_supabase.seed(
            "users",
            make_user_row("me"),
            make_user_row("hidden", zip_code="10011", privacy_settings={"show_exact_location": False}),
            make_user_row("shown", zip_code="10011"),
        )
        results = _run(search_parents(make_ctx(fake_supabase), SearchFilters(radius=5))).results
        by_uid = {p.uid: p for p in results}

        assert by_uid["hidden"].distance == 1.0
        assert by_uid["hidden"].zip_code == "100"
        assert by_uid["shown"].distance == 0.7

    def test_malformed_row_raises_decode_error(self, fake_supabase):
        fake_supabase.seed(
            "users",
            make_user_row("me"),
            make_user_row("broken", zip_code="10002", interests=[{"name": "Music"}]),
        )
        with pytest.raises(DecodeError):
            _run(search_parents(make_ctx(fake_supabase), SearchFilters(radius=5)))
