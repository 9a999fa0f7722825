"""
ZipParents - Parent search.

Candidate rows are narrowed in the store where the filter maps onto a
column, then filtered, projected and ranked in memory. Profiles without a
known location never appear in radius results.
"""

import logging

from pydantic import BaseModel, Field, field_validator

from zipparents.auth.context import AuthContext
from zipparents.db.client import execute
from zipparents.discovery.ranking import rank_by_distance
from zipparents.discovery.zipcode import DEFAULT_SEARCH_RADIUS, zip_code_distance
from zipparents.errors import ValidationFailedError
from zipparents.models.profile import PublicProfile
from zipparents.models.user import (
    AgeRange,
    ChildrenAgeRange,
    RelationshipStatus,
    UserStatus,
    decode_user,
    normalize_zip_code,
)
from zipparents.profiles.privacy import project
from zipparents.profiles.service import get_own_profile
from zipparents.safety.service import blocked_user_ids

logger = logging.getLogger(__name__)

MAX_RESULTS = 100


def coarse_distance(distance: float) -> float:
    """Whole miles, at least one. Used for profiles that hide their exact location."""
    return max(1.0, float(round(distance)))


class SearchFilters(BaseModel):
    zip_code: str | None = None
    radius: float = Field(default=DEFAULT_SEARCH_RADIUS, gt=0)
    age_ranges: list[AgeRange] = Field(default_factory=list)
    relationship_statuses: list[RelationshipStatus] = Field(default_factory=list)
    interests: list[str] = Field(default_factory=list)
    children_age_ranges: list[ChildrenAgeRange] = Field(default_factory=list)
    limit: int = Field(default=50, ge=1, le=MAX_RESULTS)
    offset: int = Field(default=0, ge=0)

    @field_validator("zip_code", mode="before")
    @classmethod
    def check_zip(cls, v):
        return normalize_zip_code(v)


class SearchResponse(BaseModel):
    results: list[PublicProfile]
    total: int
    has_more: bool


async def search_parents(ctx: AuthContext, filters: SearchFilters) -> SearchResponse:
    """Find parents around a zip code, closest first."""
    origin = filters.zip_code
    if origin is None:
        origin = (await get_own_profile(ctx)).zip_code
    if origin is None:
        raise ValidationFailedError({"zip_code": "Add a zip code to search nearby parents"})

    client = ctx.store
    query = (
        client.table("users")
        .select("*")
        .eq("onboarding_completed", True)
        .eq("status", UserStatus.ACTIVE.value)
        .neq("id", ctx.user_id)
    )
    if filters.age_ranges:
        query = query.in_("age_range", [r.value for r in filters.age_ranges])
    if filters.relationship_statuses:
        query = query.in_("relationship_status", [s.value for s in filters.relationship_statuses])
    rows = execute(query, "search parents").data or []

    blocked = blocked_user_ids(client, ctx.user_id)
    wanted_interests = set(filters.interests)
    wanted_children = set(filters.children_age_ranges)
    viewer = ctx.viewer()

    matches: list[PublicProfile] = []
    for row in rows:
        user = decode_user(row)
        if user.uid == ctx.user_id or user.uid in blocked:
            continue
        if wanted_interests and not wanted_interests.intersection(user.interests):
            continue
        if wanted_children and not wanted_children.intersection(user.children_age_ranges):
            continue

        distance = zip_code_distance(origin, user.zip_code)
        if distance is None or distance > filters.radius:
            continue

        profile = project(user, viewer)
        if profile is None:
            continue
        if not user.privacy_settings.show_exact_location:
            distance = coarse_distance(distance)
        profile.distance = distance
        matches.append(profile)

    ranked = rank_by_distance(matches)
    page = ranked[filters.offset:filters.offset + filters.limit]
    logger.debug(f"Search by {ctx.user_id} around {origin}: {len(ranked)} matches")

    return SearchResponse(
        results=page,
        total=len(ranked),
        has_more=filters.offset + len(page) < len(ranked),
    )


async def nearby_parents(
    ctx: AuthContext,
    radius: float = DEFAULT_SEARCH_RADIUS,
    limit: int = 20,
) -> list[PublicProfile]:
    """Everyone around the session user's own zip code."""
    response = await search_parents(ctx, SearchFilters(radius=radius, limit=limit))
    return response.results


async def similar_parents(
    ctx: AuthContext,
    radius: float = DEFAULT_SEARCH_RADIUS,
    limit: int = 20,
) -> list[PublicProfile]:
    """Nearby parents sharing at least one interest; plain nearby search without interests."""
    me = await get_own_profile(ctx)
    if not me.interests:
        return await nearby_parents(ctx, radius=radius, limit=limit)
    response = await search_parents(
        ctx,
        SearchFilters(zip_code=me.zip_code, radius=radius, interests=me.interests, limit=limit),
    )
    return response.results
