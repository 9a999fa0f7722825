"""
Discovery API endpoints: search, nearby and similar parents.
"""

from fastapi import APIRouter, Depends, Query

from zipparents.auth.context import AuthContext
from zipparents.discovery.search import (
    SearchFilters,
    SearchResponse,
    nearby_parents,
    search_parents,
    similar_parents,
)
from zipparents.discovery.zipcode import DEFAULT_SEARCH_RADIUS, SEARCH_RADIUS_OPTIONS
from zipparents.models.profile import PublicProfile
from zipparents.web.auth import get_auth_context

router = APIRouter(prefix="/discover", tags=["discovery"])


@router.get("/radius-options")
async def radius_options():
    return {"options": SEARCH_RADIUS_OPTIONS, "default": DEFAULT_SEARCH_RADIUS}


@router.post("/search", response_model=SearchResponse)
async def search(
    filters: SearchFilters,
    ctx: AuthContext = Depends(get_auth_context),
) -> SearchResponse:
    return await search_parents(ctx, filters)


@router.get("/nearby", response_model=list[PublicProfile])
async def nearby(
    radius: float = Query(DEFAULT_SEARCH_RADIUS, gt=0),
    limit: int = Query(20, ge=1, le=100),
    ctx: AuthContext = Depends(get_auth_context),
) -> list[PublicProfile]:
    return await nearby_parents(ctx, radius=radius, limit=limit)


@router.get("/similar", response_model=list[PublicProfile])
async def similar(
    radius: float = Query(DEFAULT_SEARCH_RADIUS, gt=0),
    limit: int = Query(20, ge=1, le=100),
    ctx: AuthContext = Depends(get_auth_context),
) -> list[PublicProfile]:
    return await similar_parents(ctx, radius=radius, limit=limit)
