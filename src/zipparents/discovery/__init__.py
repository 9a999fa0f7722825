"""ZipParents - Discovery: zip code distances, ranking and search."""

from zipparents.discovery.ranking import rank_by_distance
from zipparents.discovery.search import (
    SearchFilters,
    SearchResponse,
    nearby_parents,
    search_parents,
    similar_parents,
)
from zipparents.discovery.zipcode import (
    DEFAULT_SEARCH_RADIUS,
    SEARCH_RADIUS_OPTIONS,
    calculate_distance,
    zip_code_distance,
)

__all__ = [
    "DEFAULT_SEARCH_RADIUS",
    "SEARCH_RADIUS_OPTIONS",
    "SearchFilters",
    "SearchResponse",
    "calculate_distance",
    "nearby_parents",
    "rank_by_distance",
    "search_parents",
    "similar_parents",
    "zip_code_distance",
]
