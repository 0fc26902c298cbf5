"""Validation for coordinates and search queries.

``validate_search_query`` is the single entry point the orchestrator calls
before any filtering. It raises the first problem found, checking
coordinates, then radius, then pagination, then the remaining filters.
"""

import math
from typing import Any, Dict, Optional, Tuple

from src.data.models import SearchQuery
from src.utils.errors import InvalidCoordinate, InvalidFilter, InvalidPagination, InvalidRadius
from src.utils.ranking import SORT_STRATEGIES

# Hard ceiling on page size; configuration may lower it but never raise it
MAX_PAGE_SIZE = 100


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_coordinates(lat: float, lon: float) -> Tuple[bool, str]:
    """
    Validate latitude and longitude coordinates.

    Args:
        lat: Latitude value
        lon: Longitude value

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not _is_number(lat) or not _is_number(lon):
        return False, "Coordinates must be numeric"

    if not (math.isfinite(lat) and math.isfinite(lon)):
        return False, "Coordinates must be finite"

    if not (-90 <= lat <= 90):
        return False, "Latitude must be between -90 and 90"

    if not (-180 <= lon <= 180):
        return False, "Longitude must be between -180 and 180"

    return True, "Valid coordinates"


def validate_search_query(query: SearchQuery, config: Optional[Dict[str, Any]] = None) -> SearchQuery:
    """
    Check a query against coordinate, radius, pagination and filter rules.

    Args:
        query: The query to check
        config: Search configuration (see ``get_search_config``); only
            ``max_radius_km`` and ``max_page_size`` are read

    Returns:
        The same query, unchanged, when it is valid

    Raises:
        InvalidCoordinate, InvalidRadius, InvalidPagination, InvalidFilter
    """
    config = config or {}
    max_radius_km = float(config.get("max_radius_km", 500.0))
    max_page_size = min(int(config.get("max_page_size", MAX_PAGE_SIZE)), MAX_PAGE_SIZE)

    if query.origin is not None:
        ok, message = validate_coordinates(query.origin.latitude, query.origin.longitude)
        if not ok:
            raise InvalidCoordinate(message, field="origin")

    radius = query.radius_km
    if not _is_number(radius) or not math.isfinite(radius) or radius <= 0:
        raise InvalidRadius("Radius must be a positive number of kilometers", field="radius")
    if radius > max_radius_km:
        raise InvalidRadius(f"Radius must not exceed {max_radius_km:g} km", field="radius")

    if not isinstance(query.page, int) or isinstance(query.page, bool) or query.page < 1:
        raise InvalidPagination("Page must be an integer of at least 1", field="page")
    if (
        not isinstance(query.page_size, int)
        or isinstance(query.page_size, bool)
        or not 1 <= query.page_size <= max_page_size
    ):
        raise InvalidPagination(f"Limit must be between 1 and {max_page_size}", field="limit")

    if query.min_rating is not None:
        if not _is_number(query.min_rating) or not 0 <= query.min_rating <= 5:
            raise InvalidFilter("Minimum rating must be between 0 and 5", field="minRating")
    if query.max_hourly_rate is not None:
        if (
            not _is_number(query.max_hourly_rate)
            or not math.isfinite(query.max_hourly_rate)
            or query.max_hourly_rate < 0
        ):
            raise InvalidFilter("Maximum hourly rate must be a non-negative number", field="maxHourlyRate")
    if query.sort_by not in SORT_STRATEGIES:
        raise InvalidFilter(
            f"Unknown sort order '{query.sort_by}'; expected one of {', '.join(sorted(SORT_STRATEGIES))}",
            field="sortBy",
        )

    return query
