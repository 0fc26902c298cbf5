"""Vendor search orchestration.

A search request moves through validating, filtering, ranking and
paginating, and either responds with a ``PageEnvelope`` or is rejected with a
``SearchError``. Filtering is delegated to the vendor store as a
``FilterSpec``; everything after that runs on request-local data.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from src.data.models import GeoPoint, PageEnvelope, RankedResult, SearchQuery, VendorRecord
from src.data.vendor_store import VendorStore
from src.utils.config import get_search_config
from src.utils.errors import (
    InvalidCoordinate,
    InvalidFilter,
    InvalidPagination,
    InvalidRadius,
    SearchError,
    StoreUnavailable,
)
from src.utils.filtering import FilterSpec, build_filter_spec
from src.utils.pagination import paginate
from src.utils.performance import monitor_performance
from src.utils.ranking import DEFAULT_SORT, rank_vendors
from src.utils.validation import validate_search_query

__all__ = [
    "SearchStage",
    "VENDOR_CATEGORIES",
    "parse_search_params",
    "search_vendors",
    "find_nearby_vendors",
    "get_featured_vendors",
    "get_vendor_categories",
    "get_unique_categories",
    "build_search_response",
    "build_error_response",
]

logger = logging.getLogger(__name__)


class SearchStage(Enum):
    VALIDATING = "validating"
    FILTERING = "filtering"
    RANKING = "ranking"
    PAGINATING = "paginating"
    RESPONDED = "responded"
    REJECTED = "rejected"


VENDOR_CATEGORIES = [
    "Plumbing",
    "Electrical",
    "HVAC",
    "Carpentry",
    "Painting",
    "Roofing",
    "Landscaping",
    "Cleaning",
    "Moving",
    "Handyman",
    "Appliance Repair",
    "Pest Control",
]

SEARCH_PARAMS = {
    "latitude",
    "longitude",
    "radius",
    "serviceCategories",
    "city",
    "state",
    "minRating",
    "maxHourlyRate",
    "page",
    "limit",
    "sortBy",
}


# --- Request parsing ---


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return all(_is_blank(v) for v in value)
    return False


def _scalar(value: Any) -> Any:
    # Query strings may deliver single values as one-element lists
    if isinstance(value, (list, tuple)) and len(value) == 1:
        return value[0]
    return value


def _to_float(value: Any, error_cls: type, field: str) -> float:
    value = _scalar(value)
    if isinstance(value, bool):
        raise error_cls(f"'{field}' must be a number", field=field)
    try:
        return float(value.strip() if isinstance(value, str) else value)
    except (TypeError, ValueError):
        raise error_cls(f"'{field}' must be a number, got {value!r}", field=field) from None


def _to_int(value: Any, field: str) -> int:
    value = _scalar(value)
    if isinstance(value, bool):
        raise InvalidPagination(f"'{field}' must be an integer", field=field)
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidPagination(f"'{field}' must be an integer, got {value!r}", field=field) from None


def _parse_categories(value: Any) -> Optional[frozenset]:
    if _is_blank(value):
        return None
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple, set, frozenset)):
        parts = [str(v) for v in value if v is not None]
    else:
        raise InvalidFilter("'serviceCategories' must be a string or a list of strings", field="serviceCategories")
    categories = frozenset(p.strip() for p in parts if p.strip())
    return categories or None


def _resolve_config(config: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Caller overrides layered on top of the configured search defaults."""
    return {**get_search_config(), **(config or {})}


def parse_search_params(params: Mapping[str, Any], config: Optional[Dict[str, Any]] = None) -> SearchQuery:
    """Build a ``SearchQuery`` from HTTP-style query parameters.

    Values may be strings or native Python values. Blank values count as
    absent. Ranges are not checked here; see ``validate_search_query``.

    Raises:
        InvalidCoordinate, InvalidRadius, InvalidPagination, InvalidFilter
    """
    config = _resolve_config(config)
    normalized = {}
    for key, value in params.items():
        name = key[:-2] if key.endswith("[]") else key
        normalized[name] = value

    unknown = sorted(set(normalized) - SEARCH_PARAMS)
    if unknown:
        raise InvalidFilter(f"Unknown search parameter(s): {', '.join(unknown)}", field=unknown[0])

    lat_raw = normalized.get("latitude")
    lng_raw = normalized.get("longitude")
    origin = None
    if _is_blank(lat_raw) != _is_blank(lng_raw):
        raise InvalidCoordinate("latitude and longitude must be provided together", field="origin")
    if not _is_blank(lat_raw):
        origin = GeoPoint(
            _to_float(lat_raw, InvalidCoordinate, "latitude"),
            _to_float(lng_raw, InvalidCoordinate, "longitude"),
        )

    radius_raw = normalized.get("radius")
    radius_km = (
        float(config["default_radius_km"]) if _is_blank(radius_raw) else _to_float(radius_raw, InvalidRadius, "radius")
    )

    page_raw = normalized.get("page")
    limit_raw = normalized.get("limit")
    page = 1 if _is_blank(page_raw) else _to_int(page_raw, "page")
    page_size = int(config["default_page_size"]) if _is_blank(limit_raw) else _to_int(limit_raw, "limit")

    def optional_text(name: str) -> Optional[str]:
        value = _scalar(normalized.get(name))
        return None if _is_blank(value) else str(value).strip()

    min_rating_raw = normalized.get("minRating")
    max_rate_raw = normalized.get("maxHourlyRate")
    sort_raw = optional_text("sortBy")

    return SearchQuery(
        origin=origin,
        radius_km=radius_km,
        categories=_parse_categories(normalized.get("serviceCategories")),
        city=optional_text("city"),
        state=optional_text("state"),
        min_rating=None if _is_blank(min_rating_raw) else _to_float(min_rating_raw, InvalidFilter, "minRating"),
        max_hourly_rate=None if _is_blank(max_rate_raw) else _to_float(max_rate_raw, InvalidFilter, "maxHourlyRate"),
        page=page,
        page_size=page_size,
        sort_by=sort_raw.lower() if sort_raw else DEFAULT_SORT,
    )


# --- Store access ---


def _fetch_candidates(store: VendorStore, spec: FilterSpec, timeout: Optional[float]) -> List[VendorRecord]:
    """Run the store query, turning any failure or timeout into ``StoreUnavailable``."""
    if not timeout or timeout <= 0:
        try:
            return list(store.find_candidates(spec))
        except StoreUnavailable:
            raise
        except Exception as e:
            logger.error(f"Vendor store query failed: {type(e).__name__}: {e}")
            raise StoreUnavailable() from e

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="vendor-store")
    try:
        future = executor.submit(store.find_candidates, spec)
        try:
            return list(future.result(timeout=timeout))
        except FutureTimeoutError as e:
            future.cancel()
            logger.error(f"Vendor store query timed out after {timeout:g}s")
            raise StoreUnavailable(f"Vendor store did not respond within {timeout:g}s") from e
        except StoreUnavailable:
            raise
        except Exception as e:
            logger.error(f"Vendor store query failed: {type(e).__name__}: {e}")
            raise StoreUnavailable() from e
    finally:
        executor.shutdown(wait=False)


# --- Search operations ---


def _run_search(
    store: VendorStore,
    query: SearchQuery,
    spec: Optional[FilterSpec],
    sort_by: Optional[str],
    config: Dict[str, Any],
) -> PageEnvelope:
    stage = SearchStage.VALIDATING
    try:
        if sort_by is not None:
            query = replace(query, sort_by=sort_by)
        validate_search_query(query, config)

        stage = SearchStage.FILTERING
        logger.debug(f"Vendor search {stage.value}: {query}")
        if spec is None:
            spec = build_filter_spec(query, min_cos=float(config["min_cos_latitude"]))
        candidates = _fetch_candidates(store, spec, float(config["store_timeout_seconds"]))

        stage = SearchStage.RANKING
        logger.debug(f"Vendor search {stage.value}: {len(candidates)} candidates")
        ranked = rank_vendors(candidates, query, trim_to_radius=True)

        stage = SearchStage.PAGINATING
        envelope = paginate(ranked, query.page, query.page_size)
    except SearchError as e:
        logger.warning(f"Vendor search {SearchStage.REJECTED.value} during {stage.value}: {e.code}: {e.message}")
        raise

    logger.info(
        f"Vendor search {SearchStage.RESPONDED.value}: {envelope.total_count} results from "
        f"{len(candidates)} candidates (page {envelope.page}/{envelope.total_pages})"
    )
    return envelope


@monitor_performance(slow_threshold=0.5)
def search_vendors(
    store: VendorStore,
    request: Union[SearchQuery, Mapping[str, Any]],
    *,
    sort_by: Optional[str] = None,
    config: Optional[Dict[str, Any]] = None,
) -> PageEnvelope:
    """Run a full vendor search.

    Args:
        store: Vendor store collaborator
        request: A ``SearchQuery`` or raw query parameters
        sort_by: Strategy overriding ``query.sort_by`` ('rating', 'distance', 'price')
        config: Search configuration overrides; missing keys come from ``get_search_config()``

    Returns:
        PageEnvelope with the requested page of ranked results

    Raises:
        InvalidCoordinate, InvalidRadius, InvalidPagination, InvalidFilter:
            before the store is queried
        StoreUnavailable: if the store fails or times out
    """
    config = _resolve_config(config)
    if isinstance(request, SearchQuery):
        query = request
    else:
        try:
            query = parse_search_params(request, config)
        except SearchError as e:
            logger.warning(f"Vendor search {SearchStage.REJECTED.value} while parsing: {e.code}: {e.message}")
            raise
    return _run_search(store, query, None, sort_by, config)


@monitor_performance(slow_threshold=0.5)
def find_nearby_vendors(
    store: VendorStore,
    latitude: float,
    longitude: float,
    radius_km: Optional[float] = None,
    categories: Optional[Iterable[str]] = None,
    limit: Optional[int] = None,
    *,
    config: Optional[Dict[str, Any]] = None,
) -> PageEnvelope:
    """First page of vendors around a required origin."""
    config = _resolve_config(config)
    if latitude is None or longitude is None:
        raise InvalidCoordinate("latitude and longitude are required", field="origin")
    query = SearchQuery(
        origin=GeoPoint(latitude, longitude),
        radius_km=float(config["default_radius_km"]) if radius_km is None else radius_km,
        categories=frozenset(categories) if categories else None,
        page=1,
        page_size=int(config["default_page_size"]) if limit is None else limit,
    )
    return _run_search(store, query, None, None, config)


@monitor_performance(slow_threshold=0.5)
def get_featured_vendors(
    store: VendorStore,
    page: int = 1,
    limit: Optional[int] = None,
    *,
    config: Optional[Dict[str, Any]] = None,
) -> PageEnvelope:
    """Well-reviewed active vendors, rating-ordered and paginated."""
    config = _resolve_config(config)
    query = SearchQuery(page=page, page_size=int(config["default_page_size"]) if limit is None else limit)
    spec = FilterSpec(
        min_rating=float(config["featured_min_rating"]),
        min_rating_count=int(config["featured_min_rating_count"]),
    )
    return _run_search(store, query, spec, None, config)


def get_vendor_categories() -> List[str]:
    return list(VENDOR_CATEGORIES)


def get_unique_categories(records: Sequence[VendorRecord]) -> List[str]:
    """Sorted service categories actually offered by ``records``."""
    unique_categories = set()
    for record in records:
        unique_categories.update(c.strip() for c in record.service_categories if c and c.strip())
    return sorted(unique_categories)


# --- Response shaping ---


def _round_distance(distance_km: Optional[float], decimals: int) -> Optional[float]:
    if distance_km is None or math.isnan(distance_km):
        return None
    return round(distance_km, decimals)


def vendor_to_dict(result: RankedResult, decimals: int = 1) -> Dict[str, Any]:
    vendor = result.vendor
    return {
        "id": vendor.id,
        "displayName": vendor.display_name,
        "serviceCategories": sorted(vendor.service_categories),
        "city": vendor.city,
        "state": vendor.state,
        "hourlyRate": vendor.hourly_rate,
        "rating": vendor.rating,
        "ratingCount": vendor.rating_count,
        "latitude": vendor.location.latitude if vendor.location else None,
        "longitude": vendor.location.longitude if vendor.location else None,
        "isActive": vendor.is_active,
        "distance": _round_distance(result.distance_km, decimals),
    }


def build_search_response(
    envelope: PageEnvelope, query: SearchQuery, config: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Shape a page for the API layer, echoing the normalized filters."""
    config = _resolve_config(config)
    decimals = int(config["distance_decimals"])
    return {
        "success": True,
        "data": {
            "vendors": [vendor_to_dict(item, decimals) for item in envelope.items],
            "pagination": {
                "page": envelope.page,
                "limit": envelope.page_size,
                "total": envelope.total_count,
                "pages": envelope.total_pages,
            },
            "filters": {
                "latitude": query.origin.latitude if query.origin else None,
                "longitude": query.origin.longitude if query.origin else None,
                "radius": query.radius_km,
                "serviceCategories": sorted(query.categories) if query.categories else None,
                "city": query.city,
                "state": query.state,
                "minRating": query.min_rating,
                "maxHourlyRate": query.max_hourly_rate,
                "sortBy": query.sort_by,
            },
        },
    }


def build_error_response(error: SearchError) -> Dict[str, Any]:
    return {"success": False, "error": error.to_dict()}
