"""Value types shared by the vendor search pipeline.

All types here are plain dataclasses. ``VendorRecord`` is a read-only
projection of the vendor store; the others live for a single search request.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional


@dataclass(frozen=True, slots=True)
class GeoPoint:
    """A latitude/longitude pair in decimal degrees.

    Range checks are done by ``validate_search_query``, not here, so a
    GeoPoint can be built from raw input and rejected afterwards.
    """

    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class VendorRecord:
    """Vendor profile fields the search engine reads."""

    id: str
    display_name: str
    service_categories: FrozenSet[str] = frozenset()
    city: str = ""
    state: str = ""
    hourly_rate: Optional[float] = None
    rating: float = 0.0
    rating_count: int = 0
    location: Optional[GeoPoint] = None
    is_active: bool = True


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """Normalized search request.

    ``page_size`` is the ``limit`` query parameter. ``sort_by`` names one of
    the strategies in ``src.utils.ranking.SORT_STRATEGIES``.
    """

    origin: Optional[GeoPoint] = None
    radius_km: float = 50.0
    categories: Optional[FrozenSet[str]] = None
    city: Optional[str] = None
    state: Optional[str] = None
    min_rating: Optional[float] = None
    max_hourly_rate: Optional[float] = None
    page: int = 1
    page_size: int = 20
    sort_by: str = "rating"


@dataclass(frozen=True, slots=True)
class RankedResult:
    vendor: VendorRecord
    distance_km: Optional[float] = None


@dataclass(slots=True)
class PageEnvelope:
    """One page of ranked results plus pagination metadata."""

    items: List[RankedResult] = field(default_factory=list)
    page: int = 1
    page_size: int = 20
    total_count: int = 0
    total_pages: int = 1
