"""Candidate filtering for vendor search.

A ``FilterSpec`` is the store-facing form of a ``SearchQuery``: every
predicate the store must apply, including the bounding box. All predicates
are AND-combined and filtering never reorders rows.
"""

import logging
from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Sequence

import pandas as pd

from src.data.models import SearchQuery, VendorRecord
from src.utils.cleaning import frame_to_records, records_to_frame
from src.utils.geo import MIN_COS_LATITUDE, BoundingBox, bounding_box

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FilterSpec:
    """Predicates for a store query. ``None`` means "no constraint"."""

    active_only: bool = True
    bbox: Optional[BoundingBox] = None
    categories: Optional[FrozenSet[str]] = None
    city: Optional[str] = None
    state: Optional[str] = None
    min_rating: Optional[float] = None
    max_hourly_rate: Optional[float] = None
    min_rating_count: Optional[int] = None


def build_filter_spec(query: SearchQuery, min_cos: float = MIN_COS_LATITUDE) -> FilterSpec:
    bbox = bounding_box(query.origin, query.radius_km, min_cos=min_cos) if query.origin is not None else None
    if bbox is not None:
        logger.debug(f"Bounding box for {query.radius_km} km around {query.origin}: {bbox}")
    return FilterSpec(
        bbox=bbox,
        categories=frozenset(query.categories) if query.categories else None,
        city=query.city or None,
        state=query.state or None,
        min_rating=query.min_rating,
        max_hourly_rate=query.max_hourly_rate,
    )


def apply_filter_spec(df: pd.DataFrame, spec: FilterSpec) -> pd.DataFrame:
    """Rows of a normalized vendor frame that satisfy every predicate in ``spec``."""
    if df is None or df.empty:
        return df.copy() if df is not None else df

    mask = pd.Series(True, index=df.index)

    if spec.active_only:
        mask &= df["is_active"].astype(bool)

    if spec.categories:
        wanted = spec.categories
        mask &= df["service_categories"].apply(lambda cats: not wanted.isdisjoint(cats)).astype(bool)

    if spec.city:
        mask &= df["city"].astype(str).str.contains(spec.city, case=False, regex=False, na=False)
    if spec.state:
        mask &= df["state"].astype(str).str.contains(spec.state, case=False, regex=False, na=False)

    if spec.min_rating is not None:
        mask &= df["rating"] >= spec.min_rating

    if spec.max_hourly_rate is not None:
        # Vendors without a rate cannot be shown to satisfy a rate ceiling
        mask &= df["hourly_rate"].notna() & (df["hourly_rate"] <= spec.max_hourly_rate)

    if spec.min_rating_count is not None:
        mask &= df["rating_count"] >= spec.min_rating_count

    if spec.bbox is not None:
        mask &= spec.bbox.mask(df["latitude"], df["longitude"])

    return df[mask].copy()


def filter_candidates(records: Sequence[VendorRecord], query: SearchQuery) -> List[VendorRecord]:
    """Order-preserving subset of ``records`` matching ``query``."""
    if not records:
        return []
    frame = records_to_frame(records)
    filtered = apply_filter_spec(frame, build_filter_spec(query))
    return frame_to_records(filtered)
