"""Vendor ranking: exact distances plus a deterministic multi-key sort."""
from typing import List, Optional, Sequence

import pandas as pd

from src.data.models import GeoPoint, RankedResult, SearchQuery, VendorRecord
from src.utils.cleaning import frame_to_records, records_to_frame
from src.utils.geo import calculate_distances

# (column, ascending) pairs. Missing values always sort last and every
# strategy ends on id so the order is total.
SORT_STRATEGIES = {
    "rating": [
        ("rating", False),
        ("rating_count", False),
        ("distance_km", True),
        ("id", True),
    ],
    "distance": [
        ("distance_km", True),
        ("rating", False),
        ("rating_count", False),
        ("id", True),
    ],
    "price": [
        ("hourly_rate", True),
        ("rating", False),
        ("rating_count", False),
        ("distance_km", True),
        ("id", True),
    ],
}

DEFAULT_SORT = "rating"


def attach_distances(df: pd.DataFrame, origin: Optional[GeoPoint]) -> pd.DataFrame:
    df = df.copy()
    if origin is None or df.empty:
        df["distance_km"] = float("nan")
        return df
    distances = calculate_distances(origin, df)
    df["distance_km"] = pd.Series([float("nan") if d is None else d for d in distances], index=df.index, dtype=float)
    return df


def filter_vendors_by_radius(df: pd.DataFrame, radius_km: float) -> pd.DataFrame:
    """Drop rows whose exact distance exceeds ``radius_km``.

    Rows without a distance are kept; the bounding box already removed
    unlocated vendors from geo searches.
    """
    if df is None or df.empty or "distance_km" not in df.columns:
        return df
    return df[df["distance_km"].isna() | (df["distance_km"] <= radius_km)].copy()


def sort_vendors(df: pd.DataFrame, sort_by: str = DEFAULT_SORT) -> pd.DataFrame:
    keys = SORT_STRATEGIES[sort_by]
    if df.empty:
        return df.reset_index(drop=True)
    return df.sort_values(
        by=[col for col, _ in keys],
        ascending=[asc for _, asc in keys],
        na_position="last",
        kind="mergesort",
    ).reset_index(drop=True)


def frame_to_ranked_results(df: pd.DataFrame) -> List[RankedResult]:
    vendors = frame_to_records(df)
    distances = df["distance_km"].tolist() if "distance_km" in df.columns else [float("nan")] * len(vendors)
    return [
        RankedResult(vendor=vendor, distance_km=None if pd.isna(d) else float(d))
        for vendor, d in zip(vendors, distances)
    ]


def rank_vendors(
    records: Sequence[VendorRecord],
    query: SearchQuery,
    sort_by: Optional[str] = None,
    *,
    trim_to_radius: bool = False,
) -> List[RankedResult]:
    """Attach distances to ``records`` and order them.

    Args:
        records: Candidate vendors, already filtered
        query: Supplies the origin and, when trimming, the radius
        sort_by: Strategy name; defaults to ``query.sort_by``
        trim_to_radius: Drop candidates farther than ``query.radius_km``

    Returns:
        Ranked results in display order
    """
    if not records:
        return []
    frame = attach_distances(records_to_frame(records), query.origin)
    if trim_to_radius and query.origin is not None:
        frame = filter_vendors_by_radius(frame, query.radius_km)
    ranked = sort_vendors(frame, sort_by or query.sort_by or DEFAULT_SORT)
    return frame_to_ranked_results(ranked)
