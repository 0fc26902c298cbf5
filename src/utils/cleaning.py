"""Vendor table normalization and record conversion helpers."""
import math
from typing import Any, Iterable, List

import pandas as pd

from src.data.models import GeoPoint, VendorRecord

VENDOR_COLUMNS = [
    "id",
    "display_name",
    "service_categories",
    "city",
    "state",
    "hourly_rate",
    "rating",
    "rating_count",
    "latitude",
    "longitude",
    "is_active",
]

# Column names used by vendor exports from the profile service
COLUMN_ALIASES = {
    "vendorId": "id",
    "businessName": "display_name",
    "displayName": "display_name",
    "serviceCategories": "service_categories",
    "hourlyRate": "hourly_rate",
    "averageRating": "rating",
    "totalRatings": "rating_count",
    "ratingCount": "rating_count",
    "isActive": "is_active",
}

_TRUE_STRINGS = {"true", "t", "yes", "y", "1", "active"}


def safe_numeric_conversion(value: Any, default: float = 0.0) -> float:
    try:
        if pd.isna(value):
            return default
        return float(value)
    except (ValueError, TypeError):
        return default


def _parse_categories(value: Any) -> frozenset:
    if value is None:
        return frozenset()
    if isinstance(value, (set, frozenset, list, tuple)):
        parts = [str(v).strip() for v in value]
    else:
        try:
            if pd.isna(value):
                return frozenset()
        except (TypeError, ValueError):
            pass
        parts = [s.strip() for s in str(value).split(",")]
    return frozenset(p for p in parts if p)


def _parse_active(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return not pd.isna(value) and value != 0
    return str(value).strip().lower() in _TRUE_STRINGS


def _clean_text(value: Any) -> str:
    if value is None:
        return ""
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    text = str(value).strip()
    return "" if text in ("nan", "None", "NaN") else text


def clean_vendor_data(df: pd.DataFrame) -> pd.DataFrame:
    """Normalize a raw vendor table to ``VENDOR_COLUMNS``.

    Known camelCase export names are renamed, missing optional columns are
    added, numeric columns are coerced (unparseable values become NaN) and
    categories become frozensets. Row order is preserved.
    """
    df = df.copy()
    df.columns = [str(col).strip() for col in df.columns]
    df = df.rename(columns={k: v for k, v in COLUMN_ALIASES.items() if k in df.columns})

    if "id" not in df.columns:
        raise ValueError("Vendor data must include an 'id' column")

    if "is_active" not in df.columns:
        df["is_active"] = True
    for col in VENDOR_COLUMNS:
        if col not in df.columns:
            df[col] = None

    df["id"] = df["id"].apply(_clean_text)
    df["display_name"] = df["display_name"].apply(_clean_text)
    df["city"] = df["city"].apply(_clean_text)
    df["state"] = df["state"].apply(_clean_text)
    df["service_categories"] = df["service_categories"].apply(_parse_categories)

    for col in ("hourly_rate", "latitude", "longitude"):
        df[col] = pd.to_numeric(df[col], errors="coerce").astype(float)
    df["rating"] = df["rating"].apply(lambda x: safe_numeric_conversion(x, 0.0))
    df["rating_count"] = df["rating_count"].apply(lambda x: int(safe_numeric_conversion(x, 0.0)))
    df["is_active"] = df["is_active"].apply(_parse_active).astype(bool)

    # A vendor with half a coordinate pair has no usable location
    half_located = df["latitude"].isna() ^ df["longitude"].isna()
    df.loc[half_located, ["latitude", "longitude"]] = float("nan")

    return df[VENDOR_COLUMNS].reset_index(drop=True)


def records_to_frame(records: Iterable[VendorRecord]) -> pd.DataFrame:
    rows = [
        {
            "id": r.id,
            "display_name": r.display_name,
            "service_categories": frozenset(r.service_categories),
            "city": r.city,
            "state": r.state,
            "hourly_rate": float("nan") if r.hourly_rate is None else float(r.hourly_rate),
            "rating": float(r.rating),
            "rating_count": int(r.rating_count),
            "latitude": float("nan") if r.location is None else float(r.location.latitude),
            "longitude": float("nan") if r.location is None else float(r.location.longitude),
            "is_active": bool(r.is_active),
        }
        for r in records
    ]
    if not rows:
        return pd.DataFrame(
            {
                col: pd.Series(dtype=float if col in ("hourly_rate", "rating", "latitude", "longitude") else object)
                for col in VENDOR_COLUMNS
            }
        )
    return pd.DataFrame(rows, columns=VENDOR_COLUMNS)


def _optional_float(value: Any) -> Any:
    if value is None:
        return None
    value = float(value)
    return None if math.isnan(value) else value


def frame_to_records(df: pd.DataFrame) -> List[VendorRecord]:
    records = []
    for row in df.itertuples(index=False):
        lat = _optional_float(row.latitude)
        lng = _optional_float(row.longitude)
        location = GeoPoint(lat, lng) if lat is not None and lng is not None else None
        records.append(
            VendorRecord(
                id=str(row.id),
                display_name=str(row.display_name),
                service_categories=frozenset(row.service_categories),
                city=str(row.city),
                state=str(row.state),
                hourly_rate=_optional_float(row.hourly_rate),
                rating=float(row.rating),
                rating_count=int(row.rating_count),
                location=location,
                is_active=bool(row.is_active),
            )
        )
    return records


def validate_vendor_data(df: pd.DataFrame) -> tuple[bool, str]:
    if df.empty:
        return False, "No vendor data available"

    issues = []
    info = []

    duplicate_ids = int(df["id"].duplicated().sum())
    if duplicate_ids:
        issues.append(f"{duplicate_ids} duplicate vendor ids")

    blank_ids = int((df["id"] == "").sum())
    if blank_ids:
        issues.append(f"{blank_ids} vendors without an id")

    missing_coords = int((df["latitude"].isna() | df["longitude"].isna()).sum())
    if missing_coords:
        info.append(f"{missing_coords} vendors have no location and are excluded from radius searches")

    out_of_range = int(((df["rating"] < 0) | (df["rating"] > 5)).sum())
    if out_of_range:
        issues.append(f"{out_of_range} vendors have ratings outside 0-5")

    info.append(f"Active vendors: {int(df['is_active'].sum())} of {len(df)}")

    message_parts = []
    if issues:
        message_parts.append("Data quality issues: " + "; ".join(issues))
    if info:
        message_parts.append("Data summary: " + "; ".join(info))

    return len(issues) == 0, "\n\n".join(message_parts)
