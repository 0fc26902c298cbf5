"""Great-circle distance and bounding-box helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd

from src.data.models import GeoPoint

EARTH_RADIUS_KM = 6371.0
KM_PER_DEGREE = 111.0
MIN_COS_LATITUDE = 1e-6


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """Haversine distance in kilometers between two validated points."""
    d_lat = math.radians(b.latitude - a.latitude)
    d_lng = math.radians(b.longitude - a.longitude)
    h = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(a.latitude)) * math.cos(math.radians(b.latitude)) * math.sin(d_lng / 2) ** 2
    )
    h = min(h, 1.0)
    return 2 * EARTH_RADIUS_KM * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def calculate_distances(origin: GeoPoint, vendor_df: pd.DataFrame) -> List[Optional[float]]:
    """Distances from ``origin`` to every row of ``vendor_df``.

    Rows with a missing latitude or longitude get None.
    """
    lat_arr = np.radians(vendor_df["latitude"].to_numpy(dtype=float))
    lon_arr = np.radians(vendor_df["longitude"].to_numpy(dtype=float))
    origin_lat = np.radians(origin.latitude)
    origin_lon = np.radians(origin.longitude)

    valid = ~np.isnan(lat_arr) & ~np.isnan(lon_arr)
    dlat = lat_arr[valid] - origin_lat
    dlon = lon_arr[valid] - origin_lon
    h = np.sin(dlat / 2) ** 2 + np.cos(origin_lat) * np.cos(lat_arr[valid]) * np.sin(dlon / 2) ** 2
    h = np.clip(h, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
    distances = np.full(len(vendor_df), np.nan)
    distances[valid] = EARTH_RADIUS_KM * c

    return [None if np.isnan(d) else float(d) for d in distances]


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Latitude/longitude rectangle around a search circle.

    When the box crosses the antimeridian ``lng_min`` is greater than
    ``lng_max`` and the box covers ``[lng_min, 180] + [-180, lng_max]``.
    """

    lat_min: float
    lat_max: float
    lng_min: float
    lng_max: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.lng_min > self.lng_max

    def contains(self, point: GeoPoint) -> bool:
        if not self.lat_min <= point.latitude <= self.lat_max:
            return False
        if self.crosses_antimeridian:
            return point.longitude >= self.lng_min or point.longitude <= self.lng_max
        return self.lng_min <= point.longitude <= self.lng_max

    def mask(self, latitudes: pd.Series, longitudes: pd.Series) -> pd.Series:
        """Vectorized ``contains``; NaN coordinates never match."""
        in_lat = latitudes.between(self.lat_min, self.lat_max)
        if self.crosses_antimeridian:
            in_lng = (longitudes >= self.lng_min) | (longitudes <= self.lng_max)
        else:
            in_lng = longitudes.between(self.lng_min, self.lng_max)
        return (in_lat & in_lng).fillna(False).astype(bool)


def _wrap_longitude(lng: float) -> float:
    return ((lng + 180.0) % 360.0) - 180.0


def bounding_box(center: GeoPoint, radius_km: float, min_cos: float = MIN_COS_LATITUDE) -> BoundingBox:
    """Conservative box containing every point within ``radius_km`` of ``center``.

    Deltas use 111 km per degree. The longitude delta never drops below the
    exact half-width of the circle, which matters away from the equator.
    Boxes that reach a pole span every longitude; boxes that cross the
    antimeridian wrap.
    """
    lat_delta = radius_km / KM_PER_DEGREE
    lat_min = center.latitude - lat_delta
    lat_max = center.latitude + lat_delta

    if lat_max >= 90.0 or lat_min <= -90.0:
        return BoundingBox(max(lat_min, -90.0), min(lat_max, 90.0), -180.0, 180.0)

    cos_lat = math.cos(math.radians(center.latitude))
    lng_delta = radius_km / (KM_PER_DEGREE * max(cos_lat, min_cos))
    # Widest longitude offset reached by the circle itself
    sin_radius = math.sin(radius_km / EARTH_RADIUS_KM)
    if sin_radius >= cos_lat:
        lng_delta = 180.0
    else:
        lng_delta = max(lng_delta, math.degrees(math.asin(sin_radius / cos_lat)))

    if lng_delta >= 180.0:
        return BoundingBox(lat_min, lat_max, -180.0, 180.0)

    lng_min = center.longitude - lng_delta
    lng_max = center.longitude + lng_delta
    if lng_min < -180.0 or lng_max > 180.0:
        lng_min = _wrap_longitude(lng_min)
        lng_max = _wrap_longitude(lng_max)
    return BoundingBox(lat_min, lat_max, lng_min, lng_max)
