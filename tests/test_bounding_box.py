"""Tests for the bounding-box pre-filter.

The box may be larger than the search circle but must never exclude a point
that lies within the radius, including near the poles and across the
antimeridian.
"""
import math
import random

import pandas as pd
import pytest

from src.data.models import GeoPoint
from src.utils.geo import EARTH_RADIUS_KM, BoundingBox, bounding_box, distance_km


def destination(origin: GeoPoint, bearing_deg: float, dist_km: float) -> GeoPoint:
    """Point reached from ``origin`` after ``dist_km`` along ``bearing_deg``."""
    phi1 = math.radians(origin.latitude)
    lam1 = math.radians(origin.longitude)
    theta = math.radians(bearing_deg)
    delta = dist_km / EARTH_RADIUS_KM

    phi2 = math.asin(math.sin(phi1) * math.cos(delta) + math.cos(phi1) * math.sin(delta) * math.cos(theta))
    lam2 = lam1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(phi1),
        math.cos(delta) - math.sin(phi1) * math.sin(phi2),
    )
    lng = ((math.degrees(lam2) + 180.0) % 360.0) - 180.0
    return GeoPoint(math.degrees(phi2), lng)


class TestBoundingBoxShape:
    def test_equator_box_uses_111_km_per_degree(self):
        box = bounding_box(GeoPoint(0.0, 0.0), 111.0)

        assert box.lat_min == pytest.approx(-1.0)
        assert box.lat_max == pytest.approx(1.0)
        assert box.lng_min <= -1.0
        assert box.lng_max >= 1.0
        assert not box.crosses_antimeridian

    def test_longitude_delta_widens_with_latitude(self):
        equator = bounding_box(GeoPoint(0.0, 10.0), 100.0)
        sixty = bounding_box(GeoPoint(60.0, 10.0), 100.0)

        equator_width = equator.lng_max - equator.lng_min
        sixty_width = sixty.lng_max - sixty.lng_min
        assert sixty_width == pytest.approx(2 * equator_width, rel=0.01)

    def test_box_contains_its_center(self):
        center = GeoPoint(37.77, -122.42)
        assert bounding_box(center, 10.0).contains(center)

    def test_box_touching_north_pole_spans_all_longitudes(self):
        box = bounding_box(GeoPoint(89.9, 45.0), 50.0)

        assert box.lat_max == 90.0
        assert box.lng_min == -180.0
        assert box.lng_max == 180.0
        assert box.contains(GeoPoint(89.8, -135.0))

    def test_box_touching_south_pole_spans_all_longitudes(self):
        box = bounding_box(GeoPoint(-89.95, 0.0), 20.0)

        assert box.lat_min == -90.0
        assert (box.lng_min, box.lng_max) == (-180.0, 180.0)

    def test_center_at_pole_does_not_blow_up(self):
        box = bounding_box(GeoPoint(90.0, 0.0), 10.0)

        assert all(math.isfinite(v) for v in (box.lat_min, box.lat_max, box.lng_min, box.lng_max))
        assert box.lat_max == 90.0

    def test_near_pole_latitudes_stay_finite(self):
        box = bounding_box(GeoPoint(89.9999999, 0.0), 0.001)

        assert all(math.isfinite(v) for v in (box.lat_min, box.lat_max, box.lng_min, box.lng_max))
        assert -180.0 <= box.lng_min <= box.lng_max <= 180.0

    def test_min_cos_clamp_is_configurable(self):
        # A large clamp makes the linear estimate tiny; the exact half-width still keeps the box sound
        center = GeoPoint(80.0, 0.0)
        clamped = bounding_box(center, 100.0, min_cos=0.9)
        point = destination(center, 90.0, 99.0)

        assert clamped.contains(point)


class TestAntimeridian:
    def test_box_crossing_antimeridian_wraps(self):
        box = bounding_box(GeoPoint(0.0, 179.9), 50.0)

        assert box.crosses_antimeridian
        assert 179.0 < box.lng_min < 180.0
        assert -180.0 < box.lng_max < -179.0

    def test_wrapped_box_membership(self):
        box = bounding_box(GeoPoint(0.0, 179.9), 50.0)

        assert box.contains(GeoPoint(0.0, 179.95))
        assert box.contains(GeoPoint(0.0, -179.8))
        assert not box.contains(GeoPoint(0.0, 0.0))
        assert not box.contains(GeoPoint(0.0, 178.0))

    def test_west_side_crossing(self):
        box = bounding_box(GeoPoint(-17.7, -179.95), 30.0)

        assert box.crosses_antimeridian
        assert box.contains(GeoPoint(-17.7, 179.9))

    def test_mask_matches_contains(self):
        box = bounding_box(GeoPoint(0.0, 179.9), 50.0)
        lats = pd.Series([0.0, 0.0, 0.0, float("nan"), 5.0])
        lngs = pd.Series([179.95, -179.8, 0.0, 179.95, 179.95])

        mask = box.mask(lats, lngs)

        assert mask.tolist() == [True, True, False, False, False]
        assert mask.dtype == bool


class TestSoundness:
    """Every point within the radius lies inside the box."""

    @pytest.mark.parametrize(
        "center, radius_km",
        [
            (GeoPoint(37.77, -122.42), 10.0),
            (GeoPoint(0.0, 0.0), 500.0),
            (GeoPoint(60.0, 25.0), 300.0),
            (GeoPoint(-45.0, 170.0), 250.0),
            (GeoPoint(0.0, 179.9), 50.0),
            (GeoPoint(65.0, -179.5), 120.0),
            (GeoPoint(85.0, 10.0), 400.0),
            (GeoPoint(-88.0, -60.0), 150.0),
            (GeoPoint(89.99, 0.0), 1.0),
        ],
    )
    def test_no_false_negatives(self, center, radius_km):
        rng = random.Random(f"{center}-{radius_km}")
        box = bounding_box(center, radius_km)

        for bearing in range(0, 360, 5):
            edge = destination(center, float(bearing), radius_km * 0.999)
            assert distance_km(center, edge) <= radius_km
            assert box.contains(edge), f"{edge} at bearing {bearing} fell outside {box}"

        for _ in range(200):
            point = destination(center, rng.uniform(0, 360), rng.uniform(0, radius_km * 0.999))
            assert box.contains(point), f"{point} fell outside {box}"

    def test_box_is_plain_value(self):
        box = BoundingBox(1.0, 2.0, 3.0, 4.0)
        assert box == BoundingBox(1.0, 2.0, 3.0, 4.0)
