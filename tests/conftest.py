"""Pytest configuration helpers.

Ensure the project root is on sys.path so tests can import the `src` package
when pytest is invoked from the repository root or an isolated test runner.
"""

import sys
import time
from pathlib import Path

import pytest


def pytest_configure():
    # Insert the repository root (parent of the tests directory) at the front
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


SF_ORIGIN = (37.77, -122.42)


@pytest.fixture
def make_vendor():
    """Factory for VendorRecords with sensible defaults."""
    from src.data.models import GeoPoint, VendorRecord

    def _make(
        vendor_id,
        *,
        lat=None,
        lng=None,
        categories=("Plumbing",),
        city="San Francisco",
        state="CA",
        hourly_rate=75.0,
        rating=4.0,
        rating_count=10,
        is_active=True,
        display_name=None,
    ):
        location = GeoPoint(lat, lng) if lat is not None and lng is not None else None
        return VendorRecord(
            id=vendor_id,
            display_name=display_name or f"Vendor {vendor_id}",
            service_categories=frozenset(categories),
            city=city,
            state=state,
            hourly_rate=hourly_rate,
            rating=rating,
            rating_count=rating_count,
            location=location,
            is_active=is_active,
        )

    return _make


@pytest.fixture
def sample_vendors(make_vendor):
    """A small mixed vendor set around San Francisco."""
    lat, lng = SF_ORIGIN
    return [
        make_vendor("v1", lat=lat + 0.018, lng=lng, categories=("Plumbing",), rating=4.0, rating_count=12),
        make_vendor("v2", lat=lat + 0.045, lng=lng, categories=("Electrical",), rating=4.8, rating_count=30),
        make_vendor(
            "v3", lat=lat + 0.45, lng=lng, categories=("Plumbing", "HVAC"), rating=5.0, rating_count=2, city="Santa Rosa"
        ),
        make_vendor("v4", lat=lat, lng=lng + 0.03, categories=("Painting",), rating=3.5, hourly_rate=None),
        make_vendor("v5", categories=("Plumbing",), rating=4.6, rating_count=8, city="Oakland"),
        make_vendor("v6", lat=lat + 0.01, lng=lng, categories=("Plumbing",), rating=4.9, is_active=False),
        make_vendor(
            "v7", lat=34.05, lng=-118.24, categories=("Roofing",), rating=4.2, city="Los Angeles", hourly_rate=40.0
        ),
    ]


@pytest.fixture
def search_config():
    """Search configuration equal to the built-in defaults."""
    return {
        "default_radius_km": 50.0,
        "max_radius_km": 500.0,
        "default_page_size": 20,
        "max_page_size": 100,
        "store_timeout_seconds": 5.0,
        "min_cos_latitude": 1e-6,
        "distance_decimals": 1,
        "featured_min_rating": 4.0,
        "featured_min_rating_count": 5,
    }


class RecordingStore:
    """In-memory store that remembers every FilterSpec it was asked for."""

    def __init__(self, records):
        from src.data.vendor_store import DataFrameVendorStore

        self._store = DataFrameVendorStore.from_records(records)
        self.specs = []

    def find_candidates(self, spec):
        self.specs.append(spec)
        return self._store.find_candidates(spec)


class FailingStore:
    def __init__(self, error=None):
        self.error = error or ConnectionError("database connection refused")
        self.calls = 0

    def find_candidates(self, spec):
        self.calls += 1
        raise self.error


class SlowStore:
    def __init__(self, delay=1.0):
        self.delay = delay

    def find_candidates(self, spec):
        time.sleep(self.delay)
        return []


@pytest.fixture
def recording_store(sample_vendors):
    return RecordingStore(sample_vendors)


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def slow_store():
    return SlowStore(delay=1.0)


@pytest.fixture
def sample_fixtures_dir():
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"
