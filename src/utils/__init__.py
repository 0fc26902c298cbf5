"""Utilities package for the vendor search engine.

Re-export stable helper functions from the search pipeline modules.
"""
# This module intentionally re-exports symbols from submodules. Flake8 F401
# warnings are expected for re-exported names and are silenced locally.
# flake8: noqa: F401

from .cleaning import clean_vendor_data, safe_numeric_conversion, validate_vendor_data
from .errors import (
    InvalidCoordinate,
    InvalidFilter,
    InvalidPagination,
    InvalidRadius,
    SearchError,
    StoreUnavailable,
)
from .filtering import FilterSpec, build_filter_spec, filter_candidates
from .geo import BoundingBox, bounding_box, calculate_distances, distance_km
from .pagination import paginate
from .ranking import SORT_STRATEGIES, rank_vendors
from .validation import validate_coordinates, validate_search_query

__all__ = [
    # Geography
    "BoundingBox",
    "bounding_box",
    "calculate_distances",
    "distance_km",
    # Pipeline stages
    "FilterSpec",
    "build_filter_spec",
    "filter_candidates",
    "SORT_STRATEGIES",
    "rank_vendors",
    "paginate",
    "validate_coordinates",
    "validate_search_query",
    # Data cleaning
    "clean_vendor_data",
    "safe_numeric_conversion",
    "validate_vendor_data",
    # Errors
    "SearchError",
    "InvalidCoordinate",
    "InvalidRadius",
    "InvalidPagination",
    "InvalidFilter",
    "StoreUnavailable",
]
