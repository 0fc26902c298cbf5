"""Vendor data types and snapshot loading.

Store implementations live in ``src.data.vendor_store``.
"""

from .io_utils import detect_file_format, load_dataframe
from .models import GeoPoint, PageEnvelope, RankedResult, SearchQuery, VendorRecord

__all__ = [
    "detect_file_format",
    "load_dataframe",
    "GeoPoint",
    "PageEnvelope",
    "RankedResult",
    "SearchQuery",
    "VendorRecord",
]
