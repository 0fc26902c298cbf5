"""Error taxonomy for vendor search.

Validation errors are raised before any filtering starts. ``StoreUnavailable``
is the only error raised from inside the pipeline; it marks a failed or timed
out store read so callers can tell "no vendors found" apart from "search is
down".
"""

from typing import Any, Dict, Optional


class SearchError(Exception):
    """Base class for errors surfaced to search callers."""

    code = "SEARCH_ERROR"
    recoverable = False

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "code": self.code,
            "message": self.message,
            "recoverable": self.recoverable,
        }
        if self.field:
            payload["field"] = self.field
        return payload


class InvalidCoordinate(SearchError):
    code = "INVALID_COORDINATE"


class InvalidRadius(SearchError):
    code = "INVALID_RADIUS"


class InvalidPagination(SearchError):
    code = "INVALID_PAGINATION"


class InvalidFilter(SearchError):
    code = "INVALID_FILTER"


class StoreUnavailable(SearchError):
    code = "STORE_UNAVAILABLE"
    recoverable = True

    def __init__(self, message: str = "Vendor search is temporarily unavailable"):
        super().__init__(message)
