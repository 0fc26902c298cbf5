"""
Vendor store implementations.

The search pipeline only depends on ``VendorStore.find_candidates``. Two
implementations live here:

- ``DataFrameVendorStore`` keeps a normalized vendor table in memory and
  answers candidate queries with pandas masks.
- ``S3VendorStore`` reads the newest vendor snapshot exported to S3 and
  delegates to ``DataFrameVendorStore``.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Protocol, Union

import pandas as pd
import streamlit as st

from src.data.io_utils import load_dataframe
from src.data.models import VendorRecord
from src.utils.cleaning import clean_vendor_data, frame_to_records, records_to_frame
from src.utils.filtering import FilterSpec, apply_filter_spec

logger = logging.getLogger(__name__)


class VendorStore(Protocol):
    """Read-only source of vendor records."""

    def find_candidates(self, spec: FilterSpec) -> List[VendorRecord]:
        ...


class DataFrameVendorStore:
    """In-memory vendor store backed by a pandas DataFrame."""

    def __init__(self, frame: pd.DataFrame):
        self._frame = clean_vendor_data(frame)

    @classmethod
    def from_records(cls, records: Iterable[VendorRecord]) -> "DataFrameVendorStore":
        return cls(records_to_frame(list(records)))

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "DataFrameVendorStore":
        return cls(load_dataframe(path))

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    def __len__(self) -> int:
        return len(self._frame)

    def find_candidates(self, spec: FilterSpec) -> List[VendorRecord]:
        matches = apply_filter_spec(self._frame, spec)
        logger.debug(f"Store matched {len(matches)} of {len(self._frame)} vendors")
        return frame_to_records(matches)


@st.cache_data(ttl=3600, show_spinner=False)
def _parse_snapshot(data_bytes: bytes, filename: str, last_modified: str) -> pd.DataFrame:
    """Parse and normalize a snapshot; cached per file name and modification time."""
    logger.info(f"Parsing vendor snapshot '{filename}' (modified: {last_modified})")
    return clean_vendor_data(load_dataframe(data_bytes, filename=filename))


class S3VendorStore:
    """Vendor store reading the newest snapshot from S3 on every query."""

    def __init__(self, client=None, folder: Optional[str] = None):
        if client is None:
            from src.utils.s3_client import S3DataClient

            client = S3DataClient(folder=folder)
        self._client = client

    def is_configured(self) -> bool:
        return self._client.is_configured()

    def load_frame(self) -> pd.DataFrame:
        if not self._client.is_configured():
            raise ConnectionError("S3 vendor store is not configured")

        latest = self._client.download_latest_snapshot()
        if latest is None:
            raise ConnectionError("No vendor snapshot could be downloaded from S3")

        data_bytes, filename, last_modified = latest
        last_modified_iso = last_modified.isoformat() if last_modified else "unknown"
        return _parse_snapshot(data_bytes, filename, last_modified_iso)

    def find_candidates(self, spec: FilterSpec) -> List[VendorRecord]:
        return DataFrameVendorStore(self.load_frame()).find_candidates(spec)
