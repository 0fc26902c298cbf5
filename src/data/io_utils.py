"""
Snapshot loading for vendor tables.

Vendor snapshots arrive either as a local file or as raw bytes downloaded
from S3. The format is taken from the file extension, falling back to a
look at the first bytes for buffers without a usable name.

Supported Formats:
- CSV (.csv) - default export format
- Excel (.xlsx) - read with openpyxl
- Parquet (.parquet) - read with pyarrow
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

import pandas as pd

logger = logging.getLogger(__name__)

SNAPSHOT_EXTENSIONS = (".csv", ".xlsx", ".parquet")


def looks_like_excel_bytes(buffer: BytesIO) -> bool:
    """XLSX files are ZIP archives and start with the PK signature."""
    buffer.seek(0)
    head = buffer.read(4)
    buffer.seek(0)
    return head.startswith(b"PK")


def looks_like_parquet_bytes(buffer: BytesIO) -> bool:
    buffer.seek(0)
    head = buffer.read(4)
    buffer.seek(0)
    return head == b"PAR1"


def detect_file_format(filename: Optional[str] = None, buffer: Optional[BytesIO] = None) -> Optional[str]:
    """Return 'csv', 'xlsx', 'parquet' or None when the format is unknown."""
    if filename:
        suffix = Path(filename).suffix.lower()
        if suffix in SNAPSHOT_EXTENSIONS:
            return suffix.lstrip(".")

    if buffer is not None:
        if looks_like_parquet_bytes(buffer):
            return "parquet"
        if looks_like_excel_bytes(buffer):
            return "xlsx"
        return "csv"

    return None


def _read(source: Union[Path, BytesIO], format_type: Optional[str]) -> pd.DataFrame:
    if format_type == "parquet":
        return pd.read_parquet(source)
    if format_type == "xlsx":
        return pd.read_excel(source, engine="openpyxl")
    return pd.read_csv(source)


def load_dataframe(raw_input: Union[Path, str, bytes, bytearray, BytesIO], *, filename: Optional[str] = None) -> pd.DataFrame:
    """Load a vendor snapshot from a path or an in-memory buffer.

    Args:
        raw_input: File path, raw bytes, or a BytesIO buffer
        filename: Name used for format detection when ``raw_input`` is a buffer

    Returns:
        DataFrame with whitespace stripped from column names

    Raises:
        FileNotFoundError: If a file path doesn't exist
        TypeError: If the input type is not supported
        ValueError: If the content cannot be parsed
    """
    if isinstance(raw_input, (Path, str)):
        path = Path(raw_input)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        logger.info(f"Loading vendor snapshot from {path}")
        source: Union[Path, BytesIO] = path
        format_type = detect_file_format(path.name)
    elif isinstance(raw_input, (bytes, bytearray, BytesIO)):
        source = raw_input if isinstance(raw_input, BytesIO) else BytesIO(bytes(raw_input))
        format_type = detect_file_format(filename, source)
        logger.info(f"Loading vendor snapshot from memory (source: {filename or 'unknown'}, format: {format_type})")
    else:
        raise TypeError(f"Unsupported snapshot input: {type(raw_input).__name__}")

    try:
        df = _read(source, format_type)
    except Exception as e:
        raise ValueError(f"Could not read vendor snapshot {filename or source} as {format_type}: {e}") from e

    df.columns = [str(col).strip() for col in df.columns]
    return df


__all__ = [
    "SNAPSHOT_EXTENSIONS",
    "detect_file_format",
    "load_dataframe",
    "looks_like_excel_bytes",
    "looks_like_parquet_bytes",
]
