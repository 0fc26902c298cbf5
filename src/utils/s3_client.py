"""
AWS S3 access for vendor snapshots.

The vendor profile service exports its active vendor table to an S3 folder.
This client lists that folder and downloads the newest snapshot.

Usage:
    from src.utils.s3_client import S3DataClient

    client = S3DataClient()
    if client.is_configured():
        latest = client.download_latest_snapshot()
"""

import logging
from datetime import datetime
from io import BytesIO
from typing import Dict, List, Optional, Tuple

from src.data.io_utils import SNAPSHOT_EXTENSIONS

logger = logging.getLogger(__name__)


class S3DataClient:
    """Client for vendor snapshot files in AWS S3."""

    def __init__(self, folder: Optional[str] = None):
        """Initialize the client from the ``s3`` secrets section.

        Args:
            folder: Optional override for the configured ``vendors_folder``
        """
        from src.utils.config import get_api_config, is_api_enabled

        self.config = get_api_config("s3")
        self.enabled = is_api_enabled("s3")
        self.folder = folder or self.config.get("vendors_folder") or "vendors"
        self._client = None
        self._session = None

    def is_configured(self) -> bool:
        """Check if S3 is properly configured."""
        return self.enabled and bool(self.config.get("bucket_name"))

    def validate_configuration(self) -> Dict[str, str]:
        """Return configuration issues as a dict of field -> message."""
        issues: Dict[str, str] = {}
        if not self.config.get("bucket_name"):
            issues["bucket_name"] = "S3 bucket_name is not configured."
        if not self.config.get("aws_access_key_id"):
            issues["aws_access_key_id"] = "AWS access key id is not configured."
        if not self.config.get("aws_secret_access_key"):
            issues["aws_secret_access_key"] = "AWS secret access key is not configured."
        return issues

    def _get_session(self):
        """Get cached boto3 session for connection reuse."""
        if self._session is None and self.enabled:
            try:
                import boto3

                session_kwargs = {}
                access_key = self.config.get("aws_access_key_id")
                secret_key = self.config.get("aws_secret_access_key")
                region = self.config.get("region_name")
                if access_key and secret_key:
                    session_kwargs.update({"aws_access_key_id": access_key, "aws_secret_access_key": secret_key})
                if region:
                    session_kwargs["region_name"] = region

                self._session = boto3.Session(**session_kwargs)
            except Exception as e:
                logger.error(f"Failed to initialize S3 session: {e}")
                self.enabled = False
        return self._session

    def _get_client(self):
        """Get S3 client from cached session."""
        if self._client is None:
            session = self._get_session()
            if session:
                try:
                    from botocore.config import Config

                    config = Config(
                        retries={"max_attempts": 3, "mode": "adaptive"},
                        max_pool_connections=10,
                    )
                    self._client = session.client("s3", config=config)
                except Exception as e:
                    logger.error(f"Failed to create S3 client: {e}")
                    self.enabled = False
        return self._client

    def _resolve_folder(self) -> str:
        """Normalized S3 prefix for the vendors folder, with a trailing '/'."""
        folder = self.folder.strip("/") + "/"

        # Remove any leading bucket name if accidentally included
        bucket = self.config.get("bucket_name")
        if bucket and folder.startswith(f"{bucket}/"):
            folder = folder[len(bucket) + 1 :]

        return folder.lstrip("/")

    def list_snapshot_files(self) -> List[Tuple[str, datetime]]:
        """List snapshot files in the vendors folder, newest first."""
        client = self._get_client()
        if not client:
            return []

        folder = self._resolve_folder()
        try:
            paginator = client.get_paginator("list_objects_v2")
            page_iterator = paginator.paginate(
                Bucket=self.config["bucket_name"], Prefix=folder, PaginationConfig={"PageSize": 100}
            )

            files = []
            for page in page_iterator:
                for obj in page.get("Contents", []):
                    if obj["Key"] == folder:
                        continue
                    if obj["Key"].lower().endswith(SNAPSHOT_EXTENSIONS):
                        filename = obj["Key"].split("/")[-1]
                        files.append((filename, obj["LastModified"]))

            return sorted(files, key=lambda x: x[1], reverse=True)

        except Exception as e:
            logger.error(f"Failed to list files in S3 folder '{folder}': {e}")
            return []

    def download_file(self, filename: str) -> Optional[bytes]:
        """Download one file from the vendors folder."""
        client = self._get_client()
        if not client:
            return None

        s3_key = f"{self._resolve_folder()}{filename}"
        try:
            buffer = BytesIO()
            client.download_fileobj(self.config["bucket_name"], s3_key, buffer)
            buffer.seek(0)
            return buffer.getvalue()
        except Exception as e:
            logger.error(f"Failed to download file '{s3_key}' from S3: {e}")
            return None

    def download_latest_snapshot(self) -> Optional[Tuple[bytes, str, datetime]]:
        """
        Download the most recently modified vendor snapshot.

        Returns:
            Tuple of (file_bytes, filename, last_modified) or None if nothing
            could be downloaded
        """
        files = self.list_snapshot_files()
        if not files:
            logger.warning(f"No vendor snapshots found in S3 folder '{self.folder}'")
            return None

        latest_filename, last_modified = files[0]
        logger.info(f"Downloading vendor snapshot '{latest_filename}' from S3 (modified: {last_modified})")

        file_bytes = self.download_file(latest_filename)
        if file_bytes:
            return file_bytes, latest_filename, last_modified
        return None
