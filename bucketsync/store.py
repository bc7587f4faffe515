"""Object store client used by the sync engine.

Wraps a boto3 S3 client and exposes the few operations a sync needs:
listing a prefix, reading one object's metadata, uploading, downloading,
server-side copies and bulk deletes.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Iterator, Optional

import boto3
from boto3.s3.transfer import TransferConfig
from botocore.exceptions import BotoCoreError, ClientError

from .config import SyncConfig
from .exceptions import StoreError
from .utils import (
    DELETE_BATCH_SIZE,
    ETAG_MULTIPART_THRESHOLD,
    LIST_PAGE_SIZE,
)

logger = logging.getLogger(__name__)


class ObjectStoreClient:
    """Thread-safe access to S3 buckets.

    A client is created lazily for every bucket, in the region the bucket
    lives in, so that requests are not redirected.
    """

    def __init__(self, config: SyncConfig):
        """Initialize the store client.

        Args:
            config: Sync configuration with credentials and endpoint settings
        """
        self.config = config
        self._base_client: Any = None
        self._bucket_clients: dict[str, Any] = {}
        self._lock = threading.Lock()

    def _get_client_kwargs(self, region: Optional[str] = None) -> dict[str, Any]:
        """Build kwargs for boto3 client initialization."""
        kwargs: dict[str, Any] = {"region_name": region or self.config.region}

        if self.config.endpoint_url:
            kwargs["endpoint_url"] = self.config.endpoint_url

        if self.config.has_static_credentials:
            kwargs["aws_access_key_id"] = self.config.access_key
            kwargs["aws_secret_access_key"] = self.config.secret_key

        return kwargs

    @property
    def client(self) -> Any:
        """Default-region boto3 S3 client (lazy initialization)."""
        with self._lock:
            if self._base_client is None:
                self._base_client = boto3.client("s3", **self._get_client_kwargs())
            return self._base_client

    def client_for(self, bucket: str) -> Any:
        """Get a client bound to the region of ``bucket``.

        Custom endpoints have no regions to look up, the default client is
        used for every bucket.

        Raises:
            StoreError: If the bucket location cannot be determined
        """
        if self.config.endpoint_url:
            return self.client

        with self._lock:
            cached = self._bucket_clients.get(bucket)
        if cached is not None:
            return cached

        try:
            response = self.client.get_bucket_location(Bucket=bucket)
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Unable to locate bucket {bucket}: {e}") from e

        region = response.get("LocationConstraint")
        if region:
            logger.debug("Bucket %s is in region %s", bucket, region)
            bucket_client = boto3.client("s3", **self._get_client_kwargs(region))
        else:
            bucket_client = self.client

        with self._lock:
            return self._bucket_clients.setdefault(bucket, bucket_client)

    def _transfer_config(self) -> TransferConfig:
        """Transfer settings that keep uploaded ETags reproducible locally."""
        return TransferConfig(
            multipart_threshold=ETAG_MULTIPART_THRESHOLD + 1,
            multipart_chunksize=self.config.chunk_size,
        )

    def list_objects(self, bucket: str, prefix: str = "") -> Iterator[dict[str, Any]]:
        """List every object under a prefix, following continuation tokens.

        Args:
            bucket: Bucket name
            prefix: Key prefix; empty lists the whole bucket

        Yields:
            Dict with object metadata (Key, Size, ETag, ...)

        Raises:
            StoreError: If a listing request fails
        """
        params: dict[str, Any] = {
            "Bucket": bucket,
            "PaginationConfig": {"PageSize": LIST_PAGE_SIZE},
        }
        if prefix:
            params["Prefix"] = prefix

        try:
            paginator = self.client_for(bucket).get_paginator("list_objects_v2")
            for page in paginator.paginate(**params):
                yield from page.get("Contents", [])
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Unable to list s3://{bucket}/{prefix}: {e}") from e

    def head_object(self, bucket: str, key: str) -> tuple[int, str]:
        """Get size and ETag of a single object.

        Raises:
            StoreError: If the object does not exist or the request fails
        """
        try:
            response = self.client_for(bucket).head_object(Bucket=bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Unable to stat s3://{bucket}/{key}: {e}") from e
        return response["ContentLength"], response.get("ETag", "")

    def upload_file(self, local_path: str, bucket: str, key: str) -> None:
        """Upload a local file with the configured storage class.

        Raises:
            StoreError: If the upload fails
        """
        extra_args = {}
        if self.config.storage_class:
            extra_args["StorageClass"] = self.config.storage_class

        try:
            self.client_for(bucket).upload_file(
                local_path,
                bucket,
                key,
                ExtraArgs=extra_args or None,
                Config=self._transfer_config(),
            )
        except (BotoCoreError, ClientError, OSError) as e:
            raise StoreError(f"Upload to s3://{bucket}/{key} failed: {e}") from e

    def download_file(self, bucket: str, key: str, local_path: str) -> None:
        """Download an object, creating parent directories as needed.

        Raises:
            StoreError: If the download fails
        """
        try:
            Path(local_path).parent.mkdir(parents=True, exist_ok=True)
            self.client_for(bucket).download_file(bucket, key, local_path)
        except (BotoCoreError, ClientError, OSError) as e:
            raise StoreError(f"Download of s3://{bucket}/{key} failed: {e}") from e

    def copy_object(
        self, source_bucket: str, source_key: str, bucket: str, key: str
    ) -> None:
        """Copy an object server-side, possibly across buckets.

        Raises:
            StoreError: If the copy fails
        """
        extra_args = {}
        if self.config.storage_class:
            extra_args["StorageClass"] = self.config.storage_class

        try:
            self.client_for(bucket).copy(
                {"Bucket": source_bucket, "Key": source_key},
                bucket,
                key,
                ExtraArgs=extra_args or None,
                Config=self._transfer_config(),
            )
        except (BotoCoreError, ClientError) as e:
            raise StoreError(
                f"Copy s3://{source_bucket}/{source_key} -> "
                f"s3://{bucket}/{key} failed: {e}"
            ) from e

    def delete_objects(self, bucket: str, keys: list[str]) -> int:
        """Delete up to 500 objects in a single request.

        Keys the store refuses to delete are logged, not raised.

        Args:
            bucket: Bucket name
            keys: Object keys to delete

        Returns:
            Number of keys the store reported as failed

        Raises:
            ValueError: If more keys are passed than one request accepts
            StoreError: If the request itself fails
        """
        if len(keys) > DELETE_BATCH_SIZE:
            raise ValueError(
                f"At most {DELETE_BATCH_SIZE} keys per request, got {len(keys)}"
            )
        if not keys:
            return 0

        try:
            response = self.client_for(bucket).delete_objects(
                Bucket=bucket,
                Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
            )
        except (BotoCoreError, ClientError) as e:
            raise StoreError(f"Bulk delete in {bucket} failed: {e}") from e

        errors = response.get("Errors", [])
        for error in errors:
            logger.warning(
                "Could not delete s3://%s/%s: %s",
                bucket,
                error.get("Key"),
                error.get("Message", error.get("Code")),
            )
        return len(errors)
