"""Configuration for a sync run."""

import os
from dataclasses import dataclass
from typing import Optional

from .exceptions import SyncConfigError
from .utils import DEFAULT_CONCURRENCY, ETAG_PART_SIZE

# Accepted values for --storage-class; empty means the bucket default
VALID_STORAGE_CLASSES = frozenset(
    {
        "",
        "STANDARD",
        "REDUCED_REDUNDANCY",
        "GLACIER",
        "STANDARD_IA",
        "ONEZONE_IA",
        "INTELLIGENT_TIERING",
        "DEEP_ARCHIVE",
    }
)

DEFAULT_REGION = "us-east-1"


@dataclass(frozen=True)
class SyncConfig:
    """Settings for one sync invocation. Immutable for the whole run."""

    access_key: str = ""
    """Static access key; empty to use the default credential chain"""

    secret_key: str = ""
    """Static secret key; only used together with access_key"""

    storage_class: str = ""
    """Storage class applied to uploaded objects"""

    concurrency: int = DEFAULT_CONCURRENCY
    """Number of parallel copy workers"""

    part_size: int = 0
    """Multipart upload part size hint in MiB (0 keeps the transfer default)"""

    check_md5: bool = False
    """Compare content hashes when sizes are equal"""

    dry_run: bool = False
    """Report the planned work without changing the destination"""

    verbose: bool = False
    """Print the plan summary and every removed path"""

    recursive: bool = True
    force: bool = False
    skip_existing: bool = False

    region: str = DEFAULT_REGION
    """Region used before a bucket's own region is known"""

    endpoint_url: Optional[str] = None
    """Custom endpoint for S3-compatible services such as MinIO"""

    @classmethod
    def from_env(cls, **overrides) -> "SyncConfig":
        """Create a config from environment variables.

        Reads ``AWS_ACCESS_KEY_ID``, ``AWS_SECRET_ACCESS_KEY``,
        ``AWS_DEFAULT_REGION`` and ``BUCKETSYNC_ENDPOINT_URL``. Keyword
        arguments that are not None override the environment.

        Returns:
            SyncConfig instance
        """
        values = {
            "access_key": os.getenv("AWS_ACCESS_KEY_ID", ""),
            "secret_key": os.getenv("AWS_SECRET_ACCESS_KEY", ""),
            "region": os.getenv("AWS_DEFAULT_REGION", DEFAULT_REGION),
            "endpoint_url": os.getenv("BUCKETSYNC_ENDPOINT_URL") or None,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def has_static_credentials(self) -> bool:
        """Whether both parts of a static key pair are configured."""
        return bool(self.access_key and self.secret_key)

    @property
    def part_size_bytes(self) -> int:
        """Multipart part size in bytes, 0 when unset."""
        return self.part_size * 1024 * 1024

    @property
    def chunk_size(self) -> int:
        """Multipart chunk size for uploads and ETag hashing."""
        return self.part_size_bytes or ETAG_PART_SIZE

    def validate(self) -> None:
        """Check the configuration before any work starts.

        Raises:
            SyncConfigError: If a setting is out of range
        """
        if self.storage_class not in VALID_STORAGE_CLASSES:
            raise SyncConfigError(
                f"Invalid storage class provided: {self.storage_class}"
            )
        if self.concurrency < 1:
            raise SyncConfigError(
                f"Concurrency must be at least 1, got {self.concurrency}"
            )
        if self.part_size < 0:
            raise SyncConfigError(f"Part size must not be negative: {self.part_size}")
