"""bucketsync - incremental one-way sync between local trees and S3 buckets."""

from .config import SyncConfig
from .exceptions import (
    ChecksumError,
    InvalidLocatorError,
    InventoryError,
    StoreError,
    SyncConfigError,
    SyncError,
    TransferError,
)
from .locator import ResourceLocator
from .store import ObjectStoreClient
from .sync import SyncEngine, SyncStats
from .utils import humanize

__all__ = [
    "SyncConfig",
    "SyncEngine",
    "SyncStats",
    "ResourceLocator",
    "ObjectStoreClient",
    "SyncError",
    "SyncConfigError",
    "InvalidLocatorError",
    "InventoryError",
    "StoreError",
    "TransferError",
    "ChecksumError",
    "humanize",
]
