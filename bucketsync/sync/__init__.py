"""Sync engine for bucketsync - one-way mirroring between paths and buckets."""

from .checksum import checksums_match, etag_hash, normalize_etag
from .comparator import Action, ActionKind, DiffClassifier
from .engine import SyncEngine, SyncStats
from .operations import SyncOperations
from .progress import ProgressAggregator
from .queues import QueueClosedError, WorkQueue
from .scanner import (
    Inventory,
    InventoryEntry,
    build_inventory,
    compute_file_key,
    compute_prefixes,
    get_file_info,
)
from .workers import RemoveWorker, checksum_worker, copy_worker

__all__ = [
    "SyncEngine",
    "SyncStats",
    "SyncOperations",
    "DiffClassifier",
    "Action",
    "ActionKind",
    "Inventory",
    "InventoryEntry",
    "build_inventory",
    "compute_file_key",
    "compute_prefixes",
    "get_file_info",
    "WorkQueue",
    "QueueClosedError",
    "ProgressAggregator",
    "RemoveWorker",
    "copy_worker",
    "checksum_worker",
    "etag_hash",
    "normalize_etag",
    "checksums_match",
]
