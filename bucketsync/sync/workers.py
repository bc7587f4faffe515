"""Worker loops draining the copy, checksum and remove queues.

Each worker runs in its own thread until its queue is closed and drained.
Copy failures are fatal: the failing worker sets the shared abort event and
re-raises, and every other worker stops taking new work. Removal failures
only leave stale files behind, so they are logged and skipped.
"""

import logging
import threading
from typing import Optional

from ..exceptions import ChecksumError, StoreError, TransferError
from ..locator import ResourceLocator
from ..output import OutputFormatter
from ..utils import DELETE_BATCH_SIZE, ETAG_PART_SIZE
from .checksum import checksums_match, etag_hash
from .comparator import Action
from .operations import SyncOperations
from .queues import WorkQueue

logger = logging.getLogger(__name__)


def _require_source(action: Action) -> ResourceLocator:
    if action.source is None:
        raise TransferError(
            "(none)",
            str(action.destination),
            f"{action.kind.value} action has no source",
        )
    return action.source


def copy_worker(
    operations: SyncOperations,
    jobs: WorkQueue[Action],
    progress: WorkQueue[int],
    abort: threading.Event,
) -> int:
    """Copy files until the queue is drained.

    Args:
        operations: Transfer operations
        jobs: Queue of COPY actions
        progress: Progress channel; receives ``-size`` per finished copy
        abort: Set on failure, checked before every action

    Returns:
        Number of files copied

    Raises:
        TransferError: On the first failed copy
    """
    copied = 0
    for action in jobs:
        if abort.is_set():
            break
        try:
            operations.copy(_require_source(action), action.destination)
        except Exception:
            abort.set()
            raise
        progress.put(-action.size)
        copied += 1

    logger.debug("Copy worker done after %d file(s)", copied)
    return copied


def local_side(action: Action) -> Optional[ResourceLocator]:
    """Return the locally readable file of a checksum action.

    The store side already carries its ETag, so the local copy is the one
    to hash. None when both sides live in an object store.
    """
    if action.destination.is_remote:
        if action.source is not None and action.source.is_local:
            return action.source
        return None
    return action.destination


def checksum_worker(
    operations: SyncOperations,
    jobs: WorkQueue[Action],
    progress: WorkQueue[int],
    abort: threading.Event,
    output: OutputFormatter,
    part_size: int = ETAG_PART_SIZE,
) -> int:
    """Verify content hashes and copy the files that differ.

    Args:
        operations: Transfer operations
        jobs: Queue of CHECKSUM actions
        progress: Progress channel; a mismatch adds ``+size`` then ``-size``
        abort: Set on failure, checked before every action
        output: Formatter for checksum read warnings
        part_size: Multipart chunk size used for hashing large files

    Returns:
        Number of files re-copied

    Raises:
        TransferError: If re-copying a mismatched file fails
    """
    copied = 0
    for action in jobs:
        if abort.is_set():
            break

        local = local_side(action)
        if local is None:
            # Both ETags came from listings and the diff found them equal
            continue

        expected = action.checksum
        try:
            local_hash = etag_hash(local.path, part_size)
            if not expected and action.source is not None and action.source.is_local:
                # Local to local: neither inventory carries a checksum
                expected = etag_hash(action.source.path, part_size)
        except ChecksumError as e:
            output.warning(str(e))
            local_hash = ""

        if checksums_match(local_hash, expected):
            continue

        logger.debug(
            "Checksum mismatch for %s (local=%s, expected=%s)",
            action.destination,
            local_hash,
            expected,
        )
        progress.put(action.size)
        try:
            operations.copy(_require_source(action), action.destination)
        except Exception:
            abort.set()
            raise
        progress.put(-action.size)
        copied += 1

    logger.debug("Checksum worker done, %d file(s) re-copied", copied)
    return copied


class RemoveWorker:
    """Deletes destination files absent from the source.

    Object keys are collected and removed in bulk, up to 500 per request.
    The pending batch belongs to this worker alone; run only one per
    remove queue.
    """

    def __init__(
        self,
        operations: SyncOperations,
        output: OutputFormatter,
        dry_run: bool = False,
        verbose: bool = False,
        batch_size: int = DELETE_BATCH_SIZE,
    ):
        """Initialize the remove worker.

        Args:
            operations: Delete operations
            output: Formatter for verbose "Remove" lines
            dry_run: Report removals without deleting anything
            verbose: Print every removed path
            batch_size: Keys per bulk delete request
        """
        self.operations = operations
        self.output = output
        self.dry_run = dry_run
        self.verbose = verbose
        self.batch_size = batch_size
        self.removed = 0
        self._bucket = ""
        self._pending: list[str] = []

    def __call__(self, jobs: WorkQueue[Action], abort: threading.Event) -> int:
        """Drain the remove queue.

        Returns:
            Number of files removed (or that would be removed in dry-run)
        """
        for action in jobs:
            if abort.is_set():
                return self.removed
            self.remove(action.destination)

        self.flush()
        logger.debug("Remove worker done after %d file(s)", self.removed)
        return self.removed

    def remove(self, target: ResourceLocator) -> None:
        """Remove one file, or queue its key for the next bulk delete."""
        if self.verbose:
            self.output.info(f"Remove {target}")
        if self.dry_run:
            self.removed += 1
            return

        if target.is_local:
            try:
                self.operations.delete_local(target.path)
                self.removed += 1
            except OSError as e:
                logger.warning("Unable to remove %s: %s", target, e)
            return

        if self._pending and target.bucket != self._bucket:
            self.flush()
        self._bucket = target.bucket
        self._pending.append(target.key)
        if len(self._pending) >= self.batch_size:
            self.flush()

    def flush(self) -> None:
        """Delete all pending object keys in one request."""
        if not self._pending:
            return

        keys, self._pending = self._pending, []
        try:
            failed = self.operations.delete_remote(self._bucket, keys)
        except StoreError as e:
            logger.warning("Bulk delete of %d object(s) failed: %s", len(keys), e)
            return
        self.removed += len(keys) - failed
