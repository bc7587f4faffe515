"""Core sync engine for executing sync operations."""

import logging
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import Optional

from rich.console import Console

from ..config import SyncConfig
from ..exceptions import SyncConfigError
from ..locator import ResourceLocator, parse_destination, parse_source
from ..output import OutputFormatter
from ..store import ObjectStoreClient
from ..utils import CHECKSUM_WORKERS, PROGRESS_QUEUE_SIZE
from .comparator import Action, ActionKind, DiffClassifier
from .operations import SyncOperations
from .progress import ProgressAggregator
from .queues import WorkQueue
from .scanner import (
    InventoryEntry,
    build_inventory,
    compute_file_key,
    compute_prefixes,
    get_file_info,
)
from .workers import RemoveWorker, checksum_worker, copy_worker

logger = logging.getLogger(__name__)


@dataclass
class SyncStats:
    """Statistics of one sync run."""

    files: int = 0
    """Paths considered by the diff (source files plus removals)"""

    estimated_bytes: int = 0
    """Bytes of every file that was copied or verified"""

    copies: int = 0
    """COPY actions queued"""

    checksums: int = 0
    """CHECKSUM actions queued"""

    removes: int = 0
    """REMOVE actions queued"""

    copied: int = 0
    """Files actually transferred, including checksum mismatches"""

    removed: int = 0
    """Files deleted from the destination"""


class SyncEngine:
    """Mirrors a source tree onto a destination.

    Both inventories are built up front, the diff fills three work queues
    and fixed pools of workers drain them while a progress thread renders
    the transfer status.
    """

    def __init__(
        self,
        config: SyncConfig,
        client: Optional[ObjectStoreClient] = None,
        output: Optional[OutputFormatter] = None,
        console: Optional[Console] = None,
    ):
        """Initialize sync engine.

        Args:
            config: Sync configuration
            client: Object store client (created on demand for s3 locators)
            output: Output formatter for messages
            console: Console for the progress line (defaults to the output console)
        """
        self.config = config
        self.client = client
        self.output = output or OutputFormatter()
        self.console = console

    def _client_for(
        self, source: ResourceLocator, destination: ResourceLocator
    ) -> Optional[ObjectStoreClient]:
        if self.client is None and (source.is_remote or destination.is_remote):
            self.client = ObjectStoreClient(self.config)
        return self.client

    def sync(self, source: str, destination: str) -> SyncStats:
        """Sync a source directory or prefix onto a destination.

        Args:
            source: Source path or ``s3://bucket/prefix``
            destination: Destination path or ``s3://bucket/prefix``

        Returns:
            SyncStats for the run

        Raises:
            SyncConfigError: If the configuration or an address is invalid
            InventoryError: If either side cannot be walked or listed
            TransferError: If any copy fails

        Examples:
            >>> engine = SyncEngine(SyncConfig(check_md5=True))
            >>> stats = engine.sync("./build/", "s3://my-bucket/site")
            >>> print(f"Copied {stats.copied} file(s)")
        """
        self.config.validate()
        if not source:
            raise SyncConfigError("Missing source")
        if not destination:
            raise SyncConfigError("Missing destination")

        source_root = parse_source(source)
        destination_root = parse_destination(destination)
        client = self._client_for(source_root, destination_root)

        start_time = time.time()
        stats = SyncStats()

        copy_jobs: WorkQueue[Action] = WorkQueue()
        checksum_jobs: WorkQueue[Action] = WorkQueue()
        remove_jobs: WorkQueue[Action] = WorkQueue()
        progress_updates: WorkQueue[int] = WorkQueue(maxsize=PROGRESS_QUEUE_SIZE)

        progress = ProgressAggregator(console=self.console or self.output.console)
        progress_thread = threading.Thread(
            target=progress.run, args=(progress_updates,), name="sync-progress"
        )
        progress_thread.start()

        operations = SyncOperations(client, dry_run=self.config.dry_run)
        remover = RemoveWorker(
            operations,
            self.output,
            dry_run=self.config.dry_run,
            verbose=self.config.verbose,
        )
        abort = threading.Event()
        pool_size = self.config.concurrency + CHECKSUM_WORKERS + 1

        try:
            with ThreadPoolExecutor(
                max_workers=pool_size, thread_name_prefix="sync-worker"
            ) as executor:
                copy_futures = [
                    executor.submit(
                        copy_worker, operations, copy_jobs, progress_updates, abort
                    )
                    for _ in range(self.config.concurrency)
                ]
                checksum_futures = [
                    executor.submit(
                        checksum_worker,
                        operations,
                        checksum_jobs,
                        progress_updates,
                        abort,
                        self.output,
                        self.config.chunk_size,
                    )
                    for _ in range(CHECKSUM_WORKERS)
                ]
                remove_future = executor.submit(remover, remove_jobs, abort)

                try:
                    self._plan(
                        source_root,
                        destination_root,
                        client,
                        stats,
                        copy_jobs,
                        checksum_jobs,
                        remove_jobs,
                        progress_updates,
                    )
                except BaseException:
                    abort.set()
                    raise
                finally:
                    copy_jobs.close()
                    checksum_jobs.close()
                    remove_jobs.close()

                futures: list[Future] = [
                    *copy_futures,
                    *checksum_futures,
                    remove_future,
                ]
                done, _ = wait(futures, return_when=FIRST_EXCEPTION)
                if any(f.exception() is not None for f in done):
                    abort.set()
                wait(futures)

                stats.copied = sum(f.result() for f in copy_futures)
                stats.copied += sum(f.result() for f in checksum_futures)
                stats.removed = remove_future.result()
        finally:
            progress_updates.put(0)
            progress_updates.close()
            progress_thread.join()
            progress.finish()

        logger.debug(
            "Sync finished in %.2fs: %d copied, %d removed",
            time.time() - start_time,
            stats.copied,
            stats.removed,
        )
        return stats

    def _plan(
        self,
        source_root: ResourceLocator,
        destination_root: ResourceLocator,
        client: Optional[ObjectStoreClient],
        stats: SyncStats,
        copy_jobs: WorkQueue[Action],
        checksum_jobs: WorkQueue[Action],
        remove_jobs: WorkQueue[Action],
        progress_updates: WorkQueue[int],
    ) -> None:
        """Build both inventories and queue the resulting actions."""
        source_file = self._single_file(source_root, client)
        if source_file is not None:
            key = compute_file_key(source_root, destination_root)
            logger.debug("Single file source, destination key %r", key)
            source_files = {key: source_file}
            target = destination_root.with_path(key)
            destination_files = {
                key: entry for entry in get_file_info([target], client).values()
            }
        else:
            drop, prefix = compute_prefixes(source_root, destination_root)
            logger.debug("Source names: drop %d chars, add prefix %r", drop, prefix)
            source_files = build_inventory(source_root, drop, prefix, client)
            destination_files = build_inventory(destination_root, 0, "", client)

        classifier = DiffClassifier(check_md5=self.config.check_md5)
        for action in classifier.classify(
            source_files, destination_files, source_root, destination_root
        ):
            if action.kind == ActionKind.COPY:
                copy_jobs.put(action)
                progress_updates.put(action.size)
                stats.copies += 1
            elif action.kind == ActionKind.CHECKSUM:
                checksum_jobs.put(action)
                stats.checksums += 1
            else:
                remove_jobs.put(action)
                stats.removes += 1

        stats.files = classifier.file_count
        stats.estimated_bytes = classifier.estimated_bytes
        logger.debug(
            "Queued %d copies, %d checksums, %d removes",
            stats.copies,
            stats.checksums,
            stats.removes,
        )

        if self.config.verbose:
            self.output.info(
                f"{stats.files} files to consider - {stats.estimated_bytes} bytes"
            )

    @staticmethod
    def _single_file(
        source_root: ResourceLocator, client: Optional[ObjectStoreClient]
    ) -> Optional[InventoryEntry]:
        """Metadata of the source if it addresses one file, else None.

        Sources ending in a separator are always directories or prefixes.
        """
        if not source_root.path or source_root.path.endswith("/"):
            return None
        return get_file_info([source_root], client).get(source_root)
