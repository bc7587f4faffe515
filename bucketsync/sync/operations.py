"""Transfer and delete operations behind the sync workers."""

import logging
import os
import shutil
from typing import Optional

from ..exceptions import StoreError, TransferError
from ..locator import ResourceLocator
from ..store import ObjectStoreClient

logger = logging.getLogger(__name__)


class SyncOperations:
    """Unified copy/delete interface across local paths and buckets."""

    def __init__(self, client: Optional[ObjectStoreClient], dry_run: bool = False):
        """Initialize sync operations.

        Args:
            client: Object store client (may be None for local-only syncs)
            dry_run: If True, log transfers instead of performing them
        """
        self.client = client
        self.dry_run = dry_run

    def _require_client(self) -> ObjectStoreClient:
        if self.client is None:
            raise StoreError("No object store client configured")
        return self.client

    def copy(self, source: ResourceLocator, destination: ResourceLocator) -> None:
        """Copy one file, whichever side is local.

        Args:
            source: File to read
            destination: File to create or overwrite

        Raises:
            TransferError: If the transfer fails
        """
        if self.dry_run:
            logger.info("Would copy %s -> %s", source, destination)
            return

        logger.debug("Copy %s -> %s", source, destination)
        try:
            if source.is_local and destination.is_local:
                self._copy_local(source.path, destination.path)
            elif source.is_local:
                self._require_client().upload_file(
                    source.path, destination.bucket, destination.key
                )
            elif destination.is_local:
                self._require_client().download_file(
                    source.bucket, source.key, destination.path
                )
            else:
                self._require_client().copy_object(
                    source.bucket, source.key, destination.bucket, destination.key
                )
        except (OSError, StoreError) as e:
            raise TransferError(str(source), str(destination), str(e)) from e

    def _copy_local(self, source: str, destination: str) -> None:
        parent = os.path.dirname(destination)
        if parent:
            os.makedirs(parent, exist_ok=True)
        shutil.copyfile(source, destination)

    def delete_local(self, path: str) -> None:
        """Delete a local file.

        Raises:
            OSError: If the file cannot be removed
        """
        os.remove(path)

    def delete_remote(self, bucket: str, keys: list[str]) -> int:
        """Delete a batch of objects.

        Returns:
            Number of keys the store failed to delete
        """
        return self._require_client().delete_objects(bucket, keys)
