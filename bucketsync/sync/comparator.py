"""Diff classification between source and destination inventories."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from ..locator import ResourceLocator
from .scanner import Inventory, InventoryEntry


class ActionKind(str, Enum):
    """Kinds of work produced by the diff."""

    COPY = "copy"
    """Transfer source content to the destination"""

    CHECKSUM = "checksum"
    """Hash the local side and copy only if the content differs"""

    REMOVE = "remove"
    """Delete a destination file that is absent from the source"""


@dataclass(frozen=True)
class Action:
    """A unit of queued work, consumed exactly once by one worker."""

    kind: ActionKind
    """What to do"""

    destination: ResourceLocator
    """File to create, verify or delete"""

    source: Optional[ResourceLocator] = None
    """File to copy from (None for removals)"""

    size: int = 0
    """Source size in bytes"""

    checksum: str = ""
    """Expected checksum for CHECKSUM actions"""


class DiffClassifier:
    """Compares two inventories and decides what to do with every path.

    The source is the ground truth. Unchanged files produce no action at
    all, so they never count towards the progress total.

    Examples:
        >>> classifier = DiffClassifier(check_md5=False)
        >>> actions = list(classifier.classify(src, dst, src_root, dst_root))
        >>> classifier.estimated_bytes
        1024
    """

    def __init__(self, check_md5: bool = False):
        """Initialize the classifier.

        Args:
            check_md5: Compare checksums of files with equal sizes
        """
        self.check_md5 = check_md5
        self.estimated_bytes = 0
        self.file_count = 0

    def classify(
        self,
        source_files: Inventory,
        destination_files: Inventory,
        source_root: ResourceLocator,
        destination_root: ResourceLocator,
    ) -> Iterator[Action]:
        """Yield one action per path that needs work.

        Args:
            source_files: Source inventory
            destination_files: Destination inventory, keyed like the source
            source_root: Source locator; entry names become its paths
            destination_root: Destination locator; keys become its paths

        Yields:
            Action objects, copies and checksums first, then removals
        """
        for path, source_info in source_files.items():
            action = self.compare(
                source_root.with_path(source_info.name),
                source_info,
                destination_root.with_path(path),
                destination_files.get(path),
            )
            if action is not None:
                yield action

        for path in destination_files:
            if path not in source_files:
                action = self.compare(
                    None,
                    None,
                    destination_root.with_path(path),
                    destination_files[path],
                )
                if action is not None:
                    yield action

    def compare(
        self,
        source: Optional[ResourceLocator],
        source_info: Optional[InventoryEntry],
        destination: ResourceLocator,
        destination_info: Optional[InventoryEntry],
    ) -> Optional[Action]:
        """Decide what to do with a single path.

        Returns:
            The action to queue, or None if the destination is up to date
        """
        self.file_count += 1

        if source_info is None:
            return Action(
                kind=ActionKind.REMOVE, source=source, destination=destination
            )

        if destination_info is None or source_info.size != destination_info.size:
            return self._copy(source, source_info, destination)

        if not self.check_md5:
            return None

        if (
            source_info.checksum
            and destination_info.checksum
            and source_info.checksum != destination_info.checksum
        ):
            return self._copy(source, source_info, destination)

        self.estimated_bytes += source_info.size
        return Action(
            kind=ActionKind.CHECKSUM,
            source=source,
            destination=destination,
            size=source_info.size,
            checksum=source_info.checksum or destination_info.checksum,
        )

    def _copy(
        self,
        source: Optional[ResourceLocator],
        source_info: InventoryEntry,
        destination: ResourceLocator,
    ) -> Action:
        self.estimated_bytes += source_info.size
        return Action(
            kind=ActionKind.COPY,
            source=source,
            destination=destination,
            size=source_info.size,
        )
