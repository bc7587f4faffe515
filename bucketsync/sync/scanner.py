"""Inventory building for both sides of a sync."""

import logging
import os
from dataclasses import dataclass
from stat import S_ISREG
from typing import Optional

from ..exceptions import InventoryError, StoreError
from ..locator import ResourceLocator
from ..store import ObjectStoreClient

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InventoryEntry:
    """A file discovered while walking a directory or listing a prefix."""

    name: str
    """Path as enumerated (local path or object key), before normalization"""

    size: int
    """File size in bytes"""

    checksum: str = ""
    """Store-reported ETag, empty for local files"""


Inventory = dict[str, InventoryEntry]


def compute_prefixes(
    source: ResourceLocator, destination: ResourceLocator
) -> tuple[int, str]:
    """Compute how source names map onto destination keys.

    Source names have their first ``drop`` characters removed and the
    destination prefix prepended. A source without a trailing separator is
    synced as a directory of the same name inside the destination, like
    ``cp -r``.

    Args:
        source: Source root
        destination: Destination root

    Returns:
        Tuple of (drop, add_prefix)

    Examples:
        >>> compute_prefixes(ResourceLocator.parse("/tmp/site/"),
        ...                  ResourceLocator.parse("s3://bucket/www"))
        (10, 'www/')
        >>> compute_prefixes(ResourceLocator.parse("/tmp/site"),
        ...                  ResourceLocator.parse("s3://bucket/www"))
        (10, 'www/site/')
    """
    source_root = source.key if source.is_remote else source.path
    drop = len(source_root)
    prefix = _destination_prefix(destination)

    if source_root and not source_root.endswith("/"):
        prefix += os.path.basename(source_root) + "/"
        drop += 1

    return drop, prefix


def compute_file_key(source: ResourceLocator, destination: ResourceLocator) -> str:
    """Destination key of a source that addresses one file.

    The file keeps its name inside the destination directory or prefix.

    Examples:
        >>> compute_file_key(ResourceLocator.parse("/tmp/site/index.html"),
        ...                  ResourceLocator.parse("s3://bucket/www"))
        'www/index.html'
    """
    name = source.key if source.is_remote else source.path
    return _destination_prefix(destination) + os.path.basename(name)


def _destination_prefix(destination: ResourceLocator) -> str:
    prefix = destination.key if destination.is_remote else destination.path
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    return prefix


def build_inventory(
    locator: ResourceLocator,
    drop_prefix: int = 0,
    add_prefix: str = "",
    client: Optional[ObjectStoreClient] = None,
) -> Inventory:
    """Build the inventory of one side of a sync.

    Every entry is keyed by ``add_prefix + name[drop_prefix:]``.

    Args:
        locator: Root to walk or list
        drop_prefix: Number of leading characters removed from each name
        add_prefix: Prefix prepended to each name after dropping
        client: Object store client, required for s3 locators

    Returns:
        Mapping of normalized path to InventoryEntry

    Raises:
        InventoryError: If walking or listing fails
    """
    if locator.is_remote:
        if client is None:
            raise InventoryError(f"No object store client to list {locator}")
        entries = scan_remote(locator, client)
    else:
        entries = scan_local(locator.path)

    inventory: Inventory = {}
    for entry in entries:
        inventory[add_prefix + entry.name[drop_prefix:]] = entry

    logger.debug("Inventory of %s: %d file(s)", locator, len(inventory))
    return inventory


def scan_local(root: str) -> list[InventoryEntry]:
    """Recursively collect regular files below ``root``.

    A missing root is an empty tree; directories themselves are not
    recorded.

    Raises:
        InventoryError: If a directory cannot be read
    """
    if not os.path.exists(root):
        logger.debug("Local root %s does not exist", root)
        return []

    def on_error(error: OSError) -> None:
        raise InventoryError(f"Unable to walk {error.filename}: {error}") from error

    entries: list[InventoryEntry] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=on_error):
        for filename in filenames:
            path = os.path.join(dirpath, filename)
            try:
                stat = os.stat(path)
            except OSError as e:
                # Dangling symlinks and files removed during the walk
                logger.debug("Skipping %s: %s", path, e)
                continue
            if not os.path.isfile(path):
                continue
            entries.append(InventoryEntry(name=path, size=stat.st_size))

    return entries


def scan_remote(
    locator: ResourceLocator, client: ObjectStoreClient
) -> list[InventoryEntry]:
    """List all objects below an s3 locator.

    Objects that share the prefix only as a string are skipped: listing
    ``foo`` must not pick up ``foobar/index.html``.

    Raises:
        InventoryError: If listing fails
    """
    prefix = locator.key
    boundary = len(prefix) if prefix and not prefix.endswith("/") else None

    entries: list[InventoryEntry] = []
    try:
        for obj in client.list_objects(locator.bucket, prefix):
            key = obj["Key"]
            if boundary is not None and len(key) > boundary and key[boundary] != "/":
                continue
            entries.append(
                InventoryEntry(name=key, size=obj["Size"], checksum=obj.get("ETag", ""))
            )
    except StoreError as e:
        raise InventoryError(str(e)) from e

    return entries


def get_file_info(
    locators: list[ResourceLocator], client: Optional[ObjectStoreClient] = None
) -> dict[ResourceLocator, InventoryEntry]:
    """Get metadata for individual files without walking a tree.

    Files that do not exist or cannot be read are left out of the result,
    and so are directories.

    Args:
        locators: Files to look up
        client: Object store client, required for s3 locators

    Returns:
        Mapping of locator to InventoryEntry
    """
    result: dict[ResourceLocator, InventoryEntry] = {}

    for locator in locators:
        if locator.is_local:
            try:
                info = os.stat(locator.path)
            except OSError:
                continue
            if not S_ISREG(info.st_mode):
                continue
            result[locator] = InventoryEntry(name=locator.path, size=info.st_size)
        elif client is not None:
            try:
                size, etag = client.head_object(locator.bucket, locator.key)
            except StoreError:
                continue
            result[locator] = InventoryEntry(name=locator.key, size=size, checksum=etag)

    return result
