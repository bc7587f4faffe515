"""Content hashing compatible with S3 ETags."""

import hashlib
import logging
import os

from ..exceptions import ChecksumError
from ..utils import ETAG_MULTIPART_THRESHOLD, ETAG_PART_SIZE

logger = logging.getLogger(__name__)

# Read buffer for single-part hashing
_READ_SIZE = 1024 * 1024


def etag_hash(path: str, part_size: int = ETAG_PART_SIZE) -> str:
    """Compute the ETag S3 would report for a local file.

    Files up to 16 MiB hash to the hex MD5 of their content. Larger files
    are split into ``part_size`` parts; the result is the hex MD5 of the
    concatenated binary part digests followed by ``-<number of parts>``.

    Args:
        path: Local path, optionally prefixed with ``file://``
        part_size: Multipart chunk size the file was (or will be) uploaded
            with, 5 MiB unless a custom part size is configured

    Returns:
        ETag-style digest without quotes

    Raises:
        ChecksumError: If the file cannot be read
    """
    if path.startswith("file://"):
        path = path[len("file://") :]

    try:
        with open(path, "rb") as fh:
            size = os.fstat(fh.fileno()).st_size
            if size > ETAG_MULTIPART_THRESHOLD:
                return _multipart_hash(fh, part_size)

            hasher = hashlib.md5()
            for block in iter(lambda: fh.read(_READ_SIZE), b""):
                hasher.update(block)
            return hasher.hexdigest()
    except OSError as e:
        raise ChecksumError(path, str(e)) from e


def _multipart_hash(fh, part_size: int) -> str:
    digests = []
    for part in iter(lambda: fh.read(part_size), b""):
        digests.append(hashlib.md5(part).digest())

    logger.debug("Hashed %d parts", len(digests))
    combined = hashlib.md5(b"".join(digests)).hexdigest()
    return f"{combined}-{len(digests)}"


def normalize_etag(etag: str) -> str:
    """Strip the double quotes S3 puts around ETag values."""
    if len(etag) >= 2 and etag.startswith('"') and etag.endswith('"'):
        return etag[1:-1]
    return etag


def checksums_match(local_hash: str, expected: str) -> bool:
    """Check a locally computed hash against a stored checksum.

    An expected value of two characters or less can never match, which
    covers both a missing checksum and an empty quoted ETag.
    """
    if len(expected) <= 2:
        return False
    return local_hash == normalize_etag(expected)
