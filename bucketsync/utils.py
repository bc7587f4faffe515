"""Utility functions and constants for bucketsync."""

# =============================================================================
# Constants for sync operations
# =============================================================================

# Number of parallel copy workers when no concurrency is configured
DEFAULT_CONCURRENCY: int = 4

# Hashing is serialized to bound disk and CPU usage
CHECKSUM_WORKERS: int = 1

# Capacity of each work queue; producers should never block in practice
QUEUE_SIZE: int = 1_000_000

# Capacity of the progress channel
PROGRESS_QUEUE_SIZE: int = 16

# Maximum number of keys accepted by a single bulk delete request
DELETE_BATCH_SIZE: int = 500

# Page size requested when listing objects
LIST_PAGE_SIZE: int = 1000

# =============================================================================
# ETag hash parameters (must match the S3 multipart convention)
# =============================================================================

# Part size used when hashing files above the multipart threshold (5 MiB)
ETAG_PART_SIZE: int = 5 * 1024 * 1024

# Files larger than this are hashed part-by-part (16 MiB)
ETAG_MULTIPART_THRESHOLD: int = 16 * 1024 * 1024

# =============================================================================
# Size formatting utilities
# =============================================================================

SIZE_UNITS = ("B", "KiB", "MiB", "GiB", "TiB", "PiB", "EiB")


def humanize(value: int) -> str:
    """Format a byte count using base-1024 units.

    Values are rounded to one decimal; the decimal is only shown while the
    scaled value is below 10.

    Args:
        value: Size in bytes

    Returns:
        Formatted size string

    Examples:
        >>> humanize(5)
        '5 B'
        >>> humanize(1536)
        '1.5 KiB'
        >>> humanize(100 * 1024 * 1024)
        '100 MiB'
    """
    if value < 10:
        return f"{value} B"

    exponent = 0
    while exponent < len(SIZE_UNITS) - 1 and value >= 1024 ** (exponent + 1):
        exponent += 1

    # Round half up to one decimal
    scaled = int(value * 10 / 1024**exponent + 0.5) / 10
    if scaled < 10:
        return f"{scaled:.1f} {SIZE_UNITS[exponent]}"
    return f"{scaled:.0f} {SIZE_UNITS[exponent]}"
