"""Uniform addressing for local paths and object store locations."""

from dataclasses import dataclass, replace

from .exceptions import InvalidLocatorError

SCHEME_FILE = "file"
SCHEME_S3 = "s3"

SUPPORTED_SCHEMES = (SCHEME_FILE, SCHEME_S3)


@dataclass(frozen=True)
class ResourceLocator:
    """Address of a file or directory, either local or inside a bucket.

    Object store paths keep a leading ``/``; use :attr:`key` for the form the
    store expects.

    Examples:
        >>> loc = ResourceLocator.parse("s3://my-bucket/site/index.html")
        >>> loc.bucket, loc.key
        ('my-bucket', 'site/index.html')
        >>> str(loc.with_path("other.html"))
        's3://my-bucket/other.html'
    """

    scheme: str
    """Either "file" or "s3"."""

    path: str
    """Local path, or object path (with leading slash) inside the bucket"""

    bucket: str = ""
    """Bucket name, only set for the s3 scheme"""

    def __post_init__(self) -> None:
        if self.scheme not in SUPPORTED_SCHEMES:
            raise InvalidLocatorError(str(self), f"unsupported scheme {self.scheme}")
        if self.scheme == SCHEME_S3 and not self.bucket:
            raise InvalidLocatorError(str(self), "missing bucket name")

    @classmethod
    def parse(cls, address: str) -> "ResourceLocator":
        """Parse an address string.

        Plain paths and ``file://`` URIs map to the file scheme; ``s3://``
        URIs are split into bucket and path.

        Args:
            address: Address to parse

        Returns:
            ResourceLocator instance

        Raises:
            InvalidLocatorError: If the scheme is unknown or the bucket is missing
        """
        if "://" not in address:
            return cls(scheme=SCHEME_FILE, path=address)

        scheme, _, rest = address.partition("://")
        scheme = scheme.lower() or SCHEME_FILE

        if scheme == SCHEME_FILE:
            return cls(scheme=SCHEME_FILE, path=rest)
        if scheme != SCHEME_S3:
            raise InvalidLocatorError(address, f"unsupported scheme {scheme}")

        bucket, slash, key = rest.partition("/")
        if not bucket:
            raise InvalidLocatorError(address, "missing bucket name")
        return cls(scheme=SCHEME_S3, bucket=bucket, path=slash + key)

    @property
    def is_local(self) -> bool:
        """Whether this locator addresses the local filesystem."""
        return self.scheme == SCHEME_FILE

    @property
    def is_remote(self) -> bool:
        """Whether this locator addresses an object store."""
        return self.scheme == SCHEME_S3

    @property
    def key(self) -> str:
        """Object store key: the path without its leading separator."""
        return self.path.lstrip("/")

    def with_path(self, path: str) -> "ResourceLocator":
        """Return a locator with the same scheme and bucket but another path."""
        if self.is_remote and not path.startswith("/"):
            path = "/" + path
        return replace(self, path=path)

    def join(self, suffix: str) -> "ResourceLocator":
        """Return a locator for ``suffix`` relative to this one."""
        if not suffix:
            return self
        if not self.path:
            return self.with_path(suffix)
        return self.with_path(self.path.rstrip("/") + "/" + suffix.lstrip("/"))

    def __str__(self) -> str:
        if self.scheme == SCHEME_S3:
            return f"s3://{self.bucket}/{self.key}"
        return self.path


def parse_source(address: str) -> ResourceLocator:
    """Parse the source address of a sync."""
    return ResourceLocator.parse(address)


def parse_destination(address: str) -> ResourceLocator:
    """Parse the destination address of a sync, defaulting to the root path."""
    locator = ResourceLocator.parse(address)
    if not locator.path:
        locator = replace(locator, path="/")
    return locator
