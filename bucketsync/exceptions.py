"""Custom exceptions for bucketsync."""


class SyncError(Exception):
    """Base exception for all sync errors."""

    pass


class SyncConfigError(SyncError):
    """Raised when the sync configuration is invalid or incomplete."""

    pass


class InvalidLocatorError(SyncConfigError):
    """Raised when a source or destination address cannot be parsed."""

    def __init__(self, address: str, reason: str = ""):
        self.address = address
        message = f"Invalid address: {address}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class InventoryError(SyncError):
    """Raised when walking or listing one side of the sync fails."""

    pass


class StoreError(SyncError):
    """Raised when an object store request fails."""

    pass


class TransferError(SyncError):
    """Raised when copying a file fails. Fatal for the whole run."""

    def __init__(self, source: str, destination: str, reason: str = ""):
        self.source = source
        self.destination = destination
        message = f"Unable to copy {source} -> {destination}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class ChecksumError(SyncError):
    """Raised when a local file cannot be hashed."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        message = f"Unable to get checksum of local file {path}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
