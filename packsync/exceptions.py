# Packsync Exceptions
# Fatal error kinds surfaced by the sync engine to its caller

from pathlib import Path
from typing import Optional


class PacksyncError(Exception):
    """Base exception for all packsync errors."""


class ConfigurationError(PacksyncError):
    """Raised for invalid configuration or a misconfigured installation."""


class ManifestError(PacksyncError):
    """Raised when the remote manifest cannot be loaded or validated."""


class FilesystemError(PacksyncError):
    """Raised when a directory cannot be listed/created or a file cannot be deleted/written."""

    def __init__(self, message: str, path: Path, cause: Optional[BaseException] = None):
        super().__init__(f"{message}: {path}" + (f" ({cause})" if cause else ""))
        self.path = path
        self.cause = cause


class TransferError(PacksyncError):
    """Raised when a file cannot be fetched from its remote location."""

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        super().__init__(f"Failed to download {url}" + (f": {cause}" if cause else ""))
        self.url = url
        self.cause = cause


class IntegrityError(PacksyncError):
    """Raised when a freshly downloaded file fails its integrity check."""

    def __init__(self, path: Path, expected: str, actual: Optional[str]):
        super().__init__(
            f"Downloaded file '{path.name}' failed the integrity check "
            f"(expected {expected}, got {actual}). The transfer may be corrupted "
            "or the manifest may declare an incorrect checksum."
        )
        self.path = path
        self.expected = expected
        self.actual = actual


class CategorySyncError(PacksyncError):
    """Raised by the sync engine when a category aborts the run."""

    def __init__(self, category: str, cause: PacksyncError):
        super().__init__(f"[{category}] {cause}")
        self.category = category
        self.cause = cause
