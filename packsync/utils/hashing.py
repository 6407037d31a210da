# Packsync Hashing Utilities
# Streaming content hashing and integrity verification

import hashlib
import logging
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from packsync.manifest.schema import IntegrityInfo

logger = logging.getLogger(__name__)

SUPPORTED_ALGORITHMS: tuple[str, ...] = ("md5", "sha1", "sha256", "sha512")


class IntegrityOutcome(str, Enum):
    """Result of comparing local bytes against a declared checksum."""

    MATCH = "match"
    MISMATCH = "mismatch"
    INDETERMINATE = "indeterminate"


def file_hash(path: Path, *, algorithm: str = "sha256", chunk_size: int = 65536) -> str | None:
    """
    Calculate hash of file content without loading it fully into memory.

    Args:
        path: Path to file.
        algorithm: Hash algorithm (default sha256).
        chunk_size: Chunk size for reading large files.

    Returns:
        Hex digest of hash, or None if file doesn't exist.
    """
    if not path.exists() or not path.is_file():
        return None

    hasher = hashlib.new(algorithm)

    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)

    return hasher.hexdigest()


def is_supported_algorithm(algorithm: str | None) -> bool:
    """Check if an integrity algorithm can be evaluated."""
    return bool(algorithm) and algorithm.lower() in SUPPORTED_ALGORITHMS


def verify_integrity(path: Path, integrity: "IntegrityInfo | None") -> IntegrityOutcome:
    """
    Verify a local file against its declared integrity info.

    Args:
        path: Path to the local file.
        integrity: Declared checksum, or None when the manifest has none.

    Returns:
        MATCH or MISMATCH when the checksum could be evaluated,
        INDETERMINATE when there is nothing trustworthy to compare against.
    """
    if integrity is None or not integrity.value.strip():
        return IntegrityOutcome.INDETERMINATE

    if not is_supported_algorithm(integrity.algorithm):
        logger.debug(f"Unknown integrity algorithm '{integrity.algorithm}' for {path.name}")
        return IntegrityOutcome.INDETERMINATE

    actual = file_hash(path, algorithm=integrity.algorithm.lower())
    if actual is None:
        return IntegrityOutcome.MISMATCH

    if actual == integrity.value.strip().lower():
        return IntegrityOutcome.MATCH
    return IntegrityOutcome.MISMATCH
