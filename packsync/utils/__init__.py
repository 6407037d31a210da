# Packsync Utilities Module
# Helper functions for paths, hashing and environment filtering

from packsync.utils.environment import (
    applies,
    get_current_environment,
)
from packsync.utils.hashing import (
    IntegrityOutcome,
    file_hash,
    verify_integrity,
)
from packsync.utils.paths import (
    atomic_write,
    ensure_dir,
    file_name_from_url,
    list_files,
    safe_delete,
)

__all__ = [
    # Environment
    "applies",
    "get_current_environment",
    # Paths
    "safe_delete",
    "ensure_dir",
    "atomic_write",
    "file_name_from_url",
    "list_files",
    # Hashing
    "IntegrityOutcome",
    "file_hash",
    "verify_integrity",
]
