# Packsync Local Snapshot
# Discovery and ownership partition of local category files

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from packsync.sync.ownership import is_managed
from packsync.utils.paths import list_files


@dataclass
class LocalSnapshot:
    """
    Files present in a category directory at the start of a run.

    Only regular, non-hidden files directly in the directory whose
    extension matches the category are included.
    """

    directory: Path
    extension: str
    files: list[Path] = field(default_factory=list)
    marker: Optional[str] = None

    @property
    def names(self) -> set[str]:
        """Names of all snapshot files."""
        return {path.name for path in self.files}

    @property
    def managed(self) -> list[Path]:
        """Files following the managed naming convention."""
        return [path for path in self.files if is_managed(path.name, self.extension, self.marker)]

    @property
    def foreign(self) -> list[Path]:
        """Files added independently of the engine."""
        return [path for path in self.files if not is_managed(path.name, self.extension, self.marker)]

    def deletion_candidates(self, allow_foreign_files: bool) -> list[Path]:
        """
        Files the orphan pass may delete.

        With ``allow_foreign_files`` only managed files are candidates;
        without it every snapshot file is.
        """
        if allow_foreign_files:
            return self.managed
        return list(self.files)


def scan_local_files(directory: Path, extension: str, marker: Optional[str] = None) -> LocalSnapshot:
    """
    Build the local snapshot for a category directory.

    Args:
        directory: Existing category directory.
        extension: Category file extension without the dot.
        marker: Optional managed-file marker.

    Returns:
        LocalSnapshot with files sorted by name.

    Raises:
        OSError: If the directory cannot be listed.
    """
    return LocalSnapshot(
        directory=directory,
        extension=extension,
        files=list_files(directory, extension=extension),
        marker=marker,
    )
