# Packsync Ownership Classification
# Managed-file naming convention and expected local file names

from pathlib import PurePath
from typing import Optional

from packsync.manifest.schema import ContentItem


def expected_file_name(item: ContentItem, extension: str, marker: Optional[str] = None) -> str:
    """
    Local file name for a content item.

    The stem of the URL-derived file name, followed by the marker (if any)
    and the category extension.

    Args:
        item: Content item.
        extension: Category file extension without the dot.
        marker: Optional managed-file marker.

    Returns:
        File name such as ``sodium-0.5.jar`` or ``sodium-0.5.synced.jar``.
    """
    stem = PurePath(item.file_name).stem
    return f"{stem}{marker or ''}.{extension}"


def is_managed(file_name: str, extension: str, marker: Optional[str] = None) -> bool:
    """
    Check if a local file is owned by the sync engine.

    Without a marker every file of the category extension is managed.

    Args:
        file_name: Local file name.
        extension: Category file extension without the dot.
        marker: Optional managed-file marker.

    Returns:
        True if the file follows the managed naming convention.
    """
    suffix = f"{marker or ''}.{extension}".lower()
    return file_name.lower().endswith(suffix)
