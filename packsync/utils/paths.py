# Packsync Path Utilities
# Safe file operations, temporary files and URL-derived file names

import os
import tempfile
from pathlib import Path, PurePosixPath
from urllib.parse import unquote, urlparse


def ensure_dir(path: Path) -> Path:
    """
    Ensure directory exists, creating if necessary.

    Args:
        path: Directory path.

    Returns:
        The path that was ensured.
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def safe_delete(path: Path, *, missing_ok: bool = False) -> bool:
    """
    Delete a single file.

    Args:
        path: Path to delete.
        missing_ok: If True, don't raise error if path doesn't exist.

    Returns:
        True if something was deleted, False if path didn't exist.

    Raises:
        FileNotFoundError: If path doesn't exist and missing_ok is False.
        IsADirectoryError: If path is a directory.
    """
    if not path.exists():
        if missing_ok:
            return False
        raise FileNotFoundError(f"Path does not exist: {path}")

    if path.is_dir():
        raise IsADirectoryError(f"Refusing to delete directory: {path}")

    path.unlink()
    return True


def create_temp_file(directory: Path, name: str) -> Path:
    """
    Create an empty hidden temporary file next to its final destination.

    The leading dot keeps the file out of directory snapshots, and being in
    the same directory keeps the final rename atomic.

    Args:
        directory: Directory the final file will live in.
        name: Final file name, used as part of the temporary name.

    Returns:
        Path of the temporary file.
    """
    ensure_dir(directory)
    fd, temp_path = tempfile.mkstemp(dir=directory, prefix=f".{name}.", suffix=".part")
    os.close(fd)
    return Path(temp_path)


def atomic_replace(temp_path: Path, dest: Path) -> None:
    """Move a fully written temporary file onto its destination."""
    os.replace(temp_path, dest)


def atomic_write(path: Path, content: str | bytes, *, encoding: str = "utf-8") -> None:
    """
    Atomically write content to file.

    Uses a temporary file and atomic rename.

    Args:
        path: Target file path.
        content: Content to write (str or bytes).
        encoding: Encoding for string content (default utf-8).
    """
    temp_path = create_temp_file(path.parent, path.name)
    try:
        if isinstance(content, str):
            temp_path.write_text(content, encoding=encoding)
        else:
            temp_path.write_bytes(content)
        atomic_replace(temp_path, path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def file_name_from_url(url: str) -> str:
    """
    Derive a file name from the last path segment of a URL.

    Args:
        url: Download URL.

    Returns:
        URL-decoded base name without query or fragment.

    Raises:
        ValueError: If the URL is blank or has no file name.
    """
    if not url or not url.strip():
        raise ValueError("URL is blank")

    parsed = urlparse(url.strip())
    name = PurePosixPath(unquote(parsed.path)).name
    if not name or name in (".", ".."):
        raise ValueError(f"Cannot derive a file name from URL: {url}")
    return name


def is_hidden(path: Path) -> bool:
    """Check if a path is hidden (dot-prefixed name)."""
    return path.name.startswith(".")


def list_files(directory: Path, *, extension: str) -> list[Path]:
    """
    List regular, non-hidden files directly inside a directory by extension.

    Args:
        directory: Directory to list (not recursive).
        extension: File extension without the dot, matched case-insensitively.

    Returns:
        Sorted list of matching file paths.
    """
    suffix = f".{extension.lower().lstrip('.')}"
    results: list[Path] = []

    for path in directory.iterdir():
        if is_hidden(path) or not path.is_file():
            continue
        if path.suffix.lower() != suffix:
            continue
        results.append(path)

    return sorted(results)


def sanitize_url(url: str) -> str:
    """Strip query and fragment from a URL for safe logging."""
    try:
        parsed = urlparse(url)
        return f"{parsed.scheme}://{parsed.netloc}{parsed.path}"
    except ValueError:
        return "<invalid-url>"
