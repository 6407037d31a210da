# Packsync Manifest Loader
# Fetch and validate the remote content manifest

import json
import logging
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urlparse

import requests
from pydantic import ValidationError

from packsync.exceptions import ManifestError
from packsync.manifest.schema import Manifest
from packsync.utils.paths import sanitize_url

logger = logging.getLogger(__name__)


def is_remote_source(source: str) -> bool:
    """Check if a manifest source is an http(s) URL."""
    return urlparse(source).scheme in ("http", "https")


def _read_remote(source: str, timeout: int, session: Optional[requests.Session]) -> Any:
    owns_session = session is None
    session = session or requests.Session()
    try:
        response = session.get(source, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.RequestException as e:
        raise ManifestError(f"Failed to fetch manifest from {sanitize_url(source)}: {e}") from e
    except ValueError as e:
        raise ManifestError(f"Manifest at {sanitize_url(source)} is not valid JSON: {e}") from e
    finally:
        if owns_session:
            session.close()


def _read_local(source: str) -> Any:
    path = Path(source).expanduser()
    if not path.is_file():
        raise ManifestError(f"Manifest file not found: {path}")
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ManifestError(f"Manifest file {path} is not valid JSON: {e}") from e
    except OSError as e:
        raise ManifestError(f"Cannot read manifest file {path}: {e}") from e


def parse_manifest(data: Any) -> Manifest:
    """
    Validate raw manifest data.

    Args:
        data: Decoded JSON document.

    Returns:
        Validated, immutable Manifest.

    Raises:
        ManifestError: If the document does not describe a valid manifest.
    """
    if not isinstance(data, dict):
        raise ManifestError("Manifest must be a JSON object")
    try:
        return Manifest.model_validate(data)
    except ValidationError as e:
        messages = []
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            messages.append(f"{loc}: {error['msg']}")
        raise ManifestError("Invalid manifest:\n  " + "\n  ".join(messages)) from e


def load_manifest(
    source: str,
    *,
    timeout: int = 30,
    session: Optional[requests.Session] = None,
) -> Manifest:
    """
    Load a manifest from a URL or a local file.

    Args:
        source: http(s) URL or file path.
        timeout: Request timeout in seconds for remote sources.
        session: Optional requests session for remote sources.

    Returns:
        Validated Manifest.

    Raises:
        ManifestError: If the manifest cannot be read or is invalid.
    """
    if not source:
        raise ManifestError("No manifest source configured")

    if is_remote_source(source):
        logger.info(f"Fetching manifest from {sanitize_url(source)}")
        data = _read_remote(source, timeout, session)
    else:
        logger.info(f"Reading manifest from {source}")
        data = _read_local(source)

    manifest = parse_manifest(data)
    for name, category in manifest.categories.items():
        logger.debug(f"Manifest category '{name}': {len(category.items)} items")
    return manifest
