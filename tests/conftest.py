# Packsync Test Fixtures
# Pytest fixtures for packsync tests

import hashlib
import tempfile
from collections.abc import Generator
from pathlib import Path

import pytest
import yaml

from packsync.manifest.schema import ContentItem, IntegrityInfo, SyncPolicy
from packsync.utils.paths import file_name_from_url

BASE_URL = "https://cdn.example.com/files"


def sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def make_item(
    name: str,
    data: bytes | None = None,
    *,
    environment: str = "both",
    verify: bool = True,
    integrity: str | None = None,
    label: str | None = None,
) -> ContentItem:
    """Build a content item served from BASE_URL; data yields a sha256 integrity."""
    if integrity is None and data is not None:
        integrity = f"sha256:{sha256(data)}"
    return ContentItem(
        download_url=f"{BASE_URL}/{name}",
        integrity=IntegrityInfo.model_validate(integrity) if integrity else None,
        name=label,
        environment=environment,
        verify_integrity=verify,
    )


class FakeDownloader:
    """In-memory transfer agent serving bytes by URL."""

    def __init__(self, files: dict[str, bytes] | None = None):
        self.files: dict[str, bytes] = dict(files or {})
        self.fetched: list[str] = []
        self.errors: dict[str, Exception] = {}

    def serve(self, name: str, data: bytes) -> str:
        url = f"{BASE_URL}/{name}"
        self.files[url] = data
        return url

    def fetch(self, url, destination, on_progress=None):
        self.fetched.append(file_name_from_url(url))
        if url in self.errors:
            raise self.errors[url]
        data = self.files[url]
        destination.write_bytes(data)
        if on_progress is not None:
            on_progress(len(data), 100.0, len(data))

    def close(self):
        pass


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("PACKSYNC_CONFIG", raising=False)
    return home


@pytest.fixture
def instance_dir(temp_dir: Path) -> Path:
    """Create an application instance directory."""
    instance = temp_dir / "instance"
    instance.mkdir()
    return instance


@pytest.fixture
def mods_dir(instance_dir: Path) -> Path:
    """Create the mods directory of the instance."""
    mods = instance_dir / "mods"
    mods.mkdir()
    return mods


@pytest.fixture
def downloader() -> FakeDownloader:
    """Create an in-memory downloader."""
    return FakeDownloader()


@pytest.fixture
def default_policy() -> SyncPolicy:
    """Policy with every flag off and no marker."""
    return SyncPolicy()


@pytest.fixture
def sample_config_dict(instance_dir: Path) -> dict:
    """Sample configuration as dict."""
    return {
        "instance": {
            "path": str(instance_dir),
            "environment": "client",
        },
        "manifest": {
            "source": "https://example.com/manifest.json",
        },
        "sync_categories": {
            "mods": {
                "enabled": True,
                "description": "Mods",
                "directory": "mods",
                "extension": "jar",
            },
            "resourcepacks": {
                "enabled": True,
                "description": "Resource packs",
                "directory": "resourcepacks",
                "extension": "zip",
            },
            "shaderpacks": {
                "enabled": False,
                "description": "Shader packs",
                "directory": "shaderpacks",
                "extension": "zip",
            },
        },
    }


@pytest.fixture
def sample_config_file(temp_dir: Path, sample_config_dict: dict) -> Path:
    """Create a sample configuration file."""
    config_path = temp_dir / "config.yaml"
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump(sample_config_dict, f)
    return config_path
