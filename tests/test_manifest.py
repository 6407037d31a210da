# Tests for packsync.manifest
# Manifest models, sync-info conversion and loading

import json
from unittest.mock import MagicMock

import pytest
import requests
from pydantic import ValidationError

from packsync.config.schema import Environment
from packsync.exceptions import ManifestError
from packsync.manifest import (
    ContentItem,
    IntegrityInfo,
    Manifest,
    SyncPolicy,
    load_manifest,
    parse_manifest,
)
from packsync.manifest.loader import is_remote_source

SAMPLE = {
    "categories": {
        "mods": {
            "policy": {
                "allowForeignFiles": True,
                "restrictToCurrentEnvironment": True,
                "managedFileMarker": ".synced",
            },
            "items": [
                {
                    "downloadUrl": "https://cdn.example.com/sodium-0.5.8.jar",
                    "fileIntegrityInfo": "sha256:ABCDEF",
                    "name": "Sodium",
                    "environment": "CLIENT",
                },
                {"downloadUrl": "https://cdn.example.com/lithium.jar"},
            ],
        }
    }
}


class TestIntegrityInfo:
    """Tests for IntegrityInfo parsing."""

    def test_object_form(self):
        info = IntegrityInfo.model_validate({"algorithm": "SHA-256", "value": "ABC"})
        assert info.algorithm == "sha256"
        assert info.value == "abc"

    def test_compact_string(self):
        info = IntegrityInfo.model_validate("sha1:0123")
        assert (info.algorithm, info.value) == ("sha1", "0123")
        assert str(info) == "sha1:0123"

    def test_single_key_mapping(self):
        info = IntegrityInfo.model_validate({"md5": "ff"})
        assert (info.algorithm, info.value) == ("md5", "ff")

    def test_string_without_separator(self):
        with pytest.raises(ValidationError):
            IntegrityInfo.model_validate("deadbeef")


class TestContentItem:
    """Tests for ContentItem."""

    def test_defaults(self):
        item = ContentItem.model_validate({"downloadUrl": "https://example.com/a.jar"})
        assert item.integrity is None
        assert item.environment == Environment.BOTH
        assert item.verify_integrity is True
        assert item.file_name == "a.jar"
        assert item.display_name == "a.jar"

    def test_display_name_prefers_name(self):
        item = ContentItem(download_url="https://example.com/a.jar", name="Mod A")
        assert item.display_name == "Mod A"

    def test_blank_url_rejected(self):
        with pytest.raises(ValidationError):
            ContentItem(download_url="  ")

    def test_url_without_file_name_rejected(self):
        with pytest.raises(ValidationError):
            ContentItem(download_url="https://example.com/")

    def test_immutable(self):
        item = ContentItem(download_url="https://example.com/a.jar")
        with pytest.raises(ValidationError):
            item.name = "changed"


class TestSyncPolicy:
    def test_defaults(self):
        policy = SyncPolicy()
        assert policy.allow_foreign_files is False
        assert policy.restrict_to_current_environment is False
        assert policy.managed_file_marker is None

    def test_blank_marker_is_none(self):
        assert SyncPolicy(managed_file_marker="  ").managed_file_marker is None


class TestManifest:
    """Tests for Manifest parsing."""

    def test_categories_form(self):
        manifest = parse_manifest(SAMPLE)
        mods = manifest.get_category("mods")
        assert mods is not None
        assert len(mods.items) == 2
        assert mods.items[0].environment == Environment.CLIENT
        assert mods.items[0].integrity.value == "abcdef"
        assert mods.policy.managed_file_marker == ".synced"
        assert manifest.get_category("shaderpacks") is None

    def test_item_order_preserved(self):
        manifest = parse_manifest(SAMPLE)
        assert [i.file_name for i in manifest.get_category("mods").items] == ["sodium-0.5.8.jar", "lithium.jar"]

    def test_sync_info_form(self):
        manifest = Manifest.model_validate(
            {
                "mods": [{"downloadUrl": "https://example.com/a.jar"}],
                "resourcePacks": [],
                "allowUsingOtherMods": True,
                "shouldSyncOnlyModsForCurrentEnvironment": True,
                "modSyncMarker": ".synced",
                "allowUsingOtherResourcePacks": False,
            }
        )
        assert set(manifest.categories) == {"mods", "resourcepacks"}
        mods = manifest.categories["mods"]
        assert mods.policy.allow_foreign_files is True
        assert mods.policy.restrict_to_current_environment is True
        assert mods.policy.managed_file_marker == ".synced"
        assert manifest.categories["resourcepacks"].items == ()

    def test_not_an_object(self):
        with pytest.raises(ManifestError):
            parse_manifest([1, 2, 3])

    def test_invalid_item_reports_location(self):
        data = {"categories": {"mods": {"items": [{"downloadUrl": ""}]}}}
        with pytest.raises(ManifestError, match="downloadUrl"):
            parse_manifest(data)


class TestLoadManifest:
    """Tests for load_manifest."""

    def test_is_remote_source(self):
        assert is_remote_source("https://example.com/m.json")
        assert not is_remote_source("/srv/manifest.json")

    def test_blank_source(self):
        with pytest.raises(ManifestError):
            load_manifest("")

    def test_local_file(self, temp_dir):
        path = temp_dir / "manifest.json"
        path.write_text(json.dumps(SAMPLE), encoding="utf-8")
        manifest = load_manifest(str(path))
        assert "mods" in manifest.categories

    def test_local_file_missing(self, temp_dir):
        with pytest.raises(ManifestError, match="not found"):
            load_manifest(str(temp_dir / "missing.json"))

    def test_local_file_invalid_json(self, temp_dir):
        path = temp_dir / "manifest.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ManifestError, match="not valid JSON"):
            load_manifest(str(path))

    def test_remote(self):
        session = MagicMock()
        session.get.return_value.json.return_value = SAMPLE

        manifest = load_manifest("https://example.com/manifest.json", timeout=5, session=session)

        session.get.assert_called_once_with("https://example.com/manifest.json", timeout=5)
        session.close.assert_not_called()
        assert len(manifest.categories["mods"].items) == 2

    def test_remote_http_error(self):
        session = MagicMock()
        session.get.return_value.raise_for_status.side_effect = requests.HTTPError("404 Not Found")

        with pytest.raises(ManifestError, match="Failed to fetch"):
            load_manifest("https://example.com/manifest.json?token=secret", session=session)

    def test_remote_invalid_json(self):
        session = MagicMock()
        session.get.return_value.json.side_effect = ValueError("Expecting value")

        with pytest.raises(ManifestError, match="not valid JSON"):
            load_manifest("https://example.com/manifest.json", session=session)
