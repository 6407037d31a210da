# Packsync Config Tests
# Tests for configuration loading and validation

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from packsync.config.defaults import DEFAULT_CONFIG, generate_default_config
from packsync.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    load_or_default_config,
    save_config,
    update_category_enabled,
    validate_config_file,
)
from packsync.config.schema import Environment, InstanceConfig, PacksyncConfig, SyncCategory
from packsync.exceptions import ConfigurationError


class TestPacksyncConfig:
    """Tests for PacksyncConfig schema."""

    def test_minimal_config(self):
        """Test configuration with all defaults."""
        config = PacksyncConfig()
        assert config.instance.environment == Environment.CLIENT
        assert config.manifest.source is None
        assert config.parallel_categories is False
        assert len(config.sync_categories) == 0

    def test_full_config(self, sample_config_dict: dict):
        """Test full configuration loading."""
        config = PacksyncConfig.model_validate(sample_config_dict)

        assert config.manifest.source == "https://example.com/manifest.json"
        assert "mods" in config.sync_categories
        assert config.sync_categories["mods"].extension == "jar"

    def test_get_enabled_categories(self, sample_config_dict: dict):
        """Test getting only enabled categories."""
        enabled = PacksyncConfig.model_validate(sample_config_dict).get_enabled_categories()

        assert set(enabled) == {"mods", "resourcepacks"}

    def test_relative_category_path(self, sample_config_dict: dict, instance_dir: Path):
        """Test category directories resolve against the instance path."""
        config = PacksyncConfig.model_validate(sample_config_dict)
        assert config.get_category_path("mods") == instance_dir / "mods"
        assert config.get_category_path("missing") is None

    def test_absolute_category_path(self, temp_dir: Path):
        """Test absolute category directories are used as-is."""
        config = PacksyncConfig(
            sync_categories={"mods": SyncCategory(directory=str(temp_dir / "elsewhere"), extension="jar")}
        )
        assert config.get_category_path("mods") == temp_dir / "elsewhere"

    def test_instance_environment_must_be_concrete(self):
        """Test 'both' is not a valid run context."""
        with pytest.raises(ValidationError):
            InstanceConfig(environment="both")


class TestSyncCategory:
    """Tests for SyncCategory schema."""

    def test_extension_normalized(self):
        cat = SyncCategory(directory="mods", extension=".JAR")
        assert cat.extension == "jar"
        assert cat.enabled is True

    def test_empty_extension_rejected(self):
        with pytest.raises(ValidationError):
            SyncCategory(directory="mods", extension=" . ")


class TestConfigLoader:
    """Tests for config loading and saving."""

    def test_load_config(self, sample_config_file: Path):
        """Test loading configuration from file."""
        config = load_config(sample_config_file)
        assert "mods" in config.sync_categories
        assert config.sync_categories["shaderpacks"].enabled is False

    def test_load_merges_defaults(self, temp_dir: Path):
        """Test missing sections are filled from defaults."""
        path = temp_dir / "config.yaml"
        path.write_text("manifest:\n  source: https://example.com/m.json\n", encoding="utf-8")

        config = load_config(path)

        assert config.manifest.timeout == 30
        assert set(config.sync_categories) == {"mods", "resourcepacks", "shaderpacks"}

    def test_load_missing_config(self, temp_dir: Path):
        """Test loading missing configuration."""
        with pytest.raises(FileNotFoundError):
            load_config(temp_dir / "nonexistent.yaml")

    def test_load_invalid_yaml(self, temp_dir: Path):
        bad_file = temp_dir / "bad.yaml"
        bad_file.write_text("{ invalid yaml [", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(bad_file)

    def test_load_invalid_values(self, temp_dir: Path):
        bad_file = temp_dir / "bad.yaml"
        bad_file.write_text("download:\n  max_retries: 0\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_config(bad_file)

    def test_load_or_default(self, temp_dir: Path):
        """Test defaults are used without writing a file."""
        path = temp_dir / "missing.yaml"
        config = load_or_default_config(path)
        assert "mods" in config.sync_categories
        assert not path.exists()

    def test_config_path_env_override(self, temp_dir: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("PACKSYNC_CONFIG", str(temp_dir / "custom.yaml"))
        assert get_config_path() == temp_dir / "custom.yaml"

    def test_default_config_path(self, temp_home: Path):
        assert get_config_path() == temp_home / ".config" / "packsync" / "config.yaml"

    def test_save_config(self, temp_dir: Path, sample_config_dict: dict):
        """Test saving configuration."""
        config = PacksyncConfig.model_validate(sample_config_dict)
        config_path = temp_dir / "nested" / "config.yaml"

        save_config(config, config_path)

        with open(config_path, encoding="utf-8") as f:
            saved = yaml.safe_load(f)

        assert saved["instance"]["environment"] == "client"
        assert "sync_categories" in saved

    def test_ensure_config_exists(self, temp_dir: Path):
        path = temp_dir / "config.yaml"

        assert ensure_config_exists(path) == (path, True)
        assert ensure_config_exists(path) == (path, False)
        assert "sync_categories" in path.read_text(encoding="utf-8")

    def test_update_category_enabled(self, sample_config_file: Path):
        update_category_enabled("shaderpacks", True, sample_config_file)
        assert load_config(sample_config_file).sync_categories["shaderpacks"].enabled is True

    def test_update_unknown_category(self, sample_config_file: Path):
        with pytest.raises(KeyError):
            update_category_enabled("plugins", True, sample_config_file)


class TestValidateConfigFile:
    """Tests for validate_config_file."""

    def test_valid(self, sample_config_file: Path):
        is_valid, errors = validate_config_file(sample_config_file)
        assert is_valid is True
        assert errors == []

    def test_invalid_yaml(self, temp_dir: Path):
        bad_file = temp_dir / "bad.yaml"
        bad_file.write_text("{ invalid yaml [", encoding="utf-8")

        is_valid, errors = validate_config_file(bad_file)
        assert is_valid is False
        assert len(errors) > 0

    def test_missing_manifest_source(self, temp_dir: Path):
        path = temp_dir / "config.yaml"
        path.write_text(generate_default_config(), encoding="utf-8")

        is_valid, errors = validate_config_file(path)
        assert is_valid is False
        assert any("manifest.source" in e for e in errors)

    def test_missing_file(self, temp_dir: Path):
        is_valid, errors = validate_config_file(temp_dir / "missing.yaml")
        assert is_valid is False


class TestDefaults:
    """Tests for default configuration."""

    def test_default_categories(self):
        categories = DEFAULT_CONFIG["sync_categories"]
        assert categories["mods"]["extension"] == "jar"
        assert categories["resourcepacks"]["extension"] == "zip"
        assert categories["shaderpacks"]["extension"] == "zip"

    def test_generated_yaml_is_valid(self):
        data = yaml.safe_load(generate_default_config())
        config = PacksyncConfig.model_validate(data)
        assert config.instance.environment == Environment.CLIENT
