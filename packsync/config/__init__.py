# Packsync Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from packsync.config.defaults import DEFAULT_CONFIG, generate_default_config, get_default_config
from packsync.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    load_or_default_config,
    save_config,
    update_category_enabled,
    validate_config_file,
)
from packsync.config.schema import (
    DownloadConfig,
    Environment,
    InstanceConfig,
    ManifestSourceConfig,
    OutputConfig,
    PacksyncConfig,
    SyncCategory,
)

__all__ = [
    # Schema
    "PacksyncConfig",
    "InstanceConfig",
    "ManifestSourceConfig",
    "DownloadConfig",
    "SyncCategory",
    "OutputConfig",
    "Environment",
    # Loader
    "load_config",
    "load_or_default_config",
    "save_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    "update_category_enabled",
    # Defaults
    "DEFAULT_CONFIG",
    "get_default_config",
    "generate_default_config",
]
