# Packsync Configuration Loader
# Load, save, and manage YAML configuration files

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from packsync.config.defaults import generate_default_config, get_default_config
from packsync.config.schema import PacksyncConfig
from packsync.exceptions import ConfigurationError
from packsync.utils.paths import atomic_write


def get_config_dir() -> Path:
    """Get the packsync configuration directory."""
    return Path.home() / ".config" / "packsync"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    # Allow override via environment variable
    env_path = os.environ.get("PACKSYNC_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def ensure_config_dir(config_path: Optional[Path] = None) -> Path:
    """Ensure the configuration directory exists."""
    config_dir = config_path.parent if config_path is not None else get_config_dir()
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir


def load_config(config_path: Optional[Path] = None) -> PacksyncConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        PacksyncConfig: Validated configuration object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If config file is invalid.
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found: {config_path}\nRun 'packsync config init' to create one."
        )

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {config_path}: {e}") from e

    if data is None:
        data = {}

    # Merge with defaults for missing values
    merged = _merge_with_defaults(data)

    try:
        return PacksyncConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {config_path}:\n{e}") from e


def load_or_default_config(config_path: Optional[Path] = None) -> PacksyncConfig:
    """Load config if it exists, otherwise return the defaults without writing anything."""
    if config_path is None:
        config_path = get_config_path()
    if config_path.exists():
        return load_config(config_path)
    return PacksyncConfig.model_validate(get_default_config())


def save_config(config: PacksyncConfig, config_path: Optional[Path] = None) -> Path:
    """
    Save configuration to YAML file.

    Args:
        config: Configuration object to save.
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        Path: Path where config was saved.
    """
    if config_path is None:
        config_path = get_config_path()

    ensure_config_dir(config_path)

    # Use mode='json' to serialize Enums as their string values
    data = config.model_dump(exclude_none=True, mode="json")

    atomic_write(config_path, yaml.dump(data, default_flow_style=False, sort_keys=False, allow_unicode=True))

    return config_path


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    if config_path is None:
        config_path = get_config_path()

    if config_path.exists():
        return config_path, False

    ensure_config_dir(config_path)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path, True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without loading it into the system.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    if config_path is None:
        config_path = get_config_path()

    errors: list[str] = []

    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]

    try:
        PacksyncConfig.model_validate(_merge_with_defaults(data))
    except ValidationError as e:
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        return False, errors

    if not (data.get("manifest") or {}).get("source"):
        errors.append("No manifest source configured (manifest.source)")

    return len(errors) == 0, errors


def _merge_with_defaults(data: dict) -> dict:
    """Merge loaded data with default values for missing keys."""
    result = get_default_config()

    for section in ("instance", "manifest", "download", "output"):
        if section in data and data[section]:
            result[section] = {**result[section], **data[section]}

    if "sync_categories" in data and data["sync_categories"]:
        # Keep default categories, update with user values
        for cat_name, cat_data in data["sync_categories"].items():
            if cat_name in result["sync_categories"]:
                result["sync_categories"][cat_name] = {**result["sync_categories"][cat_name], **(cat_data or {})}
            else:
                result["sync_categories"][cat_name] = cat_data

    if "parallel_categories" in data:
        result["parallel_categories"] = data["parallel_categories"]

    return result


def update_category_enabled(category_name: str, enabled: bool, config_path: Optional[Path] = None) -> PacksyncConfig:
    """
    Update a category's enabled state and save.

    Args:
        category_name: Name of the category to update.
        enabled: New enabled state.
        config_path: Optional path to config file.

    Returns:
        Updated PacksyncConfig.

    Raises:
        KeyError: If category doesn't exist.
    """
    config = load_config(config_path)

    if category_name not in config.sync_categories:
        raise KeyError(f"Category '{category_name}' not found in configuration")

    config.sync_categories[category_name].enabled = enabled
    save_config(config, config_path)
    return config
