# Packsync Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "instance": {
        "path": ".",
        "environment": "client",
    },
    "manifest": {
        "source": None,
        "timeout": 30,
    },
    "download": {
        "timeout": 60,
        "max_retries": 3,
        "chunk_size": 65536,
        "user_agent": "packsync",
    },
    "sync_categories": {
        "mods": {
            "enabled": True,
            "description": "Mods - .jar files",
            "directory": "mods",
            "extension": "jar",
        },
        "resourcepacks": {
            "enabled": True,
            "description": "Resource packs - .zip files",
            "directory": "resourcepacks",
            "extension": "zip",
        },
        "shaderpacks": {
            "enabled": True,
            "description": "Shader packs - .zip files",
            "directory": "shaderpacks",
            "extension": "zip",
        },
    },
    "parallel_categories": False,
    "output": {
        "verbose": False,
        "colored": True,
        "log_file": None,
    },
}


def get_default_config() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """
    Generate the default configuration as commented YAML.

    Returns:
        YAML text suitable for writing to config.yaml.
    """
    header = (
        "# packsync configuration\n"
        "#\n"
        "# instance.path        Application instance directory (contains mods/, resourcepacks/, ...)\n"
        "# instance.environment client or server; selects environment-specific content\n"
        "# manifest.source      URL or file path of the remote manifest (JSON)\n"
        "# sync_categories      Content directories kept in sync with the manifest\n"
        "\n"
    )
    body = yaml.dump(get_default_config(), default_flow_style=False, sort_keys=False, allow_unicode=True)
    return header + body
