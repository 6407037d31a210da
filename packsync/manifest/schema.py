# Packsync Manifest Schema
# Immutable pydantic models for the remote content manifest

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from packsync.config.schema import Environment
from packsync.utils.paths import file_name_from_url


class IntegrityInfo(BaseModel):
    """Declared checksum of a content file."""

    model_config = ConfigDict(frozen=True)

    algorithm: str = Field(description="Hash algorithm name (md5, sha1, sha256, sha512)")
    value: str = Field(description="Expected hex digest")

    @model_validator(mode="before")
    @classmethod
    def parse_compact_forms(cls, data: Any) -> Any:
        """Accept "sha256:<hex>" and {"sha256": "<hex>"} in addition to the object form."""
        if isinstance(data, str):
            algorithm, sep, value = data.partition(":")
            if not sep:
                raise ValueError("integrity string must look like '<algorithm>:<hex digest>'")
            return {"algorithm": algorithm, "value": value}
        if isinstance(data, dict) and "algorithm" not in data and len(data) == 1:
            ((algorithm, value),) = data.items()
            return {"algorithm": algorithm, "value": value}
        return data

    @field_validator("algorithm")
    @classmethod
    def normalize_algorithm(cls, v: str) -> str:
        """Lowercase and strip dashes (SHA-256 -> sha256)."""
        return v.strip().lower().replace("-", "")

    @field_validator("value")
    @classmethod
    def normalize_value(cls, v: str) -> str:
        return v.strip().lower()

    def __str__(self) -> str:
        return f"{self.algorithm}:{self.value}"


class ContentItem(BaseModel):
    """One remote-declared content file."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    download_url: str = Field(alias="downloadUrl", description="Source URL; also yields the file name")
    integrity: IntegrityInfo | None = Field(
        default=None, alias="fileIntegrityInfo", description="Declared checksum, None if unknown"
    )
    name: str | None = Field(default=None, description="Human-readable label")
    environment: Environment = Field(default=Environment.BOTH, description="Run contexts this item applies to")
    verify_integrity: bool = Field(
        default=True, alias="verifyFileIntegrity", description="Re-check existing local copies each run"
    )

    @field_validator("download_url")
    @classmethod
    def require_file_name(cls, v: str) -> str:
        """A blank URL or one without a file name is a manifest error."""
        file_name_from_url(v)
        return v.strip()

    @field_validator("environment", mode="before")
    @classmethod
    def lowercase_environment(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def file_name(self) -> str:
        """File name derived from the download URL."""
        return file_name_from_url(self.download_url)

    @property
    def display_name(self) -> str:
        """Label for progress output."""
        return self.name or self.file_name


class SyncPolicy(BaseModel):
    """Category-scoped reconciliation policy."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    # When True, orphan deletion is restricted to managed files; when False,
    # every file with the category's extension is a deletion candidate.
    allow_foreign_files: bool = Field(default=False, alias="allowForeignFiles")
    restrict_to_current_environment: bool = Field(default=False, alias="restrictToCurrentEnvironment")
    managed_file_marker: str | None = Field(default=None, alias="managedFileMarker")

    @field_validator("managed_file_marker")
    @classmethod
    def blank_marker_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v


class CategoryManifest(BaseModel):
    """Ordered items and policy for one category."""

    model_config = ConfigDict(frozen=True)

    items: tuple[ContentItem, ...] = Field(default=())
    policy: SyncPolicy = Field(default_factory=SyncPolicy)


# Category name -> (items key, policy keys) in the sync-info manifest shape
_SYNC_INFO_KEYS: dict[str, tuple[str, dict[str, str]]] = {
    "mods": (
        "mods",
        {
            "allow_foreign_files": "allowUsingOtherMods",
            "restrict_to_current_environment": "shouldSyncOnlyModsForCurrentEnvironment",
            "managed_file_marker": "modSyncMarker",
        },
    ),
    "resourcepacks": (
        "resourcePacks",
        {
            "allow_foreign_files": "allowUsingOtherResourcePacks",
            "restrict_to_current_environment": "shouldSyncOnlyResourcePacksForCurrentEnvironment",
            "managed_file_marker": "resourcePackSyncMarker",
        },
    ),
    "shaderpacks": (
        "shaderPacks",
        {
            "allow_foreign_files": "allowUsingOtherShaderPacks",
            "restrict_to_current_environment": "shouldSyncOnlyShaderPacksForCurrentEnvironment",
            "managed_file_marker": "shaderPackSyncMarker",
        },
    ),
}


class Manifest(BaseModel):
    """Parsed remote manifest: one CategoryManifest per category name."""

    model_config = ConfigDict(frozen=True)

    categories: dict[str, CategoryManifest] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def convert_sync_info(cls, data: Any) -> Any:
        """Accept the flat sync-info shape with top-level mods/resourcePacks/shaderPacks."""
        if not isinstance(data, dict) or "categories" in data:
            return data
        if not any(items_key in data for items_key, _ in _SYNC_INFO_KEYS.values()):
            return data

        categories: dict[str, Any] = {}
        for category_name, (items_key, policy_keys) in _SYNC_INFO_KEYS.items():
            if items_key not in data:
                continue
            policy = {field: data[key] for field, key in policy_keys.items() if key in data}
            categories[category_name] = {"items": data[items_key] or [], "policy": policy}
        return {"categories": categories}

    def get_category(self, name: str) -> CategoryManifest | None:
        """Get a category by name."""
        return self.categories.get(name)
