# Packsync Configuration Schema
# Pydantic models for YAML configuration validation

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class Environment(str, Enum):
    """Run context a content item applies to."""

    CLIENT = "client"
    SERVER = "server"
    BOTH = "both"


class InstanceConfig(BaseModel):
    """Application instance settings."""

    path: str = Field(default=".", description="Instance directory containing the category directories")
    environment: Environment = Field(default=Environment.CLIENT, description="Current run context")

    @field_validator("path")
    @classmethod
    def expand_path(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())

    @field_validator("environment")
    @classmethod
    def concrete_environment(cls, v: Environment) -> Environment:
        """The instance itself is either a client or a server."""
        if v == Environment.BOTH:
            raise ValueError("environment must be 'client' or 'server'")
        return v


class ManifestSourceConfig(BaseModel):
    """Where the remote manifest is read from."""

    source: str | None = Field(default=None, description="Manifest URL (http/https) or local file path")
    timeout: int = Field(default=30, ge=1, description="Manifest request timeout in seconds")


class DownloadConfig(BaseModel):
    """Transfer settings."""

    timeout: int = Field(default=60, ge=1, description="Request timeout in seconds")
    max_retries: int = Field(default=3, ge=1, description="Attempts per file before failing")
    chunk_size: int = Field(default=65536, ge=1024, description="Streaming chunk size in bytes")
    user_agent: str = Field(default="packsync", description="User-Agent header for requests")


class SyncCategory(BaseModel):
    """Configuration for a single content category."""

    enabled: bool = Field(default=True, description="Whether this category is enabled")
    description: str = Field(default="", description="Human-readable description")
    directory: str = Field(description="Target directory, relative to the instance path or absolute")
    extension: str = Field(description="File extension of the category's content (without dot)")

    @field_validator("directory")
    @classmethod
    def expand_directory(cls, v: str) -> str:
        """Expand ~ in directory."""
        return str(Path(v).expanduser())

    @field_validator("extension")
    @classmethod
    def normalize_extension(cls, v: str) -> str:
        """Strip leading dot and lowercase."""
        ext = v.strip().lstrip(".").lower()
        if not ext:
            raise ValueError("extension must not be empty")
        return ext


class OutputConfig(BaseModel):
    """Output and logging configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")
    log_file: str | None = Field(default=None, description="Path to log file")

    @field_validator("log_file")
    @classmethod
    def expand_optional_path(cls, v: str | None) -> str | None:
        """Expand ~ in optional path."""
        if v is None:
            return None
        return str(Path(v).expanduser())


class PacksyncConfig(BaseModel):
    """Root configuration model for packsync."""

    instance: InstanceConfig = Field(default_factory=InstanceConfig, description="Instance settings")
    manifest: ManifestSourceConfig = Field(default_factory=ManifestSourceConfig, description="Manifest source")
    download: DownloadConfig = Field(default_factory=DownloadConfig, description="Transfer settings")
    sync_categories: dict[str, SyncCategory] = Field(default_factory=dict, description="Category definitions")
    parallel_categories: bool = Field(default=False, description="Run categories concurrently")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")

    def get_enabled_categories(self) -> dict[str, SyncCategory]:
        """Return only enabled categories."""
        return {name: cat for name, cat in self.sync_categories.items() if cat.enabled}

    def get_category(self, name: str) -> SyncCategory | None:
        """Get a category by name."""
        return self.sync_categories.get(name)

    def get_category_path(self, name: str) -> Path | None:
        """Resolve a category's target directory against the instance path."""
        category = self.get_category(name)
        if category is None:
            return None
        directory = Path(category.directory)
        if directory.is_absolute():
            return directory
        return Path(self.instance.path) / directory
