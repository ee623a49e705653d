"""Configuration management for spawner-skills."""

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

# Later files override earlier ones
CONFIG_FILES = ("config.user.yaml", "config.runtime.yaml")

WORKSPACE_PATHS = ("skills_path", "logging_path")


# ============================================================================
# Section Models
# ============================================================================


class LoaderConfig(BaseModel):
    """Skill loading configuration."""

    max_workers: int = Field(default=4, gt=0)
    timeout: float | None = Field(default=30.0, gt=0)
    exclude: list[str] = Field(default_factory=lambda: ["README.md"])


class RoutingConfig(BaseModel):
    """Task routing configuration."""

    limit: int | None = Field(default=5, gt=0)


class LogConfig(BaseModel):
    """Log file configuration."""

    level: str = "DEBUG"
    max_bytes: int = Field(default=1_000_000, gt=0)
    backup_count: int = Field(default=3, ge=0)

    @field_validator("level")
    @classmethod
    def level_must_be_known(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level '{v}'")
        return level


class ApiConfig(BaseModel):
    """Bind address for ``spawner-skills serve``."""

    host: str = "127.0.0.1"
    port: int = Field(default=8000, gt=0, lt=65536)

    @field_validator("host")
    @classmethod
    def host_must_not_be_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("host must not be empty")
        return v


def merge_layers(*layers: dict[str, Any]) -> dict[str, Any]:
    """
    Merge config mappings left to right.

    Nested sections are merged key by key, so a runtime file that only sets
    ``loader.max_workers`` keeps ``loader.timeout`` from the user file.
    """
    merged: dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = merge_layers(current, value)
            else:
                merged[key] = value
    return merged


def read_layers(workspace_dir: Path) -> list[dict[str, Any]]:
    """
    Read every config file that exists in the workspace.

    Raises:
        yaml.YAMLError: If a file is not valid YAML
        ValueError: If a file does not hold a mapping
    """
    layers = []
    for filename in CONFIG_FILES:
        path = workspace_dir / filename
        if not path.exists():
            continue
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{filename} must contain a mapping")
        layers.append(data)
    return layers


# ============================================================================
# Workspace Configuration
# ============================================================================


class Config(BaseModel):
    """
    Main configuration for spawner-skills.

    Built from the workspace's ``config.user.yaml`` with
    ``config.runtime.yaml`` layered on top. Both files are optional; fields
    they leave out keep the defaults below.
    """

    workspace: Path
    skills_path: Path = Field(default=Path("skills"))
    logging_path: Path = Field(default=Path(".logs"))
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    routing: RoutingConfig = Field(default_factory=RoutingConfig)
    log: LogConfig = Field(default_factory=LogConfig)
    api: ApiConfig = Field(default_factory=ApiConfig)

    @model_validator(mode="after")
    def anchor_paths(self) -> "Config":
        """Anchor relative paths at the workspace; absolute ones must stay inside it."""
        for field_name in WORKSPACE_PATHS:
            value: Path = getattr(self, field_name)
            if not value.is_absolute():
                setattr(self, field_name, self.workspace / value)
            elif not value.is_relative_to(self.workspace):
                raise ValueError(f"{field_name} must be relative, got: {value}")
        return self

    @classmethod
    def load(cls, workspace_dir: Path) -> "Config":
        """
        Load configuration from a workspace directory.

        Raises:
            ValidationError: If a value is invalid
            yaml.YAMLError: If a config file is not valid YAML
        """
        return cls.model_validate(
            merge_layers({"workspace": workspace_dir}, *read_layers(workspace_dir))
        )

    def reload(self) -> bool:
        """
        Re-read the config files and update this instance in place.

        Returns:
            True on success. False if a file is invalid, in which case the
            current values are kept.
        """
        try:
            fresh = Config.load(self.workspace)
        except (ValueError, yaml.YAMLError):
            return False

        for field_name in Config.model_fields:
            setattr(self, field_name, getattr(fresh, field_name))
        return True
