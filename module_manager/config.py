"""
Module Configuration Management

This module provides configuration for the module registry: where modules
live on disk, where their public assets are published, where session
metadata is stored, and where modules are installed from.

All settings can be overridden via environment variables with the MODULES_
prefix (e.g. MODULES_MODULES_PATH) or through a .env file.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Dotted configuration keys understood by ModulesConfig.get()
KEY_PREFIX = "modules.paths."

PATH_KEYS: Dict[str, str] = {
    "modules": "modules_path",
    "assets": "assets_path",
    "storage": "storage_path",
    "repository": "repository_url",
    "branch": "branch",
    "url": "app_url",
}


class ModulesConfig(BaseSettings):
    """
    Module registry configuration with validation and environment variable support.

    Consumers read values through get() with dotted keys in the
    ``modules.paths.*`` namespace, which keeps the registry independent of
    the attribute names used here.
    """

    model_config = SettingsConfigDict(
        env_prefix="MODULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Filesystem locations
    modules_path: str = Field("modules", description="Root directory scanned for modules")
    assets_path: str = Field("public/modules", description="Directory module assets are published to")
    storage_path: str = Field("storage", description="Root directory for session metadata")

    # Installation sources
    repository_url: str = Field(
        "https://github.com/{name}.git",
        description="Repository URL template, {name} is replaced by vendor/package",
    )
    branch: str = Field("master", description="Branch used for subtree installs")

    # URL generation
    app_url: str = Field("http://localhost", description="Base URL assets are served from")

    @field_validator('modules_path', 'assets_path', 'storage_path')
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate that configured paths are not blank."""
        if not v or not v.strip():
            raise ValueError('Configured paths must not be empty')
        return v

    @field_validator('repository_url')
    @classmethod
    def validate_repository_url(cls, v: str) -> str:
        """Validate the repository template can be filled with a module name."""
        if '{name}' not in v:
            raise ValueError('Repository URL template must contain {name}')
        return v

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dotted key.

        Args:
            key: Key such as ``modules.paths.modules``; a bare field name
                 (``modules_path``) is accepted too
            default: Value returned for unknown keys

        Returns:
            The configured value, or default
        """
        if key.startswith(KEY_PREFIX):
            field_name = PATH_KEYS.get(key[len(KEY_PREFIX):])
        else:
            field_name = key if key in type(self).model_fields else None

        if field_name is None:
            return default
        return getattr(self, field_name)

    @classmethod
    def from_env_file(cls, env_file_path: Optional[Path] = None) -> "ModulesConfig":
        """
        Create configuration from an environment file.

        Args:
            env_file_path: Optional path to .env file. Defaults to ./.env

        Returns:
            ModulesConfig: Configured instance
        """
        if env_file_path is not None and Path(env_file_path).exists():
            return cls(_env_file=str(env_file_path))
        return cls()


# Global configuration instance
_config: Optional[ModulesConfig] = None


def get_modules_config(env_file_path: Optional[Path] = None) -> ModulesConfig:
    """
    Get or create the global module configuration instance.

    Args:
        env_file_path: Optional path to environment file

    Returns:
        ModulesConfig: Global configuration instance
    """
    global _config
    if _config is None:
        _config = ModulesConfig.from_env_file(env_file_path)
    return _config


def reset_modules_config() -> None:
    """Reset the global configuration (useful for testing)."""
    global _config
    _config = None
