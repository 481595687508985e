"""Configuration loading and management."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from ..utils.logging import ConfigurationError

ENV_PREFIX = "MARIA_MIGRATION_"

SEARCH_LOCATIONS = [
    "./maria-migration.yaml",
    "./maria-migration.yml",
    "~/.config/maria-migration/config.yaml",
    "~/.maria-migration.yaml",
]


class MigratorConfig(BaseModel):
    """Configuration model for maria-migration."""

    # Connection
    database_url: str | None = Field(
        default=None, description="SQLAlchemy database URL"
    )
    database: str | None = Field(
        default=None, description="Schema name, defaults to the URL's database"
    )
    echo: bool = Field(default=False, description="Echo SQL statements")
    pool_size: int = Field(default=5, description="Connections kept in the pool")
    max_overflow: int = Field(default=10, description="Extra connections allowed")
    pool_timeout: int = Field(default=30, description="Pool checkout timeout")
    pool_recycle: int = Field(default=3600, description="Connection recycle age")

    # Migrator
    version_table: str = Field(
        default="version", description="Table holding the schema version"
    )
    migrator: str | None = Field(
        default=None, description="Migrator class as module:Class or file path"
    )
    max_clear_passes: int = Field(
        default=10, ge=1, description="Passes before a database clear gives up"
    )

    # Logging
    log_level: str = Field(default="WARNING", description="Logging level")
    log_file: str | None = Field(default=None, description="Log file path")
    structured_logging: bool = Field(
        default=False, description="Emit JSON log records"
    )


def find_config_file(custom_path: str | None = None) -> Path | None:
    """Find configuration file in standard locations."""
    if custom_path:
        path = Path(custom_path).expanduser()
        if path.exists():
            return path
        raise ConfigurationError(f"Config file not found: {custom_path}")

    for location in SEARCH_LOCATIONS:
        path = Path(location).expanduser()
        if path.exists():
            return path

    return None


def load_config_file(config_path: Path) -> dict[str, Any]:
    """Load configuration from YAML file."""
    try:
        with open(config_path) as f:
            return yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Failed to read config file {config_path}: {e}")


def load_env_vars() -> dict[str, Any]:
    """Load configuration from MARIA_MIGRATION_* environment variables."""
    config: dict[str, Any] = {}
    int_keys = {
        "pool_size",
        "max_overflow",
        "pool_timeout",
        "pool_recycle",
        "max_clear_passes",
    }
    bool_keys = {"echo", "structured_logging"}

    for config_key in MigratorConfig.model_fields:
        env_var = f"{ENV_PREFIX}{config_key.upper()}"
        if env_var not in os.environ:
            continue

        env_value = os.environ[env_var]
        if config_key in int_keys:
            try:
                config[config_key] = int(env_value)
            except ValueError:
                continue
        elif config_key in bool_keys:
            config[config_key] = env_value.lower() in ("true", "1", "yes", "on")
        else:
            config[config_key] = env_value

    return config


def load_config(
    config_path: str | None = None,
    profile: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> MigratorConfig:
    """Load configuration from file and environment variables.

    Precedence order (highest to lowest):
    1. CLI flag overrides
    2. Environment variables
    3. Configuration file (with profile support)
    4. Default values
    """
    config_data: dict[str, Any] = {}

    config_file = find_config_file(config_path)
    if config_file:
        file_data = load_config_file(config_file)
        config_data.update({k: v for k, v in file_data.items() if k != "profiles"})

        if profile:
            profiles = file_data.get("profiles") or {}
            if profile not in profiles:
                raise ConfigurationError(
                    f"Profile '{profile}' not found in {config_file}"
                )
            config_data.update(profiles[profile])

    config_data.update(load_env_vars())

    if cli_overrides:
        config_data.update(cli_overrides)

    try:
        return MigratorConfig(**config_data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e
