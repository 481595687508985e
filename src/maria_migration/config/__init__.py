"""Configuration management module."""

from .loader import MigratorConfig, find_config_file, load_config

__all__ = ["MigratorConfig", "load_config", "find_config_file"]
