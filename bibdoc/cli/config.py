"""Configuration management for the CLI."""

import os
from pathlib import Path
from typing import Any

import msgspec
import yaml

from bibdoc.storage.parser import ParserOptions

DEFAULT_FORMAT = "bibtex"


class Config:
    """Configuration management for the CLI application."""

    @staticmethod
    def from_file(path: Path) -> dict[str, Any]:
        """Load configuration from a YAML file."""
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in config file {path}: {e}") from e
        except OSError as e:
            raise ValueError(f"Error reading config file {path}: {e}") from e

        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return data

    @staticmethod
    def get_config_paths() -> list[Path]:
        """Get the default configuration file paths to check."""
        paths = []

        # User config
        xdg_config_home = Path(
            os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
        )
        paths.append(xdg_config_home / "bibdoc" / "config.yaml")

        # Project config
        paths.append(Path(".bibdoc.yaml"))
        paths.append(Path("bibdoc.yaml"))

        return paths

    @staticmethod
    def merge_configs(*configs: dict[str, Any]) -> dict[str, Any]:
        """Merge multiple configuration dictionaries."""
        result: dict[str, Any] = {}
        for config in configs:
            result = _deep_merge(result, config)
        return result


def load_config(explicit: Path | None = None) -> dict[str, Any]:
    """Load configuration from files and environment variables.

    Later sources win: default paths, then ``explicit``, then the
    ``BIBDOC_FORMAT`` and ``BIBDOC_STRICT`` environment variables.
    """
    config: dict[str, Any] = {}

    for path in Config.get_config_paths():
        if path.exists():
            config = Config.merge_configs(config, Config.from_file(path))

    if explicit is not None:
        config = Config.merge_configs(config, Config.from_file(explicit))

    env_overrides: dict[str, Any] = {}
    if output_format := os.environ.get("BIBDOC_FORMAT"):
        env_overrides["format"] = output_format
    if strict := os.environ.get("BIBDOC_STRICT"):
        env_overrides["parser"] = {"strict": strict.lower() in ("1", "true", "yes")}

    return Config.merge_configs(config, env_overrides)


def parser_options(config: dict[str, Any]) -> ParserOptions:
    """Build parser options from the ``parser`` section of a configuration."""
    try:
        return msgspec.convert(config.get("parser") or {}, ParserOptions)
    except msgspec.ValidationError as e:
        raise ValueError(f"Invalid parser configuration: {e}") from e


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries."""
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
