"""Layered YAML configuration loader."""

from pathlib import Path
from typing import Any

import yaml

from src.core.exceptions.errors import ConfigurationError


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two mappings, recursing into nested mappings.

    Args:
        base: Lower priority values.
        override: Higher priority values.

    Returns:
        New merged dictionary. Inputs are not modified.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Load one or more YAML files, later files overriding earlier ones.

    When ``sections`` is given, every top-level key must be one of them and
    must hold a mapping.
    """

    def __init__(
        self,
        config_path: Path | None = None,
        sections: set[str] | None = None,
    ) -> None:
        """Initialize the config loader.

        Args:
            config_path: Path to configuration file.
            sections: Allowed top-level section names. Any name when omitted.
        """
        self.config_path = config_path
        self.sections = sections
        self.loaded_paths: list[Path] = []
        self._config: dict[str, Any] = {}

    def load(self, path: Path | None = None) -> dict[str, Any]:
        """Load a YAML file and merge it over what is already loaded.

        Args:
            path: Path to YAML file. Uses config_path if not provided.

        Returns:
            Merged configuration dictionary.

        Raises:
            ConfigurationError: If the file is missing, is not valid YAML or
                has an unexpected structure.
        """
        load_path = path or self.config_path
        if not load_path:
            return self._config

        data = self._read(Path(load_path))
        self._validate(data, load_path)

        self._config = deep_merge(self._config, data)
        self.loaded_paths.append(Path(load_path))
        return self._config

    def load_all(self, paths: list[Path]) -> dict[str, Any]:
        """Load several files in priority order (last wins)."""
        for path in paths:
            self.load(path)
        return self._config

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        try:
            with open(path, encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except FileNotFoundError as e:
            raise ConfigurationError(
                f"Configuration file not found: {path}",
                config_key=str(path),
            ) from e
        except yaml.YAMLError as e:
            raise ConfigurationError(
                f"Invalid YAML in configuration file: {path}",
                config_key=str(path),
                details={"error": str(e)},
            ) from e

        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(
                f"Configuration root must be a mapping: {path}",
                config_key=str(path),
            )
        return loaded

    def _validate(self, data: dict[str, Any], path: Path) -> None:
        if self.sections is None:
            return

        for name, value in data.items():
            if name not in self.sections:
                raise ConfigurationError(
                    f"Unknown configuration section '{name}' in {path}",
                    config_key=str(name),
                    details={"allowed": sorted(self.sections)},
                )
            if value is not None and not isinstance(value, dict):
                raise ConfigurationError(
                    f"Configuration section '{name}' must be a mapping",
                    config_key=str(name),
                )

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value by dotted key (e.g. 'scoring.secret_critical').

        Args:
            key: Configuration key.
            default: Default value if key not found.

        Returns:
            Configuration value or default.
        """
        value: Any = self._config
        for k in key.split("."):
            if not isinstance(value, dict) or k not in value:
                return default
            value = value[k]
        return value

    def get_section(self, section: str) -> dict[str, Any]:
        """Get an entire configuration section, empty if absent."""
        return self._config.get(section) or {}

    @property
    def config(self) -> dict[str, Any]:
        """Return the merged configuration."""
        return self._config
