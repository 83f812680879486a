"""Configuration management with environment variable integration and validation."""

import os
from pathlib import Path
from typing import Dict, Any, Optional

import yaml
from pydantic import ValidationError

from .types import InstallerConfig
from .errors import ConfigurationError

ENV_PREFIX = "SOLUTION_INSTALLER_"


_TRUE_WORDS = frozenset({"true", "yes", "on"})
_FALSE_WORDS = frozenset({"false", "no", "off"})


def load_env_overrides(prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """Collect ``<prefix>FIELD`` and ``<prefix>SECTION__FIELD`` variables.

    Names are lower-cased into field names; values are converted with
    ``_convert_env_value``. Deeper nesting than one section is ignored.
    """
    overrides: Dict[str, Any] = {}
    for key, raw in os.environ.items():
        if not key.startswith(prefix):
            continue
        path = key[len(prefix) :].lower().split("__")
        value = _convert_env_value(raw)
        if len(path) == 1:
            overrides[path[0]] = value
        elif len(path) == 2:
            overrides.setdefault(path[0], {})[path[1]] = value
    return overrides


def _convert_env_value(value: str) -> Any:
    """Empty means unset; otherwise int, float, boolean word or the string."""
    if not value:
        return None
    for convert in (int, float):
        try:
            return convert(value)
        except ValueError:
            continue
    lowered = value.lower()
    if lowered in _TRUE_WORDS:
        return True
    if lowered in _FALSE_WORDS:
        return False
    return value


def _merge_sections(base: Dict[str, Any], overrides: Dict[str, Any]) -> None:
    """Merge overrides into base, descending one level into dict sections."""
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key].update(value)
        else:
            base[key] = value


class ConfigManager:
    """Central configuration management."""

    def __init__(self) -> None:
        self._config: Optional[InstallerConfig] = None

    def load_config(
        self, config_file: Optional[Path] = None, **overrides: Any
    ) -> InstallerConfig:
        """Load configuration from file and environment with CLI overrides.

        Precedence, highest first: CLI overrides, environment variables,
        config file, model defaults. ``None`` overrides are ignored so CLI
        options left unset do not mask lower layers.
        """
        config_data: Dict[str, Any] = {}

        if config_file is not None:
            if not config_file.exists():
                raise ConfigurationError(f"Config file not found: {config_file}")
            config_data.update(self._load_from_file(config_file))

        _merge_sections(config_data, load_env_overrides())
        _merge_sections(
            config_data, {k: v for k, v in overrides.items() if v is not None}
        )

        try:
            self._config = InstallerConfig(**config_data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

        return self._config

    def get_config(self) -> InstallerConfig:
        """Get current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def _load_from_file(self, config_file: Path) -> Dict[str, Any]:
        """Load configuration from YAML file."""
        if config_file.suffix.lower() not in (".yml", ".yaml"):
            raise ConfigurationError(
                f"Unsupported config file format: {config_file.suffix}"
            )
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(
                f"Failed to load config file {config_file}: {e}"
            ) from e
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Config file {config_file} must contain a mapping"
            )
        return data


# Global config manager instance
_config_manager = ConfigManager()


def load_config(**kwargs: Any) -> InstallerConfig:
    """Load global configuration."""
    return _config_manager.load_config(**kwargs)


def get_config() -> InstallerConfig:
    """Get current global configuration."""
    return _config_manager.get_config()
