"""
Configuration Loader.

Reads the engine configuration from YAML, overlays an optional per-environment
file, expands environment variable references and validates the result.
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Optional

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from .env import resolve_value, walk
from .exceptions import (
    ConfigFileNotFoundError,
    ConfigParseError,
    ConfigValidationError,
)
from .models import EngineConfig


class ConfigLoader:
    """
    YAML configuration loader.

    Given `config/config.yaml` and env="production", the files read are
    `config/.env` (if present), `config/config.yaml` and
    `config/config.production.yaml` (if present), in that order.

    Example:
        >>> loader = ConfigLoader()
        >>> config = loader.load("config/config.yaml", env="production")
        >>> config.analyzer.symbol
        'BTCUSDT'
    """

    def __init__(self, env_file: Optional[str | Path] = None):
        """
        Args:
            env_file: .env file to load before any other candidate
        """
        self._env_file = Path(env_file) if env_file else None
        self._env_loaded = False

    def load(self, path: str | Path, env: Optional[str] = None) -> EngineConfig:
        """
        Load and validate the engine configuration.

        Args:
            path: Base YAML file
            env: Environment name selecting the `{stem}.{env}{suffix}` overlay

        Raises:
            ConfigFileNotFoundError: If the base file is missing
            ConfigParseError: If a file is not a YAML mapping
            ConfigValidationError: If the merged values are rejected
        """
        path = Path(path)
        self._load_env_file(path.parent)

        data = self.load_yaml(path)
        if env:
            overlay = path.with_name(f"{path.stem}.{env}{path.suffix}")
            if overlay.exists():
                data = self.merge_configs(data, self.load_yaml(overlay))

        data = self.substitute_env_vars(data)

        try:
            return EngineConfig(**data)
        except ValidationError as e:
            raise ConfigValidationError([
                f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
                for error in e.errors()
            ]) from e

    def load_yaml(self, path: str | Path) -> dict[str, Any]:
        """Parse one YAML file. An empty file yields an empty mapping."""
        path = Path(path)
        if not path.exists():
            raise ConfigFileNotFoundError(str(path))

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigParseError(str(path), str(e)) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigParseError(str(path), "top-level document must be a mapping")
        return data

    def merge_configs(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """
        Recursively merge `override` into a copy of `base`.

        Nested mappings merge key by key; any other value in `override`
        replaces the base value. Neither input is modified.
        """
        merged = deepcopy(base)
        for key, value in override.items():
            current = merged.get(key)
            if isinstance(current, dict) and isinstance(value, dict):
                merged[key] = self.merge_configs(current, value)
            else:
                merged[key] = deepcopy(value)
        return merged

    def substitute_env_vars(self, data: Any) -> Any:
        """
        Expand `${VAR}` / `${VAR:default}` throughout `data`.

        Whole-value references are typed (bool, int, float); references
        without a value or default are kept as written.
        """
        return walk(data, resolve_value)

    def _load_env_file(self, config_dir: Path) -> None:
        if self._env_loaded:
            return

        candidates = [config_dir / ".env", config_dir.parent / ".env", Path.cwd() / ".env"]
        if self._env_file:
            candidates.insert(0, self._env_file)

        for candidate in candidates:
            if candidate.exists():
                load_dotenv(candidate)
                self._env_loaded = True
                return


def load_config(
    path: str | Path,
    env: Optional[str] = None,
    env_file: Optional[str | Path] = None,
) -> EngineConfig:
    """
    Load the engine configuration with a fresh ConfigLoader.

    Example:
        >>> config = load_config("config/config.yaml", env="production")
    """
    return ConfigLoader(env_file=env_file).load(path, env=env)
