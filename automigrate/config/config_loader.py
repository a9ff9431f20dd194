"""
Configuration Loader

Loads model definitions and other settings from YAML files, with optional
per-environment and local overrides merged on top.

Layout for a config named ``models`` in ``config_dir``:
    config_dir/models.yaml                  base definitions
    config_dir/environments/<env>.yaml      overrides under a ``models`` key
    config_dir/local/overrides.yaml         overrides under a ``models`` key
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .env_config import ConfigError

YAML_SUFFIXES = (".yaml", ".yml")


class ConfigLoader:
    """Load and merge configuration from YAML files."""

    def __init__(self, config_dir: Union[str, Path] = "config", environment: Optional[str] = None):
        self.config_dir = Path(config_dir)
        self.environment = environment
        self._cache: Dict[str, Dict[str, Any]] = {}

    def _find_base(self, config_name: str) -> Path:
        for suffix in YAML_SUFFIXES:
            path = self.config_dir / f"{config_name}{suffix}"
            if path.exists():
                return path
        raise FileNotFoundError(f"Config not found: {self.config_dir / config_name}.yaml")

    def _read(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}")
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError(f"{path}: top level must be a mapping")
        return data

    def load(self, config_name: str) -> Dict[str, Any]:
        """
        Load configuration with environment overrides.

        Loading order:
        1. {config_dir}/{config_name}.yaml
        2. {config_dir}/environments/{environment}.yaml (overrides)
        3. {config_dir}/local/overrides.yaml (overrides)

        Args:
            config_name: Name of config file (without extension)

        Returns:
            Merged configuration dictionary
        """
        if config_name in self._cache:
            return self._cache[config_name]

        config = self._read(self._find_base(config_name))

        if self.environment:
            env_path = self.config_dir / "environments" / f"{self.environment}.yaml"
            if env_path.exists():
                env_config = self._read(env_path)
                config = self._merge_config(config, env_config.get(config_name, {}))

        local_path = self.config_dir / "local" / "overrides.yaml"
        if local_path.exists():
            local_config = self._read(local_path)
            config = self._merge_config(config, local_config.get(config_name, {}))

        self._cache[config_name] = config
        return config

    def _merge_config(self, base: Dict, override: Dict) -> Dict:
        """Deep merge override config into base config."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result

    def clear_cache(self) -> None:
        self._cache.clear()
