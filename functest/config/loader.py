"""
Configuration Loader

Loads run settings from YAML files with environment overrides.

Loading order:
1. <config_dir>/base/<name>.yaml
2. <config_dir>/environments/<environment>.yaml (key <name>, overrides)
3. <config_dir>/local/overrides.yaml (key <name>, overrides, gitignored)
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from ..errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent
DEFAULT_ENVIRONMENT = "development"


class ConfigLoader:
    """Load and merge configuration from YAML files."""

    def __init__(self, config_dir: str = None, environment: str = None):
        self.config_dir = Path(config_dir or os.environ.get("FUNCTEST_CONFIG_DIR") or CONFIG_DIR)
        self.environment = environment or os.environ.get("FUNCTEST_ENV", DEFAULT_ENVIRONMENT)
        self._cache = {}

    def load(self, config_name: str = "functest") -> Dict[str, Any]:
        """
        Load configuration with environment overrides.

        Args:
            config_name: Name of config file (without .yaml extension)

        Returns:
            Merged configuration dictionary
        """
        if config_name in self._cache:
            return self._cache[config_name]

        base_path = self.config_dir / "base" / f"{config_name}.yaml"
        if not base_path.exists():
            raise ConfigError(f"Base config not found: {base_path}")

        config = self._read(base_path)

        env_path = self.config_dir / "environments" / f"{self.environment}.yaml"
        if env_path.exists():
            env_config = self._read(env_path)
            config = self._merge_config(config, env_config.get(config_name) or {})

        local_path = self.config_dir / "local" / "overrides.yaml"
        if local_path.exists():
            local_config = self._read(local_path)
            config = self._merge_config(config, local_config.get(config_name) or {})

        logger.debug(f"Loaded config '{config_name}' for environment '{self.environment}'")
        self._cache[config_name] = config
        return config

    def get(self, key: str, default: Any = None, config_name: str = "functest") -> Any:
        """Look up a dotted key, e.g. ``transport.timeout``."""
        current = self.load(config_name)
        for part in key.split("."):
            if not isinstance(current, dict) or part not in current:
                return default
            current = current[part]
        return current

    def _read(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path) as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    def _merge_config(self, base: Dict, override: Dict) -> Dict:
        """Deep merge override config into base config."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value
        return result


_loader: Optional[ConfigLoader] = None


def get_config() -> ConfigLoader:
    """Process-wide loader, created on first use."""
    global _loader
    if _loader is None:
        _loader = ConfigLoader()
    return _loader


def reset_config() -> None:
    """Drop the cached loader so the next call re-reads the environment."""
    global _loader
    _loader = None
