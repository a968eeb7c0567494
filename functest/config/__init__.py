"""Run configuration (YAML, per environment)."""

from .loader import ConfigLoader, get_config, reset_config

__all__ = ["ConfigLoader", "get_config", "reset_config"]
