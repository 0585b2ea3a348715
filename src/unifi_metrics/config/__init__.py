"""Configuration management for the exporter.

Settings are assembled from environment variables, .env files, an optional
YAML config file and defaults. There is no module-level settings singleton:
the entry point loads an AppConfig once and passes it down.
"""

from unifi_metrics.config.env_loader import Environment, get_environment
from unifi_metrics.config.loader import ConfigLoadError, load_config_file
from unifi_metrics.config.settings import AppConfig, load_app_config

__all__ = [
    "AppConfig",
    "load_app_config",
    "Environment",
    "get_environment",
    "load_config_file",
    "ConfigLoadError",
]
