"""YAML configuration file loading.

The config file mirrors the exporter's logical sections::

    unifi:
      ip: 10.0.0.1
      api_token: "..."
      poll_interval: 30
    monitoring:
      network_devices: true
      protect_sensors: true
    server:
      bind_address: 0.0.0.0
      port: 9090
      bearer_token: "..."
    logging:
      log_file: /var/log/unifi-metrics.jsonl
      log_level: info

Sections are flattened into AppConfig field names by `flatten_config`.
"""

from pathlib import Path
from typing import Any

import structlog
import yaml

log = structlog.get_logger(__name__)


class ConfigLoadError(Exception):
    """Raised when a configuration file cannot be read, parsed or mapped."""

    pass


# (section, key) -> AppConfig field name
CONFIG_FILE_FIELDS: dict[tuple[str, str], str] = {
    ("unifi", "ip"): "controller_host",
    ("unifi", "api_token"): "api_token",
    ("unifi", "poll_interval"): "poll_interval_seconds",
    ("unifi", "network_poll_interval"): "network_poll_interval_seconds",
    ("unifi", "protect_poll_interval"): "protect_poll_interval_seconds",
    ("unifi", "request_timeout"): "request_timeout_seconds",
    ("unifi", "verify_tls"): "verify_tls",
    ("monitoring", "network_devices"): "monitor_network_devices",
    ("monitoring", "protect_sensors"): "monitor_protect_sensors",
    ("server", "bind_address"): "bind_address",
    ("server", "port"): "port",
    ("server", "bearer_token"): "bearer_token",
    ("logging", "log_file"): "log_file",
    ("logging", "log_level"): "log_level",
    ("logging", "log_format"): "log_format",
}


def load_yaml_file(file_path: Path) -> dict[str, Any]:
    """Load and parse a YAML file.

    Args:
        file_path: Path to the YAML file.

    Returns:
        Parsed YAML content. Returns an empty dict for an empty file.

    Raises:
        ConfigLoadError: If the file cannot be read, parsed, or is not a mapping.
    """
    try:
        with file_path.open("r", encoding="utf-8") as f:
            content = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigLoadError(f"Configuration file not found: {file_path}") from None
    except yaml.YAMLError as e:
        raise ConfigLoadError(f"Failed to parse YAML file {file_path}: {e}") from None
    except OSError as e:
        raise ConfigLoadError(f"Unexpected error reading {file_path}: {e}") from None

    if content is None:
        log.debug("yaml_file_empty", file_path=str(file_path))
        return {}
    if not isinstance(content, dict):
        raise ConfigLoadError(f"Configuration file {file_path} must contain a mapping")
    return content


def flatten_config(raw: dict[str, Any]) -> dict[str, Any]:
    """Map sectioned config file content to AppConfig field names.

    Raises:
        ConfigLoadError: On unknown sections or keys.
    """
    flat: dict[str, Any] = {}
    for section, values in raw.items():
        if not isinstance(values, dict):
            raise ConfigLoadError(f"Config section '{section}' must be a mapping")
        for key, value in values.items():
            field_name = CONFIG_FILE_FIELDS.get((section, key))
            if field_name is None:
                raise ConfigLoadError(f"Unknown config key '{section}.{key}'")
            flat[field_name] = value
    return flat


def load_config_file(file_path: Path) -> dict[str, Any]:
    """Load a YAML config file and return AppConfig keyword arguments."""
    values = flatten_config(load_yaml_file(file_path))
    log.debug("config_file_loaded", file_path=str(file_path), keys=sorted(values))
    return values
