"""Application configuration settings.

This module provides the AppConfig class and its loader.
"""

from contextvars import ContextVar
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
import structlog

from unifi_metrics.config.env_loader import Environment, get_environment, load_env_files
from unifi_metrics.config.loader import load_config_file
from unifi_metrics.config.validators import (
    normalize_bearer_token,
    resolve_path,
    validate_log_format,
    validate_log_level,
)

log = structlog.get_logger(__name__)

NETWORK_API_PATH = "/proxy/network/integration/v1"
PROTECT_API_PATH = "/proxy/protect/integration/v1"

# Flattened YAML values for the AppConfig being built by load_app_config.
_config_file_values: ContextVar[dict[str, Any] | None] = ContextVar(
    "config_file_values", default=None
)


class ConfigFileSettingsSource(PydanticBaseSettingsSource):
    """Settings source serving the values read from the YAML config file."""

    def get_field_value(self, field: FieldInfo, field_name: str) -> tuple[Any, str, bool]:
        values = _config_file_values.get() or {}
        return values.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(_config_file_values.get() or {})


class AppConfig(BaseSettings):
    """Unified exporter configuration.

    Values come from (highest priority first) keyword arguments (CLI flags),
    environment variables with the UNIFI_METRICS_ prefix, the optional YAML
    config file, and defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="UNIFI_METRICS_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: Environment = Field(
        default_factory=get_environment, description="Current environment"
    )

    # UniFi controller
    controller_host: str = Field(
        default="10.0.0.1", description="Controller address (host, host:port or full URL)"
    )
    api_token: str = Field(default="", description="Integration API key (X-API-KEY header)")
    poll_interval_seconds: float = Field(
        default=30.0, gt=0, description="Default interval for both poll loops"
    )
    network_poll_interval_seconds: float | None = Field(
        default=None, gt=0, description="Device statistics poll interval (defaults to poll_interval_seconds)"
    )
    protect_poll_interval_seconds: float | None = Field(
        default=None, gt=0, description="Sensor poll interval (defaults to poll_interval_seconds)"
    )
    request_timeout_seconds: float = Field(
        default=5.0, gt=0, description="Timeout for a single upstream request"
    )
    verify_tls: bool = Field(
        default=False,
        description="Verify the controller TLS certificate (controllers usually ship self-signed ones)",
    )

    # Monitoring toggles
    monitor_network_devices: bool = Field(default=True, description="Poll network device statistics")
    monitor_protect_sensors: bool = Field(default=True, description="Poll protect sensors")

    # HTTP server
    bind_address: str = Field(default="0.0.0.0", description="Listener address")
    port: int = Field(default=9090, ge=1, le=65535, description="Listener port")
    bearer_token: str | None = Field(
        default=None, description="Bearer token required on /metrics (disabled when unset)"
    )

    # Logging
    log_level: str = Field(
        default="INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_format: str = Field(default="console", description="Console log format (console or json)")
    log_file: Path | None = Field(default=None, description="Optional JSON-lines log file")

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Priority: init kwargs (CLI flags), environment, config file, secrets."""
        return (
            init_settings,
            env_settings,
            ConfigFileSettingsSource(settings_cls),
            file_secret_settings,
        )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        return validate_log_format(v)

    @field_validator("log_file", mode="before")
    @classmethod
    def resolve_log_file(cls, v: Path | str | None) -> Path | None:
        """Resolve relative log file paths against the working directory."""
        return resolve_path(v)

    @field_validator("bearer_token", mode="before")
    @classmethod
    def normalize_bearer_token(cls, v: str | None) -> str | None:
        """Treat an empty token as no token."""
        return normalize_bearer_token(v)

    @model_validator(mode="after")
    def apply_poll_interval_defaults(self) -> "AppConfig":
        """Fill per-source poll intervals from the shared default."""
        if self.network_poll_interval_seconds is None:
            self.network_poll_interval_seconds = self.poll_interval_seconds
        if self.protect_poll_interval_seconds is None:
            self.protect_poll_interval_seconds = self.poll_interval_seconds
        return self

    @property
    def controller_url(self) -> str:
        """Controller base URL, defaulting to https when no scheme is given."""
        host = self.controller_host.rstrip("/")
        if "://" in host:
            return host
        return f"https://{host}"

    @property
    def network_base_url(self) -> str:
        """Base URL of the UniFi Network integration API."""
        return f"{self.controller_url}{NETWORK_API_PATH}"

    @property
    def protect_base_url(self) -> str:
        """Base URL of the UniFi Protect integration API."""
        return f"{self.controller_url}{PROTECT_API_PATH}"


def load_app_config(config_path: Path | None = None, **overrides: Any) -> AppConfig:
    """Load and validate application configuration.

    This function:
    1. Loads .env files in priority order (via env_loader)
    2. Reads the optional YAML config file
    3. Creates and validates the AppConfig instance

    Args:
        config_path: Optional YAML config file.
        **overrides: Extra field values (e.g. from CLI flags). Non-None values
            win over both the environment and the config file.

    Returns:
        Validated AppConfig instance.

    Raises:
        ConfigLoadError: If the config file cannot be read or mapped.
        ValidationError: If configuration validation fails.
    """
    log.info(
        "loading_app_config",
        environment=get_environment().value,
        config_path=str(config_path) if config_path else None,
    )

    load_env_files()

    file_values = load_config_file(config_path) if config_path is not None else {}
    cli_values = {key: value for key, value in overrides.items() if value is not None}

    token = _config_file_values.set(file_values)
    try:
        config = AppConfig(**cli_values)
    except Exception as e:
        log.error("app_config_load_failed", error=str(e), error_type=type(e).__name__)
        raise
    finally:
        _config_file_values.reset(token)

    log.info(
        "app_config_loaded",
        environment=config.environment.value,
        controller=config.controller_url,
        network_devices=config.monitor_network_devices,
        protect_sensors=config.monitor_protect_sensors,
        log_level=config.log_level,
        log_format=config.log_format,
    )
    return config
