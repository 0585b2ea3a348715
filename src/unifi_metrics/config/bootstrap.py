"""Bootstrap configuration helpers (pre-settings).

These helpers exist for "chicken-and-egg" situations where a small amount of
configuration is needed before the full settings object can be loaded.

Constraints:
- Keep this module dependency-light (no telemetry imports) to avoid circular imports.
"""

from __future__ import annotations

import os

from unifi_metrics.config.validators import validate_log_level

LOG_LEVEL_ENV_VAR = "UNIFI_METRICS_LOG_LEVEL"


def get_bootstrap_log_level(default: str = "INFO") -> str:
    """Get logging level from environment without loading settings.

    Args:
        default: Default log level if not set or invalid.

    Returns:
        Uppercased, validated log level string.
    """
    value = os.getenv(LOG_LEVEL_ENV_VAR, default)
    try:
        return validate_log_level(value)
    except ValueError:
        return validate_log_level(default)
