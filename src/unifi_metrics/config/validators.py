"""Custom Pydantic validators for configuration."""

from pathlib import Path

_LEVEL_ALIASES = {"WARN": "WARNING", "TRACE": "DEBUG"}


def validate_log_level(value: str) -> str:
    """Validate log level is one of the standard levels.

    "warn" and "trace" are accepted as aliases for WARNING and DEBUG.

    Args:
        value: Log level string.

    Returns:
        Validated, uppercased log level.

    Raises:
        ValueError: If log level is not valid.
    """
    valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
    level = value.strip().upper()
    level = _LEVEL_ALIASES.get(level, level)
    if level not in valid_levels:
        raise ValueError(f"log_level must be one of {valid_levels}, got {value}")
    return level


def validate_log_format(value: str) -> str:
    """Validate log format is 'json' or 'console'.

    Raises:
        ValueError: If log format is not valid.
    """
    valid_formats = {"json", "console"}
    if value.lower() not in valid_formats:
        raise ValueError(f"log_format must be one of {valid_formats}, got {value}")
    return value.lower()


def resolve_path(value: Path | str | None) -> Path | None:
    """Resolve a relative path against the current working directory.

    Args:
        value: Path value (string, Path or None).

    Returns:
        Absolute Path, or None when no path was given.
    """
    if value is None or value == "":
        return None
    path = Path(value) if isinstance(value, str) else value
    return path.expanduser().resolve()


def normalize_bearer_token(value: str | None) -> str | None:
    """Treat an empty or whitespace-only bearer token as "not configured"."""
    if value is None:
        return None
    value = value.strip()
    return value or None
