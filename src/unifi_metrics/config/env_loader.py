"""Environment variable file loader with priority-based loading."""

import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from unifi_metrics.telemetry import get_logger

log = get_logger(__name__)


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


def get_environment() -> Environment:
    """Detect current environment from the APP_ENV environment variable.

    Environment variable mapping:
    - "production" or "prod" → Environment.PRODUCTION
    - "staging" or "stage" → Environment.STAGING
    - "test" → Environment.TEST
    - Default → Environment.DEVELOPMENT
    """
    app_env = os.getenv("APP_ENV", "").lower()

    if app_env in ("production", "prod"):
        return Environment.PRODUCTION
    elif app_env in ("staging", "stage"):
        return Environment.STAGING
    elif app_env == "test":
        return Environment.TEST
    else:
        return Environment.DEVELOPMENT


def load_env_files(project_root: Path | None = None) -> list[Path]:
    """Load .env files in priority order.

    Priority order (highest to lowest):
    1. `.env.{environment}.local`
    2. `.env.{environment}`
    3. `.env.local`
    4. `.env`

    Explicit environment variables always win over values from files.

    Args:
        project_root: Directory holding the .env files. Defaults to the working directory.

    Returns:
        The files that were loaded, lowest priority first.
    """
    if project_root is None:
        project_root = Path.cwd()

    env_name = get_environment().value

    # Highest priority first: load_dotenv(override=False) never replaces a
    # variable that is already set, so the first file to define a key wins.
    env_files = [
        project_root / f".env.{env_name}.local",
        project_root / f".env.{env_name}",
        project_root / ".env.local",
        project_root / ".env",
    ]

    loaded_files = []
    for env_file in env_files:
        if env_file.exists():
            load_dotenv(env_file, override=False)
            loaded_files.append(env_file)

    loaded_files.reverse()
    if loaded_files:
        log.info(
            "env_files_loaded",
            environment=env_name,
            files=[str(path.relative_to(project_root)) for path in loaded_files],
        )
    else:
        log.debug("no_env_files_found", environment=env_name, project_root=str(project_root))

    return loaded_files
