"""Command-line entry point.

Examples:
    unifi-metrics                     # config.yaml in the working directory, if present
    unifi-metrics /etc/unifi-metrics/config.yaml
    unifi-metrics config.yaml --port 9100
    unifi-metrics --version
"""

from pathlib import Path
from typing import Optional

import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console

from unifi_metrics import __version__
from unifi_metrics.config import ConfigLoadError, load_app_config
from unifi_metrics.service.app import create_app
from unifi_metrics.telemetry import configure_logging, get_logger

DEFAULT_CONFIG_FILE = Path("config.yaml")

app = typer.Typer(help="UniFi Metrics - OpenMetrics exporter for UniFi Network and Protect")
console = Console(stderr=True)


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"unifi-metrics v{__version__}")
        raise typer.Exit()


def _resolve_config_path(config_path: Path | None) -> Path | None:
    """Use the given path, or config.yaml from the working directory when it exists."""
    if config_path is not None:
        return config_path
    if DEFAULT_CONFIG_FILE.exists():
        return DEFAULT_CONFIG_FILE
    return None


@app.command()
def serve(
    config_path: Optional[Path] = typer.Argument(
        None, help="YAML config file (defaults to ./config.yaml when present)"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Override server.bind_address and UNIFI_METRICS_BIND_ADDRESS"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Override server.port and UNIFI_METRICS_PORT"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Print the version and exit",
    ),
) -> None:
    """Poll the UniFi controller and serve /metrics."""
    resolved_path = _resolve_config_path(config_path)

    try:
        settings = load_app_config(resolved_path, bind_address=host, port=port)
    except (ConfigLoadError, ValidationError) as e:
        console.print(f"[red]Invalid configuration:[/red] {e}")
        raise typer.Exit(1) from None

    configure_logging(settings.log_level, settings.log_format, settings.log_file)
    log = get_logger(__name__)

    log.info(
        "unifi_metrics_started",
        version=__version__,
        config_path=str(resolved_path) if resolved_path else None,
    )
    log.info("metrics_api_enabled", port=settings.port, format="OpenMetrics")
    if settings.bearer_token is not None:
        log.info("metrics_bearer_auth_enabled")
    log.info("http_server_starting", bind_address=settings.bind_address, port=settings.port)

    uvicorn.run(
        create_app(settings),
        host=settings.bind_address,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    app()
