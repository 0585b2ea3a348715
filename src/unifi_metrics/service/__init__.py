"""HTTP service exposing the metrics snapshot."""

from unifi_metrics.service.app import create_app

__all__ = ["create_app"]
