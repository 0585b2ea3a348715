"""UniFi Metrics: OpenMetrics exporter for UniFi Network devices and Protect sensors."""

__version__ = "0.3.0"
