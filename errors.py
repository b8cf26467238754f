"""
Exception types for the exporter.

Configuration errors abort startup. Fetch and payload errors are absorbed by
each collection cycle and only ever show up as ``akka_up`` / zero counts.
"""
from __future__ import annotations


class ExporterError(Exception):
    """Base class for all exporter errors."""


class ConfigurationError(ExporterError):
    """Invalid startup configuration (URI, duration, listen address)."""


class UnsupportedSchemeError(ConfigurationError):
    """Scrape URI scheme is neither http nor https."""

    def __init__(self, scheme: str) -> None:
        super().__init__(f"unsupported scheme: {scheme!r}")
        self.scheme = scheme


class FetchError(ExporterError):
    """The management endpoint could not be fetched."""


class TransportError(FetchError):
    """Connection, DNS, timeout or body read failure."""


class UpstreamStatusError(FetchError):
    """The endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"HTTP status {status_code}")
        self.status_code = status_code


class PayloadError(ExporterError, ValueError):
    """The membership payload is not valid JSON or has the wrong shape."""
