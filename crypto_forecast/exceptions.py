"""Exception hierarchy for the forecast pipeline.

All pipeline-specific exceptions derive from :class:`ForecastError` so callers can
catch every fetch, decode and configuration failure uniformly.
"""
from typing import Optional


class ForecastError(Exception):
    """Base class for forecast pipeline exceptions."""


class TransportError(ForecastError):
    """Raised when an HTTP request fails at the network level or returns a non-success status."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class DecodeError(ForecastError):
    """Raised when a provider payload does not have the expected shape."""


class ProviderError(ForecastError):
    """Raised when a provider reports a logical error in its own response metadata."""


class EmptyResultError(ForecastError):
    """Raised when the first page of a fetch holds no candles and emptiness was not allowed."""


class ConfigError(ForecastError):
    """Raised when configuration files or values are missing or invalid."""


__all__ = [
    "ForecastError",
    "TransportError",
    "DecodeError",
    "ProviderError",
    "EmptyResultError",
    "ConfigError",
]
