"""Error taxonomy shared by providers, the cache layer and the coordinator."""
from __future__ import annotations

from typing import Optional


class WeatherError(RuntimeError):
    """Base error for the weather core."""

    kind = "error"


class InvalidParams(WeatherError):
    """Raised when the inbound request has no usable coordinates."""

    kind = "invalid_params"


class UpstreamError(WeatherError):
    """Base error raised by provider adapters."""

    kind = "upstream_error"

    def __init__(self, message: str, *, provider: str = "unknown", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code


class UpstreamRateLimited(UpstreamError):
    """Raised when a provider reports a quota/usage limit issue."""

    kind = "upstream_rate_limited"


class UpstreamUnavailable(UpstreamError):
    """Network failure, timeout or non-2xx status."""

    kind = "upstream_unavailable"


class UpstreamMalformed(UpstreamError):
    """The provider answered but the body could not be parsed."""

    kind = "upstream_malformed"


class CacheBackendError(WeatherError):
    """The key-value store is unreachable."""

    kind = "cache_backend_error"


__all__ = [
    "WeatherError",
    "InvalidParams",
    "UpstreamError",
    "UpstreamRateLimited",
    "UpstreamUnavailable",
    "UpstreamMalformed",
    "CacheBackendError",
]
