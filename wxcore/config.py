"""Service configuration passed from the web layer into the core."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .entities import Units
from .keys import KeyPolicy
from .providers.base import RequestConfig


@dataclass(frozen=True)
class ServiceConfig:
    weather_ttl: int = 3600
    stale_ttl: int = 24 * 3600
    geocode_ttl: int = 3600
    default_provider: str = "metno"
    default_timezone: str = "UTC"
    default_units: Units = Units.METRIC
    forecast_days: int = 7
    hourly_limit: int = 24
    daily_limit: int = 7
    http_timeout: float = 5.0
    http_retries: int = 1
    user_agent: str = "wxgate/1.0"
    key_precision: int = 4
    key_bucket: float = 0.0
    geo_precision: int = 3
    resolve_location: bool = True
    geocode_wait: float = 2.0
    max_workers: int = 8

    @classmethod
    def from_settings(cls, settings: Any) -> "ServiceConfig":
        """Build from an object exposing the ``WEATHER_*`` names in :data:`SETTINGS_MAP`.

        Missing attributes keep their defaults.
        """
        values = {
            field_name: getattr(settings, setting)
            for setting, field_name in SETTINGS_MAP.items()
            if hasattr(settings, setting)
        }
        if "default_units" in values:
            values["default_units"] = Units(values["default_units"])
        return cls(**values)

    def request_config(self) -> RequestConfig:
        return RequestConfig(timeout=self.http_timeout, retries=self.http_retries, user_agent=self.user_agent)

    def key_policy(self) -> KeyPolicy:
        return KeyPolicy(precision=self.key_precision, bucket=self.key_bucket, geo_precision=self.geo_precision)


SETTINGS_MAP = {
    "WEATHER_CACHE_TIMEOUT": "weather_ttl",
    "WEATHER_STALE_TIMEOUT": "stale_ttl",
    "WEATHER_GEOCODE_TIMEOUT": "geocode_ttl",
    "WEATHER_DEFAULT_PROVIDER": "default_provider",
    "WEATHER_DEFAULT_TIMEZONE": "default_timezone",
    "WEATHER_DEFAULT_UNITS": "default_units",
    "WEATHER_FORECAST_DAYS": "forecast_days",
    "WEATHER_HTTP_TIMEOUT": "http_timeout",
    "WEATHER_HTTP_RETRIES": "http_retries",
    "WEATHER_USER_AGENT": "user_agent",
    "WEATHER_KEY_PRECISION": "key_precision",
    "WEATHER_KEY_BUCKET": "key_bucket",
    "WEATHER_GEO_PRECISION": "geo_precision",
    "WEATHER_RESOLVE_LOCATION": "resolve_location",
    "WEATHER_GEOCODE_WAIT": "geocode_wait",
    "WEATHER_MAX_WORKERS": "max_workers",
}


__all__ = ["ServiceConfig", "SETTINGS_MAP"]
