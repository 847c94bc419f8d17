"""Deterministic cache keys derived from request parameters."""
from __future__ import annotations

from dataclasses import dataclass

from .entities import RequestParams


@dataclass(frozen=True)
class KeyPolicy:
    """Coordinate precision used when building keys.

    ``bucket`` snaps coordinates to a grid of that many degrees before
    formatting (``0`` disables bucketing); ``precision`` is the number of
    decimal places kept in weather keys and ``geo_precision`` in geocode keys.
    """

    precision: int = 4
    bucket: float = 0.0
    geo_precision: int = 3
    version: str = "v1"


def bucket_coordinate(value: float, step: float) -> float:
    if step <= 0:
        return value
    return round(value / step) * step


def _fmt(value: float, precision: int) -> str:
    # +0.0 folds negative zero into zero
    return f"{round(value, precision) + 0.0:.{precision}f}"


def weather_key(params: RequestParams, policy: KeyPolicy = KeyPolicy()) -> str:
    lat = _fmt(bucket_coordinate(params.latitude, policy.bucket), policy.precision)
    lon = _fmt(bucket_coordinate(params.longitude, policy.bucket), policy.precision)
    return f"weather:{policy.version}:{lat},{lon}:{params.timezone}:{params.units.value}:{params.provider}"


def geocode_key(latitude: float, longitude: float, policy: KeyPolicy = KeyPolicy()) -> str:
    return f"geo:{_fmt(latitude, policy.geo_precision)},{_fmt(longitude, policy.geo_precision)}"


__all__ = ["KeyPolicy", "bucket_coordinate", "weather_key", "geocode_key"]
