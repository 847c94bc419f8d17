"""Inbound query validation: clamp what can be clamped, reject the rest."""
from __future__ import annotations

import logging
import math
from typing import Any, Collection, Mapping, Optional, Tuple

from .config import ServiceConfig
from .entities import RequestParams, Units
from .errors import InvalidParams
from .timezones import canonical_timezone


logger = logging.getLogger(__name__)

FALSY = {"0", "false", "no", "off"}


def parse_coordinate(raw: Any) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(str(raw).strip())
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def parse_flag(query: Mapping[str, Any], *names: str) -> bool:
    """A flag is set when present, unless its value is explicitly falsy."""
    for name in names:
        if name in query:
            raw = query.get(name)
            if raw is None or str(raw).strip().lower() not in FALSY:
                return True
    return False


def parse_location(query: Mapping[str, Any]) -> Tuple[float, float]:
    latitude = parse_coordinate(query.get("lat"))
    longitude = parse_coordinate(query.get("lon"))
    if latitude is None and longitude is None:
        raise InvalidParams("lat and lon must be valid numbers")
    return (
        clamp(latitude if latitude is not None else 0.0, -90.0, 90.0),
        clamp(longitude if longitude is not None else 0.0, -180.0, 180.0),
    )


def build_params(
    query: Mapping[str, Any],
    config: ServiceConfig,
    providers: Collection[str],
) -> RequestParams:
    """Build :class:`RequestParams` from raw query values.

    Out-of-range coordinates are clamped; a single missing coordinate becomes
    ``0.0``; unknown units, providers or timezones fall back to the defaults.
    Only a request where neither coordinate parses is rejected.
    """
    latitude, longitude = parse_location(query)

    requested = str(query.get("tz") or query.get("timezone") or "").strip()
    timezone_name = canonical_timezone(requested)
    if timezone_name is None:
        if requested:
            logger.info("Unknown timezone %r, using %s", requested, config.default_timezone)
        timezone_name = canonical_timezone(config.default_timezone) or config.default_timezone

    try:
        units = Units(str(query.get("units") or config.default_units.value).strip().lower())
    except ValueError:
        units = config.default_units

    provider = str(query.get("provider") or config.default_provider).strip().lower()
    if provider not in providers:
        logger.info("Unknown provider %r, using %s", provider, config.default_provider)
        provider = config.default_provider

    return RequestParams(
        latitude=latitude,
        longitude=longitude,
        timezone=timezone_name,
        units=units,
        provider=provider,
        force_refresh=parse_flag(query, "noCache", "forceRefresh"),
    )


__all__ = ["build_params", "parse_coordinate", "parse_location", "parse_flag", "clamp"]
