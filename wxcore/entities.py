"""Canonical weather entities returned to callers and stored in the cache."""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Dict, List, Type, TypeVar, Union

UNAVAILABLE = "N/A"
UNAVAILABLE_TIME = "--:--"
UNKNOWN = "Unknown"

Reading = Union[float, str]

T = TypeVar("T")


class Units(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"


UNIT_LABELS = {
    Units.METRIC: {"temperature": "°C", "windSpeed": "km/h", "precipitation": "mm"},
    Units.IMPERIAL: {"temperature": "°F", "windSpeed": "mph", "precipitation": "in"},
}


def _json(name: str) -> Any:
    return field(metadata={"json": name})


def _dump(obj: Any) -> Dict[str, Any]:
    return {f.metadata.get("json", f.name): getattr(obj, f.name) for f in fields(obj)}


def _load(cls: Type[T], payload: Dict[str, Any]) -> T:
    return cls(**{f.name: payload[f.metadata.get("json", f.name)] for f in fields(cls)})  # type: ignore[arg-type]


@dataclass(frozen=True)
class RequestParams:
    """Validated inbound request; immutable once built."""

    latitude: float
    longitude: float
    timezone: str
    units: Units
    provider: str
    force_refresh: bool = False


@dataclass(frozen=True)
class CurrentConditions:
    time: str
    temp: Reading
    feels_like: Reading = _json("feelsLike")
    humidity: Reading
    precipitation: Reading
    wind_speed: Reading = _json("windSpeed")
    wind_direction: Reading = _json("windDirection")
    sunrise: str
    sunset: str


@dataclass(frozen=True)
class HourPoint:
    time: str
    timestamp: str
    temp: Reading
    precipitation: Reading
    precipitation_chance: Reading = _json("precipitationChance")
    wind_speed: Reading = _json("windSpeed")
    wind_direction: Reading = _json("windDirection")


@dataclass(frozen=True)
class DayPoint:
    date: str
    iso_date: str = _json("isoDate")
    temp_max: Reading = _json("tempMax")
    temp_min: Reading = _json("tempMin")
    precipitation: Reading
    precipitation_chance: Reading = _json("precipitationChance")
    wind_speed_max: Reading = _json("windSpeedMax")
    sunrise: str
    sunset: str


@dataclass(frozen=True)
class WeatherSnapshot:
    """Normalized weather result for one location and forecast window.

    ``hourly`` and ``daily`` are chronological; every point carries every
    field, with :data:`UNAVAILABLE` standing in for values the provider did
    not supply.
    """

    provider: str
    units: Units
    current: CurrentConditions
    hourly: List[HourPoint]
    daily: List[DayPoint]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "provider": self.provider,
            "units": self.units.value,
            "unitLabels": UNIT_LABELS[self.units],
            "current": _dump(self.current),
            "hourly": [_dump(point) for point in self.hourly],
            "daily": [_dump(point) for point in self.daily],
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "WeatherSnapshot":
        return cls(
            provider=payload["provider"],
            units=Units(payload["units"]),
            current=_load(CurrentConditions, payload["current"]),
            hourly=[_load(HourPoint, item) for item in payload["hourly"]],
            daily=[_load(DayPoint, item) for item in payload["daily"]],
        )


@dataclass(frozen=True)
class GeocodeResult:
    city: str = UNKNOWN
    country: str = UNKNOWN

    def to_dict(self) -> Dict[str, str]:
        return {"city": self.city, "country": self.country}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "GeocodeResult":
        return cls(city=payload.get("city") or UNKNOWN, country=payload.get("country") or UNKNOWN)


__all__ = [
    "UNAVAILABLE",
    "UNAVAILABLE_TIME",
    "UNKNOWN",
    "UNIT_LABELS",
    "Reading",
    "Units",
    "RequestParams",
    "CurrentConditions",
    "HourPoint",
    "DayPoint",
    "WeatherSnapshot",
    "GeocodeResult",
]
