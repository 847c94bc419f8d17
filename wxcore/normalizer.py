"""Turn adapted provider output into the canonical :class:`WeatherSnapshot`."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date, datetime, timezone, tzinfo
from typing import Dict, List, Optional, Sequence

from . import units as convert
from .entities import (
    UNAVAILABLE,
    UNAVAILABLE_TIME,
    CurrentConditions,
    DayPoint,
    HourPoint,
    Reading,
    Units,
    WeatherSnapshot,
)
from .providers.base import ProviderRawResponse, RawDaily, RawHourly, SunTimes
from .timezones import as_local, format_date, format_time, resolve_timezone
from .units import WindUnit

HOURLY_LIMIT = 24
DAILY_LIMIT = 7


@dataclass
class _DayBucket:
    temperatures: List[float] = field(default_factory=list)
    precipitation: List[float] = field(default_factory=list)
    probability: List[float] = field(default_factory=list)
    wind_speed: List[float] = field(default_factory=list)


def normalize(
    raw: ProviderRawResponse,
    units: Units,
    timezone_name: str,
    *,
    hours: int = HOURLY_LIMIT,
    days: int = DAILY_LIMIT,
) -> WeatherSnapshot:
    """Normalize ``raw`` into the requested unit system and local time.

    Hourly and daily sequences are truncated only after daily aggregation so
    per-day extremes and sums see every sub-daily point.
    """
    tz = resolve_timezone(timezone_name) or timezone.utc
    hourly = _hourly(raw.hourly, raw.wind_unit, units, tz)
    if raw.daily is not None:
        daily = _provider_daily(raw.daily, raw.wind_unit, units, tz)
    else:
        daily = _aggregate_daily(raw.hourly, raw.sun, raw.wind_unit, units, tz)

    cur = raw.current
    current = CurrentConditions(
        time=_time(cur.time, tz),
        temp=_temperature(cur.temperature, units),
        feels_like=_temperature(cur.apparent_temperature, units),
        humidity=_whole(cur.humidity),
        precipitation=_precipitation(cur.precipitation, units),
        wind_speed=_wind(cur.wind_speed, raw.wind_unit, units),
        wind_direction=_whole(cur.wind_direction),
        sunrise=daily[0].sunrise if daily else UNAVAILABLE_TIME,
        sunset=daily[0].sunset if daily else UNAVAILABLE_TIME,
    )
    return WeatherSnapshot(
        provider=raw.provider,
        units=units,
        current=current,
        hourly=hourly[:hours],
        daily=daily[:days],
    )


def _hourly(series: RawHourly, wind_unit: WindUnit, units: Units, tz: tzinfo) -> List[HourPoint]:
    order = sorted(range(len(series.time)), key=lambda idx: _utc(series.time[idx]))
    points: List[HourPoint] = []
    for idx in order:
        moment = as_local(series.time[idx], tz)
        points.append(
            HourPoint(
                time=moment.strftime("%H:%M"),
                timestamp=moment.isoformat(),
                temp=_temperature(_at(series.temperature, idx), units),
                precipitation=_precipitation(_at(series.precipitation, idx), units),
                precipitation_chance=_whole(_at(series.precipitation_probability, idx)),
                wind_speed=_wind(_at(series.wind_speed, idx), wind_unit, units),
                wind_direction=_whole(_at(series.wind_direction, idx)),
            )
        )
    return points


def _provider_daily(series: RawDaily, wind_unit: WindUnit, units: Units, tz: tzinfo) -> List[DayPoint]:
    order = sorted(range(len(series.date)), key=lambda idx: series.date[idx])
    return [
        DayPoint(
            date=format_date(series.date[idx]),
            iso_date=series.date[idx].isoformat(),
            temp_max=_temperature(_at(series.temperature_max, idx), units),
            temp_min=_temperature(_at(series.temperature_min, idx), units),
            precipitation=_precipitation(_at(series.precipitation_sum, idx), units),
            precipitation_chance=_whole(_at(series.precipitation_probability_max, idx)),
            wind_speed_max=_wind(_at(series.wind_speed_max, idx), wind_unit, units),
            sunrise=_time(_at(series.sunrise, idx), tz),
            sunset=_time(_at(series.sunset, idx), tz),
        )
        for idx in order
    ]


def _aggregate_daily(
    series: RawHourly,
    sun: Dict[date, SunTimes],
    wind_unit: WindUnit,
    units: Units,
    tz: tzinfo,
) -> List[DayPoint]:
    # Points belong to their local calendar date, not the UTC one.
    buckets: Dict[date, _DayBucket] = {}
    for idx, moment in enumerate(series.time):
        bucket = buckets.setdefault(as_local(moment, tz).date(), _DayBucket())
        _append(bucket.temperatures, _at(series.temperature, idx))
        _append(bucket.precipitation, _at(series.precipitation, idx))
        _append(bucket.probability, _at(series.precipitation_probability, idx))
        _append(bucket.wind_speed, _at(series.wind_speed, idx))

    result: List[DayPoint] = []
    for day in sorted(buckets):
        bucket = buckets[day]
        times = sun.get(day) or SunTimes()
        result.append(
            DayPoint(
                date=format_date(day),
                iso_date=day.isoformat(),
                temp_max=_temperature(max(bucket.temperatures, default=None), units),
                temp_min=_temperature(min(bucket.temperatures, default=None), units),
                precipitation=_precipitation(sum(bucket.precipitation) if bucket.precipitation else None, units),
                precipitation_chance=_whole(max(bucket.probability, default=None)),
                wind_speed_max=_wind(max(bucket.wind_speed, default=None), wind_unit, units),
                sunrise=_time(times.sunrise, tz),
                sunset=_time(times.sunset, tz),
            )
        )
    return result


# helpers ------------------------------------------------------------
def _number(value: object) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _at(values: Sequence, index: int):
    if index < len(values):
        return values[index]
    return None


def _append(target: List[float], value: object) -> None:
    number = _number(value)
    if number is not None:
        target.append(number)


def _utc(value: datetime) -> datetime:
    return as_local(value, timezone.utc)


def _temperature(value: object, units: Units) -> Reading:
    number = _number(value)
    return UNAVAILABLE if number is None else convert.temperature(number, units)


def _precipitation(value: object, units: Units) -> Reading:
    number = _number(value)
    return UNAVAILABLE if number is None else convert.precipitation(number, units)


def _wind(value: object, wind_unit: WindUnit, units: Units) -> Reading:
    number = _number(value)
    return UNAVAILABLE if number is None else convert.wind_speed(number, wind_unit, units)


def _whole(value: object) -> Reading:
    number = _number(value)
    return UNAVAILABLE if number is None else round(number)


def _time(value: Optional[datetime], tz: tzinfo) -> str:
    if value is None:
        return UNAVAILABLE_TIME
    return format_time(value, tz)


__all__ = ["normalize", "HOURLY_LIMIT", "DAILY_LIMIT"]
