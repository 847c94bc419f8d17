"""MET Norway Locationforecast provider with Sunrise API sun times."""
from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from .base import ProviderRawResponse, RawCurrent, RawHourly, SunTimes, WeatherProvider
from ..errors import UpstreamError
from ..timezones import as_local, resolve_timezone, utc_offset
from ..units import WindUnit


class _InstantDetails(BaseModel):
    air_temperature: Optional[float] = None
    relative_humidity: Optional[float] = None
    wind_speed: Optional[float] = None
    wind_from_direction: Optional[float] = None


class _Instant(BaseModel):
    details: _InstantDetails = Field(default_factory=_InstantDetails)


class _PeriodDetails(BaseModel):
    precipitation_amount: Optional[float] = None
    probability_of_precipitation: Optional[float] = None


class _Period(BaseModel):
    details: _PeriodDetails = Field(default_factory=_PeriodDetails)


class _EntryData(BaseModel):
    instant: _Instant
    next_1_hours: Optional[_Period] = None
    next_6_hours: Optional[_Period] = None


class _Entry(BaseModel):
    time: datetime
    data: _EntryData


class _Properties(BaseModel):
    timeseries: List[_Entry] = Field(min_length=1)


class MetNoForecast(BaseModel):
    properties: _Properties


class _SunEvent(BaseModel):
    time: Optional[str] = None


class _SunProperties(BaseModel):
    sunrise: Optional[_SunEvent] = None
    sunset: Optional[_SunEvent] = None


class MetNoSun(BaseModel):
    properties: _SunProperties


class MetNoProvider(WeatherProvider):
    """Locationforecast 2.0 compact; sub-daily only, wind in m/s."""

    name = "metno"
    base_url = "https://api.met.no/weatherapi/locationforecast/2.0/compact"
    sun_url = "https://api.met.no/weatherapi/sunrise/3.0/sun"

    def __init__(self, sun_url: Optional[str] = None, **kwargs) -> None:
        super().__init__(**kwargs)
        self.sun_url = sun_url or self.sun_url

    def fetch_forecast(
        self, latitude: float, longitude: float, timezone_name: str, horizon_days: int
    ) -> ProviderRawResponse:
        tz = resolve_timezone(timezone_name) or timezone.utc
        # The API rejects more than four decimals.
        params = {"lat": round(latitude, 4), "lon": round(longitude, 4)}
        response = self._request("GET", self.base_url, params=params)
        forecast = self._parse(MetNoForecast, self._json(response))
        entries = forecast.properties.timeseries

        first = entries[0]
        current = RawCurrent(
            time=first.time,
            temperature=first.data.instant.details.air_temperature,
            humidity=first.data.instant.details.relative_humidity,
            precipitation=_precipitation(first),
            wind_speed=first.data.instant.details.wind_speed,
            wind_direction=first.data.instant.details.wind_from_direction,
        )
        hourly = RawHourly(
            time=[entry.time for entry in entries],
            temperature=[entry.data.instant.details.air_temperature for entry in entries],
            precipitation=[_precipitation(entry) for entry in entries],
            precipitation_probability=[_probability(entry) for entry in entries],
            wind_speed=[entry.data.instant.details.wind_speed for entry in entries],
            wind_direction=[entry.data.instant.details.wind_from_direction for entry in entries],
        )

        local_dates: List[date] = []
        for entry in entries:
            day = as_local(entry.time, tz).date()
            if day not in local_dates:
                local_dates.append(day)
        sun = self._fetch_sun(latitude, longitude, tz, local_dates[:horizon_days])

        return ProviderRawResponse(
            provider=self.name,
            wind_unit=WindUnit.MS,
            current=current,
            hourly=hourly,
            daily=None,
            sun=sun,
        )

    def _fetch_sun(self, latitude: float, longitude: float, tz, days: List[date]) -> Dict[date, SunTimes]:
        result: Dict[date, SunTimes] = {}
        for day in days:
            params = {
                "lat": round(latitude, 4),
                "lon": round(longitude, 4),
                "date": day.isoformat(),
                "offset": utc_offset(tz, day),
            }
            try:
                response = self._request("GET", self.sun_url, params=params)
                payload = self._parse(MetNoSun, self._json(response))
            except UpstreamError as exc:
                # Remaining days keep the sentinel.
                self._log.warning("Sun times unavailable from %s on: %s", day, exc)
                break
            props = payload.properties
            result[day] = SunTimes(
                sunrise=_parse_time(props.sunrise.time if props.sunrise else None),
                sunset=_parse_time(props.sunset.time if props.sunset else None),
            )
        return result


def _precipitation(entry: _Entry) -> Optional[float]:
    period = entry.data.next_1_hours or entry.data.next_6_hours
    if period is None:
        return None
    return period.details.precipitation_amount


def _probability(entry: _Entry) -> Optional[float]:
    period = entry.data.next_1_hours or entry.data.next_6_hours
    if period is None:
        return None
    return period.details.probability_of_precipitation


def _parse_time(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


__all__ = ["MetNoProvider", "MetNoForecast", "MetNoSun"]
