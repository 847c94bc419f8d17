"""Open-Meteo forecast provider."""
from __future__ import annotations

from datetime import date, datetime, timezone, tzinfo
from typing import List, Optional

from pydantic import BaseModel, Field

from .base import ProviderRawResponse, RawCurrent, RawDaily, RawHourly, WeatherProvider
from ..errors import UpstreamMalformed
from ..timezones import is_named_zone, resolve_timezone
from ..units import WindUnit

HOURLY_FIELDS = ["temperature_2m", "precipitation_probability", "precipitation", "wind_speed_10m", "wind_direction_10m"]
CURRENT_FIELDS = [
    "temperature_2m",
    "apparent_temperature",
    "relative_humidity_2m",
    "precipitation",
    "wind_speed_10m",
    "wind_direction_10m",
]
DAILY_FIELDS = [
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "precipitation_probability_max",
    "wind_speed_10m_max",
    "sunrise",
    "sunset",
]


class _Current(BaseModel):
    time: Optional[str] = None
    temperature_2m: Optional[float] = None
    apparent_temperature: Optional[float] = None
    relative_humidity_2m: Optional[float] = None
    precipitation: Optional[float] = None
    wind_speed_10m: Optional[float] = None
    wind_direction_10m: Optional[float] = None


class _Hourly(BaseModel):
    time: List[str] = Field(min_length=1)
    temperature_2m: List[Optional[float]] = Field(default_factory=list)
    precipitation_probability: List[Optional[float]] = Field(default_factory=list)
    precipitation: List[Optional[float]] = Field(default_factory=list)
    wind_speed_10m: List[Optional[float]] = Field(default_factory=list)
    wind_direction_10m: List[Optional[float]] = Field(default_factory=list)


class _Daily(BaseModel):
    time: List[str] = Field(default_factory=list)
    temperature_2m_max: List[Optional[float]] = Field(default_factory=list)
    temperature_2m_min: List[Optional[float]] = Field(default_factory=list)
    precipitation_sum: List[Optional[float]] = Field(default_factory=list)
    precipitation_probability_max: List[Optional[float]] = Field(default_factory=list)
    wind_speed_10m_max: List[Optional[float]] = Field(default_factory=list)
    sunrise: List[Optional[str]] = Field(default_factory=list)
    sunset: List[Optional[str]] = Field(default_factory=list)


class OpenMeteoForecast(BaseModel):
    latitude: float
    longitude: float
    utc_offset_seconds: int = 0
    current: Optional[_Current] = None
    hourly: _Hourly
    daily: Optional[_Daily] = None


class OpenMeteoProvider(WeatherProvider):
    """Open-Meteo ``/v1/forecast``; wind in km/h, times in the requested zone."""

    name = "openmeteo"
    base_url = "https://api.open-meteo.com/v1/forecast"

    def fetch_forecast(
        self, latitude: float, longitude: float, timezone_name: str, horizon_days: int
    ) -> ProviderRawResponse:
        tz = resolve_timezone(timezone_name) or timezone.utc
        # Offset tokens are not accepted upstream; request GMT and aggregate days locally.
        named = is_named_zone(tz)
        zone: tzinfo = tz if named else timezone.utc
        params = {
            "latitude": latitude,
            "longitude": longitude,
            "timezone": timezone_name if named else "GMT",
            "current": ",".join(CURRENT_FIELDS),
            "hourly": ",".join(HOURLY_FIELDS),
            "daily": ",".join(DAILY_FIELDS),
            "forecast_days": horizon_days,
            "temperature_unit": "celsius",
            "wind_speed_unit": "kmh",
            "precipitation_unit": "mm",
        }
        response = self._request("GET", self.base_url, params=params)
        forecast = self._parse(OpenMeteoForecast, self._json(response))

        cur = forecast.current or _Current()
        current = RawCurrent(
            time=self._localize_optional(cur.time, zone),
            temperature=cur.temperature_2m,
            apparent_temperature=cur.apparent_temperature,
            humidity=cur.relative_humidity_2m,
            precipitation=cur.precipitation,
            wind_speed=cur.wind_speed_10m,
            wind_direction=cur.wind_direction_10m,
        )
        hourly = RawHourly(
            time=self._localize_series(forecast.hourly.time, zone),
            temperature=forecast.hourly.temperature_2m,
            precipitation=forecast.hourly.precipitation,
            precipitation_probability=forecast.hourly.precipitation_probability,
            wind_speed=forecast.hourly.wind_speed_10m,
            wind_direction=forecast.hourly.wind_direction_10m,
        )
        daily = None
        if named and forecast.daily and forecast.daily.time:
            daily = RawDaily(
                date=[self._parse_date(value) for value in forecast.daily.time],
                temperature_max=forecast.daily.temperature_2m_max,
                temperature_min=forecast.daily.temperature_2m_min,
                precipitation_sum=forecast.daily.precipitation_sum,
                precipitation_probability_max=forecast.daily.precipitation_probability_max,
                wind_speed_max=forecast.daily.wind_speed_10m_max,
                sunrise=[self._localize_optional(value, zone) for value in forecast.daily.sunrise],
                sunset=[self._localize_optional(value, zone) for value in forecast.daily.sunset],
            )

        return ProviderRawResponse(
            provider=self.name,
            wind_unit=WindUnit.KMH,
            current=current,
            hourly=hourly,
            daily=daily,
        )

    # helpers ------------------------------------------------------------
    def _localize(self, value: Optional[str], zone: tzinfo) -> datetime:
        parsed = self._localize_optional(value, zone)
        if parsed is None:
            raise UpstreamMalformed(f"unparseable time {value!r}", provider=self.name)
        return parsed

    def _localize_series(self, values: List[str], zone: tzinfo) -> List[datetime]:
        """Localize consecutive wall times, taking the second occurrence of a repeated hour."""
        result: List[datetime] = []
        for value in values:
            moment = self._localize(value, zone)
            if result and moment.timestamp() <= result[-1].timestamp():
                folded = moment.replace(fold=1)
                if folded.timestamp() > result[-1].timestamp():
                    moment = folded
            result.append(moment)
        return result

    def _localize_optional(self, value: Optional[str], zone: tzinfo) -> Optional[datetime]:
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=zone)
        return parsed

    def _parse_date(self, value: str) -> date:
        try:
            return date.fromisoformat(value)
        except ValueError as exc:
            raise UpstreamMalformed(f"unparseable date {value!r}", provider=self.name) from exc


__all__ = ["OpenMeteoProvider", "OpenMeteoForecast"]
