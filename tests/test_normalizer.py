from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from wxcore.entities import UNAVAILABLE, UNAVAILABLE_TIME, Units
from wxcore.normalizer import normalize
from wxcore.providers.base import ProviderRawResponse, RawCurrent, RawDaily, RawHourly, SunTimes
from wxcore.units import WindUnit

LONDON = ZoneInfo("Europe/London")


def hourly_series(start: datetime, count: int, temps=None) -> RawHourly:
    times = [start + timedelta(hours=idx) for idx in range(count)]
    return RawHourly(
        time=times,
        temperature=list(temps) if temps is not None else [10.0 + idx % 5 for idx in range(count)],
        precipitation=[0.0] * count,
        precipitation_probability=[20.0] * count,
        wind_speed=[5.0] * count,
        wind_direction=[180.0] * count,
    )


def daily_series(start: date, count: int) -> RawDaily:
    days = [start + timedelta(days=idx) for idx in range(count)]
    return RawDaily(
        date=days,
        temperature_max=[15.0] * count,
        temperature_min=[5.0] * count,
        precipitation_sum=[1.2] * count,
        precipitation_probability_max=[40.0] * count,
        wind_speed_max=[20.0] * count,
        sunrise=[datetime(day.year, day.month, day.day, 7, 30, tzinfo=LONDON) for day in days],
        sunset=[datetime(day.year, day.month, day.day, 16, 5, tzinfo=LONDON) for day in days],
    )


def test_end_to_end_shape_for_london() -> None:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    raw = ProviderRawResponse(
        provider="openmeteo",
        wind_unit=WindUnit.KMH,
        current=RawCurrent(time=start, temperature=8.0, humidity=81, wind_speed=12.0, wind_direction=200),
        hourly=hourly_series(start, 48),
        daily=daily_series(date(2024, 1, 1), 7),
    )

    snapshot = normalize(raw, Units.METRIC, "Europe/London")

    assert len(snapshot.hourly) == 24
    assert len(snapshot.daily) == 7
    timestamps = [datetime.fromisoformat(point.timestamp) for point in snapshot.hourly]
    assert all(earlier < later for earlier, later in zip(timestamps, timestamps[1:]))
    assert snapshot.current.sunrise == "07:30"
    assert snapshot.current.sunset == "16:05"
    assert snapshot.current.feels_like == UNAVAILABLE
    assert snapshot.daily[0].date == "Mon, Jan 1"
    assert snapshot.daily[0].iso_date == "2024-01-01"
    assert snapshot.daily[0].wind_speed_max == 20.0


def test_daily_aggregation_uses_local_calendar_date() -> None:
    start = datetime(2024, 6, 1, 9, tzinfo=timezone.utc)
    raw = ProviderRawResponse(
        provider="metno",
        wind_unit=WindUnit.MS,
        current=RawCurrent(time=start, temperature=10.0),
        hourly=hourly_series(start, 3, temps=[10.0, 15.0, 5.0]),
    )

    snapshot = normalize(raw, Units.METRIC, "Europe/London")

    assert len(snapshot.daily) == 1
    day = snapshot.daily[0]
    assert day.temp_max == 15.0
    assert day.temp_min == 5.0
    assert day.precipitation == 0.0
    assert day.precipitation_chance == 20
    assert day.wind_speed_max == 18.0
    assert day.sunrise == UNAVAILABLE_TIME


def test_points_near_midnight_group_by_local_date() -> None:
    start = datetime(2024, 1, 1, 22, tzinfo=timezone.utc)
    raw = ProviderRawResponse(
        provider="metno",
        wind_unit=WindUnit.MS,
        current=RawCurrent(time=start),
        hourly=hourly_series(start, 4, temps=[1.0, 2.0, 3.0, 4.0]),
    )

    snapshot = normalize(raw, Units.METRIC, "+05:00")

    assert [day.iso_date for day in snapshot.daily] == ["2024-01-02"]
    assert snapshot.hourly[0].time == "03:00"
    assert snapshot.hourly[0].timestamp == "2024-01-02T03:00:00+05:00"


def test_sun_times_come_from_the_sun_map() -> None:
    start = datetime(2024, 3, 1, 10, tzinfo=timezone.utc)
    sunrise = datetime(2024, 3, 1, 6, 45, tzinfo=timezone.utc)
    sunset = datetime(2024, 3, 1, 17, 40, tzinfo=timezone.utc)
    raw = ProviderRawResponse(
        provider="metno",
        wind_unit=WindUnit.MS,
        current=RawCurrent(time=start, temperature=4.0),
        hourly=hourly_series(start, 2),
        sun={date(2024, 3, 1): SunTimes(sunrise=sunrise, sunset=sunset)},
    )

    snapshot = normalize(raw, Units.METRIC, "UTC")

    assert snapshot.current.sunrise == "06:45"
    assert snapshot.current.sunset == "17:40"


def test_imperial_conversion_and_missing_values() -> None:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    series = RawHourly(
        time=[start, start + timedelta(hours=1)],
        temperature=[0.0, None],
        precipitation=[25.4],
        wind_speed=[10.0, float("nan")],
    )
    raw = ProviderRawResponse(
        provider="metno",
        wind_unit=WindUnit.MS,
        current=RawCurrent(time=start, temperature=0.0, precipitation=25.4, wind_speed=10.0),
        hourly=series,
    )

    snapshot = normalize(raw, Units.IMPERIAL, "UTC")

    assert snapshot.current.temp == 32.0
    assert snapshot.current.precipitation == 1.0
    assert snapshot.current.wind_speed == 22.4
    assert snapshot.current.humidity == UNAVAILABLE
    second = snapshot.hourly[1]
    assert second.temp == UNAVAILABLE
    assert second.precipitation == UNAVAILABLE
    assert second.wind_speed == UNAVAILABLE
    assert second.precipitation_chance == UNAVAILABLE
    assert snapshot.to_dict()["unitLabels"]["temperature"] == "°F"


def test_unsorted_hours_are_ordered() -> None:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    times = [start + timedelta(hours=2), start, start + timedelta(hours=1)]
    raw = ProviderRawResponse(
        provider="metno",
        wind_unit=WindUnit.MS,
        current=RawCurrent(time=start),
        hourly=RawHourly(time=times, temperature=[3.0, 1.0, 2.0]),
    )

    snapshot = normalize(raw, Units.METRIC, "UTC")

    assert [point.temp for point in snapshot.hourly] == [1.0, 2.0, 3.0]


def test_snapshot_dict_round_trip() -> None:
    start = datetime(2024, 1, 1, tzinfo=timezone.utc)
    raw = ProviderRawResponse(
        provider="metno",
        wind_unit=WindUnit.MS,
        current=RawCurrent(time=start, temperature=3.0),
        hourly=hourly_series(start, 5),
    )
    snapshot = normalize(raw, Units.METRIC, "UTC")

    payload = snapshot.to_dict()

    assert payload["current"]["feelsLike"] == UNAVAILABLE
    assert "windSpeedMax" in payload["daily"][0]
    assert type(snapshot).from_dict(payload) == snapshot
