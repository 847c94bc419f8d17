from __future__ import annotations

import pytest

from wxcore import units
from wxcore.entities import Units
from wxcore.units import WindUnit


@pytest.mark.parametrize("celsius", [-40.0, -12.3, 0.0, 21.7, 38.4])
def test_temperature_round_trip_stays_within_rounding(celsius: float) -> None:
    fahrenheit = units.temperature(celsius, Units.IMPERIAL)

    assert units.temperature_to_celsius(fahrenheit, Units.IMPERIAL) == pytest.approx(celsius, abs=0.1)


def test_temperature_conversion() -> None:
    assert units.temperature(0, Units.IMPERIAL) == 32.0
    assert units.temperature(100, Units.IMPERIAL) == 212.0
    assert units.temperature(21.66, Units.METRIC) == 21.7


def test_wind_speed_from_metres_per_second() -> None:
    assert units.wind_speed(10, WindUnit.MS, Units.METRIC) == 36.0
    assert units.wind_speed(10, WindUnit.MS, Units.IMPERIAL) == 22.4


def test_wind_speed_from_kilometres_per_hour() -> None:
    assert units.wind_speed(12.34, WindUnit.KMH, Units.METRIC) == 12.3
    assert units.wind_speed(100, WindUnit.KMH, Units.IMPERIAL) == 62.1


def test_precipitation_conversion() -> None:
    assert units.precipitation(25.4, Units.IMPERIAL) == 1.0
    assert units.precipitation(1.27, Units.IMPERIAL) == 0.05
    assert units.precipitation(0.44, Units.METRIC) == 0.4
