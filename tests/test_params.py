from __future__ import annotations

import pytest

from wxcore.config import ServiceConfig
from wxcore.entities import Units
from wxcore.errors import InvalidParams
from wxcore.keys import weather_key
from wxcore.params import build_params, parse_flag, parse_location

PROVIDERS = ("metno", "openmeteo")


def test_defaults_are_applied() -> None:
    params = build_params({"lat": "51.5", "lon": "-0.12"}, ServiceConfig(), PROVIDERS)

    assert params.latitude == 51.5
    assert params.longitude == -0.12
    assert params.timezone == "UTC"
    assert params.units == Units.METRIC
    assert params.provider == "metno"
    assert params.force_refresh is False


def test_explicit_values_are_kept() -> None:
    params = build_params(
        {"lat": "1", "lon": "2", "tz": "Europe/Berlin", "units": "IMPERIAL", "provider": "openmeteo", "noCache": "1"},
        ServiceConfig(),
        PROVIDERS,
    )

    assert params.timezone == "Europe/Berlin"
    assert params.units == Units.IMPERIAL
    assert params.provider == "openmeteo"
    assert params.force_refresh is True


def test_out_of_range_coordinates_are_clamped() -> None:
    params = build_params({"lat": "123", "lon": "-500"}, ServiceConfig(), PROVIDERS)

    assert (params.latitude, params.longitude) == (90.0, -180.0)


def test_single_missing_coordinate_defaults_to_zero() -> None:
    assert parse_location({"lat": "10"}) == (10.0, 0.0)
    assert parse_location({"lon": "abc", "lat": "-5"}) == (-5.0, 0.0)


@pytest.mark.parametrize("query", [{}, {"lat": "abc", "lon": ""}, {"lat": "nan", "lon": "inf"}])
def test_rejects_when_no_coordinate_parses(query) -> None:
    with pytest.raises(InvalidParams):
        build_params(query, ServiceConfig(), PROVIDERS)


def test_unknown_values_fall_back_to_defaults() -> None:
    params = build_params(
        {"lat": "1", "lon": "1", "tz": "Mars/Olympus", "units": "kelvin", "provider": "nope"},
        ServiceConfig(default_timezone="Europe/London"),
        PROVIDERS,
    )

    assert params.timezone == "Europe/London"
    assert params.units == Units.METRIC
    assert params.provider == "metno"


def test_offset_timezone_tokens_are_accepted() -> None:
    params = build_params({"lat": "1", "lon": "1", "timezone": "+05:30"}, ServiceConfig(), PROVIDERS)

    assert params.timezone == "+05:30"


def test_flag_parsing() -> None:
    assert parse_flag({"noCache": ""}, "noCache") is True
    assert parse_flag({"forceRefresh": "true"}, "noCache", "forceRefresh") is True
    assert parse_flag({"noCache": "false"}, "noCache") is False
    assert parse_flag({}, "noCache") is False


@pytest.mark.parametrize(
    "spellings, expected",
    [
        (["+05:30", "UTC+5:30", "+0530", "GMT+05:30"], "+05:30"),
        (["UTC", "GMT", "Z", "utc", "+00:00"], "UTC"),
        (["-3", "UTC-3", "-03:00"], "-03:00"),
        (["Europe/London", " Europe/London "], "Europe/London"),
    ],
)
def test_equivalent_timezone_spellings_share_one_key(spellings, expected) -> None:
    keys = set()
    for spelling in spellings:
        params = build_params({"lat": "1", "lon": "1", "tz": spelling}, ServiceConfig(), PROVIDERS)
        assert params.timezone == expected
        keys.add(weather_key(params))

    assert len(keys) == 1
