"""Unit conversion between the metric and imperial representations.

Inputs are always finite numbers in metric base units (Celsius, m/s or km/h,
millimetres); missing values are replaced by the normalizer before they get
here.
"""
from __future__ import annotations

from enum import Enum

from .entities import Units

MS_TO_KMH = 3.6
MS_TO_MPH = 2.23694
KMH_TO_MPH = 0.621371
MM_PER_INCH = 25.4


class WindUnit(str, Enum):
    MS = "m/s"
    KMH = "km/h"


def temperature(value: float, units: Units) -> float:
    if units == Units.IMPERIAL:
        return round(value * 9 / 5 + 32, 1)
    return round(value, 1)


def wind_speed(value: float, source_unit: WindUnit, units: Units) -> float:
    if source_unit == WindUnit.MS:
        factor = MS_TO_MPH if units == Units.IMPERIAL else MS_TO_KMH
    else:
        factor = KMH_TO_MPH if units == Units.IMPERIAL else 1.0
    return round(value * factor, 1)


def precipitation(value: float, units: Units) -> float:
    if units == Units.IMPERIAL:
        return round(value / MM_PER_INCH, 2)
    return round(value, 1)


def temperature_to_celsius(value: float, units: Units) -> float:
    """Inverse of :func:`temperature`, up to its rounding."""
    if units == Units.IMPERIAL:
        return (value - 32) * 5 / 9
    return value


__all__ = [
    "WindUnit",
    "temperature",
    "wind_speed",
    "precipitation",
    "temperature_to_celsius",
]
