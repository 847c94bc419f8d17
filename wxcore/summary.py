"""Short plain-language summary of a snapshot's current conditions."""
from __future__ import annotations

from typing import Optional

from .entities import WeatherSnapshot
from .units import temperature_to_celsius

WARM_ABOVE_C = 25.0
COOL_BELOW_C = 15.0


def _current_celsius(snapshot: WeatherSnapshot) -> Optional[float]:
    temp = snapshot.current.temp
    if isinstance(temp, (int, float)):
        return temperature_to_celsius(float(temp), snapshot.units)
    return None


def summarize(snapshot: WeatherSnapshot) -> str:
    celsius = _current_celsius(snapshot)
    if celsius is None:
        feel, mood = "of moderate temperature", "average"
    elif celsius > WARM_ABOVE_C:
        feel, mood = "warm", "energetic"
    elif celsius < COOL_BELOW_C:
        feel, mood = "cool", "chilly"
    else:
        feel, mood = "mild", "comfortable"

    precipitation = snapshot.current.precipitation
    if not isinstance(precipitation, (int, float)):
        rain = "Precipitation data is not available."
    elif precipitation > 0:
        rain = "There is a chance of precipitation."
    else:
        rain = "No precipitation is expected right now."

    return f"Currently, the weather is {feel}. {rain} Overall, expect a day that feels {mood}."


__all__ = ["summarize"]
