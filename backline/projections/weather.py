"""
Weather adjustment to the projected total.

Thresholds are checked from most to least severe; each category contributes
at most one term. Cold is judged on wind chill. The summed adjustment is
capped, and indoor venues (or games with no weather) get exactly 0.0.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from backline.data.types import GameWeather

# (threshold, total points) pairs, most severe first
WIND_MPH: List[Tuple[float, float]] = [(25.0, -7.0), (20.0, -4.0), (15.0, -2.0)]
COLD_F: List[Tuple[float, float]] = [(20.0, -5.0), (32.0, -3.0), (40.0, -1.0)]
HEAT_F: List[Tuple[float, float]] = [(95.0, -1.0), (90.0, 0.0)]
RAIN_INCHES: List[Tuple[float, float]] = [(0.5, -6.0), (0.25, -4.0), (0.1, -2.0)]
SNOW_INCHES: List[Tuple[float, float]] = [(4.0, -10.0), (2.0, -7.0), (0.5, -4.0)]

DEFAULT_MAX_WEATHER_ADJUSTMENT = 10.0


@dataclass(frozen=True)
class WeatherImpact:
    """Total-points adjustment plus the conditions that produced it."""

    adjustment: float = 0.0
    factors: Tuple[str, ...] = ()

    @property
    def has_impact(self) -> bool:
        return bool(self.factors)


def _at_least(value: float, table: List[Tuple[float, float]]) -> Optional[float]:
    for threshold, points in table:
        if value >= threshold:
            return points
    return None


def _at_most(value: float, table: List[Tuple[float, float]]) -> Optional[float]:
    for threshold, points in table:
        if value <= threshold:
            return points
    return None


def weather_impact(
    weather: Optional[GameWeather],
    indoor: bool = False,
    max_adjustment: float = DEFAULT_MAX_WEATHER_ADJUSTMENT,
) -> WeatherImpact:
    """
    Adjustment to the projected total for kickoff conditions.

    Args:
        weather: Kickoff weather, or None when unknown
        indoor: Game is played in a dome or indoor arena
        max_adjustment: Bound on the absolute summed adjustment

    Returns:
        WeatherImpact; adjustment is 0.0 indoors or without weather
    """
    if indoor or weather is None:
        return WeatherImpact()

    total = 0.0
    factors: List[str] = []

    if weather.wind_speed_mph is not None:
        points = _at_least(weather.wind_speed_mph, WIND_MPH)
        if points is not None:
            total += points
            factors.append(f"wind {weather.wind_speed_mph:.0f} mph")

    feels_like = weather.wind_chill
    if feels_like is not None:
        points = _at_most(feels_like, COLD_F)
        if points is not None:
            total += points
            factors.append(f"cold {feels_like:.0f}F")
        else:
            points = _at_least(feels_like, HEAT_F)
            if points is not None:
                total += points
                factors.append(f"heat {feels_like:.0f}F")

    if weather.precipitation_inches > 0:
        points = _at_least(weather.precipitation_inches, RAIN_INCHES)
        if points is not None:
            total += points
            factors.append(f"rain {weather.precipitation_inches:.2f} in")

    if weather.snowfall_inches > 0:
        points = _at_least(weather.snowfall_inches, SNOW_INCHES)
        if points is not None:
            total += points
            factors.append(f"snow {weather.snowfall_inches:.1f} in")

    total = max(-max_adjustment, min(max_adjustment, total))
    return WeatherImpact(adjustment=total, factors=tuple(factors))


def weather_adjustment(
    weather: Optional[GameWeather],
    indoor: bool = False,
    max_adjustment: float = DEFAULT_MAX_WEATHER_ADJUSTMENT,
) -> float:
    return weather_impact(weather, indoor, max_adjustment).adjustment
