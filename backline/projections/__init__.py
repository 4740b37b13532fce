"""
Projection functions: pure maps from two pre-game ratings and game context
to a projected spread and total.
"""

from backline.projections.spread import ProjectionParameters, project_spread, round_half
from backline.projections.totals import base_total, project_total
from backline.projections.weather import WeatherImpact, weather_adjustment, weather_impact

__all__ = [
    "ProjectionParameters",
    "project_spread",
    "round_half",
    "base_total",
    "project_total",
    "WeatherImpact",
    "weather_adjustment",
    "weather_impact",
]
