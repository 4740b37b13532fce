"""
Tests for the total projection and weather adjustment.
"""

import pytest

from backline.data.types import GameWeather
from backline.projections.spread import ProjectionParameters
from backline.projections.totals import base_total, project_total
from backline.projections.weather import weather_adjustment, weather_impact


@pytest.fixture
def params():
    return ProjectionParameters(league_average_total=55.0, pace_weight=0.0)


class TestBaseTotal:
    def test_league_average_before_any_games(self, make_rating):
        assert base_total(make_rating("KC"), make_rating("DET"), 55.0) == 55.0

    def test_blends_offense_and_defense(self, make_rating):
        home = make_rating("KC", games_played=2, points_for=60, points_against=40)   # 30 / 20
        away = make_rating("DET", games_played=2, points_for=50, points_against=56)  # 25 / 28
        # (30 + 28) / 2 + (25 + 20) / 2
        assert base_total(home, away, 55.0) == pytest.approx(29.0 + 22.5)


class TestProjectTotal:
    def test_indoor_has_zero_weather(self, make_rating, make_game, params):
        storm = GameWeather(temperature_f=10, wind_speed_mph=30, snowfall_inches=6)
        game = make_game("g", "KC", "DET", indoor=True, weather=storm)
        total, adjustments = project_total(make_rating("KC"), make_rating("DET"), game, params)
        assert adjustments["weather"] == 0.0
        assert total == 55.0

    def test_outdoor_weather_lowers_total(self, make_rating, make_game, params):
        game = make_game("g", "KC", "DET", weather=GameWeather(temperature_f=60, wind_speed_mph=21))
        total, adjustments = project_total(make_rating("KC"), make_rating("DET"), game, params)
        assert adjustments["weather"] == -4.0
        assert total == pytest.approx(51.0)

    def test_pace_term(self, make_rating, make_game):
        params = ProjectionParameters(league_average_total=45.0, pace_weight=0.5, max_pace_adjustment=3.0)
        home = make_rating("KC", games_played=1, points_for=30, points_against=20)
        away = make_rating("DET", games_played=1, points_for=27, points_against=24)
        _, adjustments = project_total(home, away, make_game("g", "KC", "DET"), params)
        # environments 50 and 51 -> 0.5 * (50.5 - 45) = 2.75
        assert adjustments["pace"] == pytest.approx(2.75)

    def test_pace_capped(self, make_rating, make_game):
        params = ProjectionParameters(league_average_total=30.0, pace_weight=1.0, max_pace_adjustment=3.0)
        home = make_rating("KC", games_played=1, points_for=40, points_against=30)
        away = make_rating("DET", games_played=1, points_for=35, points_against=35)
        _, adjustments = project_total(home, away, make_game("g", "KC", "DET"), params)
        assert adjustments["pace"] == 3.0


class TestWeather:
    def test_no_weather_is_zero(self):
        assert weather_adjustment(None) == 0.0

    def test_calm_mild_day_is_zero(self):
        impact = weather_impact(GameWeather(temperature_f=65, wind_speed_mph=5))
        assert impact.adjustment == 0.0
        assert not impact.has_impact

    @pytest.mark.parametrize("wind,expected", [(14.9, 0.0), (15, -2.0), (20, -4.0), (25, -7.0), (40, -7.0)])
    def test_wind_tiers(self, wind, expected):
        assert weather_adjustment(GameWeather(temperature_f=65, wind_speed_mph=wind)) == expected

    @pytest.mark.parametrize("temp,expected", [(41, 0.0), (40, -1.0), (32, -3.0), (20, -5.0)])
    def test_cold_tiers_without_wind(self, temp, expected):
        assert weather_adjustment(GameWeather(temperature_f=temp, wind_speed_mph=0)) == expected

    def test_cold_uses_wind_chill(self):
        # 42F with 10 mph wind feels like ~37F
        weather = GameWeather(temperature_f=42, wind_speed_mph=10)
        assert weather.wind_chill < 40
        assert weather_adjustment(weather) == -1.0

    def test_heat(self):
        assert weather_adjustment(GameWeather(temperature_f=96, wind_speed_mph=0)) == -1.0
        assert weather_adjustment(GameWeather(temperature_f=91, wind_speed_mph=0)) == 0.0

    def test_rain_and_snow(self):
        rain = GameWeather(temperature_f=60, wind_speed_mph=0, precipitation_inches=0.3)
        snow = GameWeather(temperature_f=45, wind_speed_mph=0, snowfall_inches=2.5)
        assert weather_adjustment(rain) == -4.0
        assert weather_adjustment(snow) == -7.0

    def test_summed_then_capped(self):
        blizzard = GameWeather(temperature_f=15, wind_speed_mph=28, snowfall_inches=5)
        impact = weather_impact(blizzard, max_adjustment=10.0)
        assert impact.adjustment == -10.0
        assert len(impact.factors) == 3

    def test_indoor_is_zero(self):
        blizzard = GameWeather(temperature_f=15, wind_speed_mph=28, snowfall_inches=5)
        assert weather_adjustment(blizzard, indoor=True) == 0.0
