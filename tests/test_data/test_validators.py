"""
Tests for feed validation.
"""

from dataclasses import replace
from datetime import timedelta

import pandas as pd
import pytest

from backline.core.exceptions import DuplicateGameError, FeedError, FeedOrderError
from backline.data.validators import FeedGuard, validate_chronological_order, validate_game_frame


class TestValidateGameFrame:
    def test_valid(self):
        df = pd.DataFrame({
            "game_id": ["a"], "season": [2024], "week": [1],
            "start_time": ["2024-09-08"], "home_team": ["KC"], "away_team": ["DET"],
        })
        validate_game_frame(df)

    def test_same_team_both_sides(self):
        df = pd.DataFrame({
            "game_id": ["a"], "season": [2024], "week": [1],
            "start_time": ["2024-09-08"], "home_team": ["KC"], "away_team": ["KC"],
        })
        with pytest.raises(ValueError, match="identical"):
            validate_game_frame(df)


class TestFeedGuard:
    def test_accepts_ordered_feed(self, two_season_games):
        validate_chronological_order(two_season_games)

    def test_equal_timestamp_ordered_by_id(self, make_game):
        a = make_game("a", "KC", "DET")
        b = make_game("b", "BUF", "MIA", start=a.start_time)
        guard = FeedGuard()
        guard.check(a)
        guard.check(b)
        assert guard.last is b

    def test_equal_timestamp_wrong_id_order(self, make_game):
        b = make_game("b", "BUF", "MIA")
        a = make_game("a", "KC", "DET", start=b.start_time)
        with pytest.raises(FeedOrderError) as exc:
            validate_chronological_order([b, a])
        assert exc.value.game_ids == ("b", "a")

    def test_season_going_backwards(self, make_game):
        a = make_game("a", "KC", "DET", season=2024)
        b = replace(make_game("b", "BUF", "MIA", season=2023), start_time=a.start_time + timedelta(days=1))
        with pytest.raises(FeedOrderError, match="Season went backwards"):
            validate_chronological_order([a, b])

    def test_duplicate(self, make_game):
        a = make_game("a", "KC", "DET")
        with pytest.raises(DuplicateGameError):
            validate_chronological_order([a, a])

    def test_same_team_both_sides(self, make_game):
        with pytest.raises(FeedError):
            validate_chronological_order([make_game("a", "KC", "KC")])
