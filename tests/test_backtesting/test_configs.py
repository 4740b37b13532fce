"""
Tests for named replay configurations and parameter validation.
"""

import pytest

from backline.backtesting.configs import REPLAY_CONFIGS, get_config
from backline.backtesting.types import ReplayParameters
from backline.data.types import LineTiming


class TestGetConfig:
    def test_reference_matches_worked_example(self):
        params = get_config("reference")
        assert params.k_factor == 20.0
        assert params.home_field_elo == 100.0
        assert params.margin_coefficient == 0.8
        assert params.carryover == 0.6

    @pytest.mark.parametrize("name", sorted(REPLAY_CONFIGS))
    def test_all_configs_build_sub_parameters(self, name):
        params = get_config(name)
        assert params.elo_parameters().k_factor == params.k_factor
        assert params.projection_parameters().scale_constant == params.scale_constant
        assert params.season_transition().carryover == params.carryover

    def test_variants_differ(self):
        assert get_config("cbb_inseason").scale_constant == 28.0
        assert get_config("cfb_elo_v1").use_margin is False
        holdout = get_config("cbb_elo_holdout")
        assert (holdout.min_edge, holdout.max_edge, holdout.min_games_played) == (2.0, 8.0, 3)

    def test_overrides_return_copy(self):
        params = get_config("reference", k_factor=32.0)
        assert params.k_factor == 32.0
        assert get_config("reference").k_factor == 20.0

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Valid options"):
            get_config("nope")

    def test_unknown_override(self):
        with pytest.raises(ValueError, match="Unknown replay parameter"):
            get_config("reference", k_facter=30)


class TestReplayParameters:
    @pytest.mark.parametrize(
        "kwargs",
        [
            {"carryover": 1.5},
            {"k_factor": -5},
            {"min_edge": 5.0, "max_edge": 2.0},
            {"min_edge": -1.0},
            {"price_american": -50},
            {"markets": ("spread", "moneyline")},
            {"scale_constant": 0.0},
            {"min_games_played": -1},
        ],
    )
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            ReplayParameters(**kwargs)

    def test_execution_accepts_string(self):
        assert ReplayParameters(execution="opening").execution == LineTiming.OPENING

    def test_to_dict(self):
        data = ReplayParameters().to_dict()
        assert data["execution"] == "closing"
        assert data["markets"] == ["spread", "total"]
