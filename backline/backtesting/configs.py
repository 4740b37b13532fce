"""
Named replay configurations.

Backtest variants differ in home field advantage, divisor and carryover.
They are kept here as named parameter sets rather than code forks:

- reference: K=20, 100 Elo home field, ln-margin x0.8, carryover 0.6
- cfb_elo_v1: no margin scaling, 2.5-point home field, carryover 0.67
- cbb_elo_holdout: 3.5-point home field, edge band 2-8, min 3 games
- cbb_elo_comprehensive: 2.5-point home field
- cbb_inseason: 100 Elo home field, divisor 28, carryover 0.7

Where a variant expressed home field in points only, the Elo equivalent is
points x divisor so the update and the projection agree.
"""

import dataclasses
from typing import Any, Dict, Optional

from backline.backtesting.types import ReplayParameters
from backline.core.config import settings

# ============================================================================
# Parameter sets
# ============================================================================

REFERENCE = ReplayParameters(
    k_factor=20.0,
    home_field_elo=100.0,
    home_field_points=4.0,  # 100 Elo / 25
    margin_coefficient=0.8,
    use_margin=True,
    carryover=0.6,
    scale_constant=25.0,
)

CFB_ELO_V1 = ReplayParameters(
    k_factor=20.0,
    home_field_elo=62.5,
    home_field_points=2.5,
    use_margin=False,
    carryover=0.67,
    scale_constant=25.0,
)

CBB_ELO_HOLDOUT = ReplayParameters(
    k_factor=20.0,
    home_field_elo=87.5,
    home_field_points=3.5,
    carryover=0.6,
    scale_constant=25.0,
    min_edge=2.0,
    max_edge=8.0,
    min_games_played=3,
)

CBB_ELO_COMPREHENSIVE = ReplayParameters(
    k_factor=20.0,
    home_field_elo=62.5,
    home_field_points=2.5,
    carryover=0.6,
    scale_constant=25.0,
)

CBB_INSEASON = ReplayParameters(
    k_factor=20.0,
    home_field_elo=100.0,
    home_field_points=3.5,
    carryover=0.7,
    scale_constant=28.0,
)


# ============================================================================
# Configuration Registry
# ============================================================================

REPLAY_CONFIGS: Dict[str, ReplayParameters] = {
    "reference": REFERENCE,
    "cfb_elo_v1": CFB_ELO_V1,
    "cbb_elo_holdout": CBB_ELO_HOLDOUT,
    "cbb_elo_comprehensive": CBB_ELO_COMPREHENSIVE,
    "cbb_inseason": CBB_INSEASON,
}


def get_config(config_name: Optional[str] = None, **overrides: Any) -> ReplayParameters:
    """
    Retrieve a named parameter set, optionally with fields overridden.

    Args:
        config_name: Registry name (default: settings.DEFAULT_REPLAY_CONFIG)
        **overrides: ReplayParameters fields to replace

    Returns:
        ReplayParameters

    Raises:
        ValueError: If config_name or an override field is invalid

    Examples:
        >>> get_config("cbb_inseason").scale_constant
        28.0
        >>> get_config("reference", k_factor=32).k_factor
        32
    """
    name = config_name or settings.DEFAULT_REPLAY_CONFIG
    if name not in REPLAY_CONFIGS:
        raise ValueError(
            f"Invalid config_name '{name}'. Valid options: {list(REPLAY_CONFIGS.keys())}"
        )

    valid_fields = {f.name for f in dataclasses.fields(ReplayParameters)}
    unknown = sorted(set(overrides) - valid_fields)
    if unknown:
        raise ValueError(f"Unknown replay parameter(s): {unknown}")

    return dataclasses.replace(REPLAY_CONFIGS[name], **overrides)
