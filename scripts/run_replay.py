#!/usr/bin/env python3
"""
Replay games from CSV files and write a metrics summary and HTML report.

Usage:
    python scripts/run_replay.py --games games.csv --lines lines.csv
    python scripts/run_replay.py --games games.csv --config cbb_inseason --seasons 2021-2023
    python scripts/run_replay.py --games games.csv --lines lines.csv --set k_factor=32 --set min_edge=2

games.csv columns: game_id, season, week, start_time, home_team, away_team,
home_score, away_score (optional context columns: neutral_site, indoor,
home_rest_days, away_rest_days, temperature_f, wind_speed_mph,
precipitation_inches, snowfall_inches).

lines.csv columns: game_id, opening_spread, closing_spread, opening_total,
closing_total (optional: spread_price, total_price, sportsbook).
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

# Ensure project root is on path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from backline.backtesting.configs import REPLAY_CONFIGS, get_config
from backline.backtesting.driver import replay
from backline.backtesting.report import save_report
from backline.core.config import settings
from backline.core.log import configure_logging
from backline.data.feed import InMemoryGameFeed, InMemoryMarketLineProvider

logger = logging.getLogger(__name__)


def parse_seasons(s: str) -> List[int]:
    """Parse '2018-2022' or '2018,2019,2020' into list of ints."""
    if "-" in s and "," not in s:
        start, end = s.split("-")
        return list(range(int(start), int(end) + 1))
    return [int(x.strip()) for x in s.split(",")]


def parse_overrides(pairs: List[str]) -> Dict[str, Any]:
    """Parse ['k_factor=32', 'use_margin=false'] into typed values."""
    overrides: Dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Override '{pair}' must look like name=value")
        name, raw = pair.split("=", 1)
        try:
            value = json.loads(raw)
        except json.JSONDecodeError:
            value = raw
        overrides[name.strip()] = value
    return overrides


def main():
    parser = argparse.ArgumentParser(description="Walk-forward rating replay")
    parser.add_argument("--games", required=True, help="CSV of games")
    parser.add_argument("--lines", default=None, help="CSV of market lines")
    parser.add_argument(
        "--config",
        default=settings.DEFAULT_REPLAY_CONFIG,
        choices=sorted(REPLAY_CONFIGS),
        help="Named parameter set",
    )
    parser.add_argument("--seasons", default=None, help="Seasons to replay (e.g. 2018-2022)")
    parser.add_argument("--set", action="append", default=[], dest="overrides",
                        help="Override a parameter, e.g. --set k_factor=32")
    parser.add_argument("--output-dir", default=settings.RESULTS_DIR, help="Results directory")
    parser.add_argument("--log-level", default=None, help="Logging level")
    args = parser.parse_args()

    configure_logging(args.log_level)

    params = get_config(args.config, **parse_overrides(args.overrides))
    seasons = parse_seasons(args.seasons) if args.seasons else None

    feed = InMemoryGameFeed.from_frame(pd.read_csv(args.games))
    lines = InMemoryMarketLineProvider.from_frame(pd.read_csv(args.lines)) if args.lines else None
    logger.info(f"Loaded {len(feed)} games, {len(lines) if lines else 0} market lines")
    logger.info(f"Config: {args.config} {params.to_dict()}")

    result = replay(feed, lines, params, seasons=seasons)
    metrics = result.summarize()

    out = Path(args.output_dir)
    out.mkdir(parents=True, exist_ok=True)
    result.to_frame().to_csv(out / "projections.csv", index=False)
    result.bets_to_frame().to_csv(out / "bets.csv", index=False)
    (out / "metrics.json").write_text(json.dumps(metrics.to_dict(), indent=2, default=str))
    report_path = save_report(result, str(out / "report.html"), metrics, title=f"Replay: {args.config}")
    result.save(str(out / "replay.joblib"))

    overall = metrics.overall
    logger.info(
        f"Bets: {overall.bets} ({overall.record}), win rate {overall.win_rate:.3f}, "
        f"ROI {overall.roi:+.3f}, MAE {metrics.mae:.2f}, CLV rate {overall.clv_rate:.3f}"
    )
    logger.info(f"Report written to {report_path}")


if __name__ == "__main__":
    main()
