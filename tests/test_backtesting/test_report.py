"""
Tests for the HTML replay report.
"""

from backline.backtesting.configs import get_config
from backline.backtesting.driver import replay
from backline.backtesting.report import generate_html_report, save_report
from backline.data.feed import InMemoryMarketLineProvider


def _result(games, lines):
    return replay(games, InMemoryMarketLineProvider(lines), get_config("reference"))


def test_report_sections(two_season_games, two_season_lines):
    html = generate_html_report(_result(two_season_games, two_season_lines))
    assert html.startswith("<!DOCTYPE html>")
    for heading in ("Projection Accuracy", "Betting Performance", "By Market", "By Season",
                    "Win Rate by Edge", "Cumulative Units"):
        assert heading in html
    assert "2023-2024" in html


def test_report_without_bets(two_season_games):
    result = replay(two_season_games, None, get_config("reference"))
    html = generate_html_report(result, title="No <lines>")
    assert "No bets." in html
    assert "No &lt;lines&gt;" in html


def test_save_report(two_season_games, two_season_lines, tmp_path):
    path = save_report(_result(two_season_games, two_season_lines), str(tmp_path / "out" / "report.html"))
    assert path.exists()
    assert "Replay Report" in path.read_text(encoding="utf-8")
