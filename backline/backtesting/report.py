"""
Replay report generator.

Produces a standalone HTML report from a ``ReplayResult`` including:
- Projection accuracy
- Betting performance, overall, per market and per season
- Edge-bucket win rates
- Cumulative units table

No external template engine required; generates self-contained HTML.
"""

from __future__ import annotations

import html
from datetime import datetime
from pathlib import Path
from typing import Optional

from backline.backtesting.driver import ReplayResult
from backline.backtesting.types import MarketSummary, MetricsReport


# ---------------------------------------------------------------------------
# Lightweight HTML builder
# ---------------------------------------------------------------------------

def _metric_row(label: str, value, fmt: str = ".4f") -> str:
    if value is None:
        return f"<tr><td>{html.escape(label)}</td><td>N/A</td></tr>"
    if isinstance(value, float):
        return f"<tr><td>{html.escape(label)}</td><td>{value:{fmt}}</td></tr>"
    return f"<tr><td>{html.escape(label)}</td><td>{html.escape(str(value))}</td></tr>"


def _summary_table(rows: dict, first_header: str) -> str:
    if not rows:
        return "<p>No bets.</p>"
    body = []
    for key, s in rows.items():
        body.append(
            f"<tr><td>{html.escape(str(key))}</td><td>{s.bets}</td>"
            f"<td>{html.escape(s.record)}</td><td>{s.win_rate:.4f}</td>"
            f"<td>{s.profit:+.2f}</td><td>{s.roi:+.4f}</td><td>{s.clv_rate:.4f}</td></tr>"
        )
    return (
        f'<table class="tbl"><tr><th>{html.escape(first_header)}</th><th>Bets</th>'
        "<th>W-L-P</th><th>Win Rate</th><th>Units</th><th>ROI</th><th>CLV Rate</th></tr>"
        + "\n".join(body)
        + "</table>"
    )


def _units_table(result: ReplayResult) -> str:
    """Cumulative profit after each week that had bets."""
    bets = result.bets
    if not bets:
        return "<p>No bets.</p>"
    totals = {}
    for bet in bets:
        key = (bet.season, bet.week)
        totals[key] = totals.get(key, 0.0) + bet.profit
    rows = []
    running = 0.0
    for (season, week), units in sorted(totals.items()):
        running += units
        rows.append(
            f"<tr><td>{season}</td><td>{week}</td><td>{units:+.2f}</td><td>{running:+.2f}</td></tr>"
        )
    return (
        '<table class="tbl"><tr><th>Season</th><th>Week</th><th>Units</th><th>Cumulative</th></tr>'
        + "\n".join(rows)
        + "</table>"
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def generate_html_report(
    result: ReplayResult,
    metrics: Optional[MetricsReport] = None,
    title: str = "Replay Report",
) -> str:
    """
    Generate a self-contained HTML report string from *result*.

    Returns:
        HTML string (UTF-8)
    """
    m = metrics or result.summarize()
    overall: MarketSummary = m.overall
    p = result.parameters

    seasons = sorted({r.game.season for r in result.records})
    period = f"{seasons[0]}-{seasons[-1]}" if seasons else "none"
    band = f"{p.min_edge:g} - {p.max_edge:g}" if p.max_edge is not None else f"{p.min_edge:g}+"

    edge_rows = "\n".join(_metric_row(f"Edge {label}", rate) for label, rate in m.edge_buckets.items())

    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8"/>
<title>{html.escape(title)}</title>
<style>
  body {{ font-family: system-ui, sans-serif; max-width: 900px; margin: 2rem auto; color: #1e293b; }}
  h1 {{ color: #0f172a; }}
  h2 {{ border-bottom: 2px solid #e2e8f0; padding-bottom: 0.3rem; }}
  .tbl {{ border-collapse: collapse; width: 100%; margin: 1rem 0; }}
  .tbl th, .tbl td {{ border: 1px solid #cbd5e1; padding: 0.5rem 0.75rem; text-align: left; }}
  .tbl th {{ background: #f1f5f9; }}
  .meta {{ color: #64748b; font-size: 0.9rem; }}
</style>
</head>
<body>
<h1>{html.escape(title)}</h1>
<p class="meta">
  Generated: {datetime.now().strftime("%Y-%m-%d %H:%M")} |
  Seasons: {html.escape(period)} |
  Games: {m.games} |
  K: {p.k_factor:g} | Scale: {p.scale_constant:g} | Carryover: {p.carryover:g} |
  Edge band: {html.escape(band)} | Execution: {html.escape(p.execution.value)}
</p>

<h2>Projection Accuracy</h2>
<table class="tbl">
{_metric_row("Graded Games", m.graded_games, "d")}
{_metric_row("Mean Error", m.mean_error)}
{_metric_row("MAE", m.mae)}
{_metric_row("RMSE", m.rmse)}
{_metric_row("Correlation", m.correlation)}
{_metric_row("Total MAE", m.total_mae)}
</table>

<h2>Betting Performance</h2>
<table class="tbl">
{_metric_row("Total Bets", overall.bets, "d")}
{_metric_row("Record (W-L-P)", overall.record)}
{_metric_row("Win Rate", overall.win_rate)}
{_metric_row("Units", overall.profit, "+.2f")}
{_metric_row("ROI", overall.roi)}
{_metric_row("Avg |Edge|", overall.avg_abs_edge, ".2f")}
{_metric_row("CLV Rate", overall.clv_rate)}
{_metric_row("Avg CLV (pts)", overall.avg_clv, "+.2f")}
{_metric_row("Max Drawdown (units)", m.max_drawdown, ".2f")}
</table>

<h2>By Market</h2>
{_summary_table(m.by_market, "Market")}

<h2>By Season</h2>
{_summary_table(m.by_season, "Season")}

<h2>Win Rate by Edge</h2>
<table class="tbl">
{edge_rows}
</table>

<h2>Cumulative Units</h2>
{_units_table(result)}
</body>
</html>"""


def save_report(
    result: ReplayResult,
    path: str,
    metrics: Optional[MetricsReport] = None,
    title: str = "Replay Report",
) -> Path:
    """Generate and save report to *path*. Returns the Path written."""
    content = generate_html_report(result, metrics, title)
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(content, encoding="utf-8")
    return out
