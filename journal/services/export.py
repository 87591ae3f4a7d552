"""CSV export of a metrics snapshot, laid out like the dashboard's export."""

import csv
import io

from journal.schemas.metrics import PerformanceMetrics


def _fmt(value: float) -> str:
    return f"{value:.2f}"


def metrics_to_rows(metrics: PerformanceMetrics) -> list[list[str]]:
    rows: list[list[str]] = [
        ["Metric", "Value"],
        ["Total Trades", str(metrics.total_trades)],
        ["Win Rate", f"{_fmt(metrics.win_rate)}%"],
        ["Total P&L", _fmt(metrics.total_pnl)],
        ["Average P&L", _fmt(metrics.average_pnl)],
        ["Largest Win", _fmt(metrics.largest_win)],
        ["Largest Loss", _fmt(metrics.largest_loss)],
        ["Profit Factor", _fmt(metrics.profit_factor)],
        ["Sharpe Ratio", _fmt(metrics.sharpe_ratio)],
        ["Max Drawdown", f"{_fmt(metrics.max_drawdown * 100)}%"],
        ["Risk/Reward Ratio", _fmt(metrics.risk_reward_ratio)],
        [],
        ["Common Mistakes", "Count", "Impact"],
    ]
    rows += [[m.description, str(m.count), _fmt(m.impact)] for m in metrics.common_mistakes]
    rows += [[], ["Strategies", "P&L", "Win Rate"]]
    rows += [
        [s.strategy, _fmt(s.pnl), f"{_fmt(s.win_rate)}%"]
        for s in metrics.most_profitable_strategies
    ]
    rows += [[], ["Indicators", "Count", "Success Rate"]]
    rows += [
        [i.indicator, str(i.count), f"{_fmt(i.success_rate)}%"]
        for i in metrics.most_used_indicators
    ]
    return rows


def metrics_to_csv(metrics: PerformanceMetrics) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(metrics_to_rows(metrics))
    return buffer.getvalue()


def export_filename(metrics: PerformanceMetrics) -> str:
    return f"trading_analytics_{metrics.created_at:%Y-%m-%d}.csv"
