"""Structured input for the external narrative-insight generator.

The generator itself (prompting, caching its text) lives outside this
service. Here we only decide what it is given and whether a previous
narrative is stale.
"""

from typing import Any

from journal.schemas.metrics import PerformanceMetrics
from journal.services.pnl import calculate_pnl
from journal.services.trade_record import TradeRecord

# Numeric fields compared when deciding whether metrics changed
_COMPARED_FIELDS = ("win_rate", "total_pnl", "average_pnl", "profit_factor", "max_drawdown")
_TOLERANCE = 1e-4


def _trade_summary(trade: TradeRecord) -> dict[str, Any]:
    return {
        "pair": trade.pair,
        "type": trade.type,
        "entry_price": trade.entry_price,
        "exit_price": trade.exit_price,
        "quantity": trade.quantity,
        "pnl": calculate_pnl(trade),
        "strategy": list(trade.strategy),
        "mistakes": list(trade.mistakes),
    }


def build_insight_payload(
    metrics: PerformanceMetrics,
    trades: list[TradeRecord],
    recent: int = 10,
) -> dict[str, Any]:
    """Performance block, breakdowns, behavior and the last ``recent`` trades."""
    dumped = metrics.model_dump(mode="json")
    return {
        "user_id": metrics.user_id,
        "is_default_data": metrics.is_default_data,
        "performance": {
            key: dumped[key]
            for key in (
                "total_trades",
                "win_rate",
                "total_pnl",
                "average_pnl",
                "profit_factor",
                "sharpe_ratio",
                "max_drawdown",
                "risk_reward_ratio",
            )
        },
        "strategies": dumped["most_profitable_strategies"],
        "mistakes": dumped["common_mistakes"],
        "indicators": dumped["most_used_indicators"],
        "behavioral_patterns": dumped["behavioral_patterns"],
        "recent_trades": [_trade_summary(t) for t in trades[-recent:]] if recent > 0 else [],
    }


def metrics_changed(old: PerformanceMetrics | None, new: PerformanceMetrics | None) -> bool:
    """Whether a narrative written for ``old`` is stale for ``new``.

    Missing snapshots on either side count as "no change", so callers only
    regenerate when there is something concrete to compare.
    """
    if old is None or new is None:
        return False
    if old.total_trades != new.total_trades:
        return True
    for name in _COMPARED_FIELDS:
        if abs(getattr(old, name) - getattr(new, name)) > _TOLERANCE:
            return True
    return (
        old.most_profitable_strategies != new.most_profitable_strategies
        or old.common_mistakes != new.common_mistakes
    )
