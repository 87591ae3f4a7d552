"""Behavioral scores derived from trade metadata rather than price action.

Every score is clamped to [0, 1] and falls back to 0 on empty or unusable
input instead of raising.
"""

import functools
import logging
import math
from collections import Counter
from dataclasses import dataclass
from datetime import tzinfo

from journal.services.trade_record import TradeRecord
from journal.utils.constants import MAX_RISK_PER_TRADE_PCT, MAX_TRADES_PER_DAY

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    if not math.isfinite(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def _score(func):
    """Clamp the result and turn bad-data errors into a zero score."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs) -> float:
        try:
            return _clamp(func(*args, **kwargs))
        except (ArithmeticError, TypeError, ValueError) as e:
            logger.warning(f"{func.__name__} fell back to 0: {e}")
            return 0.0
    return wrapper


@_score
def fear_greed_index(trades: list[TradeRecord], pnls: list[float]) -> float:
    """1 minus the share of winners the trader admits to exiting early."""
    if not trades:
        return 0.0
    early_exits = sum(
        1
        for trade, pnl in zip(trades, pnls)
        if pnl > 0 and any("early" in m.lower() for m in trade.mistakes)
    )
    return 1 - early_exits / len(trades)


@_score
def consistency_score(trades: list[TradeRecord]) -> float:
    """How much of the trading sticks to the single most used strategy."""
    if not trades:
        return 0.0
    usage = Counter(label for trade in trades for label in trade.strategy)
    if not usage:
        return 0.0
    top_count = usage.most_common(1)[0][1]
    return top_count / len(trades)


@_score
def time_management_score(trades: list[TradeRecord], tz: tzinfo | None = None) -> float:
    """Penalizes averaging more than five trades per calendar day."""
    if not trades:
        return 0.0
    days = {trade.created_at.astimezone(tz).date() for trade in trades}
    avg_per_day = len(trades) / len(days)
    return MAX_TRADES_PER_DAY / max(avg_per_day, 1)


@_score
def risk_management_score(trades: list[TradeRecord], pnls: list[float]) -> float:
    """Share of trades whose PnL stayed within 2% of the account capital."""
    sized = [
        (trade.capital, pnl)
        for trade, pnl in zip(trades, pnls)
        if math.isfinite(trade.capital) and trade.capital > 0
    ]
    if not sized:
        return 0.0
    within = sum(1 for capital, pnl in sized if abs(pnl) / capital * 100 <= MAX_RISK_PER_TRADE_PCT)
    return within / len(sized)


@_score
def discipline_score(trades: list[TradeRecord]) -> float:
    """Average journaling completeness: strategy 0.4, notes 0.3, indicators 0.3."""
    if not trades:
        return 0.0
    total = 0.0
    for trade in trades:
        if trade.strategy:
            total += 0.4
        if trade.notes.strip():
            total += 0.3
        if trade.indicators:
            total += 0.3
    return total / len(trades)


@dataclass
class BehaviorScores:
    fear_greed: float = 0.0
    consistency: float = 0.0
    time_management: float = 0.0
    risk_management: float = 0.0
    discipline: float = 0.0


def score_behavior(
    trades: list[TradeRecord],
    pnls: list[float],
    tz: tzinfo | None = None,
) -> BehaviorScores:
    return BehaviorScores(
        fear_greed=fear_greed_index(trades, pnls),
        consistency=consistency_score(trades),
        time_management=time_management_score(trades, tz),
        risk_management=risk_management_score(trades, pnls),
        discipline=discipline_score(trades),
    )
