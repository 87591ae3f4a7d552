"""Qualitative breakdowns over closed trades.

Each reducer takes the closed trades and their PnL values as parallel lists.
Groups keep first-seen order so sort ties fall back to input order.
"""

from datetime import tzinfo

from journal.schemas.metrics import (
    BucketStat,
    IndicatorStat,
    MistakeStat,
    StrategyStat,
    placeholder_indicators,
    placeholder_mistakes,
    placeholder_strategies,
)
from journal.services.trade_record import TradeRecord
from journal.utils.constants import DEFAULT_EMOTIONAL_STATE, HOURS_IN_DAY


def _win_rate(wins: int, trades: int) -> float:
    return wins / trades * 100 if trades else 0.0


def aggregate_mistakes(trades: list[TradeRecord], pnls: list[float]) -> list[MistakeStat]:
    """Occurrences and average PnL per mistake, most frequent first."""
    groups: dict[str, list[float]] = {}
    for trade, pnl in zip(trades, pnls):
        for mistake in trade.mistakes:
            groups.setdefault(mistake, []).append(pnl)

    if not groups:
        return placeholder_mistakes()

    stats = [
        MistakeStat(description=mistake, count=len(values), impact=sum(values) / len(values))
        for mistake, values in groups.items()
    ]
    return sorted(stats, key=lambda s: s.count, reverse=True)


def aggregate_strategies(trades: list[TradeRecord], pnls: list[float]) -> list[StrategyStat]:
    """Total PnL and win rate per strategy, most profitable first."""
    groups: dict[str, dict[str, float]] = {}
    for trade, pnl in zip(trades, pnls):
        for strategy in trade.strategy:
            group = groups.setdefault(strategy, {"trades": 0, "wins": 0, "pnl": 0.0})
            group["trades"] += 1
            group["pnl"] += pnl
            if pnl > 0:
                group["wins"] += 1

    if not groups:
        return placeholder_strategies()

    stats = [
        StrategyStat(
            strategy=strategy,
            pnl=group["pnl"],
            win_rate=_win_rate(group["wins"], group["trades"]),
        )
        for strategy, group in groups.items()
    ]
    return sorted(stats, key=lambda s: s.pnl, reverse=True)


def aggregate_indicators(trades: list[TradeRecord], pnls: list[float]) -> list[IndicatorStat]:
    """Usage count and success rate per indicator, most used first."""
    groups: dict[str, list[int]] = {}
    for trade, pnl in zip(trades, pnls):
        for indicator in trade.indicators:
            counts = groups.setdefault(indicator, [0, 0])
            counts[0] += 1
            if pnl > 0:
                counts[1] += 1

    if not groups:
        return placeholder_indicators()

    stats = [
        IndicatorStat(
            indicator=indicator,
            count=count,
            success_rate=_win_rate(successes, count),
        )
        for indicator, (count, successes) in groups.items()
    ]
    return sorted(stats, key=lambda s: s.count, reverse=True)


def aggregate_time_of_day(
    trades: list[TradeRecord],
    pnls: list[float],
    tz: tzinfo | None = None,
) -> list[BucketStat]:
    """Trades and win rate for each hour 00-23 of ``created_at`` in local time.

    ``tz=None`` means the system's local zone.
    """
    counts = [0] * HOURS_IN_DAY
    wins = [0] * HOURS_IN_DAY
    for trade, pnl in zip(trades, pnls):
        hour = trade.created_at.astimezone(tz).hour
        counts[hour] += 1
        if pnl > 0:
            wins[hour] += 1

    return [
        BucketStat(bucket=f"{hour:02d}:00", trades=counts[hour], win_rate=_win_rate(wins[hour], counts[hour]))
        for hour in range(HOURS_IN_DAY)
    ]


def aggregate_emotional_state(trades: list[TradeRecord], pnls: list[float]) -> list[BucketStat]:
    """Trades and win rate per emotional state, in first-seen order."""
    groups: dict[str, list[int]] = {}
    for trade, pnl in zip(trades, pnls):
        state = trade.emotional_state or DEFAULT_EMOTIONAL_STATE
        counts = groups.setdefault(state, [0, 0])
        counts[0] += 1
        if pnl > 0:
            counts[1] += 1

    return [
        BucketStat(bucket=state, trades=count, win_rate=_win_rate(successes, count))
        for state, (count, successes) in groups.items()
    ]
