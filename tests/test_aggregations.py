"""Tests for mistake/strategy/indicator breakdowns and behavioral buckets."""

from datetime import datetime, timezone

import pytest

from journal.services import aggregations
from journal.utils.constants import NO_DATA_LABEL


def test_mistake_impact_scenario(trade_factory):
    trades = [
        trade_factory(mistakes=["FOMO"]),
        trade_factory(mistakes=["FOMO", "Late Entry"]),
        trade_factory(mistakes=[]),
    ]
    stats = aggregations.aggregate_mistakes(trades, [-10, -20, 5])

    assert stats[0].description == "FOMO"
    assert stats[0].count == 2
    assert stats[0].impact == pytest.approx(-15)
    assert stats[1].description == "Late Entry"
    assert stats[1].count == 1
    assert stats[1].impact == pytest.approx(-20)


def test_mistake_ties_keep_input_order(trade_factory):
    trades = [trade_factory(mistakes=["B"]), trade_factory(mistakes=["A"])]
    stats = aggregations.aggregate_mistakes(trades, [1, 1])
    assert [s.description for s in stats] == ["B", "A"]


def test_strategies_sorted_by_pnl(trade_factory):
    trades = [
        trade_factory(strategy=["Scalp"]),
        trade_factory(strategy=["Trend", "Breakout"]),
        trade_factory(strategy=["Trend"]),
    ]
    stats = aggregations.aggregate_strategies(trades, [-5, 30, -10])

    assert [s.strategy for s in stats] == ["Breakout", "Trend", "Scalp"]
    trend = stats[1]
    assert trend.pnl == pytest.approx(20)
    assert trend.win_rate == pytest.approx(50)
    assert stats[0].win_rate == pytest.approx(100)


def test_indicators_sorted_by_count(trade_factory):
    trades = [
        trade_factory(indicators=["RSI"]),
        trade_factory(indicators=["RSI", "MACD"]),
        trade_factory(indicators=["RSI"]),
    ]
    stats = aggregations.aggregate_indicators(trades, [10, -5, 0])

    assert stats[0].indicator == "RSI"
    assert stats[0].count == 3
    assert stats[0].success_rate == pytest.approx(100 / 3)
    assert stats[1].indicator == "MACD"
    assert stats[1].success_rate == 0


@pytest.mark.parametrize("func,label_attr", [
    (aggregations.aggregate_mistakes, "description"),
    (aggregations.aggregate_strategies, "strategy"),
    (aggregations.aggregate_indicators, "indicator"),
])
def test_empty_breakdowns_get_placeholder_row(func, label_attr):
    stats = func([], [])
    assert len(stats) == 1
    assert getattr(stats[0], label_attr) == NO_DATA_LABEL


def test_time_of_day_buckets(trade_factory):
    trades = [
        trade_factory(created_at=datetime(2024, 1, 2, 9, 15, tzinfo=timezone.utc)),
        trade_factory(created_at=datetime(2024, 1, 3, 9, 45, tzinfo=timezone.utc)),
        trade_factory(created_at=datetime(2024, 1, 3, 14, 0, tzinfo=timezone.utc)),
    ]
    buckets = aggregations.aggregate_time_of_day(trades, [10, -4, 3], tz=timezone.utc)

    assert len(buckets) == 24
    assert buckets[9].bucket == "09:00"
    assert buckets[9].trades == 2
    assert buckets[9].win_rate == pytest.approx(50)
    assert buckets[14].trades == 1
    assert buckets[14].win_rate == 100
    assert buckets[0].trades == 0
    assert buckets[0].win_rate == 0


def test_emotional_state_defaults_to_neutral(trade_factory):
    trades = [
        trade_factory(emotional_state="anxious"),
        trade_factory(),
        trade_factory(emotional_state=None),
    ]
    buckets = aggregations.aggregate_emotional_state(trades, [-1, 2, 3])

    assert [(b.bucket, b.trades) for b in buckets] == [("anxious", 1), ("neutral", 2)]
    assert buckets[0].win_rate == 0
    assert buckets[1].win_rate == 100
