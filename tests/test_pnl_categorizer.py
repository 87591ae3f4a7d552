"""Tests for per-trade PnL and trade categorization."""

import math

import pytest

from journal.services.categorizer import categorize
from journal.services.pnl import calculate_pnl, raw_pnl


# ---------------------------------------------------------------------------
# 1. calculate_pnl
# ---------------------------------------------------------------------------

class TestCalculatePnl:
    def test_buy_winner(self, trade_factory):
        trade = trade_factory(type="BUY", entry_price=100, exit_price=110, quantity=2)
        assert calculate_pnl(trade) == 20

    def test_sell_winner(self, trade_factory):
        trade = trade_factory(type="SELL", entry_price=100, exit_price=90, quantity=1)
        assert calculate_pnl(trade) == 10

    @pytest.mark.parametrize("trade_type,entry,exit_,expected_positive", [
        ("BUY", 100, 120, True),
        ("BUY", 100, 80, False),
        ("SELL", 100, 80, True),
        ("SELL", 100, 120, False),
    ])
    def test_sign_law(self, trade_factory, trade_type, entry, exit_, expected_positive):
        trade = trade_factory(type=trade_type, entry_price=entry, exit_price=exit_)
        assert (calculate_pnl(trade) > 0) is expected_positive

    def test_open_trade_has_no_realized_pnl(self, trade_factory):
        trade = trade_factory(status="OPEN", exit_price=None, closed_at=None)
        assert calculate_pnl(trade) == 0

    def test_closed_without_exit_price(self, trade_factory):
        assert calculate_pnl(trade_factory(exit_price=0)) == 0
        assert calculate_pnl(trade_factory(exit_price=None)) == 0

    def test_stored_profit_loss_is_authoritative(self, trade_factory):
        trade = trade_factory(entry_price=100, exit_price=110, profit_loss=12.3456)
        assert calculate_pnl(trade) == 12.35

    def test_stored_zero_is_recomputed(self, trade_factory):
        trade = trade_factory(entry_price=100, exit_price=110, quantity=3, profit_loss=0)
        assert calculate_pnl(trade) == 30

    def test_non_finite_stored_value_is_ignored(self, trade_factory):
        trade = trade_factory(entry_price=100, exit_price=105, profit_loss=float("inf"))
        assert calculate_pnl(trade) == 5

    @pytest.mark.parametrize("field,value", [
        ("entry_price", "abc"),
        ("entry_price", -5),
        ("quantity", 0),
        ("quantity", float("nan")),
    ])
    def test_bad_numbers_give_zero(self, trade_factory, field, value):
        trade = trade_factory(**{field: value})
        assert calculate_pnl(trade) == 0

    def test_unknown_type_gives_zero(self, trade_factory):
        assert calculate_pnl(trade_factory(type="HOLD")) == 0

    def test_rounds_to_cents(self, trade_factory):
        trade = trade_factory(entry_price=1.0, exit_price=1.00333, quantity=1000)
        assert calculate_pnl(trade) == 3.33


def test_raw_pnl_rejects_infinite_inputs():
    assert raw_pnl("BUY", 100, math.inf, 1) == 0
    assert raw_pnl("SELL", 100, 90, 2) == 20


# ---------------------------------------------------------------------------
# 2. categorize
# ---------------------------------------------------------------------------

class TestCategorize:
    def test_buckets(self, trade_factory):
        trades = [
            trade_factory(id="win", exit_price=110),
            trade_factory(id="loss", exit_price=90),
            trade_factory(id="flat", exit_price=100),
            trade_factory(id="open", status="OPEN", exit_price=None, closed_at=None),
            trade_factory(id="cancelled", status="CANCELLED"),
            trade_factory(id="pending", status="PENDING", exit_price=None),
            trade_factory(id="no-exit", exit_price=0),
        ]
        buckets = categorize(trades)

        assert [t.id for t in buckets.winning] == ["win"]
        assert [t.id for t in buckets.losing] == ["loss"]
        assert [t.id for t in buckets.break_even] == ["flat"]
        assert [t.id for t in buckets.open] == ["open"]
        assert [t.id for t in buckets.invalid] == ["cancelled", "pending", "no-exit"]
        assert [t.id for t in buckets.closed] == ["win", "loss", "flat"]
        assert buckets.closed_pnl == [10, -10, 0]

    def test_partition_is_total(self, trade_factory):
        trades = [
            trade_factory(id=str(i), status=status, exit_price=exit_price)
            for i, (status, exit_price) in enumerate([
                ("CLOSED", 120), ("CLOSED", 80), ("OPEN", None), ("OPEN", 105),
                ("CANCELLED", None), ("CLOSED", None), ("PENDING", 101), ("CLOSED", 100),
            ])
        ]
        buckets = categorize(trades)
        assert buckets.total == len(trades)

        seen = [
            t.id
            for bucket in (buckets.open, buckets.winning, buckets.losing, buckets.break_even, buckets.invalid)
            for t in bucket
        ]
        assert sorted(seen) == sorted(t.id for t in trades)

    def test_open_trade_with_exit_price_is_invalid(self, trade_factory):
        buckets = categorize([trade_factory(status="OPEN", exit_price=105)])
        assert buckets.open == []
        assert len(buckets.invalid) == 1

    def test_negative_exit_price_is_invalid(self, trade_factory):
        buckets = categorize([trade_factory(exit_price=-3)])
        assert len(buckets.invalid) == 1
        assert buckets.closed == []

    def test_empty(self):
        buckets = categorize([])
        assert buckets.total == 0
        assert buckets.closed_pnl == []
