"""Partition a trade set into open / winning / losing / break-even / invalid."""

from dataclasses import dataclass, field

from journal.services.pnl import calculate_pnl, has_exit_price
from journal.services.trade_record import TradeRecord


@dataclass
class TradeBuckets:
    """Every input trade sits in exactly one bucket, input order preserved."""
    open: list[TradeRecord] = field(default_factory=list)
    winning: list[TradeRecord] = field(default_factory=list)
    losing: list[TradeRecord] = field(default_factory=list)
    break_even: list[TradeRecord] = field(default_factory=list)
    invalid: list[TradeRecord] = field(default_factory=list)
    # Closed trades in input order, paired with their PnL
    closed: list[TradeRecord] = field(default_factory=list)
    closed_pnl: list[float] = field(default_factory=list)

    @property
    def total(self) -> int:
        return (
            len(self.open) + len(self.winning) + len(self.losing)
            + len(self.break_even) + len(self.invalid)
        )


def categorize(trades: list[TradeRecord]) -> TradeBuckets:
    buckets = TradeBuckets()
    for trade in trades:
        if trade.status == "OPEN" and not has_exit_price(trade):
            buckets.open.append(trade)
            continue

        if trade.status == "CLOSED" and has_exit_price(trade) and trade.exit_price > 0:
            pnl = calculate_pnl(trade)
            if pnl > 0:
                buckets.winning.append(trade)
            elif pnl < 0:
                buckets.losing.append(trade)
            else:
                buckets.break_even.append(trade)
            buckets.closed.append(trade)
            buckets.closed_pnl.append(pnl)
            continue

        buckets.invalid.append(trade)
    return buckets
