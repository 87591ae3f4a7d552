"""Realized profit/loss for a single trade.

Pure functions over trade records; nothing here touches the database.
"""

import math

from journal.services.trade_record import TradeRecord


def has_exit_price(trade: TradeRecord) -> bool:
    """True when the exit price is present and non-zero (NaN counts as absent)."""
    price = trade.exit_price
    return price is not None and not math.isnan(price) and price != 0


def raw_pnl(trade_type: str, entry_price: float, exit_price: float, quantity: float) -> float:
    """Directional PnL from prices; 0 for unknown types or unusable numbers."""
    values = (entry_price, exit_price, quantity)
    if not all(isinstance(v, (int, float)) and math.isfinite(v) for v in values):
        return 0.0
    if entry_price <= 0 or exit_price <= 0 or quantity <= 0:
        return 0.0

    if trade_type == "BUY":
        return (exit_price - entry_price) * quantity
    if trade_type == "SELL":
        return (entry_price - exit_price) * quantity
    return 0.0


def calculate_pnl(trade: TradeRecord) -> float:
    """Realized PnL of a closed trade, rounded to cents.

    A stored non-zero ``profit_loss`` wins over recomputation; a stored zero
    is ignored because it cannot be told apart from "never computed".
    """
    if trade.status != "CLOSED" or not has_exit_price(trade):
        return 0.0

    stored = trade.profit_loss
    if stored is not None and math.isfinite(stored) and stored != 0:
        return round(stored, 2)

    pnl = raw_pnl(trade.type, trade.entry_price, trade.exit_price, trade.quantity)
    return round(pnl, 2)
