"""Risk and return statistics over a sequence of per-trade PnL values.

Pure numpy arithmetic; callers decide ordering and capital.
"""

from dataclasses import dataclass

import numpy as np

from journal.utils.constants import (
    DEFAULT_CAPITAL,
    DEFAULT_RISK_FREE_RATE,
    RISK_REWARD_SENTINEL,
)


# ---------------------------------------------------------------------------
# Individual statistics
# ---------------------------------------------------------------------------

def sharpe_ratio(
    pnls: list[float],
    reference_capital: float = DEFAULT_CAPITAL,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
) -> float:
    """(mean return - risk free) / population std of returns; 0 when std is 0."""
    if not pnls or reference_capital <= 0:
        return 0.0
    returns = np.asarray(pnls, dtype=float) / reference_capital
    std = float(np.std(returns))
    if std == 0 or np.isnan(std):
        return 0.0
    return (float(np.mean(returns)) - risk_free_rate) / std


def max_drawdown(pnls: list[float]) -> float:
    """Largest (peak - value) / peak over the sequence, in the order given.

    The order matters: callers wanting a chronological drawdown must sort
    first. Points where the running peak is not positive are skipped.
    """
    if not pnls:
        return 0.0
    values = np.asarray(pnls, dtype=float)
    peaks = np.maximum.accumulate(values)
    positive = peaks > 0
    if not positive.any():
        return 0.0
    drawdowns = (peaks[positive] - values[positive]) / peaks[positive]
    return float(max(drawdowns.max(), 0.0))


def gross_profit_and_loss(pnls: list[float]) -> tuple[float, float]:
    """Sum of winning PnL and absolute sum of losing PnL."""
    values = np.asarray(pnls, dtype=float)
    gross_profit = float(values[values > 0].sum())
    gross_loss = float(-values[values < 0].sum())
    return gross_profit, gross_loss


def profit_factor(gross_profit: float, gross_loss: float) -> float:
    """Never infinite: with no losses, the gross profit itself (or 0)."""
    if gross_loss == 0:
        return gross_profit if gross_profit > 0 else 0.0
    return gross_profit / gross_loss


def risk_reward_ratio(average_win: float, average_loss: float) -> float:
    if average_loss == 0:
        return RISK_REWARD_SENTINEL if average_win > 0 else 0.0
    return average_win / average_loss


# ---------------------------------------------------------------------------
# Combined result
# ---------------------------------------------------------------------------

@dataclass
class RiskStats:
    total_pnl: float = 0.0
    average_pnl: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    average_win_size: float = 0.0
    average_loss_size: float = 0.0
    profit_factor: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    risk_reward_ratio: float = 0.0


def compute_risk_stats(
    pnls: list[float],
    reference_capital: float = DEFAULT_CAPITAL,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    drawdown_pnls: list[float] | None = None,
) -> RiskStats:
    """All statistics for one PnL sequence.

    ``drawdown_pnls`` lets the caller supply a re-ordered sequence for the
    drawdown only; by default the input order is used.
    """
    if not pnls:
        return RiskStats()

    values = np.asarray(pnls, dtype=float)
    gross_profit, gross_loss = gross_profit_and_loss(pnls)
    win_count = int((values > 0).sum())
    loss_count = int((values < 0).sum())

    average_win = gross_profit / win_count if win_count else 0.0
    average_loss = gross_loss / loss_count if loss_count else 0.0
    total = float(values.sum())

    return RiskStats(
        total_pnl=total,
        average_pnl=total / len(values),
        largest_win=max(0.0, float(values.max())),
        largest_loss=min(0.0, float(values.min())),
        gross_profit=gross_profit,
        gross_loss=gross_loss,
        average_win_size=average_win,
        average_loss_size=average_loss,
        profit_factor=profit_factor(gross_profit, gross_loss),
        sharpe_ratio=sharpe_ratio(pnls, reference_capital, risk_free_rate),
        max_drawdown=max_drawdown(drawdown_pnls if drawdown_pnls is not None else pnls),
        risk_reward_ratio=risk_reward_ratio(average_win, average_loss),
    )
