"""Database models."""

from journal.models.trade import Trade
from journal.models.metrics_snapshot import MetricsSnapshot

__all__ = [
    "Trade",
    "MetricsSnapshot",
]
