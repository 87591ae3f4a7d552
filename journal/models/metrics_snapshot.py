"""MetricsSnapshot model: history of every computed metrics snapshot."""

from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON
from sqlmodel import SQLModel, Field, Column


class MetricsSnapshot(SQLModel, table=True):
    __tablename__ = "metrics_snapshot"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    period: str = Field(index=True)  # "all-time", "daily", "weekly", "monthly", "yearly"
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_default_data: bool = False
    total_trades: int = 0
    total_pnl: float = 0.0
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON))
