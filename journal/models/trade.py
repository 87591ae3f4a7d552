"""Trade model: one journal entry for a position the user logged."""

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlmodel import SQLModel, Field, Column


class Trade(SQLModel, table=True):
    __tablename__ = "trade"

    id: int | None = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    pair: str  # free-text symbol, e.g. "BTC/USDT"
    type: str  # "BUY" or "SELL"
    status: str = "OPEN"  # "OPEN", "CLOSED", "CANCELLED", "PENDING"

    entry_price: float
    exit_price: float | None = None
    quantity: float

    # Classification labels
    strategy: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    indicators: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    mistakes: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    tags: list[str] = Field(default_factory=list, sa_column=Column(JSON))

    notes: str = ""
    reason: str = ""
    emotional_state: str = "neutral"
    capital: float = 10000.0

    # Derived at write time
    result: str = "UNKNOWN"  # "WIN", "LOSS", "BREAKEVEN", "UNKNOWN"
    profit_loss: float = 0.0
    profit_loss_percentage: float = 0.0

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), index=True)
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    closed_at: datetime | None = None
