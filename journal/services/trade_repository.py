"""Trade repositories the metrics engine reads from.

Both implementations normalize at the boundary, so callers always receive
``TradeRecord`` values.
"""

import logging
from collections.abc import Iterable
from typing import Any, Protocol

from sqlmodel import Session, select

from journal.models.trade import Trade
from journal.services.trade_record import TradeRecord, normalize_trade

logger = logging.getLogger(__name__)


class TradeRepository(Protocol):
    async def get_trades_for_user(self, user_id: str) -> list[TradeRecord]:
        ...


class SqlTradeRepository:
    """Reads trades from the SQLModel database, oldest first."""

    def __init__(self, engine):
        self.engine = engine

    async def get_trades_for_user(self, user_id: str) -> list[TradeRecord]:
        with Session(self.engine) as session:
            rows = session.exec(
                select(Trade)
                .where(Trade.user_id == user_id)
                .order_by(Trade.created_at, Trade.id)
            ).all()
        return [normalize_trade(row) for row in rows]


class InMemoryTradeRepository:
    """Holds raw trade documents, e.g. a JSON export loaded from disk."""

    def __init__(self, documents: Iterable[Any] = ()):
        self._records: list[TradeRecord] = []
        for doc in documents:
            self.add(doc)

    def add(self, document: Any) -> TradeRecord:
        record = normalize_trade(document)
        self._records.append(record)
        return record

    def user_ids(self) -> list[str]:
        seen: list[str] = []
        for record in self._records:
            if record.user_id not in seen:
                seen.append(record.user_id)
        return seen

    async def get_trades_for_user(self, user_id: str) -> list[TradeRecord]:
        return [r for r in self._records if r.user_id == user_id]
