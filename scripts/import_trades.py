#!/usr/bin/env python3
"""One-time import: load an exported trade collection (JSON) into the database.

Accepts the camelCase documents of the old mobile backend as well as
snake_case rows. Every document goes through the same normalization the
metrics engine uses; derived fields are recomputed on insert.

Usage:
    python scripts/import_trades.py <json_path> [user_id]

Example:
    python scripts/import_trades.py exports/trades.json
"""

import math
import sys
from pathlib import Path

from sqlmodel import Session

from journal.cli import load_trade_documents
from journal.database import engine, create_db_and_tables
from journal.models.trade import Trade
from journal.services.trade_record import TradeRecord, normalize_trade
from journal.services.trades import apply_derived_fields


def _finite_or(value: float | None, default: float | None) -> float | None:
    if value is None or not math.isfinite(value):
        return default
    return value


def to_row(record: TradeRecord) -> Trade:
    trade = Trade(
        user_id=record.user_id,
        pair=record.pair,
        type=record.type,
        status=record.status,
        entry_price=_finite_or(record.entry_price, 0.0),
        exit_price=_finite_or(record.exit_price, None),
        quantity=_finite_or(record.quantity, 0.0),
        strategy=list(record.strategy),
        indicators=list(record.indicators),
        mistakes=list(record.mistakes),
        tags=list(record.tags),
        notes=record.notes,
        reason=record.reason,
        emotional_state=record.emotional_state,
        capital=record.capital,
        created_at=record.created_at,
        closed_at=record.closed_at,
    )
    updated_at = record.updated_at or record.created_at
    return apply_derived_fields(trade, now=updated_at)


def import_trades(path: str, user_id: str | None = None):
    if not Path(path).exists():
        print(f"ERROR: file not found: {path}")
        sys.exit(1)

    create_db_and_tables()
    documents = load_trade_documents(path)

    imported = skipped = 0
    with Session(engine) as session:
        for doc in documents:
            try:
                record = normalize_trade(doc, default_user_id=user_id or "")
            except TypeError as e:
                print(f"  SKIP {e}")
                skipped += 1
                continue
            if not record.user_id:
                print(f"  SKIP trade {record.id or '?'} (no user id)")
                skipped += 1
                continue
            session.add(to_row(record))
            imported += 1
        session.commit()

    print(f"\nImported {imported} trades ({skipped} skipped).")


if __name__ == "__main__":
    if len(sys.argv) not in (2, 3):
        print(__doc__)
        sys.exit(1)
    import_trades(sys.argv[1], sys.argv[2] if len(sys.argv) == 3 else None)
