"""Trade write path: create, update, close and delete journal entries.

Derived fields (result, profit_loss, profit_loss_percentage, closed_at) are
recomputed on every write so the stored values stay a faithful cache of
what ``calculate_pnl`` would derive.
"""

import logging
from datetime import datetime, timezone

from pydantic import ValidationError
from sqlmodel import Session, select

from journal.models.trade import Trade
from journal.schemas.trade import TradeClose, TradeCreate, TradeUpdate
from journal.services.pnl import raw_pnl
from journal.utils.errors import TradeNotFoundError, TradeStateError, TradeValidationError

logger = logging.getLogger(__name__)

# Fields owned by the server; never taken from merged client input
_DERIVED_FIELDS = ("id", "user_id", "result", "profit_loss", "profit_loss_percentage", "updated_at")


def apply_derived_fields(trade: Trade, now: datetime | None = None) -> Trade:
    now = now or datetime.now(timezone.utc)
    if trade.status == "CLOSED" and trade.exit_price and trade.exit_price > 0:
        pnl = raw_pnl(trade.type, trade.entry_price, trade.exit_price, trade.quantity)
        investment = trade.entry_price * trade.quantity
        trade.profit_loss = pnl
        trade.profit_loss_percentage = pnl / investment * 100 if investment else 0.0
        if pnl > 0:
            trade.result = "WIN"
        elif pnl < 0:
            trade.result = "LOSS"
        else:
            trade.result = "BREAKEVEN"
        trade.closed_at = trade.closed_at or now
    else:
        trade.profit_loss = 0.0
        trade.profit_loss_percentage = 0.0
        trade.result = "UNKNOWN"
        if trade.status != "CLOSED":
            trade.closed_at = None
    trade.updated_at = now
    return trade


def list_trades(
    session: Session,
    user_id: str,
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> list[Trade]:
    stmt = select(Trade).where(Trade.user_id == user_id).order_by(Trade.created_at.desc())
    if status is not None:
        stmt = stmt.where(Trade.status == status.upper())
    stmt = stmt.offset(offset).limit(limit)
    return list(session.exec(stmt).all())


def get_user_trade(session: Session, user_id: str, trade_id: int) -> Trade:
    trade = session.get(Trade, trade_id)
    if not trade or trade.user_id != user_id:
        raise TradeNotFoundError(trade_id)
    return trade


def create_trade(session: Session, user_id: str, data: TradeCreate) -> Trade:
    payload = data.model_dump(exclude={"result"})
    if payload.get("created_at") is None:
        payload.pop("created_at")
    trade = apply_derived_fields(Trade(user_id=user_id, **payload))
    session.add(trade)
    session.commit()
    session.refresh(trade)
    logger.info(f"Created trade {trade.id} ({trade.pair} {trade.type}) for user {user_id}")
    return trade


def update_trade(session: Session, user_id: str, trade_id: int, data: TradeUpdate) -> Trade:
    trade = get_user_trade(session, user_id, trade_id)
    update_data = data.model_dump(exclude_unset=True)

    # Validate the full merged trade so partial updates cannot bypass cross-field rules.
    merged = {**trade.model_dump(), **update_data}
    for name in _DERIVED_FIELDS:
        merged.pop(name, None)
    if merged.get("status") != "CLOSED":
        merged["closed_at"] = None
    try:
        validated = TradeCreate.model_validate(merged)
    except ValidationError as e:
        raise TradeValidationError(
            [{"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]} for err in e.errors()]
        )

    for key in update_data:
        setattr(trade, key, getattr(validated, key))
    trade.closed_at = validated.closed_at
    apply_derived_fields(trade)

    session.add(trade)
    session.commit()
    session.refresh(trade)
    return trade


def close_trade(session: Session, user_id: str, trade_id: int, data: TradeClose) -> Trade:
    trade = get_user_trade(session, user_id, trade_id)
    if trade.status == "CLOSED":
        raise TradeStateError("trade/already-closed")
    if trade.status != "OPEN":
        raise TradeStateError("trade/invalid-status", f"Cannot close a {trade.status} trade")

    created_at = trade.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    if data.closed_at is not None and data.closed_at < created_at:
        raise TradeStateError("trade/invalid-date-range", "Closed date must not be earlier than created date")

    trade.status = "CLOSED"
    trade.exit_price = data.exit_price
    trade.closed_at = data.closed_at
    if data.notes is not None:
        trade.notes = data.notes
    if data.mistakes is not None:
        trade.mistakes = data.mistakes
    apply_derived_fields(trade)

    session.add(trade)
    session.commit()
    session.refresh(trade)
    logger.info(f"Closed trade {trade.id} for user {user_id}: {trade.result} {trade.profit_loss:.2f}")
    return trade


def delete_trade(session: Session, user_id: str, trade_id: int):
    trade = get_user_trade(session, user_id, trade_id)
    session.delete(trade)
    session.commit()
