"""Trade journal API."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from journal.api.deps import get_current_user_id, get_metrics_service
from journal.config import settings
from journal.database import get_session
from journal.schemas.trade import TradeClose, TradeCreate, TradeRead, TradeUpdate
from journal.services import trades as trade_service
from journal.services.metrics_engine import MetricsService

router = APIRouter(prefix="/api/trades", tags=["trades"])


def _after_write(service: MetricsService, user_id: str):
    """Cached metrics are stale once the trade set changes."""
    service.invalidate(user_id)
    if settings.refresh_on_write:
        from journal.engine.scheduler import queue_metrics_refresh
        queue_metrics_refresh(service, user_id)


@router.get("", response_model=list[TradeRead])
def list_trades(
    status: str | None = None,
    limit: int = 50,
    offset: int = 0,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    return trade_service.list_trades(session, user_id, status=status, limit=limit, offset=offset)


@router.post("", response_model=TradeRead, status_code=201)
def create_trade(
    data: TradeCreate,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
    service: MetricsService = Depends(get_metrics_service),
):
    trade = trade_service.create_trade(session, user_id, data)
    _after_write(service, user_id)
    return trade


@router.get("/{trade_id}", response_model=TradeRead)
def get_trade(
    trade_id: int,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
):
    return trade_service.get_user_trade(session, user_id, trade_id)


@router.put("/{trade_id}", response_model=TradeRead)
def update_trade(
    trade_id: int,
    data: TradeUpdate,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
    service: MetricsService = Depends(get_metrics_service),
):
    trade = trade_service.update_trade(session, user_id, trade_id, data)
    _after_write(service, user_id)
    return trade


@router.post("/{trade_id}/close", response_model=TradeRead)
def close_trade(
    trade_id: int,
    data: TradeClose,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
    service: MetricsService = Depends(get_metrics_service),
):
    trade = trade_service.close_trade(session, user_id, trade_id, data)
    _after_write(service, user_id)
    return trade


@router.delete("/{trade_id}", status_code=204)
def delete_trade(
    trade_id: int,
    user_id: str = Depends(get_current_user_id),
    session: Session = Depends(get_session),
    service: MetricsService = Depends(get_metrics_service),
):
    trade_service.delete_trade(session, user_id, trade_id)
    _after_write(service, user_id)
