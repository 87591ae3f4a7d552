"""Analytics API: performance metrics, history, CSV export, insight payload."""

from datetime import datetime

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from journal.api.deps import get_current_user_id, get_metrics_service
from journal.config import settings
from journal.schemas.metrics import MetricsSnapshotRead, MetricsStatusRead, Period, PerformanceMetrics
from journal.services.export import export_filename, metrics_to_csv
from journal.services.insight_payload import build_insight_payload, metrics_changed
from journal.services.metrics_engine import MetricsService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/metrics", response_model=PerformanceMetrics)
async def get_metrics(
    period: Period = "all-time",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    refresh: bool = False,
    user_id: str = Depends(get_current_user_id),
    service: MetricsService = Depends(get_metrics_service),
):
    return await service.get_metrics(
        user_id, period, start_date, end_date, force_recalculate=refresh
    )


@router.get("/metrics/status", response_model=MetricsStatusRead)
async def get_metrics_status(
    period: Period = "all-time",
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    user_id: str = Depends(get_current_user_id),
    service: MetricsService = Depends(get_metrics_service),
):
    """Fresh computation, reporting whether the result is real, empty or degraded."""
    outcome = await service.compute(user_id, period, start_date, end_date)
    return MetricsStatusRead(status=outcome.status, reason=outcome.reason, metrics=outcome.metrics)


@router.get("/history", response_model=list[MetricsSnapshotRead])
def get_history(
    period: Period | None = None,
    limit: int = 10,
    user_id: str = Depends(get_current_user_id),
    service: MetricsService = Depends(get_metrics_service),
):
    if service.snapshot_store is None:
        return []
    return service.snapshot_store.history(user_id, period, limit)


@router.get("/export.csv")
async def export_csv(
    period: Period = "all-time",
    user_id: str = Depends(get_current_user_id),
    service: MetricsService = Depends(get_metrics_service),
):
    metrics = await service.get_metrics(user_id, period)
    return Response(
        content=metrics_to_csv(metrics),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename(metrics)}"'},
    )


@router.get("/insight-payload")
async def insight_payload(
    user_id: str = Depends(get_current_user_id),
    service: MetricsService = Depends(get_metrics_service),
):
    """Input for the external narrative generator, plus whether a fresh narrative is needed."""
    previous = None
    if service.snapshot_store is not None:
        previous = service.snapshot_store.latest(user_id, "all-time")
    metrics = await service.calculate_performance_metrics(user_id)
    trades = await service.fetch_trades(user_id)
    payload = build_insight_payload(metrics, trades, recent=settings.insight_recent_trades)
    payload["metrics_changed"] = previous is None or metrics_changed(previous, metrics)
    return payload
