"""History store for computed metrics snapshots."""

import logging

from sqlmodel import Session, select

from journal.models.metrics_snapshot import MetricsSnapshot
from journal.schemas.metrics import PerformanceMetrics

logger = logging.getLogger(__name__)


class SqlSnapshotStore:
    def __init__(self, engine):
        self.engine = engine

    def save(self, metrics: PerformanceMetrics) -> MetricsSnapshot:
        snapshot = MetricsSnapshot(
            user_id=metrics.user_id,
            period=metrics.period,
            start_date=metrics.start_date,
            end_date=metrics.end_date,
            is_default_data=metrics.is_default_data,
            total_trades=metrics.total_trades,
            total_pnl=metrics.total_pnl,
            created_at=metrics.created_at,
            payload=metrics.model_dump(mode="json"),
        )
        with Session(self.engine) as session:
            session.add(snapshot)
            session.commit()
            session.refresh(snapshot)
        return snapshot

    def history(self, user_id: str, period: str | None = None, limit: int = 10) -> list[MetricsSnapshot]:
        """Most recent snapshots first."""
        stmt = (
            select(MetricsSnapshot)
            .where(MetricsSnapshot.user_id == user_id)
            .order_by(MetricsSnapshot.created_at.desc(), MetricsSnapshot.id.desc())
        )
        if period is not None:
            stmt = stmt.where(MetricsSnapshot.period == period)
        stmt = stmt.limit(limit)
        with Session(self.engine) as session:
            return list(session.exec(stmt).all())

    def latest(self, user_id: str, period: str | None = None) -> PerformanceMetrics | None:
        rows = self.history(user_id, period, limit=1)
        if not rows:
            return None
        return PerformanceMetrics.model_validate(rows[0].payload)
