"""Performance metrics orchestration.

Fetches a user's trades, runs categorization, the aggregators and the risk
statistics, and assembles one immutable ``PerformanceMetrics`` snapshot:

    repository -> normalize -> categorize -> {aggregations, behavior, risk} -> snapshot

``build_metrics`` is the pure part. ``MetricsService`` wraps it with the
repository fetch, the TTL cache and snapshot persistence. Internal failures
never escape ``calculate_performance_metrics``; they degrade to default data,
and ``compute`` reports which case happened.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from zoneinfo import ZoneInfo

from journal.schemas.metrics import BehavioralPatterns, PerformanceMetrics
from journal.services import aggregations
from journal.services.behavior import score_behavior
from journal.services.categorizer import categorize
from journal.services.metrics_cache import MetricsCache, cache_key
from journal.services.risk_stats import compute_risk_stats
from journal.services.trade_record import TradeRecord
from journal.services.trade_repository import TradeRepository
from journal.utils.constants import DEFAULT_CAPITAL, DEFAULT_PERIOD, DEFAULT_RISK_FREE_RATE, PERIODS
from journal.utils.errors import AnalyticsQueryError, TradeFetchError

logger = logging.getLogger(__name__)

STATUS_COMPUTED = "computed"
STATUS_NO_DATA = "no_data"
STATUS_DEGRADED = "degraded"


@dataclass(frozen=True)
class MetricsOutcome:
    """Metrics plus how they were obtained."""
    status: str  # "computed", "no_data", "degraded"
    metrics: PerformanceMetrics
    reason: str | None = None

    @property
    def is_default(self) -> bool:
        return self.status != STATUS_COMPUTED


def _utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def resolve_timezone(name: str) -> tzinfo | None:
    """IANA zone for time-of-day bucketing; None means system local time."""
    return ZoneInfo(name) if name else None


def default_metrics(
    user_id: str,
    period: str = DEFAULT_PERIOD,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    total_trades: int = 0,
    created_at: datetime | None = None,
) -> PerformanceMetrics:
    """Zeroed snapshot with placeholder breakdowns, flagged as default data."""
    return PerformanceMetrics(
        user_id=user_id,
        period=period,
        start_date=start_date,
        end_date=end_date,
        total_trades=total_trades,
        created_at=created_at or datetime.now(timezone.utc),
        is_default_data=True,
    )


def filter_by_date(
    trades: list[TradeRecord],
    start_date: datetime | None,
    end_date: datetime | None,
) -> list[TradeRecord]:
    """Keep trades created within [start_date, end_date]; open bounds allowed."""
    start, end = _utc(start_date), _utc(end_date)
    return [
        t for t in trades
        if (start is None or t.created_at >= start) and (end is None or t.created_at <= end)
    ]


def _chronological(trades: list[TradeRecord], pnls: list[float]) -> list[float]:
    order = sorted(range(len(trades)), key=lambda i: trades[i].closed_at or trades[i].created_at)
    return [pnls[i] for i in order]


def build_metrics(
    user_id: str,
    trades: list[TradeRecord],
    period: str = DEFAULT_PERIOD,
    start_date: datetime | None = None,
    end_date: datetime | None = None,
    risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
    drawdown_chronological: bool = False,
    tz: tzinfo | None = None,
    now: datetime | None = None,
) -> MetricsOutcome:
    """Pure computation of one snapshot from an already-fetched trade list."""
    created_at = now or datetime.now(timezone.utc)
    buckets = categorize(trades)
    closed, pnls = buckets.closed, buckets.closed_pnl

    if not closed:
        metrics = default_metrics(user_id, period, start_date, end_date, len(trades), created_at)
        return MetricsOutcome(STATUS_NO_DATA, metrics, "no closed trades")

    reference_capital = closed[0].capital or DEFAULT_CAPITAL
    stats = compute_risk_stats(
        pnls,
        reference_capital=reference_capital,
        risk_free_rate=risk_free_rate,
        drawdown_pnls=_chronological(closed, pnls) if drawdown_chronological else None,
    )
    scores = score_behavior(closed, pnls, tz)

    metrics = PerformanceMetrics(
        user_id=user_id,
        period=period,
        start_date=start_date,
        end_date=end_date,
        total_trades=len(trades),
        winning_trades=len(buckets.winning),
        losing_trades=len(buckets.losing),
        win_rate=len(buckets.winning) / len(closed) * 100,
        total_pnl=stats.total_pnl,
        average_pnl=stats.average_pnl,
        largest_win=stats.largest_win,
        largest_loss=stats.largest_loss,
        average_win_size=stats.average_win_size,
        average_loss_size=stats.average_loss_size,
        profit_factor=stats.profit_factor,
        sharpe_ratio=stats.sharpe_ratio,
        max_drawdown=stats.max_drawdown,
        risk_reward_ratio=stats.risk_reward_ratio,
        common_mistakes=aggregations.aggregate_mistakes(closed, pnls),
        most_profitable_strategies=aggregations.aggregate_strategies(closed, pnls),
        most_used_indicators=aggregations.aggregate_indicators(closed, pnls),
        behavioral_patterns=BehavioralPatterns(
            time_of_day=aggregations.aggregate_time_of_day(closed, pnls, tz),
            emotional_state=aggregations.aggregate_emotional_state(closed, pnls),
            overall_confidence=scores.fear_greed,
            risk_management=scores.risk_management,
            consistency=scores.consistency,
            time_management=scores.time_management,
            discipline=scores.discipline,
        ),
        created_at=created_at,
        is_default_data=False,
    )
    return MetricsOutcome(STATUS_COMPUTED, metrics)


class MetricsService:
    """Computes, caches and records metrics snapshots for users.

    All collaborators are injected; the service keeps no module-level state.
    """

    def __init__(
        self,
        repository: TradeRepository,
        cache: MetricsCache | None = None,
        snapshot_store=None,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        drawdown_chronological: bool = False,
        apply_date_filter: bool = False,
        tz: tzinfo | None = None,
        degrade_on_fetch_error: bool = False,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.repository = repository
        self.cache = cache if cache is not None else MetricsCache()
        self.snapshot_store = snapshot_store
        self.risk_free_rate = risk_free_rate
        self.drawdown_chronological = drawdown_chronological
        self.apply_date_filter = apply_date_filter
        self.tz = tz
        self.degrade_on_fetch_error = degrade_on_fetch_error
        self._clock = clock

    @classmethod
    def from_settings(cls, engine, settings) -> "MetricsService":
        from journal.services.snapshot_store import SqlSnapshotStore
        from journal.services.trade_repository import SqlTradeRepository

        return cls(
            repository=SqlTradeRepository(engine),
            cache=MetricsCache(ttl_seconds=settings.metrics_cache_ttl_seconds),
            snapshot_store=SqlSnapshotStore(engine) if settings.persist_snapshots else None,
            risk_free_rate=settings.risk_free_rate,
            drawdown_chronological=settings.drawdown_chronological,
            apply_date_filter=settings.apply_date_filter,
            tz=resolve_timezone(settings.timezone),
        )

    @staticmethod
    def validate_query(period: str, start_date: datetime | None, end_date: datetime | None):
        if period not in PERIODS:
            allowed = ", ".join(PERIODS)
            raise AnalyticsQueryError(
                "analytics/invalid-parameters", f"period must be one of: {allowed}"
            )
        start, end = _utc(start_date), _utc(end_date)
        if start is not None and end is not None and start > end:
            raise AnalyticsQueryError(
                "analytics/invalid-date-range", "start_date must be before end_date"
            )

    async def fetch_trades(self, user_id: str) -> list[TradeRecord]:
        try:
            return await self.repository.get_trades_for_user(user_id)
        except Exception as e:
            logger.error(f"Trade fetch failed for user {user_id}: {e}")
            raise TradeFetchError(user_id, e) from e

    async def compute(
        self,
        user_id: str,
        period: str = DEFAULT_PERIOD,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> MetricsOutcome:
        """Compute a fresh snapshot and say whether it is real, empty or degraded."""
        self.validate_query(period, start_date, end_date)
        now = self._clock()

        try:
            trades = await self.fetch_trades(user_id)
        except TradeFetchError as e:
            if not self.degrade_on_fetch_error:
                raise
            metrics = default_metrics(user_id, period, start_date, end_date, created_at=now)
            return MetricsOutcome(STATUS_DEGRADED, metrics, e.message)

        if self.apply_date_filter:
            trades = filter_by_date(trades, start_date, end_date)

        try:
            outcome = build_metrics(
                user_id,
                trades,
                period,
                start_date,
                end_date,
                risk_free_rate=self.risk_free_rate,
                drawdown_chronological=self.drawdown_chronological,
                tz=self.tz,
                now=now,
            )
        except Exception as e:
            logger.warning(f"Metrics for user {user_id} degraded to defaults: {e}", exc_info=True)
            metrics = default_metrics(user_id, period, start_date, end_date, len(trades), now)
            outcome = MetricsOutcome(STATUS_DEGRADED, metrics, f"calculation error: {e}")

        self._persist(outcome.metrics)
        return outcome

    async def calculate_performance_metrics(
        self,
        user_id: str,
        period: str = DEFAULT_PERIOD,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
    ) -> PerformanceMetrics:
        outcome = await self.compute(user_id, period, start_date, end_date)
        return outcome.metrics

    async def get_metrics(
        self,
        user_id: str,
        period: str = DEFAULT_PERIOD,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        force_recalculate: bool = False,
    ) -> PerformanceMetrics:
        """Cached variant of ``calculate_performance_metrics``."""
        key = cache_key(user_id, start_date, end_date)
        if not force_recalculate:
            cached = self.cache.get(key)
            if cached is not None and cached.period == period:
                return cached

        metrics = await self.calculate_performance_metrics(user_id, period, start_date, end_date)
        self.cache.set(key, metrics)
        return metrics

    def invalidate(self, user_id: str):
        self.cache.invalidate(user_id)

    async def on_trade_update(self, user_id: str) -> PerformanceMetrics:
        """Drop stale entries and recompute the all-time snapshot."""
        self.invalidate(user_id)
        return await self.get_metrics(user_id, force_recalculate=True)

    def _persist(self, metrics: PerformanceMetrics):
        if self.snapshot_store is None:
            return
        try:
            self.snapshot_store.save(metrics)
        except Exception as e:
            logger.warning(f"Could not persist metrics snapshot for user {metrics.user_id}: {e}")
