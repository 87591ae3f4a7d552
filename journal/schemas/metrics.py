"""Pydantic schemas for performance metrics."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from journal.utils.constants import HOURS_IN_DAY, NO_DATA_LABEL

Period = Literal["all-time", "daily", "weekly", "monthly", "yearly"]

_FROZEN = {"frozen": True}


class MistakeStat(BaseModel):
    description: str
    count: int
    impact: float  # average PnL of trades with this mistake

    model_config = _FROZEN


class StrategyStat(BaseModel):
    strategy: str
    pnl: float
    win_rate: float

    model_config = _FROZEN


class IndicatorStat(BaseModel):
    indicator: str
    count: int
    success_rate: float

    model_config = _FROZEN


class BucketStat(BaseModel):
    bucket: str  # "09:00" for time of day, the state name for emotions
    trades: int
    win_rate: float

    model_config = _FROZEN


def placeholder_time_of_day() -> list[BucketStat]:
    return [BucketStat(bucket=f"{hour:02d}:00", trades=0, win_rate=0.0) for hour in range(HOURS_IN_DAY)]


class BehavioralPatterns(BaseModel):
    time_of_day: list[BucketStat] = Field(default_factory=placeholder_time_of_day)
    emotional_state: list[BucketStat] = Field(default_factory=list)
    overall_confidence: float = 0.0
    risk_management: float = 0.0
    consistency: float = 0.0
    time_management: float = 0.0
    discipline: float = 0.0

    model_config = _FROZEN


def placeholder_mistakes() -> list[MistakeStat]:
    return [MistakeStat(description=NO_DATA_LABEL, count=0, impact=0.0)]


def placeholder_strategies() -> list[StrategyStat]:
    return [StrategyStat(strategy=NO_DATA_LABEL, pnl=0.0, win_rate=0.0)]


def placeholder_indicators() -> list[IndicatorStat]:
    return [IndicatorStat(indicator=NO_DATA_LABEL, count=0, success_rate=0.0)]


class PerformanceMetrics(BaseModel):
    """One immutable snapshot of a user's performance."""

    user_id: str
    period: Period = "all-time"
    start_date: datetime | None = None
    end_date: datetime | None = None

    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0

    win_rate: float = 0.0
    total_pnl: float = 0.0
    average_pnl: float = 0.0
    largest_win: float = 0.0
    largest_loss: float = 0.0
    average_win_size: float = 0.0
    average_loss_size: float = 0.0

    profit_factor: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    risk_reward_ratio: float = 0.0

    common_mistakes: list[MistakeStat] = Field(default_factory=placeholder_mistakes)
    most_profitable_strategies: list[StrategyStat] = Field(default_factory=placeholder_strategies)
    most_used_indicators: list[IndicatorStat] = Field(default_factory=placeholder_indicators)
    behavioral_patterns: BehavioralPatterns = Field(default_factory=BehavioralPatterns)

    created_at: datetime
    is_default_data: bool = False

    model_config = _FROZEN


class MetricsStatusRead(BaseModel):
    status: Literal["computed", "no_data", "degraded"]
    reason: str | None = None
    metrics: PerformanceMetrics


class MetricsSnapshotRead(BaseModel):
    id: int
    user_id: str
    period: str
    start_date: datetime | None
    end_date: datetime | None
    is_default_data: bool
    total_trades: int
    total_pnl: float
    created_at: datetime

    model_config = {"from_attributes": True}
