"""Pydantic schemas for the trade journal API."""

from datetime import datetime, timezone

from pydantic import BaseModel, Field, field_validator, model_validator

from journal.utils.constants import TRADE_RESULTS, TRADE_STATUSES, TRADE_TYPES


def _check_choice(value: str | None, allowed: list[str]) -> str | None:
    if value is None:
        return None
    value = value.strip().upper()
    if value not in allowed:
        raise ValueError(f"must be one of: {', '.join(allowed)}")
    return value


def _clean_labels(values: list[str] | None) -> list[str] | None:
    if values is None:
        return None
    cleaned: list[str] = []
    for value in values:
        text = value.strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class TradeCreate(BaseModel):
    pair: str = Field(min_length=1, max_length=64)
    type: str
    status: str = "OPEN"
    entry_price: float = Field(gt=0)
    exit_price: float | None = Field(default=None, gt=0)
    quantity: float = Field(gt=0)
    strategy: list[str] = Field(min_length=1)
    indicators: list[str] = Field(default_factory=list)
    mistakes: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    notes: str = ""
    reason: str = Field(min_length=1)
    emotional_state: str = "neutral"
    capital: float = Field(default=10000.0, gt=0)
    result: str | None = None
    created_at: datetime | None = None
    closed_at: datetime | None = None

    @field_validator("pair", "reason")
    @classmethod
    def _trim_required_text(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("must not be empty")
        return text

    @field_validator("type")
    @classmethod
    def _validate_type(cls, value: str) -> str:
        return _check_choice(value, TRADE_TYPES)

    @field_validator("status")
    @classmethod
    def _validate_status(cls, value: str) -> str:
        return _check_choice(value, TRADE_STATUSES)

    @field_validator("result")
    @classmethod
    def _validate_result(cls, value: str | None) -> str | None:
        return _check_choice(value, TRADE_RESULTS)

    @field_validator("strategy", "indicators", "mistakes", "tags")
    @classmethod
    def _clean_label_lists(cls, value: list[str]) -> list[str]:
        return _clean_labels(value)

    @field_validator("created_at", "closed_at")
    @classmethod
    def _normalize_dates(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @model_validator(mode="after")
    def _validate_lifecycle(self):
        if not self.strategy:
            raise ValueError("At least one strategy must be selected")
        if self.status == "CLOSED" and self.exit_price is None:
            raise ValueError("Exit price is required for closed trades")
        if self.closed_at is not None and self.status != "CLOSED":
            raise ValueError("Closed date should only be set for closed trades")
        if self.result not in (None, "UNKNOWN") and self.status != "CLOSED":
            raise ValueError("Trade result can only be set for closed trades")
        if self.closed_at and self.created_at and self.closed_at < self.created_at:
            raise ValueError("Closed date must not be earlier than created date")
        return self


class TradeUpdate(BaseModel):
    pair: str | None = Field(default=None, min_length=1, max_length=64)
    type: str | None = None
    status: str | None = None
    entry_price: float | None = Field(default=None, gt=0)
    exit_price: float | None = Field(default=None, gt=0)
    quantity: float | None = Field(default=None, gt=0)
    strategy: list[str] | None = None
    indicators: list[str] | None = None
    mistakes: list[str] | None = None
    tags: list[str] | None = None
    notes: str | None = None
    reason: str | None = None
    emotional_state: str | None = None
    capital: float | None = Field(default=None, gt=0)
    closed_at: datetime | None = None

    @field_validator("type")
    @classmethod
    def _validate_optional_type(cls, value: str | None) -> str | None:
        return _check_choice(value, TRADE_TYPES)

    @field_validator("status")
    @classmethod
    def _validate_optional_status(cls, value: str | None) -> str | None:
        return _check_choice(value, TRADE_STATUSES)

    @field_validator("strategy", "indicators", "mistakes", "tags")
    @classmethod
    def _clean_optional_labels(cls, value: list[str] | None) -> list[str] | None:
        return _clean_labels(value)

    @field_validator("strategy")
    @classmethod
    def _require_strategy(cls, value: list[str] | None) -> list[str] | None:
        if value is not None and not value:
            raise ValueError("At least one strategy must be selected")
        return value

    @field_validator("closed_at")
    @classmethod
    def _normalize_closed_at(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @model_validator(mode="after")
    def _validate_optional_lifecycle(self):
        if self.status == "CLOSED" and self.exit_price is None:
            raise ValueError("Exit price is required when closing a trade")
        return self


class TradeClose(BaseModel):
    exit_price: float = Field(gt=0)
    closed_at: datetime | None = None
    notes: str | None = None
    mistakes: list[str] | None = None

    @field_validator("closed_at")
    @classmethod
    def _normalize_closed_at(cls, value: datetime | None) -> datetime | None:
        return _as_utc(value)

    @field_validator("mistakes")
    @classmethod
    def _clean_mistakes(cls, value: list[str] | None) -> list[str] | None:
        return _clean_labels(value)


class TradeRead(BaseModel):
    id: int
    user_id: str
    pair: str
    type: str
    status: str
    entry_price: float
    exit_price: float | None
    quantity: float
    strategy: list[str]
    indicators: list[str]
    mistakes: list[str]
    tags: list[str]
    notes: str
    reason: str
    emotional_state: str
    capital: float
    result: str
    profit_loss: float
    profit_loss_percentage: float
    created_at: datetime
    updated_at: datetime
    closed_at: datetime | None

    model_config = {"from_attributes": True}
