"""Canonical trade value used by the metrics engine.

Every trade the engine sees passes through ``normalize_trade`` exactly once,
at the repository boundary. Persisted rows and raw exported documents
(camelCase keys, string numbers, epoch or ISO timestamps) all come out as a
``TradeRecord`` with every default applied, so the aggregators never have to
guess at missing fields.
"""

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from journal.utils.constants import DEFAULT_CAPITAL, DEFAULT_EMOTIONAL_STATE

# Exported documents use camelCase; the database uses snake_case
_KEY_ALIASES = {
    "userId": "user_id",
    "entryPrice": "entry_price",
    "exitPrice": "exit_price",
    "profitLoss": "profit_loss",
    "profitLossPercentage": "profit_loss_percentage",
    "emotionalState": "emotional_state",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
    "closedAt": "closed_at",
}

_EPOCH_MS_THRESHOLD = 1e11


@dataclass(frozen=True)
class TradeRecord:
    """One normalized trade."""
    user_id: str
    pair: str
    type: str
    status: str
    entry_price: float
    exit_price: float | None
    quantity: float
    created_at: datetime
    id: str | None = None
    strategy: tuple[str, ...] = ()
    indicators: tuple[str, ...] = ()
    mistakes: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    notes: str = ""
    reason: str = ""
    emotional_state: str = DEFAULT_EMOTIONAL_STATE
    capital: float = DEFAULT_CAPITAL
    result: str = "UNKNOWN"
    profit_loss: float | None = None
    profit_loss_percentage: float | None = None
    updated_at: datetime | None = None
    closed_at: datetime | None = None
    extra: dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def _to_float(value: Any) -> float:
    """Coerce to float; anything unparseable becomes NaN so PnL guards catch it."""
    if value is None or isinstance(value, bool):
        return math.nan
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def _to_optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return _to_float(value)


def _to_labels(value: Any) -> tuple[str, ...]:
    """Label sets: de-duplicated, order-preserving, blanks dropped."""
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    elif not isinstance(value, Iterable):
        return ()
    labels: list[str] = []
    for item in value:
        text = str(item).strip()
        if text and text not in labels:
            labels.append(text)
    return tuple(labels)


def _to_text(value: Any) -> str:
    return "" if value is None else str(value)


def parse_datetime(value: Any) -> datetime | None:
    """Parse datetimes, ISO strings, epoch seconds/ms and exported timestamp dicts.

    Naive values are taken to be UTC.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, Mapping):
        seconds = value.get("seconds", value.get("_seconds"))
        if seconds is None:
            return None
        parsed = datetime.fromtimestamp(float(seconds), tz=timezone.utc)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        seconds = value / 1000 if value > _EPOCH_MS_THRESHOLD else value
        parsed = datetime.fromtimestamp(seconds, tz=timezone.utc)
    elif isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _as_mapping(raw: Any) -> dict[str, Any]:
    if isinstance(raw, Mapping):
        data = dict(raw)
    elif hasattr(raw, "model_dump"):
        data = raw.model_dump()
    else:
        raise TypeError(f"Cannot normalize trade of type {type(raw).__name__}")
    return {_KEY_ALIASES.get(k, k): v for k, v in data.items()}


def normalize_trade(raw: Any, default_user_id: str = "") -> TradeRecord:
    """Map a persisted row or raw document to a ``TradeRecord``.

    Raises ``TypeError`` only when ``raw`` is not trade-shaped at all; bad
    field values are neutralized instead.
    """
    data = _as_mapping(raw)

    capital = _to_float(data.get("capital"))
    if not math.isfinite(capital) or capital <= 0:
        capital = DEFAULT_CAPITAL

    emotional_state = _to_text(data.get("emotional_state")).strip() or DEFAULT_EMOTIONAL_STATE

    created_at = parse_datetime(data.get("created_at")) or datetime.now(timezone.utc)
    trade_id = data.get("id")

    known = set(TradeRecord.__dataclass_fields__)
    extra = {k: v for k, v in data.items() if k not in known}

    return TradeRecord(
        id=None if trade_id is None else str(trade_id),
        user_id=_to_text(data.get("user_id")) or default_user_id,
        pair=_to_text(data.get("pair")).strip(),
        type=_to_text(data.get("type")).strip().upper(),
        status=_to_text(data.get("status")).strip().upper() or "OPEN",
        entry_price=_to_float(data.get("entry_price")),
        exit_price=_to_optional_float(data.get("exit_price")),
        quantity=_to_float(data.get("quantity")),
        strategy=_to_labels(data.get("strategy")),
        indicators=_to_labels(data.get("indicators")),
        mistakes=_to_labels(data.get("mistakes")),
        tags=_to_labels(data.get("tags")),
        notes=_to_text(data.get("notes")),
        reason=_to_text(data.get("reason")),
        emotional_state=emotional_state,
        capital=capital,
        result=_to_text(data.get("result")).strip().upper() or "UNKNOWN",
        profit_loss=_to_optional_float(data.get("profit_loss")),
        profit_loss_percentage=_to_optional_float(data.get("profit_loss_percentage")),
        created_at=created_at,
        updated_at=parse_datetime(data.get("updated_at")),
        closed_at=parse_datetime(data.get("closed_at")),
        extra=extra,
    )
