"""Shared fixtures: trade factories, in-memory database, API client."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlmodel import Session, SQLModel

from journal.database import build_engine, get_session
from journal.services.metrics_cache import MetricsCache
from journal.services.metrics_engine import MetricsService
from journal.services.snapshot_store import SqlSnapshotStore
from journal.services.trade_record import normalize_trade
from journal.services.trade_repository import SqlTradeRepository

BASE_TIME = datetime(2024, 3, 4, 9, 30, tzinfo=timezone.utc)


def make_trade(**overrides):
    """A closed, winning BUY trade unless overridden."""
    doc = {
        "id": overrides.pop("id", None),
        "user_id": "user-1",
        "pair": "BTC/USDT",
        "type": "BUY",
        "status": "CLOSED",
        "entry_price": 100.0,
        "exit_price": 110.0,
        "quantity": 1.0,
        "strategy": ["Breakout"],
        "indicators": [],
        "mistakes": [],
        "notes": "",
        "created_at": BASE_TIME,
        "closed_at": BASE_TIME + timedelta(hours=1),
    }
    doc.update(overrides)
    return normalize_trade(doc)


@pytest.fixture
def trade_factory():
    return make_trade


@pytest.fixture
def db_engine():
    engine = build_engine("sqlite://")
    import journal.models  # noqa: F401
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def metrics_service(db_engine):
    return MetricsService(
        repository=SqlTradeRepository(db_engine),
        cache=MetricsCache(ttl_seconds=300),
        snapshot_store=SqlSnapshotStore(db_engine),
    )


@pytest.fixture
def client(db_engine, metrics_service):
    from fastapi.testclient import TestClient
    from journal.main import app

    def _session_override():
        with Session(db_engine) as session:
            yield session

    app.dependency_overrides[get_session] = _session_override
    previous = app.state.metrics_service
    app.state.metrics_service = metrics_service
    try:
        # No context manager: lifespan (scheduler, file database) stays off
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
        app.state.metrics_service = previous


@pytest.fixture
def auth_headers():
    from journal.services.auth import create_access_token

    def _headers(user_id: str = "user-1") -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id)}"}

    return _headers
