"""SQLModel database engine and session management."""

import logging

from sqlalchemy import inspect
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine, Session

from journal.config import settings

logger = logging.getLogger(__name__)

# Columns added after the first release; older databases get them on startup
_TRADE_COLUMN_MIGRATIONS = {
    "emotional_state": "VARCHAR NOT NULL DEFAULT 'neutral'",
    "capital": "FLOAT NOT NULL DEFAULT 10000.0",
}


def build_engine(database_url: str):
    """Create an engine; SQLite needs check_same_thread=False, PostgreSQL does not."""
    connect_args = {}
    kwargs = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        # In-memory SQLite must share one connection or every session sees an empty DB
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=False, connect_args=connect_args, **kwargs)


engine = build_engine(settings.database_url)


def _run_migrations(target_engine):
    """Run lightweight schema migrations for added columns."""
    from sqlalchemy import text

    inspector = inspect(target_engine)
    if "trade" not in inspector.get_table_names():
        return

    columns = {col["name"] for col in inspector.get_columns("trade")}
    for name, ddl in _TRADE_COLUMN_MIGRATIONS.items():
        if name in columns:
            continue
        logger.info(f"Migrating: adding trade.{name}")
        with target_engine.connect() as conn:
            conn.execute(text(f"ALTER TABLE trade ADD COLUMN {name} {ddl}"))
            conn.commit()


def create_db_and_tables(target_engine=None):
    """Create the trade and snapshot tables, then add any missing columns."""
    import journal.models  # noqa: F401  (registers tables on the metadata)

    target_engine = target_engine or engine
    SQLModel.metadata.create_all(target_engine)
    _run_migrations(target_engine)


def get_session() -> Session:
    """FastAPI dependency: one session per request."""
    with Session(engine) as session:
        yield session
