"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from journal.config import settings
from journal.database import create_db_and_tables, engine
from journal.services.metrics_engine import MetricsService
from journal.utils.errors import JournalError, TradeValidationError
from journal.utils.logging import setup_logging
from journal.api import analytics, system, trades

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    setup_logging()
    create_db_and_tables()
    from journal.engine.scheduler import start_scheduler, stop_scheduler
    start_scheduler()

    yield

    stop_scheduler()


app = FastAPI(
    title="Trade Journal",
    description="Trade journal with performance analytics",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.metrics_service = MetricsService.from_settings(engine, settings)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(JournalError)
async def journal_error_handler(request: Request, exc: JournalError):
    content = {"code": exc.code, "detail": exc.message}
    if isinstance(exc, TradeValidationError):
        content["errors"] = exc.errors
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=content)


# Mount routers
app.include_router(trades.router)
app.include_router(analytics.router)
app.include_router(system.router)
