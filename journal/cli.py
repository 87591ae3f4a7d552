"""CLI tool for analytics and admin operations.

Usage:
    python -m journal.cli metrics <user_id> [period]
    python -m journal.cli metrics-file <json_path> [user_id]
    python -m journal.cli issue-token <user_id>
"""

import asyncio
import json
import sys
from pathlib import Path

from journal.config import settings
from journal.database import engine, create_db_and_tables
from journal.services.metrics_engine import MetricsService, resolve_timezone
from journal.services.metrics_cache import MetricsCache
from journal.services.trade_repository import InMemoryTradeRepository
from journal.utils.constants import PERIODS
from journal.utils.logging import setup_logging


def load_trade_documents(path: str) -> list[dict]:
    """Read an exported trade collection: a JSON list or ``{"trades": [...]}``."""
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        data = data.get("trades", [])
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of trades")
    return data


def _print_metrics(metrics):
    print(json.dumps(metrics.model_dump(mode="json"), indent=2))


def metrics(user_id: str, period: str = "all-time"):
    """Compute metrics for a user from the database."""
    if period not in PERIODS:
        print(f"Unknown period: {period}. Choose from: {', '.join(PERIODS)}")
        sys.exit(1)
    create_db_and_tables()
    service = MetricsService.from_settings(engine, settings)
    result = asyncio.run(service.calculate_performance_metrics(user_id, period))
    _print_metrics(result)


def metrics_file(path: str, user_id: str | None = None):
    """Compute metrics straight from an exported JSON file, without touching the database."""
    if not Path(path).exists():
        print(f"File not found: {path}")
        sys.exit(1)

    repository = InMemoryTradeRepository(load_trade_documents(path))
    if user_id is None:
        users = repository.user_ids()
        if not users:
            print("No trades in file.")
            sys.exit(1)
        user_id = users[0]

    service = MetricsService(
        repository,
        cache=MetricsCache(ttl_seconds=settings.metrics_cache_ttl_seconds),
        risk_free_rate=settings.risk_free_rate,
        drawdown_chronological=settings.drawdown_chronological,
        apply_date_filter=settings.apply_date_filter,
        tz=resolve_timezone(settings.timezone),
    )
    result = asyncio.run(service.calculate_performance_metrics(user_id))
    _print_metrics(result)


def issue_token(user_id: str):
    """Print a development bearer token for a user id."""
    from journal.services.auth import create_access_token
    print(create_access_token(user_id))


def main():
    if len(sys.argv) < 3:
        print("Usage: python -m journal.cli <command> <args>")
        print("Commands: metrics, metrics-file, issue-token")
        sys.exit(1)

    setup_logging()
    command, args = sys.argv[1], sys.argv[2:]
    if command == "metrics":
        metrics(*args[:2])
    elif command == "metrics-file":
        metrics_file(*args[:2])
    elif command == "issue-token":
        issue_token(args[0])
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
