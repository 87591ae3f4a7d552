"""Application configuration via environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./journal.db"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:8081"]  # Expo dev server

    # Auth (tokens are issued by the external identity provider)
    jwt_secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    jwt_expire_minutes: int = 1440  # 24 hours

    # Metrics
    metrics_cache_ttl_seconds: float = 300.0  # 5 minutes
    risk_free_rate: float = 0.02
    apply_date_filter: bool = False
    drawdown_chronological: bool = False
    timezone: str = ""  # IANA name; empty = system local time
    persist_snapshots: bool = True
    refresh_on_write: bool = True

    # Narrative insight payload
    insight_recent_trades: int = 10

    model_config = {"env_prefix": "TJ_", "env_file": ".env"}


settings = Settings()
