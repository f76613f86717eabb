"""Centralized configuration using pydantic-settings. All values are env-configurable."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MILKTREND_")

    # Redis
    redis_url: str = "redis://redis:6379/0"
    redis_pool_size: int = 20

    # History
    history_backend: str = "file"  # "memory" | "file" | "redis"
    history_key: str = "milkosense_history"
    history_file: str = "data/history.json"
    history_max_points: int = 500

    # Analysis
    trend_window: int = 20
    anomaly_threshold: float = 2.5
    smoothing_alpha: float = 0.3
    quality_scorer: str | None = None  # "package.module:function"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    ws_throttle_ms: int = 100

    # Monitoring
    enable_prometheus: bool = True
    log_level: str = "INFO"
