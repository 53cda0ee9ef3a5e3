"""
backend/config.py

Application configuration via Pydantic Settings.
All values can be overridden with environment variables or a .env file.

Quick start — create a .env file in your project root:
    RANDOM_SEED=1337
    TRAINING_DELAY_SECONDS=3
    SIM_ATTACKER_IDS=user_3,user_7
    API_PORT=8080
"""

from __future__ import annotations

from typing import Annotated

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Training
    LEARNING_RATE: float = 0.01
    EPOCHS: int = 100
    TRAIN_SPLIT: float = 0.7
    WEIGHT_INIT_RANGE: float = 0.05
    TRAINING_DELAY_SECONDS: float = 0.0   # pause before fitting starts
    RANDOM_SEED: int | None = None

    # Pattern analysis
    ANALYSIS_WINDOW_SIZE: int = 30
    MIN_QUERIES_FOR_ANALYSIS: int = 10

    # Alerting: per-user suspicion score thresholds
    WARNING_SCORE: int = 50
    CRITICAL_SCORE: int = 75

    # Bounded buffers
    ALERT_LOG_CAPACITY: int = 10
    REALTIME_SERIES_CAPACITY: int = 50
    QUERY_LOG_CAPACITY: int = 10_000
    USER_HISTORY_LIMIT: int = 30          # never below ANALYSIS_WINDOW_SIZE

    # Simulator
    MONITOR_INTERVAL_SECONDS: float = 0.3
    SIM_USER_COUNT: int = 10
    SIM_ATTACKER_IDS: Annotated[list[str], NoDecode] = ["user_3", "user_7"]
    SIM_ATTACKER_BURST: int = 3
    DEMO_DATASET_SIZE: int = 200

    # API
    API_HOST: str = "0.0.0.0"
    API_PORT: int = 8000
    STATS_BROADCAST_SECONDS: float = 1.0

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator("SIM_ATTACKER_IDS", mode="before")
    @classmethod
    def parse_attacker_ids(cls, v):
        if isinstance(v, str):
            import json as _json
            v = v.strip()
            if v.startswith("["):
                try:
                    return _json.loads(v)
                except ValueError:
                    pass
            return [uid.strip() for uid in v.split(",") if uid.strip()]
        return v


settings = Settings()
