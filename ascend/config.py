"""
Centralised config for the entire application.

This module consolidates all configuration settings, loading overrides from
environment variables and providing typed, validated access to them through
a singleton `settings` object. The training constants used by the schedule
and progression engine live here too, so a deployment can tune floors and
defaults without touching the engine code.
"""

import os
from urllib.parse import quote_plus
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Centralized application settings.

    Pydantic's BaseSettings will automatically load values from a `.env` file
    or from system environment variables (prefixed with ``ASCEND_``).
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ASCEND_",
        extra="ignore",
        case_sensitive=False,
    )

    # --- CORE SETTINGS ---
    # The root directory of the project, i.e. the parent of the package.
    PROJECT_ROOT: Path = Path(__file__).parent.parent.resolve()
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # --- DATABASE (from environment) ---
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_HOST: Optional[str] = None
    POSTGRES_PORT: Optional[int] = 5432
    POSTGRES_DB: Optional[str] = None
    DATABASE_URL: Optional[str] = Field(None, validate_default=True)

    # --- WARMUP SETS ---
    WARMUP_PERCENTAGES: List[int] = [20, 40]  # tier 1, tier 2
    WARMUP_MIN_REPS: int = 1
    WARMUP_MIN_TIME_SECONDS: int = 5
    WARMUP_REDUCED_INTENSITY_FACTOR: float = 0.6  # weight kept on rep-progressing warmups

    # --- RFEM (reps from established max) ---
    RFEM_DEFAULT_MAX: int = 10
    RFEM_DEFAULT_TIME_MAX: int = 30  # seconds
    RFEM_MIN_TARGET_REPS: int = 1
    RFEM_MIN_TARGET_TIME_SECONDS: int = 5
    RFEM_TIME_PERCENTAGE: float = 0.10  # each RFEM point removes 10% of max time

    # --- CONDITIONING ---
    CONDITIONING_DEFAULT_REP_INCREMENT: int = 2
    CONDITIONING_DEFAULT_TIME_INCREMENT: int = 5  # seconds per week
    CONDITIONING_DEFAULT_BASE_REPS: int = 10
    CONDITIONING_DEFAULT_BASE_TIME: int = 30  # seconds

    # --- WEIGHT ---
    WEIGHT_ROUNDING_INCREMENT: float = 5.0  # lbs

    # --- SCHEDULING ---
    MAX_WORKOUT_DAYS_PER_WEEK: int = 7

    def __init__(self, **values):
        super().__init__(**values)
        # An explicit host override wins over the configured host
        db_host = os.getenv("DB_HOST_OVERRIDE", self.POSTGRES_HOST)
        if self.POSTGRES_USER and self.POSTGRES_PASSWORD and db_host and self.POSTGRES_DB:
            # URL-encode user/pass to support special characters like @ and #
            user_enc = quote_plus(self.POSTGRES_USER)
            pass_enc = quote_plus(self.POSTGRES_PASSWORD)
            self.DATABASE_URL = (
                f"postgresql://{user_enc}:{pass_enc}@{db_host}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
            )

    # --- FILE PATHS (derived from PROJECT_ROOT) ---
    @property
    def log_path(self) -> Path:
        return self.PROJECT_ROOT / "logs/ascend.log"

    @property
    def data_path(self) -> Path:
        return self.PROJECT_ROOT / "knowledge"

    @property
    def cycles_path(self) -> Path:
        return self.data_path / "cycles.json"

    @property
    def workouts_path(self) -> Path:
        return self.data_path / "scheduled_workouts.json"

    @property
    def exercises_path(self) -> Path:
        return self.data_path / "exercises.json"

    @property
    def max_records_path(self) -> Path:
        return self.data_path / "max_records.json"

    @property
    def cycle_defaults_path(self) -> Path:
        return self.data_path / "exercise_cycle_defaults.json"


# Create a single, importable instance of the settings
settings = Settings()
