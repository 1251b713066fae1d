"""Runtime configuration loaded from the environment."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from attendance_engine.dedup import DEFAULT_CAPACITY

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


class Settings(BaseSettings):
    app_port: int = 3000
    log_level: str = "INFO"

    # Request signing; verification is disabled when unset
    signing_secret: Optional[str] = None
    signature_max_age_seconds: int = 300

    data_dir: Path = Path("data")
    raw_log_file: str = "raw_logs.csv"
    summary_file: str = "daily_summary.csv"

    dedup_capacity: int = DEFAULT_CAPACITY
    store_timeout_seconds: float = 2.5

    model_config = SettingsConfigDict(
        env_prefix="ATTENDANCE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def raw_log_path(self) -> Path:
        return self.data_dir / self.raw_log_file

    @property
    def summary_path(self) -> Path:
        return self.data_dir / self.summary_file


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, str(level).upper(), logging.INFO), format=LOG_FORMAT)
