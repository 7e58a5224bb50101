"""
Puzzle Verifier - Configuration

Loads settings from environment variables (prefix PUZZLE_) and an optional
.env file, with Pydantic validation. Command line flags override these.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ─── Catalog ───
    catalog_path: str = "data/puzzles.json"

    # ─── Verification ───
    strict: bool = False
    max_workers: int = Field(default=1, ge=1)
    verify_timeout_s: Optional[float] = Field(default=None, gt=0)

    # ─── Logging ───
    log_level: str = "WARNING"

    model_config = SettingsConfigDict(
        env_prefix="PUZZLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
