"""Application settings."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    output_folder: Path
    host: str = "0.0.0.0"
    port: int = 8102
    debug: bool = False
    log_level: str = "INFO"
    timezone: str = "UTC"
    default_fps: int = Field(20, ge=1)
    ffmpeg_binary: str = "ffmpeg"
    encoder_timeout_seconds: float = Field(300.0, gt=0)
    work_dir: Optional[Path] = None
    cache_capacity: int = Field(10, ge=1)
    cache_max_bytes: Optional[int] = Field(None, ge=1)
    cache_max_age_seconds: int = 900
    now_granularity_seconds: int = Field(60, ge=1)

    model_config = {"env_prefix": ""}


@lru_cache
def get_settings() -> Settings:
    # OUTPUT_FOLDER is required, so settings are built on first use rather than at import
    return Settings()
