from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

_CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"


class Settings(BaseSettings):
    sci_config_path: Path = _CONFIG_DIR / "sci_index_v1.json"
    display_config_path: Path = _CONFIG_DIR / "sci_display_v1.json"
    sample_countries_path: Path = _CONFIG_DIR / "sample_countries_v1.json"

    trend_dead_zone: float = 1.0
    strength_margin: float = 10.0
    weight_tolerance: float = 1e-6
    scoring_max_workers: int = 1

    data_api_url: str = "http://localhost:8080/api"
    data_api_timeout: float = 30.0

    breakdown_cache_size: int = 1024

    app_url: str = "http://localhost:3000"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_prefix="SCI_", extra="ignore")


@lru_cache
def get_settings() -> Settings:
    return Settings()
