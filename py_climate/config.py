"""Configuration management."""

import os
from pathlib import Path

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

# Load .env for local runs without overriding variables already set
BASE_DIR = Path(__file__).resolve().parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    for key, value in dotenv_values(env_file).items():
        if key not in os.environ and value is not None:
            os.environ[key] = value


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (json or console)")

    # Grid generation
    default_tiles: int = Field(default=2000, description="Tiles in a generated planet grid")
    default_seed: str = Field(default="planet", description="Seed for grid generation")

    # Season simulation
    seasons_per_year: int = Field(default=12, description="Seasons per orbital year")
    max_air_layers: int = Field(default=12, description="Maximum air layers per column")
    advection_tolerance: float = Field(
        default=1e-4, description="Humidity change that re-queues downstream tiles"
    )
    max_advection_visits: int = Field(
        default=5, description="Maximum advection updates per tile and season"
    )
    cache_precision: int = Field(
        default=6, description="Decimal places of latitude/elevation cache keys"
    )

    class Config:
        env_prefix = "CLIMATE_"
        env_file = ".env"
        extra = "ignore"


settings = Settings()
