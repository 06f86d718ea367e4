from pathlib import Path
from typing import Optional

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

import os

# Explicitly load .env for local/dev environments only if values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from DUNGEON_* environment variables."""

    # Layout Area
    area_width: int = Field(default=800, gt=0, description="Width of the layout area in pixels")
    area_height: int = Field(default=800, gt=0, description="Height of the layout area in pixels")
    seed: Optional[str] = Field(default=None, description="Default generation seed, random if unset")

    # Physics Configuration
    time_step: float = Field(default=1 / 60, gt=0, description="Seconds simulated per relaxing tick")
    space_iterations: int = Field(default=10, ge=1, description="Separation passes per physics step")
    sleep_time: float = Field(default=1.0, gt=0, description="Idle seconds before a room falls asleep")

    # Anchor and Corridor Configuration
    min_room_size: int = Field(default=32, ge=0, description="Anchor rooms must be wider and taller than this")
    min_room_area: int = Field(default=1280, ge=0, description="Anchor rooms must have a larger area than this")
    loop_fraction: float = Field(default=0.125, ge=0, le=1, description="Share of non-tree edges kept as loops")
    max_ticks: int = Field(default=5000, ge=1, description="Tick budget for a full run")

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (console or json)")

    class Config:
        env_prefix = "DUNGEON_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate singleton settings object
settings = Settings()
