from pathlib import Path
from typing import Literal

from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

import os

from ..core.world_builder import (
    DEFACTO_COUNTY_DIFF_RATIO,
    DEFACTO_DUCHY_DIFF_RATIO,
    DEFAULT_COUNTY_COUNT,
    DEFAULT_DUCHY_COUNT,
    DEFAULT_KINGDOM_COUNT,
)
from ..core.world_map import DEFAULT_SEED

# Load .env for local/dev environments only where values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Application settings pulled from REALMGEN_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="REALMGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Generation Configuration
    default_seed: int = Field(default=DEFAULT_SEED, description="Seed used when none is given")
    county_count: int = Field(default=DEFAULT_COUNTY_COUNT, gt=0, description="Number of counties")
    duchy_count: int = Field(default=DEFAULT_DUCHY_COUNT, gt=0, description="Number of duchies")
    kingdom_count: int = Field(default=DEFAULT_KINGDOM_COUNT, gt=0, description="Number of kingdoms")
    county_diff_ratio: float = Field(
        default=DEFACTO_COUNTY_DIFF_RATIO, gt=0, le=1, description="De facto county -> duchy diff ratio"
    )
    duchy_diff_ratio: float = Field(
        default=DEFACTO_DUCHY_DIFF_RATIO, gt=0, le=1, description="De facto duchy -> kingdom diff ratio"
    )

    # Output Configuration
    output_path: str = Field(default="data/maps/world.v2.json", description="Generated map output file")

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(default="json", description="Logging format")


# Instantiate singleton settings object
settings = Settings()
