from __future__ import annotations

import logging
import os
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field


class Settings(BaseModel):
    # Cipher defaults
    default_sbox: str = Field(default="tc26-z", description="Substitution table used when none is given")
    gamma_period: int = Field(default=8, ge=1, le=8)

    # Evaluation
    roundtrip_vectors: int = Field(default=200, ge=1, le=100_000)
    sac_trials: int = Field(default=32, ge=1, le=10_000)

    # Reproducibility
    global_seed: int = Field(default=1337)

    # Logging
    log_level: str = Field(default="WARNING")

    # Paths
    runs_dir: str = Field(default="runs")


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    # Load .env if present
    load_dotenv()

    return Settings(
        default_sbox=os.getenv("MAGMA_DEFAULT_SBOX", "tc26-z"),
        gamma_period=int(os.getenv("MAGMA_GAMMA_PERIOD", "8")),
        roundtrip_vectors=int(os.getenv("MAGMA_ROUNDTRIP_VECTORS", "200")),
        sac_trials=int(os.getenv("MAGMA_SAC_TRIALS", "32")),
        global_seed=int(os.getenv("GLOBAL_SEED", "1337")),
        log_level=os.getenv("MAGMA_LOG_LEVEL", "WARNING").upper(),
        runs_dir=os.getenv("MAGMA_RUNS_DIR", "runs"),
    )


def configure_logging(settings: Optional[Settings] = None) -> None:
    settings = settings or load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.WARNING),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
