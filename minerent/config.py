"""Application configuration, read from the environment with sane defaults."""

import os
from pathlib import Path

# ---- Paths ----
BASE_DIR = Path(__file__).resolve().parents[1]
DEFAULT_DATA_PATH = BASE_DIR / "data.pkl"


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


class Config:
    APP_ENV = os.getenv("APP_ENV", "development")
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")

    # Set MINERENT_DATA_PATH to an empty string to keep the store in memory only
    DATA_PATH = os.getenv("MINERENT_DATA_PATH", str(DEFAULT_DATA_PATH))

    CLAIM_MAX_RETRIES = _env_int("CLAIM_MAX_RETRIES", 3)
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DISPLAY_TIMEZONE = os.getenv("DISPLAY_TIMEZONE", "UTC")
    STARTING_BALANCE = _env_float("STARTING_BALANCE", 0.0)
