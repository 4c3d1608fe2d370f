"""
config.py
Runtime settings, read from the environment (and a local .env if present).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent

DEFAULT_BASE_URL = "https://gym-qr-scanner.vercel.app"
DEFAULT_QR_SERVICE_URL = "https://api.qrserver.com/v1/create-qr-code/"


@dataclass(frozen=True)
class Settings:
    db_path: Path
    base_url: str
    gym_name: str
    qr_service_url: str
    qr_size: str
    photo_placeholder_url: str
    log_level: str


def load_settings(env_file: str | os.PathLike | None = None) -> Settings:
    load_dotenv(env_file or BASE_DIR / ".env")
    return Settings(
        db_path=Path(os.getenv("GYM_DB_PATH", str(BASE_DIR / "gym.db"))),
        base_url=os.getenv("GYM_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        gym_name=os.getenv("GYM_NAME", "GYM FITNESS CLUB"),
        qr_service_url=os.getenv("GYM_QR_SERVICE_URL", DEFAULT_QR_SERVICE_URL),
        qr_size=os.getenv("GYM_QR_SIZE", "160x160"),
        photo_placeholder_url=os.getenv(
            "GYM_PHOTO_PLACEHOLDER", "https://via.placeholder.com/120x120?text=Photo"
        ),
        log_level=os.getenv("GYM_LOG_LEVEL", "INFO").upper(),
    )
