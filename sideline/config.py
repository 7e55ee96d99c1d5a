"""Runtime configuration and logging setup."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass

from dotenv import load_dotenv

DEFAULT_CORS_ORIGINS = (
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


@dataclass(frozen=True)
class AppConfig:
    log_level: str = "INFO"
    cors_origins: tuple[str, ...] = DEFAULT_CORS_ORIGINS


def load_config() -> AppConfig:
    load_dotenv()
    level = (os.getenv("SIDELINE_LOG_LEVEL") or "INFO").upper()
    if logging.getLevelName(level) == f"Level {level}":
        raise ValueError(f"SIDELINE_LOG_LEVEL must be a logging level name, got {level!r}.")

    origins_raw = os.getenv("SIDELINE_CORS_ORIGINS")
    if origins_raw:
        origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip())
    else:
        origins = DEFAULT_CORS_ORIGINS

    return AppConfig(log_level=level, cors_origins=origins)


def configure_logging(level: str = "INFO") -> None:
    """Root handler for the app process. Safe to call more than once."""
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    logging.getLogger().setLevel(level)
