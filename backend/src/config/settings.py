"""Runtime settings read from the environment (and a local .env file)."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_MAX_RECORDS = 5000


@dataclass(frozen=True)
class Settings:
    api_title: str = "Developer Profile History API"
    cors_origins: tuple = ("*",)
    log_level: str = "INFO"
    max_records: int = DEFAULT_MAX_RECORDS


def _split_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return ["*"]
    return [origin.strip() for origin in raw.split(",") if origin.strip()] or ["*"]


def _parse_int(raw: Optional[str], default: int) -> int:
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring invalid HISTORY_MAX_RECORDS=%r; using %d", raw, default)
        return default
    return value if value > 0 else default


def load_settings(env_file: Optional[str] = None) -> Settings:
    """Build settings from environment variables.

    Variables already present in the environment win over the .env file.
    """
    load_dotenv(env_file)
    return Settings(
        api_title=os.getenv("HISTORY_API_TITLE", Settings.api_title),
        cors_origins=tuple(_split_origins(os.getenv("HISTORY_CORS_ORIGINS"))),
        log_level=(os.getenv("HISTORY_LOG_LEVEL") or "INFO").upper(),
        max_records=_parse_int(os.getenv("HISTORY_MAX_RECORDS"), DEFAULT_MAX_RECORDS),
    )
