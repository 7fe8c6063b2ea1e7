from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _strip_or_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = value.strip()
    return cleaned or None


@dataclass(frozen=True)
class AdminSettings:
    name: str
    email: str
    picture: Optional[str] = None


class Settings:

    def __init__(self) -> None:
        storage_path = _strip_or_none(os.getenv("SURVEYFLOW_STORAGE_PATH")) or "data/surveyflow.json"
        self.storage_path = Path(storage_path).expanduser().resolve()
        self.storage_path.parent.mkdir(parents=True, exist_ok=True)

        base_url = _strip_or_none(os.getenv("SURVEYFLOW_BASE_URL")) or "http://localhost:8501"
        self.base_url = base_url.rstrip("/")

        self.admin = AdminSettings(
            name=_strip_or_none(os.getenv("SURVEYFLOW_ADMIN_NAME")) or "Admin User",
            email=_strip_or_none(os.getenv("SURVEYFLOW_ADMIN_EMAIL")) or "admin@surveyflow.com",
            picture=_strip_or_none(os.getenv("SURVEYFLOW_ADMIN_PICTURE")),
        )

        log_level = (_strip_or_none(os.getenv("SURVEYFLOW_LOG_LEVEL")) or "INFO").upper()
        if not isinstance(logging.getLevelName(log_level), int):
            raise RuntimeError(f"Unknown log level in SURVEYFLOW_LOG_LEVEL: {log_level}")
        self.log_level = log_level


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install the root logging configuration used by the Streamlit entry points."""

    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
