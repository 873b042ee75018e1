from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Settings:
    """
    Application settings loaded from environment variables.

    Env vars:
    - LOG_LEVEL: logging level name for the 'todo_notes' loggers (default: INFO)
    - CORS_ALLOW_ORIGINS: comma-separated list of allowed origins; '*' by default
    - AUTO_CONFIRM_EDITS: 'true' to treat every edit of a confirm-before-edit note as confirmed (default: false)
    - DEFAULT_PAGE_LIMIT: page size used when a list request gives no limit (default: 50)
    """

    log_level: str
    cors_allow_origins: List[str]
    auto_confirm_edits: bool
    default_page_limit: int


def _get_env(name: str, default: str) -> str:
    value = os.getenv(name, default)
    if value is None or value == "":
        return default
    return value


def _parse_bool(value: str, default: bool = False) -> bool:
    v = value.strip().lower()
    if v in {"1", "true", "yes", "on"}:
        return True
    if v in {"0", "false", "no", "off"}:
        return False
    return default


def _parse_int(value: str, default: int, minimum: int = 0) -> int:
    try:
        parsed = int(value.strip())
    except ValueError:
        return default
    return parsed if parsed >= minimum else default


def _parse_origins(origins_value: str) -> List[str]:
    """
    Parse CORS origins from env. Supports:
    - '*' to allow all origins
    - Comma-separated list of origins
    """
    value = origins_value.strip()
    if value == "*":
        return ["*"]
    return [o.strip() for o in value.split(",") if o.strip()]


def _parse_log_level(value: str) -> str:
    level = value.strip().upper()
    if isinstance(logging.getLevelName(level), int):
        return level
    return "INFO"


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return application settings loaded from environment variables."""
    return Settings(
        log_level=_parse_log_level(_get_env("LOG_LEVEL", "INFO")),
        cors_allow_origins=_parse_origins(_get_env("CORS_ALLOW_ORIGINS", "*")),
        auto_confirm_edits=_parse_bool(_get_env("AUTO_CONFIRM_EDITS", "false"), False),
        default_page_limit=_parse_int(_get_env("DEFAULT_PAGE_LIMIT", "50"), 50, minimum=1),
    )
